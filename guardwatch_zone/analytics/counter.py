"""
Dashboard Counter Module
========================

Stateful accumulator for dashboard statistics.

Design:
- Mutable state (latest counts)
- Immutable snapshots (DashboardStats)
- Counts derived from effective status, recomputed on every update
- Reset capability
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional

from guardwatch_zone.geometry.evaluator import GeofenceEvaluator
from guardwatch_zone.models import Guard, GuardStatus, Site


@dataclass(frozen=True)
class DashboardStats:
    """
    Immutable dashboard snapshot.

    Design:
    - Frozen dataclass (thread-safe read)
    - Value object (no identity)
    - Serializable via to_dict()

    Attributes:
        total_guards: Every guard in the roster
        status_counts: Guards per effective status ({"online": 3, ...})
        total_sites: Every known site
        active_sites: Sites that count for presence
        clocked_in: Guards currently on shift
        not_on_site: Guards assigned to an active site but missing or outside it
        geofence_compliance_pct: Share of located, assigned guards inside their own site
    """

    total_guards: int = 0
    status_counts: Dict[str, int] = field(default_factory=dict)
    total_sites: int = 0
    active_sites: int = 0
    clocked_in: int = 0
    not_on_site: int = 0
    geofence_compliance_pct: int = 0

    def count(self, status: GuardStatus) -> int:
        return self.status_counts.get(status.value, 0)

    @property
    def online(self) -> int:
        return self.count(GuardStatus.ONLINE)

    @property
    def emergencies(self) -> int:
        return self.count(GuardStatus.ALERT) + self.count(GuardStatus.PANIC)

    def to_dict(self) -> dict:
        return {
            "total_guards": self.total_guards,
            "status_counts": dict(self.status_counts),
            "total_sites": self.total_sites,
            "active_sites": self.active_sites,
            "clocked_in": self.clocked_in,
            "not_on_site": self.not_on_site,
            "geofence_compliance_pct": self.geofence_compliance_pct,
        }

    def __str__(self) -> str:
        """Human-readable representation."""
        return (
            f"guards={self.total_guards} online={self.online} "
            f"emergencies={self.emergencies} not_on_site={self.not_on_site} "
            f"compliance={self.geofence_compliance_pct}%"
        )


class DashboardCounter:
    """
    Stateful counter for dashboard statistics.

    Design:
    - Mutable accumulators (private state)
    - Public immutable snapshots (get_stats())
    - Thread-safety via encapsulation (caller must synchronize if multi-threaded)

    Usage:
        counter = DashboardCounter()
        counter.update(guards, sites)
        stats = counter.get_stats()  # Immutable
    """

    def __init__(self):
        self._stats = DashboardStats()

    def update(self, guards: Iterable[Guard], sites: Iterable[Site]) -> DashboardStats:
        """
        Recompute statistics from the current roster.

        Guards without a location keep their reported status; they are
        never classified against a zone.

        Args:
            guards: Every guard in the roster
            sites: Every known site (active and inactive)

        Returns:
            The new snapshot (also available via get_stats())
        """
        guards = list(guards)
        sites = list(sites)
        sites_by_id = {site.id: site for site in sites}

        status_counts: Counter = Counter()
        not_on_site = 0
        assigned_located = 0
        compliant = 0

        for guard in guards:
            position = guard.position
            if position is None:
                status = guard.reported_status
            else:
                status = GeofenceEvaluator.effective_guard_status(position, sites)
            status_counts[status.value] += 1

            site = self._assigned_active_site(guard, sites_by_id)
            if site is None:
                continue

            if position is None:
                not_on_site += 1
                continue

            assigned_located += 1
            if GeofenceEvaluator.is_inside_zone(position.coordinate, site.zone):
                compliant += 1
            else:
                not_on_site += 1

        compliance = round(100 * compliant / assigned_located) if assigned_located else 0

        self._stats = DashboardStats(
            total_guards=len(guards),
            status_counts=dict(status_counts),
            total_sites=len(sites),
            active_sites=sum(1 for site in sites if site.active),
            clocked_in=sum(1 for guard in guards if guard.clocked_in),
            not_on_site=not_on_site,
            geofence_compliance_pct=compliance,
        )
        return self._stats

    @staticmethod
    def _assigned_active_site(guard: Guard, sites_by_id: Dict[str, Site]) -> Optional[Site]:
        if not guard.site_id:
            return None
        site = sites_by_id.get(guard.site_id)
        if site is None or not site.active:
            return None
        return site

    def get_stats(self) -> DashboardStats:
        """Latest immutable snapshot."""
        return self._stats

    def reset(self) -> None:
        self._stats = DashboardStats()
