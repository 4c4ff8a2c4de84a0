"""
Geofence Evaluator Module
=========================

Stateless membership logic - applies zone geometry to guard positions.

Design:
- Pure functions (no state, no caching)
- Recomputed on every read: guard counts are tens, not millions
- Emergency statuses pass through untouched
- Thread-safe (no mutations)
"""

from typing import Dict, Iterable, List, Tuple

from guardwatch_zone.geometry.primitives import haversine_distance_m, point_in_polygon
from guardwatch_zone.geometry.shapes import CircularZone, Coordinate, PolygonalZone, Zone
from guardwatch_zone.models import EMERGENCY_STATUSES, GuardPosition, GuardStatus, Site

PresenceKey = Tuple[str, str]  # (guard_id, site_id)

# Absorbs float round-off for points placed exactly on a circle's edge.
CIRCLE_BOUNDARY_TOLERANCE_M = 1e-6


class GeofenceEvaluator:
    """
    Stateless evaluator for guard-in-zone questions.

    Design Philosophy:
    - All methods are static (no instance state)
    - Sites are injected per call, never read from globals
    - Same answer wherever it is asked (map markers, dashboard counts)
    """

    @staticmethod
    def is_inside_zone(coordinate: Coordinate, zone: Zone) -> bool:
        """
        Check if a coordinate lies within a zone.

        Circle boundaries are inclusive (distance <= radius, give or take
        CIRCLE_BOUNDARY_TOLERANCE_M). Polygon edge
        behaviour follows the ray-casting convention.

        Args:
            coordinate: Coordinate to test
            zone: Circular or polygonal zone

        Returns:
            True if inside the zone

        Raises:
            TypeError: If zone is not a known zone type
        """
        if isinstance(zone, CircularZone):
            distance = haversine_distance_m(coordinate, zone.center)
            return distance <= zone.radius_m + CIRCLE_BOUNDARY_TOLERANCE_M
        if isinstance(zone, PolygonalZone):
            return point_in_polygon(coordinate, zone.vertices)
        raise TypeError(f"Unsupported zone type: {type(zone).__name__}")

    @staticmethod
    def inside_any_active_site(coordinate: Coordinate, sites: Iterable[Site]) -> bool:
        """True if the coordinate falls inside any active site's zone."""
        return any(
            GeofenceEvaluator.is_inside_zone(coordinate, site.zone)
            for site in sites
            if site.active
        )

    @staticmethod
    def effective_guard_status(guard: GuardPosition, all_sites: Iterable[Site]) -> GuardStatus:
        """
        Combine the reported status with geofence presence.

        Rules:
        - panic / alert: returned unchanged (never suppressed by presence)
        - inside any active site's zone: online
        - otherwise: reported status unchanged

        Args:
            guard: Guard observation
            all_sites: Every known site (inactive ones are ignored)

        Returns:
            Effective status for display and counting
        """
        if guard.reported_status in EMERGENCY_STATUSES:
            return guard.reported_status

        if GeofenceEvaluator.inside_any_active_site(guard.coordinate, all_sites):
            return GuardStatus.ONLINE

        return guard.reported_status

    @staticmethod
    def detect_presence_changes(
        positions: Iterable[GuardPosition],
        sites: Iterable[Site],
        previous_state: Dict[PresenceKey, bool],
    ) -> Tuple[List[PresenceKey], List[PresenceKey], Dict[PresenceKey, bool]]:
        """
        Detect zone entries and exits between two observations.

        Algorithm:
        1. Evaluate every position against every active site
        2. Compare with the previous inside/outside verdict per (guard, site)
        3. Unseen pairs are recorded but never reported (first sighting)

        Args:
            positions: Current guard observations (guard_id must be set)
            sites: Every known site (inactive ones are ignored)
            previous_state: {(guard_id, site_id): was_inside}

        Returns:
            (entered, exited, new_state)
            - entered: Pairs that went outside -> inside
            - exited: Pairs that went inside -> outside
            - new_state: Verdicts to pass to the next call
        """
        active_sites = [site for site in sites if site.active]
        entered: List[PresenceKey] = []
        exited: List[PresenceKey] = []
        new_state: Dict[PresenceKey, bool] = {}

        for position in positions:
            for site in active_sites:
                key = (position.guard_id, site.id)
                inside = GeofenceEvaluator.is_inside_zone(position.coordinate, site.zone)
                new_state[key] = inside

                was_inside = previous_state.get(key)
                if was_inside is None or was_inside == inside:
                    continue
                if inside:
                    entered.append(key)
                else:
                    exited.append(key)

        return entered, exited, new_state


# Module-level aliases for call sites that prefer plain functions
is_inside_zone = GeofenceEvaluator.is_inside_zone
effective_guard_status = GeofenceEvaluator.effective_guard_status
