"""
Domain Models
=============

Bounded Context: What the core reads - sites, guards and their statuses.

Design:
- Frozen dataclasses (value objects, thread-safe reads)
- The core never fetches these; callers pass them in
- Wire formats live in guardwatch_feed.schemas and map onto these types
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from guardwatch_zone.geometry.shapes import Coordinate, Zone


class GuardStatus(str, Enum):
    """Self-reported guard status."""
    ONLINE = "online"
    IDLE = "idle"
    OFFLINE = "offline"
    ALERT = "alert"
    PANIC = "panic"
    PENDING = "pending"


# Emergency statuses are never overridden by geofence inference.
EMERGENCY_STATUSES = frozenset({GuardStatus.PANIC, GuardStatus.ALERT})


@dataclass(frozen=True)
class Site:
    """
    Client site with exactly one authorization zone.

    Attributes:
        id: Opaque site identifier
        coordinate: Declared nominal location
        zone: Authorized area (circle or polygon)
        active: Inactive sites never count for presence inference
        name: Display name
    """

    id: str
    coordinate: Coordinate
    zone: Zone
    active: bool = True
    name: str = ""


@dataclass(frozen=True)
class GuardPosition:
    """
    One observation from the location feed.

    Attributes:
        coordinate: Reported GPS coordinate
        reported_status: Status as reported by the guard device
        guard_id: Guard the observation belongs to
        site_id: Site the guard is assigned to, if any
    """

    coordinate: Coordinate
    reported_status: GuardStatus
    guard_id: str = ""
    site_id: Optional[str] = None


@dataclass(frozen=True)
class Guard:
    """
    Guard roster entry, possibly without a location fix.

    Attributes:
        id: Opaque guard identifier
        reported_status: Last self-reported status
        site_id: Assigned site, if any
        coordinate: Last known coordinate (None when never located)
        name: Display name
        clocked_in: Whether the guard is on shift
    """

    id: str
    reported_status: GuardStatus
    site_id: Optional[str] = None
    coordinate: Optional[Coordinate] = None
    name: str = ""
    clocked_in: bool = False

    @property
    def position(self) -> Optional[GuardPosition]:
        """Current observation, or None without a location fix."""
        if self.coordinate is None:
            return None
        return GuardPosition(
            coordinate=self.coordinate,
            reported_status=self.reported_status,
            guard_id=self.id,
            site_id=self.site_id,
        )
