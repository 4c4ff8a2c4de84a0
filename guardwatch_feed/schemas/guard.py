"""
Guard Record Schema
===================

Bounded Context: Guard wire format of the dashboard REST API.

Wire example:
    {
        "id": "guard-3",
        "name": "Ravi Kumar",
        "employeeId": "EMP-1003",
        "siteId": "site-1",
        "status": "online",
        "location": {"lat": 28.4952, "lng": 77.0891},
        "lastSeen": "2026-03-02T09:14:05.000Z",
        "clockedIn": true
    }

A null location means the guard has no fix; such guards are listed but
never classified against a zone.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from guardwatch_zone.models import Guard, GuardStatus
from .common import LatLng, Timestamp


@dataclass(frozen=True)
class GuardRecord:
    """
    Immutable guard record as exchanged with the API.

    Attributes:
        id: Opaque guard identifier
        name: Display name
        status: Self-reported status
        location: Last reported position (None without a fix)
        site_id: Assigned site
        employee_id: HR identifier
        last_seen: Time of the last report
        clocked_in: Whether the guard is on shift
    """
    id: str
    name: str
    status: GuardStatus
    location: Optional[LatLng] = None
    site_id: Optional[str] = None
    employee_id: str = ""
    last_seen: Optional[Timestamp] = None
    clocked_in: bool = False

    def __post_init__(self):
        """Validate invariants."""
        if not self.id:
            raise ValueError("Guard id cannot be empty")

    def to_guard(self) -> Guard:
        """Map onto the core Guard model."""
        return Guard(
            id=self.id,
            reported_status=self.status,
            site_id=self.site_id,
            coordinate=self.location.to_coordinate() if self.location is not None else None,
            name=self.name,
            clocked_in=self.clocked_in,
        )

    def with_location(self, location: Optional[LatLng]) -> 'GuardRecord':
        """Copy with a new position, stamped now."""
        return GuardRecord(
            id=self.id,
            name=self.name,
            status=self.status,
            location=location,
            site_id=self.site_id,
            employee_id=self.employee_id,
            last_seen=Timestamp.now(),
            clocked_in=self.clocked_in,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to JSON-compatible dict (API field names)."""
        return {
            'id': self.id,
            'name': self.name,
            'employeeId': self.employee_id,
            'siteId': self.site_id,
            'status': self.status.value,
            'location': self.location.to_dict() if self.location is not None else None,
            'lastSeen': self.last_seen.to_dict() if self.last_seen is not None else None,
            'clockedIn': self.clocked_in,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GuardRecord':
        """Deserialize from dict.

        Raises:
            ValueError: If required fields missing or invalid
        """
        try:
            location = data.get('location')
            last_seen = data.get('lastSeen')
            site_id = data.get('siteId')

            return cls(
                id=str(data['id']),
                name=str(data.get('name', '')),
                status=GuardStatus(data['status']),
                location=LatLng.from_dict(location) if location else None,
                site_id=str(site_id) if site_id else None,
                employee_id=str(data.get('employeeId') or ''),
                last_seen=Timestamp(value=str(last_seen)) if last_seen else None,
                clocked_in=bool(data.get('clockedIn', False)),
            )
        except KeyError as e:
            raise ValueError(f"Missing required GuardRecord field: {e}")
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid GuardRecord data: {e}")
