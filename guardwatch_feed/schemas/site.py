"""
Site Record Schema
==================

Bounded Context: Site wire format of the dashboard REST API.

Zone derivation (the API stores zone type and parameters side by side):
- geofenceType == "polygon" with a non-empty polygon -> PolygonalZone
- anything else -> CircularZone on the site location, radius geofenceRadius or 0

Wire example:
    {
        "id": "site-1",
        "name": "Cyber Hub Tower B",
        "address": "DLF Phase 2, Gurugram",
        "location": {"lat": 28.4950, "lng": 77.0895},
        "geofenceType": "radius",
        "geofenceRadius": 150,
        "geofencePolygon": null,
        "isActive": true,
        "assignedGuards": ["guard-1", "guard-4"]
    }
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from guardwatch_zone.geometry.shapes import CircularZone, PolygonalZone
from guardwatch_zone.models import Site
from .common import LatLng


class GeofenceType(str, Enum):
    """Zone type as stored by site management."""
    RADIUS = "radius"
    POLYGON = "polygon"


@dataclass(frozen=True)
class SiteRecord:
    """
    Immutable site record as exchanged with the API.

    Attributes:
        id: Opaque site identifier
        name: Display name
        location: Declared site location
        geofence_type: radius or polygon
        geofence_radius: Radius in meters (radius sites)
        geofence_polygon: Ring vertices (polygon sites)
        is_active: Inactive sites never count for presence
        address: Postal address
        assigned_guards: Guard ids assigned to the site
    """
    id: str
    name: str
    location: LatLng
    geofence_type: GeofenceType = GeofenceType.RADIUS
    geofence_radius: Optional[float] = None
    geofence_polygon: Tuple[LatLng, ...] = ()
    is_active: bool = True
    address: str = ""
    assigned_guards: List[str] = field(default_factory=list)

    def __post_init__(self):
        """Validate invariants."""
        if not self.id:
            raise ValueError("Site id cannot be empty")
        if self.geofence_radius is not None and self.geofence_radius < 0:
            raise ValueError(f"geofenceRadius must be >= 0, got {self.geofence_radius}")
        if not isinstance(self.geofence_polygon, tuple):
            object.__setattr__(self, 'geofence_polygon', tuple(self.geofence_polygon))

    def to_site(self) -> Site:
        """Map onto the core Site model."""
        center = self.location.to_coordinate()
        if self.geofence_type == GeofenceType.POLYGON and self.geofence_polygon:
            zone = PolygonalZone(vertices=tuple(p.to_coordinate() for p in self.geofence_polygon))
        else:
            zone = CircularZone(center=center, radius_m=self.geofence_radius or 0.0)

        return Site(
            id=self.id,
            coordinate=center,
            zone=zone,
            active=self.is_active,
            name=self.name,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to JSON-compatible dict (API field names)."""
        return {
            'id': self.id,
            'name': self.name,
            'address': self.address,
            'location': self.location.to_dict(),
            'geofenceType': self.geofence_type.value,
            'geofenceRadius': self.geofence_radius,
            'geofencePolygon': [p.to_dict() for p in self.geofence_polygon] or None,
            'isActive': self.is_active,
            'assignedGuards': list(self.assigned_guards),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SiteRecord':
        """Deserialize from dict.

        Unknown geofence types fall back to radius, like the dashboard does.

        Raises:
            ValueError: If required fields missing or invalid
        """
        try:
            raw_type = data.get('geofenceType') or GeofenceType.RADIUS.value
            try:
                geofence_type = GeofenceType(raw_type)
            except ValueError:
                geofence_type = GeofenceType.RADIUS

            radius = data.get('geofenceRadius')
            polygon = data.get('geofencePolygon') or []

            return cls(
                id=str(data['id']),
                name=str(data.get('name', '')),
                location=LatLng.from_dict(data['location']),
                geofence_type=geofence_type,
                geofence_radius=float(radius) if radius is not None else None,
                geofence_polygon=tuple(LatLng.from_dict(p) for p in polygon),
                is_active=bool(data.get('isActive', True)),
                address=str(data.get('address') or ''),
                assigned_guards=[str(g) for g in data.get('assignedGuards') or []],
            )
        except KeyError as e:
            raise ValueError(f"Missing required SiteRecord field: {e}")
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid SiteRecord data: {e}")
