"""
Common Schema Types
==================

Bounded Context: Shared Wire Structures

Types shared by the site and guard records of the dashboard REST API.

Design Principles:
- Immutability: frozen=True prevents accidental mutation
- Type Safety: All fields explicitly typed
- Serialization: to_dict() for JSON export
- Validation: from_dict() raises ValueError naming the bad field

Types:
- LatLng: {lat, lng} pair as sent by the API
- Timestamp: ISO 8601 timestamp wrapper
"""

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict

from guardwatch_zone.geometry.shapes import Coordinate


@dataclass(frozen=True)
class LatLng:
    """
    Immutable {lat, lng} wire pair.

    Invariants:
        - lat in [-90, 90]
        - lng in [-180, 180]

    Example:
        >>> LatLng.from_dict({'lat': 28.61, 'lng': 77.2}).to_coordinate()
        Coordinate(latitude=28.61, longitude=77.2)
    """
    lat: float
    lng: float

    def __post_init__(self):
        """Validate invariants."""
        if not (math.isfinite(self.lat) and -90.0 <= self.lat <= 90.0):
            raise ValueError(f"lat must be in [-90, 90], got {self.lat}")
        if not (math.isfinite(self.lng) and -180.0 <= self.lng <= 180.0):
            raise ValueError(f"lng must be in [-180, 180], got {self.lng}")

    def to_dict(self) -> Dict[str, float]:
        return {'lat': self.lat, 'lng': self.lng}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LatLng':
        """Deserialize from dict.

        Raises:
            ValueError: If lat/lng are missing or not numbers
        """
        try:
            return cls(lat=float(data['lat']), lng=float(data['lng']))
        except KeyError as e:
            raise ValueError(f"Missing required LatLng field: {e}")
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid LatLng data: {e}")

    @classmethod
    def from_coordinate(cls, coordinate: Coordinate) -> 'LatLng':
        return cls(lat=coordinate.latitude, lng=coordinate.longitude)

    def to_coordinate(self) -> Coordinate:
        return Coordinate(latitude=self.lat, longitude=self.lng)


@dataclass(frozen=True)
class Timestamp:
    """
    Immutable ISO 8601 timestamp wrapper.

    Attributes:
        value: ISO 8601 formatted timestamp string

    Example:
        >>> Timestamp.now().value
        '2026-03-02T09:14:05.123456+00:00'
    """
    value: str

    @classmethod
    def now(cls) -> 'Timestamp':
        """Create timestamp from current time (UTC)."""
        return cls(value=datetime.now(timezone.utc).isoformat())

    def to_datetime(self) -> datetime:
        """Parse to datetime object.

        A trailing 'Z' (as emitted by JavaScript clients) is accepted.

        Raises:
            ValueError: If timestamp format invalid
        """
        text = self.value
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        try:
            return datetime.fromisoformat(text)
        except ValueError as e:
            raise ValueError(f"Invalid ISO timestamp: {self.value}") from e

    def to_dict(self) -> str:
        """Serialize to JSON (as string)."""
        return self.value
