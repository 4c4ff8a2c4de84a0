"""
Geographic Shapes Module
========================

Pure geographic value types - NO state, NO side effects.

Design:
- Immutable shapes (frozen dataclass pattern)
- Tagged union for zones: CircularZone | PolygonalZone
- Degrees, WGS84, flat-earth approximation for site-scale areas
- Thread-safe (immutable values)
"""

from dataclasses import dataclass
from typing import Iterable, Tuple, Union


@dataclass(frozen=True)
class Coordinate:
    """
    Immutable latitude/longitude pair in decimal degrees.

    Attributes:
        latitude: Degrees north (y)
        longitude: Degrees east (x)
    """

    latitude: float
    longitude: float

    def as_tuple(self) -> Tuple[float, float]:
        """Return (lat, lng)."""
        return (self.latitude, self.longitude)


@dataclass(frozen=True)
class CircularZone:
    """
    Circular authorization area.

    Attributes:
        center: Circle center
        radius_m: Radius in meters (>= 0, 0 means degenerate)
    """

    center: Coordinate
    radius_m: float

    def __post_init__(self):
        """Validate radius."""
        if self.radius_m < 0:
            raise ValueError(f"radius_m must be >= 0, got {self.radius_m}")

    @property
    def is_degenerate(self) -> bool:
        """True for a zero-radius circle."""
        return self.radius_m == 0


@dataclass(frozen=True)
class PolygonalZone:
    """
    Polygonal authorization area.

    The ring is implicitly closed (last vertex connects back to the first).
    Fewer than 3 vertices is allowed and treated as degenerate by callers;
    construction never fails for a short ring.

    Attributes:
        vertices: Ordered vertices of the ring
    """

    vertices: Tuple[Coordinate, ...]

    def __post_init__(self):
        """Freeze vertex sequence into a tuple."""
        if not isinstance(self.vertices, tuple):
            object.__setattr__(self, "vertices", tuple(self.vertices))

    @property
    def is_degenerate(self) -> bool:
        """True when the ring cannot enclose an area."""
        return len(self.vertices) < 3


Zone = Union[CircularZone, PolygonalZone]


@dataclass(frozen=True)
class Bounds:
    """
    Axis-aligned lat/lng bounding box.

    Attributes:
        south: Minimum latitude
        west: Minimum longitude
        north: Maximum latitude
        east: Maximum longitude
    """

    south: float
    west: float
    north: float
    east: float

    @classmethod
    def from_coordinates(cls, coordinates: Iterable[Coordinate]) -> "Bounds":
        """
        Smallest box containing every coordinate.

        Raises:
            ValueError: If no coordinates are given
        """
        points = list(coordinates)
        if not points:
            raise ValueError("Bounds require at least one coordinate")

        lats = [p.latitude for p in points]
        lngs = [p.longitude for p in points]
        return cls(south=min(lats), west=min(lngs), north=max(lats), east=max(lngs))

    @property
    def center(self) -> Coordinate:
        """Midpoint of the box."""
        return Coordinate(
            latitude=(self.south + self.north) / 2,
            longitude=(self.west + self.east) / 2,
        )

    def contains(self, point: Coordinate) -> bool:
        return (
            self.south <= point.latitude <= self.north
            and self.west <= point.longitude <= self.east
        )
