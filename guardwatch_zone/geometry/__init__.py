"""
Geometry Layer
==============

Bounded Context: Pure geographic shapes and spatial queries.

Responsibilities:
- Shape representation (immutable Coordinate, CircularZone, PolygonalZone)
- Point-in-polygon, centroid, distance, zoom/scale math
- Marker anchor resolution
- Geofence membership lives in geometry.evaluator (it reads guardwatch_zone.models,
  which imports this package, so it is not re-exported here)
- NO state, NO counting, NO rendering

Design Philosophy:
- Pure functions where possible
- Immutable data structures
- Sentinels over exceptions for degenerate input
- Zero side effects
"""

from guardwatch_zone.geometry.shapes import Bounds, CircularZone, Coordinate, PolygonalZone, Zone
from guardwatch_zone.geometry.primitives import (
    haversine_distance_m,
    meters_per_pixel,
    point_in_polygon,
    polygon_centroid,
    zoom_for_meters_per_pixel,
)
from guardwatch_zone.geometry.anchor import resolve_anchor
from guardwatch_zone.geometry.projection import MercatorProjection

__all__ = [
    "Bounds",
    "CircularZone",
    "Coordinate",
    "PolygonalZone",
    "Zone",
    "haversine_distance_m",
    "meters_per_pixel",
    "point_in_polygon",
    "polygon_centroid",
    "zoom_for_meters_per_pixel",
    "resolve_anchor",
    "MercatorProjection",
]
