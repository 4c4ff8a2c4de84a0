"""
Geometry Primitives Module
==========================

Pure geographic math - NO state, NO side effects.

Design:
- Vectorized ring operations (numpy) for polygon tests
- Planar approximation (x = longitude, y = latitude) for site-scale polygons
- Spherical earth (R = 6371 km) for distances
- Web-Mercator tile math for zoom/scale conversion
- Total over well-formed input: sentinels instead of exceptions

Sentinels:
- point_in_polygon() on an empty ring returns False
- polygon_centroid() on an empty or zero-area ring returns a NaN centroid
  with area 0.0; callers must check the area before trusting the centroid
"""

import math
from typing import Sequence, Tuple

import numpy as np

from guardwatch_zone.geometry.shapes import Coordinate

EARTH_RADIUS_M = 6_371_000.0

# Ground resolution of zoom level 0 at the equator (256px tiles).
EQUATOR_METERS_PER_PIXEL = 156543.03392804097

# Replaces an exactly-zero edge height in the ray-casting division.
_EDGE_EPSILON = np.finfo(float).eps


def _as_xy(vertices: Sequence[Coordinate]) -> np.ndarray:
    """Convert vertices to an Nx2 float array of (longitude, latitude)."""
    if len(vertices) == 0:
        return np.empty((0, 2), dtype=float)
    return np.array([(v.longitude, v.latitude) for v in vertices], dtype=float)


def point_in_polygon(point: Coordinate, vertices: Sequence[Coordinate]) -> bool:
    """
    Ray-casting membership test.

    An edge (v_i, v_j) counts as a crossing when the point's latitude lies
    strictly on one side of v_i and not strictly on the same side of v_j, and
    the point's longitude is left of the edge at that latitude. Odd crossings
    mean inside.

    Points exactly on an edge may be classified either way.

    Args:
        point: Coordinate to test
        vertices: Ring vertices (implicitly closed)

    Returns:
        True if the point is inside the ring, False otherwise (or if empty)
    """
    xy = _as_xy(vertices)
    if len(xy) == 0:
        return False

    x, y = point.longitude, point.latitude
    xi, yi = xy[:, 0], xy[:, 1]
    xj, yj = np.roll(xi, 1), np.roll(yi, 1)

    straddles = (yi > y) != (yj > y)

    # Horizontal edges never straddle; the epsilon only keeps the division defined
    dy = yj - yi
    dy = np.where(dy == 0, _EDGE_EPSILON, dy)
    x_at_y = (xj - xi) * (y - yi) / dy + xi

    crossings = np.count_nonzero(straddles & (x < x_at_y))
    return bool(crossings % 2)


def polygon_centroid(vertices: Sequence[Coordinate]) -> Tuple[Coordinate, float]:
    """
    Area-weighted centroid via the shoelace formula.

    Coordinates are translated to the first vertex before accumulating so
    that small site polygons far from (0, 0) keep their precision.

    Args:
        vertices: Ring vertices (implicitly closed)

    Returns:
        Tuple of:
        - centroid: Coordinate (NaN components when the area is zero)
        - signed_area: Shoelace area in square degrees (positive for
          counter-clockwise rings in lng/lat space, 0.0 when undefined)
    """
    xy = _as_xy(vertices)
    undefined = Coordinate(latitude=math.nan, longitude=math.nan)
    if len(xy) == 0:
        return undefined, 0.0

    origin = xy[0]
    local = xy - origin
    x, y = local[:, 0], local[:, 1]
    x_next, y_next = np.roll(x, -1), np.roll(y, -1)

    cross = x * y_next - x_next * y
    signed_area = float(cross.sum() / 2.0)
    if signed_area == 0.0:
        return undefined, 0.0

    cx = float(((x + x_next) * cross).sum() / (6.0 * signed_area))
    cy = float(((y + y_next) * cross).sum() / (6.0 * signed_area))

    centroid = Coordinate(latitude=cy + origin[1], longitude=cx + origin[0])
    return centroid, signed_area


def vertex_mean(vertices: Sequence[Coordinate]) -> Coordinate:
    """Arithmetic mean of the vertices (NaN for an empty ring)."""
    xy = _as_xy(vertices)
    if len(xy) == 0:
        return Coordinate(latitude=math.nan, longitude=math.nan)
    mean_lng, mean_lat = xy.mean(axis=0)
    return Coordinate(latitude=float(mean_lat), longitude=float(mean_lng))


def haversine_distance_m(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance in meters between two coordinates."""
    lat1 = math.radians(a.latitude)
    lat2 = math.radians(b.latitude)
    dlat = lat2 - lat1
    dlng = math.radians(b.longitude - a.longitude)

    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2) ** 2
    return 2 * EARTH_RADIUS_M * math.asin(min(1.0, math.sqrt(h)))


def destination_point(origin: Coordinate, bearing_deg: float, distance_m: float) -> Coordinate:
    """
    Point reached travelling distance_m from origin along bearing_deg.

    Bearing 0 = North, clockwise. Inverse of haversine_distance_m on the
    same sphere.
    """
    angular = distance_m / EARTH_RADIUS_M
    bearing = math.radians(bearing_deg)
    lat1 = math.radians(origin.latitude)
    lng1 = math.radians(origin.longitude)

    lat2 = math.asin(
        math.sin(lat1) * math.cos(angular)
        + math.cos(lat1) * math.sin(angular) * math.cos(bearing)
    )
    lng2 = lng1 + math.atan2(
        math.sin(bearing) * math.sin(angular) * math.cos(lat1),
        math.cos(angular) - math.sin(lat1) * math.sin(lat2),
    )
    longitude = (math.degrees(lng2) + 540.0) % 360.0 - 180.0
    return Coordinate(latitude=math.degrees(lat2), longitude=longitude)


def meters_per_pixel(latitude: float, zoom: float) -> float:
    """Web-Mercator ground resolution at a latitude and zoom level."""
    return EQUATOR_METERS_PER_PIXEL * math.cos(math.radians(latitude)) / (2 ** zoom)


def zoom_for_meters_per_pixel(latitude: float, target_meters_per_pixel: float) -> float:
    """
    Inverse of meters_per_pixel(): zoom level giving the target resolution.

    Returns +inf for a non-positive target (infinitely fine resolution) and
    -inf where the ground resolution collapses (poles). Callers clamp.
    """
    if target_meters_per_pixel <= 0:
        return math.inf

    ground = EQUATOR_METERS_PER_PIXEL * math.cos(math.radians(latitude))
    if ground <= 0:
        return -math.inf

    return math.log2(ground / target_meters_per_pixel)
