"""
Zone Anchor Resolver
====================

Picks the single coordinate used to place a site marker.

Fallback chain (never returns None or NaN):
1. Circle -> its center
2. Polygon with non-zero area -> area-weighted centroid
3. Degenerate polygon (collinear, duplicated, < 3 effective vertices) -> vertex mean
4. Empty polygon -> the site's declared coordinate
"""

from guardwatch_zone.geometry.primitives import polygon_centroid, vertex_mean
from guardwatch_zone.geometry.shapes import CircularZone, Coordinate, PolygonalZone, Zone

# Square degrees; ~0.01 m^2 at the equator, far below any real site polygon.
DEGENERATE_AREA_EPSILON = 1e-12


def resolve_anchor(zone: Zone, declared_site_coordinate: Coordinate) -> Coordinate:
    """
    Resolve the marker coordinate for a zone.

    Args:
        zone: Site zone
        declared_site_coordinate: Site's nominal location (last-resort fallback)

    Returns:
        Representative coordinate for the zone
    """
    if isinstance(zone, CircularZone):
        return zone.center

    if isinstance(zone, PolygonalZone):
        if not zone.vertices:
            return declared_site_coordinate

        centroid, signed_area = polygon_centroid(zone.vertices)
        if abs(signed_area) <= DEGENERATE_AREA_EPSILON:
            return vertex_mean(zone.vertices)
        return centroid

    raise TypeError(f"Unsupported zone type: {type(zone).__name__}")
