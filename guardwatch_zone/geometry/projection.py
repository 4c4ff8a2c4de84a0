"""
Web-Mercator Projection
=======================

Maps lat/lng to viewport pixels for a (center, zoom, size) view, using the
same 256px tile pyramid as slippy-map widgets.

Used by:
- SimulatedViewport (fit_bounds zoom selection)
- MapVisualizer (drawing zones and markers on a canvas)
"""

import math
from dataclasses import dataclass
from typing import Tuple

from guardwatch_zone.geometry.shapes import Bounds, Coordinate

TILE_SIZE = 256

# Web-Mercator is undefined at the poles.
MAX_LATITUDE = 85.0511287798


def _world_xy(coordinate: Coordinate, zoom: float) -> Tuple[float, float]:
    """Absolute world pixel for a coordinate at a zoom level."""
    scale = TILE_SIZE * (2 ** zoom)
    lat = max(-MAX_LATITUDE, min(MAX_LATITUDE, coordinate.latitude))
    sin_lat = math.sin(math.radians(lat))

    x = (coordinate.longitude + 180.0) / 360.0 * scale
    y = (0.5 - math.log((1 + sin_lat) / (1 - sin_lat)) / (4 * math.pi)) * scale
    return x, y


def _world_to_coordinate(x: float, y: float, zoom: float) -> Coordinate:
    scale = TILE_SIZE * (2 ** zoom)
    lng = x / scale * 360.0 - 180.0
    n = math.pi - 2 * math.pi * y / scale
    lat = math.degrees(math.atan(math.sinh(n)))
    return Coordinate(latitude=lat, longitude=lng)


@dataclass(frozen=True)
class MercatorProjection:
    """
    Immutable view projection.

    Attributes:
        center: Coordinate at the middle of the viewport
        zoom: Zoom level (fractional allowed)
        size_wh: Viewport (width, height) in pixels
    """

    center: Coordinate
    zoom: float
    size_wh: Tuple[int, int]

    def to_pixel(self, coordinate: Coordinate) -> Tuple[float, float]:
        """Viewport pixel (x right, y down) of a coordinate."""
        cx, cy = _world_xy(self.center, self.zoom)
        x, y = _world_xy(coordinate, self.zoom)
        width, height = self.size_wh
        return x - cx + width / 2, y - cy + height / 2

    def to_coordinate(self, pixel: Tuple[float, float]) -> Coordinate:
        """Coordinate under a viewport pixel."""
        cx, cy = _world_xy(self.center, self.zoom)
        width, height = self.size_wh
        return _world_to_coordinate(pixel[0] - width / 2 + cx, pixel[1] - height / 2 + cy, self.zoom)

    @staticmethod
    def zoom_to_fit(
        bounds: Bounds,
        size_wh: Tuple[int, int],
        padding_px: Tuple[int, int] = (0, 0),
    ) -> float:
        """
        Largest zoom at which bounds fit inside the padded viewport.

        A zero-span bounds (single point) returns +inf; callers cap it.
        """
        west_x, north_y = _world_xy(Coordinate(bounds.north, bounds.west), 0)
        east_x, south_y = _world_xy(Coordinate(bounds.south, bounds.east), 0)
        span_x = abs(east_x - west_x)
        span_y = abs(south_y - north_y)

        avail_w = max(size_wh[0] - 2 * padding_px[0], 1)
        avail_h = max(size_wh[1] - 2 * padding_px[1], 1)

        candidates = []
        if span_x > 0:
            candidates.append(math.log2(avail_w / span_x))
        if span_y > 0:
            candidates.append(math.log2(avail_h / span_y))
        if not candidates:
            return math.inf
        return min(candidates)
