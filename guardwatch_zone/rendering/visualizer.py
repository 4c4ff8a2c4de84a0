"""
Map Visualizer Module
=====================

Pure visualization layer for site zones and guard markers.

Design:
- Stateless rendering (pure functions)
- No business logic: callers pass effective statuses and anchors
- Configurable styles
- Uses supervision drawing utilities; cv2 only for round markers

Dependencies:
- supervision (draw utilities, Color, Point)
- opencv (circles, image output)
- numpy (canvas, pixel arrays)
"""

from typing import Dict, Mapping, Optional, Sequence, Tuple

import cv2
import numpy as np
import supervision as sv

from guardwatch_zone.geometry.primitives import destination_point
from guardwatch_zone.geometry.projection import MercatorProjection
from guardwatch_zone.geometry.shapes import CircularZone, Coordinate, PolygonalZone
from guardwatch_zone.models import GuardStatus, Site

# Marker colors by effective status
STATUS_COLORS: Dict[GuardStatus, sv.Color] = {
    GuardStatus.ONLINE: sv.Color.from_hex("#22c55e"),
    GuardStatus.IDLE: sv.Color.from_hex("#f59e0b"),
    GuardStatus.OFFLINE: sv.Color.from_hex("#ef4444"),
    GuardStatus.ALERT: sv.Color.from_hex("#dc2626"),
    GuardStatus.PANIC: sv.Color.from_hex("#d946ef"),
    GuardStatus.PENDING: sv.Color.from_hex("#9ca3af"),
}

# Circles are drawn as polygons with this many sides
CIRCLE_SEGMENTS = 64


class MapVisualizer:
    """
    Stateless visualizer for the live map.

    Usage:
        visualizer = MapVisualizer()
        canvas = visualizer.create_canvas((1280, 720))

        canvas = visualizer.draw_zone(canvas, site, projection)
        canvas = visualizer.draw_site_marker(canvas, site, anchor, projection)
        canvas = visualizer.draw_guard(canvas, coordinate, GuardStatus.ONLINE, projection)
        canvas = visualizer.draw_legend(canvas, {GuardStatus.ONLINE: 3})
    """

    def __init__(
        self,
        zone_color: sv.Color = sv.Color.from_hex("#3b82f6"),
        inactive_zone_color: sv.Color = sv.Color.from_hex("#6b7280"),
        background_color: sv.Color = sv.Color(r=241, g=245, b=249),
        text_color: sv.Color = sv.Color(r=255, g=255, b=255),
        text_background_color: sv.Color = sv.Color(r=15, g=23, b=42),
        status_colors: Optional[Mapping[GuardStatus, sv.Color]] = None,
        thickness: int = 2,
        marker_radius: int = 7,
        text_scale: float = 0.45,
        text_thickness: int = 1,
        text_padding: int = 4,
        opacity: float = 0.2,
    ):
        """
        Initialize visualizer with style configuration.

        Args:
            zone_color: Outline/fill for active site zones
            inactive_zone_color: Outline for inactive site zones
            background_color: Canvas color
            text_color: Label text color
            text_background_color: Label background color
            status_colors: Guard marker palette (defaults to STATUS_COLORS)
            thickness: Zone outline thickness
            marker_radius: Guard marker radius in pixels
            text_scale: Label scale factor
            text_thickness: Label stroke thickness
            text_padding: Label background padding
            opacity: Zone fill opacity (0-1)
        """
        self.zone_color = zone_color
        self.inactive_zone_color = inactive_zone_color
        self.background_color = background_color
        self.text_color = text_color
        self.text_background_color = text_background_color
        self.status_colors = dict(status_colors or STATUS_COLORS)
        self.thickness = thickness
        self.marker_radius = marker_radius
        self.text_scale = text_scale
        self.text_thickness = text_thickness
        self.text_padding = text_padding
        self.opacity = opacity

    def create_canvas(self, size_wh: Tuple[int, int]) -> np.ndarray:
        """Blank BGR canvas of the given (width, height)."""
        width, height = size_wh
        canvas = np.empty((height, width, 3), dtype=np.uint8)
        canvas[:] = self.background_color.as_bgr()
        return canvas

    def zone_pixels(self, zone, projection: MercatorProjection) -> np.ndarray:
        """
        Zone outline as an Nx2 int32 pixel array.

        Circles are approximated by CIRCLE_SEGMENTS destination points.
        Degenerate zones yield an empty array.
        """
        if isinstance(zone, CircularZone):
            if zone.is_degenerate:
                return np.empty((0, 2), dtype=np.int32)
            bearings = np.linspace(0.0, 360.0, CIRCLE_SEGMENTS, endpoint=False)
            ring: Sequence[Coordinate] = [
                destination_point(zone.center, float(bearing), zone.radius_m) for bearing in bearings
            ]
        elif isinstance(zone, PolygonalZone):
            ring = zone.vertices
        else:
            raise TypeError(f"Unsupported zone type: {type(zone).__name__}")

        if not ring:
            return np.empty((0, 2), dtype=np.int32)
        return np.array([projection.to_pixel(c) for c in ring], dtype=float).round().astype(np.int32)

    def draw_zone(
        self,
        canvas: np.ndarray,
        site: Site,
        projection: MercatorProjection,
    ) -> np.ndarray:
        """
        Draw a site's zone (filled when active, outline only when inactive).

        Args:
            canvas: Image to draw on
            site: Site whose zone to draw
            projection: Current view

        Returns:
            Canvas with zone drawn
        """
        polygon = self.zone_pixels(site.zone, projection)
        if len(polygon) < 3:
            return canvas

        color = self.zone_color if site.active else self.inactive_zone_color
        if site.active:
            canvas = sv.draw_filled_polygon(
                scene=canvas,
                polygon=polygon,
                color=color,
                opacity=self.opacity,
            )

        canvas = sv.draw_polygon(
            scene=canvas,
            polygon=polygon,
            color=color,
            thickness=self.thickness,
        )
        return canvas

    def draw_site_marker(
        self,
        canvas: np.ndarray,
        site: Site,
        anchor: Coordinate,
        projection: MercatorProjection,
    ) -> np.ndarray:
        """Draw a site's label at its resolved anchor."""
        x, y = projection.to_pixel(anchor)
        color = self.zone_color if site.active else self.inactive_zone_color

        canvas = sv.draw_text(
            scene=canvas,
            text=site.name or site.id,
            text_anchor=sv.Point(x=int(round(x)), y=int(round(y))),
            text_color=self.text_color,
            text_scale=self.text_scale,
            text_thickness=self.text_thickness,
            text_padding=self.text_padding,
            background_color=color,
        )
        return canvas

    def draw_guard(
        self,
        canvas: np.ndarray,
        coordinate: Coordinate,
        status: GuardStatus,
        projection: MercatorProjection,
        label: Optional[str] = None,
    ) -> np.ndarray:
        """
        Draw one guard marker colored by its effective status.

        Args:
            canvas: Image to draw on
            coordinate: Guard position
            status: Effective status (already classified by the caller)
            projection: Current view
            label: Optional text drawn above the marker

        Returns:
            Canvas with marker drawn
        """
        x, y = projection.to_pixel(coordinate)
        center = (int(round(x)), int(round(y)))
        color = self.status_colors.get(status, self.inactive_zone_color)

        cv2.circle(canvas, center, self.marker_radius, color.as_bgr(), thickness=-1, lineType=cv2.LINE_AA)
        cv2.circle(canvas, center, self.marker_radius, (255, 255, 255), thickness=2, lineType=cv2.LINE_AA)

        if label:
            canvas = sv.draw_text(
                scene=canvas,
                text=label,
                text_anchor=sv.Point(x=center[0], y=center[1] - self.marker_radius - 12),
                text_color=self.text_color,
                text_scale=self.text_scale,
                text_thickness=self.text_thickness,
                text_padding=self.text_padding,
                background_color=self.text_background_color,
            )
        return canvas

    def draw_legend(
        self,
        canvas: np.ndarray,
        counts: Optional[Mapping[GuardStatus, int]] = None,
    ) -> np.ndarray:
        """Draw the status legend (with counts when given) in the top-left corner."""
        x = 16
        y = 20
        line_height = int(28 * max(self.text_scale / 0.45, 1.0))

        for status, color in self.status_colors.items():
            cv2.circle(canvas, (x, y), self.marker_radius, color.as_bgr(), thickness=-1, lineType=cv2.LINE_AA)

            text = status.value
            if counts is not None:
                text = f"{text}: {counts.get(status, 0)}"

            canvas = sv.draw_text(
                scene=canvas,
                text=text,
                text_anchor=sv.Point(x=x + 50, y=y),
                text_color=self.text_color,
                text_scale=self.text_scale,
                text_thickness=self.text_thickness,
                text_padding=self.text_padding,
                background_color=self.text_background_color,
            )
            y += line_height

        return canvas
