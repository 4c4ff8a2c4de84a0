"""
Live Map Pipeline Module
========================

Bounded Context: One render pass of the live map.

Design:
- Orchestrator: combines anchors, effective statuses, analytics, visualization
- Builder pattern: fluent configuration
- Fail Fast: validation at build time, not at render time
- Guard/site data is passed in per pass, never read from shared state

Dependencies:
- supervision / opencv (through MapVisualizer)
- guardwatch_zone.geometry (membership, anchors, projection)
- guardwatch_zone.rendering (visualizer)
"""

import os
from collections import Counter
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import cv2
import numpy as np

from guardwatch_zone.geometry.anchor import resolve_anchor
from guardwatch_zone.geometry.evaluator import GeofenceEvaluator
from guardwatch_zone.geometry.projection import MercatorProjection
from guardwatch_zone.geometry.shapes import Bounds, Coordinate, PolygonalZone
from guardwatch_zone.models import Guard, GuardStatus, Site
from guardwatch_zone.rendering.visualizer import MapVisualizer
from utils import get_target_run_folder

DEFAULT_CENTER = Coordinate(latitude=28.6139, longitude=77.2090)
DEFAULT_ZOOM = 10.0


@dataclass(frozen=True)
class GuardMarker:
    """Classified guard, ready to draw."""

    guard_id: str
    coordinate: Coordinate
    reported_status: GuardStatus
    effective_status: GuardStatus


@dataclass(frozen=True)
class SiteMarker:
    """Site with its resolved anchor."""

    site_id: str
    anchor: Coordinate
    active: bool


@dataclass(frozen=True)
class LiveMapSnapshot:
    """
    Plain result of a render pass, for non-graphical callers.

    Attributes:
        guards: Located guards with effective status
        sites: Every site with its anchor
        unlocated_guard_ids: Guards without a location fix (not drawn)
    """

    guards: Tuple[GuardMarker, ...] = ()
    sites: Tuple[SiteMarker, ...] = ()
    unlocated_guard_ids: Tuple[str, ...] = ()

    def status_of(self, guard_id: str) -> Optional[GuardStatus]:
        for marker in self.guards:
            if marker.guard_id == guard_id:
                return marker.effective_status
        return None

    def anchor_of(self, site_id: str) -> Optional[Coordinate]:
        for marker in self.sites:
            if marker.site_id == site_id:
                return marker.anchor
        return None

    def status_counts(self) -> Dict[GuardStatus, int]:
        return dict(Counter(marker.effective_status for marker in self.guards))

    def to_dict(self) -> dict:
        return {
            "guards": [
                {
                    "id": m.guard_id,
                    "lat": m.coordinate.latitude,
                    "lng": m.coordinate.longitude,
                    "reported_status": m.reported_status.value,
                    "effective_status": m.effective_status.value,
                }
                for m in self.guards
            ],
            "sites": [
                {"id": m.site_id, "lat": m.anchor.latitude, "lng": m.anchor.longitude, "active": m.active}
                for m in self.sites
            ],
            "unlocated_guard_ids": list(self.unlocated_guard_ids),
        }


def overview_points(guards: Iterable[Guard], sites: Iterable[Site]) -> List[Coordinate]:
    """Every guard coordinate, site coordinate and polygon vertex, for overview framing."""
    points: List[Coordinate] = [g.coordinate for g in guards if g.coordinate is not None]
    for site in sites:
        points.append(site.coordinate)
        if isinstance(site.zone, PolygonalZone):
            points.extend(site.zone.vertices)
    return points


@dataclass
class PipelineConfig:
    """
    Pipeline configuration.

    Design:
    - All dependencies injected
    - Validated at construction
    """

    size_wh: Tuple[int, int]
    visualizer: MapVisualizer
    default_center: Coordinate = DEFAULT_CENTER
    default_zoom: float = DEFAULT_ZOOM
    fit_overview: bool = True
    overview_padding_px: int = 50
    max_zoom: float = 16.0
    show_legend: bool = True
    label_guards: bool = False
    output_folder: Optional[str] = None


class LiveMapPipeline:
    """
    Orchestrates one live-map render pass.

    Pipeline stages:
    1. Resolve an anchor per site
    2. Classify each located guard (effective status)
    3. Choose the view (overview fit or default)
    4. Draw zones, site labels, guards, legend

    Usage:
        pipeline = (
            PipelineBuilder()
            .with_size(1280, 720)
            .with_overview(padding_px=50)
            .build()
        )

        snapshot = pipeline.snapshot(guards, sites)
        canvas = pipeline.render(guards, sites)
        pipeline.save(canvas, "live_map.png")
    """

    def __init__(self, config: PipelineConfig):
        self.config = config
        self._validate_config()

    def _validate_config(self) -> None:
        """Validate configuration (fail fast)."""
        width, height = self.config.size_wh
        if width <= 0 or height <= 0:
            raise ValueError(f"size_wh must have positive dimensions, got {self.config.size_wh}")
        if self.config.overview_padding_px < 0:
            raise ValueError("overview_padding_px must be >= 0")

    def snapshot(self, guards: Sequence[Guard], sites: Sequence[Site]) -> LiveMapSnapshot:
        """Classify guards and resolve anchors without drawing."""
        guard_markers = []
        unlocated = []
        for guard in guards:
            position = guard.position
            if position is None:
                unlocated.append(guard.id)
                continue
            guard_markers.append(
                GuardMarker(
                    guard_id=guard.id,
                    coordinate=position.coordinate,
                    reported_status=guard.reported_status,
                    effective_status=GeofenceEvaluator.effective_guard_status(position, sites),
                )
            )

        site_markers = [
            SiteMarker(site_id=site.id, anchor=resolve_anchor(site.zone, site.coordinate), active=site.active)
            for site in sites
        ]

        return LiveMapSnapshot(
            guards=tuple(guard_markers),
            sites=tuple(site_markers),
            unlocated_guard_ids=tuple(unlocated),
        )

    def projection_for(self, guards: Sequence[Guard], sites: Sequence[Site]) -> MercatorProjection:
        """
        View for a render pass.

        Fits every overview point (padded, capped at max_zoom) when enabled,
        otherwise the configured default view.
        """
        points = overview_points(guards, sites) if self.config.fit_overview else []
        if not points:
            return MercatorProjection(
                center=self.config.default_center,
                zoom=self.config.default_zoom,
                size_wh=self.config.size_wh,
            )

        bounds = Bounds.from_coordinates(points)
        padding = self.config.overview_padding_px
        zoom = MercatorProjection.zoom_to_fit(bounds, self.config.size_wh, (padding, padding))
        return MercatorProjection(
            center=bounds.center,
            zoom=min(zoom, self.config.max_zoom),
            size_wh=self.config.size_wh,
        )

    def render(
        self,
        guards: Sequence[Guard],
        sites: Sequence[Site],
        projection: Optional[MercatorProjection] = None,
    ) -> np.ndarray:
        """
        Draw the live map.

        Args:
            guards: Guard roster
            sites: Every known site
            projection: View to draw (defaults to projection_for())

        Returns:
            BGR image
        """
        visualizer = self.config.visualizer
        projection = projection or self.projection_for(guards, sites)
        snapshot = self.snapshot(guards, sites)
        sites_by_id = {site.id: site for site in sites}

        canvas = visualizer.create_canvas(self.config.size_wh)

        for site in sites:
            canvas = visualizer.draw_zone(canvas, site, projection)

        for marker in snapshot.sites:
            canvas = visualizer.draw_site_marker(canvas, sites_by_id[marker.site_id], marker.anchor, projection)

        for marker in snapshot.guards:
            canvas = visualizer.draw_guard(
                canvas,
                marker.coordinate,
                marker.effective_status,
                projection,
                label=marker.guard_id if self.config.label_guards else None,
            )

        if self.config.show_legend:
            canvas = visualizer.draw_legend(canvas, snapshot.status_counts())

        return canvas

    def save(self, canvas: np.ndarray, path: Optional[str] = None) -> str:
        """
        Write a rendered canvas as an image.

        Args:
            canvas: Image from render()
            path: Target file (defaults to <output_folder>/live_map.png)

        Returns:
            Path written
        """
        if path is None:
            folder = self.config.output_folder or get_target_run_folder(application_name="live_map")
            path = os.path.join(folder, "live_map.png")

        parent = os.path.dirname(path)
        if parent:
            os.makedirs(parent, exist_ok=True)

        if not cv2.imwrite(path, canvas):
            raise RuntimeError(f"Failed to write image: {path}")
        return path


class PipelineBuilder:
    """
    Builder for LiveMapPipeline.

    Design:
    - Fluent API for construction
    - Fail-fast validation
    - Sensible defaults

    Usage:
        pipeline = (
            PipelineBuilder()
            .with_size(1280, 720)
            .with_default_view(Coordinate(28.6139, 77.2090), zoom=10)
            .with_guard_labels()
            .build()
        )
    """

    def __init__(self):
        self._size_wh: Tuple[int, int] = (1280, 720)
        self._visualizer: Optional[MapVisualizer] = None
        self._default_center: Coordinate = DEFAULT_CENTER
        self._default_zoom: float = DEFAULT_ZOOM
        self._fit_overview: bool = True
        self._overview_padding_px: int = 50
        self._max_zoom: float = 16.0
        self._show_legend: bool = True
        self._label_guards: bool = False
        self._output_folder: Optional[str] = None

    def with_size(self, width: int, height: int) -> "PipelineBuilder":
        """Set canvas size in pixels."""
        self._size_wh = (width, height)
        return self

    def with_visualizer(self, visualizer: MapVisualizer) -> "PipelineBuilder":
        self._visualizer = visualizer
        return self

    def with_default_view(self, center: Coordinate, zoom: float) -> "PipelineBuilder":
        """View used when there is nothing to fit (or overview is disabled)."""
        self._default_center = center
        self._default_zoom = zoom
        return self

    def with_overview(self, enabled: bool = True, padding_px: int = 50) -> "PipelineBuilder":
        """Fit all guards, sites and polygon vertices into view."""
        self._fit_overview = enabled
        self._overview_padding_px = padding_px
        return self

    def with_max_zoom(self, max_zoom: float) -> "PipelineBuilder":
        self._max_zoom = max_zoom
        return self

    def with_legend(self, enabled: bool = True) -> "PipelineBuilder":
        self._show_legend = enabled
        return self

    def with_guard_labels(self, enabled: bool = True) -> "PipelineBuilder":
        self._label_guards = enabled
        return self

    def with_output_folder(self, folder: str) -> "PipelineBuilder":
        self._output_folder = folder
        return self

    def build(self) -> LiveMapPipeline:
        """
        Build the pipeline.

        Raises:
            ValueError: If the configuration is invalid
        """
        config = PipelineConfig(
            size_wh=self._size_wh,
            visualizer=self._visualizer or MapVisualizer(),
            default_center=self._default_center,
            default_zoom=self._default_zoom,
            fit_overview=self._fit_overview,
            overview_padding_px=self._overview_padding_px,
            max_zoom=self._max_zoom,
            show_legend=self._show_legend,
            label_guards=self._label_guards,
            output_folder=self._output_folder,
        )
        return LiveMapPipeline(config)
