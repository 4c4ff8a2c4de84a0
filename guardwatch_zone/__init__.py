"""
Guardwatch Zone Engine v1.0
===========================

Bounded Context: Geofence membership and site focus for guard tracking.

Design Philosophy:
- Separation of Concerns: Geometry, Camera, Analytics, Rendering separated
- Pure core: guard/site data is always passed in, never read from globals
- Recompute on read: effective status is derived, never persisted
- Soft failure: degenerate zones fall back, framing gives up quietly

Architecture:

    guardwatch_zone/
    ├── models.py          # Site, Guard, GuardPosition, GuardStatus
    ├── geometry/          # Pure geometry (immutable, stateless)
    │   ├── shapes.py      # Coordinate, CircularZone, PolygonalZone, Bounds
    │   ├── primitives.py  # point_in_polygon, polygon_centroid, haversine, zoom math
    │   ├── evaluator.py   # GeofenceEvaluator (membership, effective status)
    │   ├── anchor.py      # resolve_anchor (marker placement)
    │   └── projection.py  # MercatorProjection
    │
    ├── camera/            # Viewport framing (stateful, cancellable)
    │   ├── viewport.py    # Viewport/Scheduler contracts, SimulatedViewport
    │   └── controller.py  # CameraFramingController
    │
    ├── analytics/         # Statistics & presence (stateful)
    │   ├── counter.py     # DashboardCounter, DashboardStats
    │   └── tracker.py     # PresenceTracker (enter/exit history)
    │
    ├── rendering/         # Visualization (stateless drawing)
    │   └── visualizer.py  # MapVisualizer
    │
    └── pipeline.py        # Render pass orchestration

Usage:

    # 1. Describe sites (immutable)
    from guardwatch_zone import Coordinate, CircularZone, Site

    hq = Coordinate(28.6139, 77.2090)
    site = Site(id="s-1", coordinate=hq, zone=CircularZone(center=hq, radius_m=150))

    # 2. Classify (stateless)
    from guardwatch_zone import GeofenceEvaluator

    status = GeofenceEvaluator.effective_guard_status(position, [site])

    # 3. Place markers
    from guardwatch_zone import resolve_anchor

    anchor = resolve_anchor(site.zone, site.coordinate)

    # 4. Frame the map (stateful)
    from guardwatch_zone import CameraFramingController

    controller = CameraFramingController(viewport, asyncio.get_running_loop())
    controller.focus(site.zone)

    # 5. Or render a whole pass
    from guardwatch_zone import PipelineBuilder

    pipeline = PipelineBuilder().with_size(1280, 720).build()
    canvas = pipeline.render(guards, sites)
"""

# Domain models
from guardwatch_zone.models import Guard, GuardPosition, GuardStatus, Site

# Geometry Layer (immutable, stateless)
from guardwatch_zone.geometry.shapes import Bounds, CircularZone, Coordinate, PolygonalZone, Zone
from guardwatch_zone.geometry.evaluator import GeofenceEvaluator, effective_guard_status, is_inside_zone
from guardwatch_zone.geometry.anchor import resolve_anchor
from guardwatch_zone.geometry.projection import MercatorProjection

# Camera Layer (stateful, cancellable)
from guardwatch_zone.camera.config import FramingConfig
from guardwatch_zone.camera.controller import CameraFramingController, FocusRequest, FocusState
from guardwatch_zone.camera.viewport import SimulatedViewport

# Analytics Layer (stateful)
from guardwatch_zone.analytics.counter import DashboardCounter, DashboardStats
from guardwatch_zone.analytics.tracker import PresenceEvent, PresenceTracker, PresenceTransition

# Rendering Layer (stateless)
from guardwatch_zone.rendering.visualizer import MapVisualizer

# Pipeline (orchestration)
from guardwatch_zone.pipeline import LiveMapPipeline, LiveMapSnapshot, PipelineBuilder

__all__ = [
    # Models
    "Guard",
    "GuardPosition",
    "GuardStatus",
    "Site",
    # Geometry
    "Bounds",
    "CircularZone",
    "Coordinate",
    "PolygonalZone",
    "Zone",
    "GeofenceEvaluator",
    "effective_guard_status",
    "is_inside_zone",
    "resolve_anchor",
    "MercatorProjection",
    # Camera
    "FramingConfig",
    "CameraFramingController",
    "FocusRequest",
    "FocusState",
    "SimulatedViewport",
    # Analytics
    "DashboardCounter",
    "DashboardStats",
    "PresenceEvent",
    "PresenceTracker",
    "PresenceTransition",
    # Rendering
    "MapVisualizer",
    # Pipeline
    "LiveMapPipeline",
    "LiveMapSnapshot",
    "PipelineBuilder",
]

__version__ = "1.0.0"
