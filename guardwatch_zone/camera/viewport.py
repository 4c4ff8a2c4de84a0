"""
Viewport Contracts
==================

Bounded Context: What the framing controller needs from a map widget.

Design:
- Protocols only - the controller never imports a map library
- Notifications are injected capabilities returning a detach callable
- Scheduler matches asyncio's loop.call_later() so an event loop can be
  passed directly

Also provides SimulatedViewport, an in-memory viewport driven by a
scheduler, for the CLI, the renderer and tests.
"""

import itertools
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple

from guardwatch_zone.geometry.primitives import destination_point
from guardwatch_zone.geometry.projection import MercatorProjection
from guardwatch_zone.geometry.shapes import Bounds, Coordinate

Detach = Callable[[], None]


class TimerHandle(Protocol):
    """Handle returned by Scheduler.call_later()."""

    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    """Cooperative single-threaded timer source (asyncio loop compatible)."""

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle:
        ...


class Viewport(Protocol):
    """Capability set of a map viewport."""

    def pan_zoom_to(self, center: Coordinate, zoom: float, animate: bool = True) -> None:
        """Move the view to center at zoom."""
        ...

    def fit_bounds(self, bounds: Bounds, padding_px: Tuple[int, int], max_zoom: float) -> None:
        """Fit bounds inside the view with padding, never exceeding max_zoom."""
        ...

    def get_size(self) -> Tuple[int, int]:
        """Viewport (width, height) in pixels."""
        ...

    def get_center(self) -> Coordinate:
        """Current (settled or in-flight) center."""
        ...

    def on_move_complete(self, callback: Callable[[], None]) -> Detach:
        """Subscribe to move-complete; returns a detach callable."""
        ...

    def on_resize(self, callback: Callable[[], None]) -> Detach:
        """Subscribe to viewport resize; returns a detach callable."""
        ...


class SimulatedViewport:
    """
    In-memory viewport with animated moves.

    Moves complete after animation_s on the injected scheduler (immediately
    when animate=False). A new command interrupts an in-flight animation,
    like slippy-map widgets do. settle_offset_m displaces the settled center
    north of the commanded one, to simulate a move that lands short.

    Attributes:
        commands: Log of (command_name, center, zoom) in issue order
    """

    def __init__(
        self,
        scheduler: Scheduler,
        center: Coordinate,
        zoom: float,
        size_wh: Tuple[int, int] = (1280, 720),
        animation_s: float = 0.25,
        settle_offset_m: float = 0.0,
        min_zoom: float = 0.0,
        max_zoom: float = 19.0,
    ):
        self._scheduler = scheduler
        self._center = center
        self._zoom = zoom
        self._size = size_wh
        self.animation_s = animation_s
        self.settle_offset_m = settle_offset_m
        self.min_zoom = min_zoom
        self.max_zoom = max_zoom

        self._tokens = itertools.count()
        self._move_listeners: Dict[int, Callable[[], None]] = {}
        self._resize_listeners: Dict[int, Callable[[], None]] = {}
        self._in_flight: Optional[TimerHandle] = None

        self.commands: List[Tuple[str, Coordinate, float]] = []

    # ---------------- Viewport protocol ----------------

    def pan_zoom_to(self, center: Coordinate, zoom: float, animate: bool = True) -> None:
        zoom = self._clamp_zoom(zoom)
        self.commands.append(("pan_zoom_to", center, zoom))
        self._move(center, zoom, animate)

    def fit_bounds(self, bounds: Bounds, padding_px: Tuple[int, int], max_zoom: float) -> None:
        zoom = MercatorProjection.zoom_to_fit(bounds, self._size, padding_px)
        zoom = self._clamp_zoom(min(zoom, max_zoom))
        center = bounds.center
        self.commands.append(("fit_bounds", center, zoom))
        self._move(center, zoom, animate=True)

    def get_size(self) -> Tuple[int, int]:
        return self._size

    def get_center(self) -> Coordinate:
        return self._center

    def on_move_complete(self, callback: Callable[[], None]) -> Detach:
        return self._subscribe(self._move_listeners, callback)

    def on_resize(self, callback: Callable[[], None]) -> Detach:
        return self._subscribe(self._resize_listeners, callback)

    # ---------------- Simulation helpers ----------------

    @property
    def zoom(self) -> float:
        return self._zoom

    @property
    def move_listener_count(self) -> int:
        return len(self._move_listeners)

    def projection(self) -> MercatorProjection:
        """Projection for the current view."""
        return MercatorProjection(center=self._center, zoom=self._zoom, size_wh=self._size)

    def resize(self, width: int, height: int) -> None:
        """Change the viewport size and notify resize listeners."""
        self._size = (width, height)
        for callback in list(self._resize_listeners.values()):
            callback()

    # ---------------- Internals ----------------

    def _clamp_zoom(self, zoom: float) -> float:
        return max(self.min_zoom, min(self.max_zoom, zoom))

    def _subscribe(self, registry: Dict[int, Callable[[], None]], callback: Callable[[], None]) -> Detach:
        token = next(self._tokens)
        registry[token] = callback

        def detach() -> None:
            registry.pop(token, None)

        return detach

    def _move(self, center: Coordinate, zoom: float, animate: bool) -> None:
        if self._in_flight is not None:
            self._in_flight.cancel()
            self._in_flight = None

        settled = center
        if self.settle_offset_m:
            settled = destination_point(center, 0.0, self.settle_offset_m)

        if animate and self.animation_s > 0:
            self._in_flight = self._scheduler.call_later(
                self.animation_s, self._finish_move, settled, zoom
            )
        else:
            self._finish_move(settled, zoom)

    def _finish_move(self, center: Coordinate, zoom: float) -> None:
        self._in_flight = None
        self._center = center
        self._zoom = zoom
        for callback in list(self._move_listeners.values()):
            callback()
