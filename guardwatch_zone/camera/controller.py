"""
Camera Framing Controller
=========================

Bounded Context: Animating a viewport onto a site zone, with termination.

State machine (per FocusRequest):

    IDLE --submit--> FRAMING --settled within tolerance--> CONVERGED
                        |  \\
                        |   `--settle check failed, attempts left--> FRAMING (retry)
                        |
                        +--attempts exhausted--> GAVE_UP   (soft, logged as WARNING)
                        `--superseded / close()--> CANCELLED

Framing policy:
- Polygon: one-shot fit_bounds of the vertex box, padded by a fraction of the
  viewport, capped at max_zoom
- Circle: zoom chosen so the diameter fills a fraction of the viewport width,
  clamped to [min_zoom, max_zoom]; settle is verified against
  max(min_tolerance_m, fraction x radius) and retried with backoff
- Radius 0 / empty polygon: center at fallback_zoom, no retry

Concurrency:
- Single-threaded, cooperative: all suspension points are scheduler timers
  and the viewport's move-complete notification
- Exactly one move-complete listener per request at any time
- Every timer and listener callback re-checks that its request is still the
  live one before touching the viewport
"""

import itertools
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from guardwatch_feed.logging import LogEvent, StructuredLogger, create_logger
from guardwatch_zone.camera.config import FramingConfig
from guardwatch_zone.camera.viewport import Detach, Scheduler, TimerHandle, Viewport
from guardwatch_zone.geometry.primitives import haversine_distance_m, zoom_for_meters_per_pixel
from guardwatch_zone.geometry.shapes import Bounds, CircularZone, Coordinate, PolygonalZone, Zone


class FocusState(str, Enum):
    """Lifecycle of one focus request."""
    IDLE = "idle"
    FRAMING = "framing"
    CONVERGED = "converged"
    GAVE_UP = "gave_up"
    CANCELLED = "cancelled"


TERMINAL_STATES = frozenset({FocusState.CONVERGED, FocusState.GAVE_UP, FocusState.CANCELLED})


@dataclass(frozen=True)
class FocusRequest:
    """
    One focus action.

    Attributes:
        target_zone: Zone to frame
        viewport_size_px: Viewport (width, height) at request time
        fallback_center: Where to look when the zone is an empty polygon
        padding_px: Explicit fit padding, overriding the fractional default
    """

    target_zone: Zone
    viewport_size_px: Tuple[int, int]
    fallback_center: Optional[Coordinate] = None
    padding_px: Optional[Tuple[int, int]] = None


@dataclass
class CameraConvergenceState:
    """
    Mutable bookkeeping for the live request.

    Owned by the controller; discarded when the request finishes, is
    superseded, or the controller closes.
    """

    request: FocusRequest
    request_id: int
    state: FocusState = FocusState.FRAMING
    attempt_count: int = 0
    cancelled: bool = False
    pending_timers: List[TimerHandle] = field(default_factory=list)
    detach_listener: Optional[Detach] = None


StateCallback = Callable[[int, FocusState], None]


class CameraFramingController:
    """
    Drives a Viewport onto requested zones.

    A new request always supersedes the in-flight one: its timers are
    cancelled and its move-complete listener detached before the new
    request issues any command.

    Example:
        >>> controller = CameraFramingController(viewport, loop)
        >>> controller.focus(site.zone)
        >>> controller.subscribe(lambda request_id, state: print(state))
    """

    def __init__(
        self,
        viewport: Viewport,
        scheduler: Scheduler,
        config: Optional[FramingConfig] = None,
        logger: Optional[StructuredLogger] = None,
    ):
        self._viewport = viewport
        self._scheduler = scheduler
        self._config = config or FramingConfig()
        self._logger = logger or create_logger("camera")

        self._ids = itertools.count(1)
        self._current: Optional[CameraConvergenceState] = None
        self._last_request: Optional[FocusRequest] = None
        self._subscriber_ids = itertools.count()
        self._subscribers: Dict[int, StateCallback] = {}
        self._closed = False

        self._detach_resize: Optional[Detach] = viewport.on_resize(self._on_resize)

    # ---------------- Public API ----------------

    @property
    def config(self) -> FramingConfig:
        return self._config

    @property
    def state(self) -> FocusState:
        """State of the most recent request (IDLE before the first one)."""
        if self._current is None:
            return FocusState.IDLE
        return self._current.state

    @property
    def current(self) -> Optional[CameraConvergenceState]:
        return self._current

    def subscribe(self, callback: StateCallback) -> Detach:
        """
        Observe state transitions as (request_id, state).

        Returns:
            Callable that removes the subscription
        """
        token = next(self._subscriber_ids)
        self._subscribers[token] = callback

        def unsubscribe() -> None:
            self._subscribers.pop(token, None)

        return unsubscribe

    def focus(self, zone: Zone, fallback_center: Optional[Coordinate] = None) -> int:
        """Frame a zone at the viewport's current size. Returns the request id."""
        request = FocusRequest(
            target_zone=zone,
            viewport_size_px=self._viewport.get_size(),
            fallback_center=fallback_center,
        )
        return self.submit(request)

    def frame_overview(self, coordinates: Iterable[Coordinate]) -> Optional[int]:
        """
        Fit every given coordinate into view with the overview padding.

        Returns:
            Request id, or None when there is nothing to frame
        """
        points = tuple(coordinates)
        if not points:
            return None

        padding = self._config.overview_padding_px
        request = FocusRequest(
            target_zone=PolygonalZone(vertices=points),
            viewport_size_px=self._viewport.get_size(),
            padding_px=(padding, padding),
        )
        return self.submit(request)

    def submit(self, request: FocusRequest) -> int:
        """
        Start framing a request, superseding any in-flight one.

        Raises:
            RuntimeError: If the controller has been closed
            TypeError: If the target zone is not a known zone type
        """
        if self._closed:
            raise RuntimeError("CameraFramingController is closed")

        zone = request.target_zone
        if not isinstance(zone, (CircularZone, PolygonalZone)):
            raise TypeError(f"Unsupported zone type: {type(zone).__name__}")

        self.cancel()

        convergence = CameraConvergenceState(request=request, request_id=next(self._ids))
        self._current = convergence
        self._last_request = request

        self._logger.info(
            event=LogEvent.FOCUS_STARTED,
            message="Focus request started",
            metadata={
                'request_id': convergence.request_id,
                'zone_type': type(zone).__name__,
                'viewport_size_px': list(request.viewport_size_px),
            }
        )
        self._notify(convergence)

        if isinstance(zone, PolygonalZone):
            self._frame_polygon(convergence)
        elif zone.is_degenerate:
            self._center_at_fallback_zoom(convergence, zone.center)
        else:
            self._attempt_circle(convergence)

        return convergence.request_id

    def cancel(self) -> None:
        """
        Cancel the in-flight request, if any.

        Shared by supersession and teardown. Timers are cancelled and the
        move-complete listener detached; a request already in a terminal
        state keeps that state.
        """
        convergence = self._current
        if convergence is None or convergence.cancelled:
            return

        convergence.cancelled = True
        self._release(convergence)

        if convergence.state is FocusState.FRAMING:
            convergence.state = FocusState.CANCELLED
            self._logger.info(
                event=LogEvent.FOCUS_CANCELLED,
                message="Focus request cancelled",
                metadata={
                    'request_id': convergence.request_id,
                    'attempts': convergence.attempt_count,
                }
            )
            self._notify(convergence)

    def close(self) -> None:
        """Tear down: cancel the live request and stop following resizes."""
        self.cancel()
        if self._detach_resize is not None:
            self._detach_resize()
            self._detach_resize = None
        self._closed = True

    # ---------------- Framing math ----------------

    def circle_zoom(self, zone: CircularZone, viewport_width_px: int) -> float:
        """Zoom at which the circle's diameter fills the configured share of the width."""
        target_mpp = (2 * zone.radius_m) / (
            self._config.circle_diameter_fraction * max(viewport_width_px, 1)
        )
        zoom = zoom_for_meters_per_pixel(zone.center.latitude, target_mpp)
        return min(max(zoom, self._config.min_zoom), self._config.max_zoom)

    def tolerance_m(self, zone: CircularZone) -> float:
        """Settle tolerance, scaled with the radius."""
        return max(
            self._config.min_tolerance_m,
            self._config.tolerance_radius_fraction * zone.radius_m,
        )

    def polygon_padding(self, request: FocusRequest) -> Tuple[int, int]:
        if request.padding_px is not None:
            return request.padding_px
        width, height = request.viewport_size_px
        fraction = self._config.polygon_padding_fraction
        return (round(width * fraction), round(height * fraction))

    # ---------------- One-shot paths ----------------

    def _frame_polygon(self, convergence: CameraConvergenceState) -> None:
        request = convergence.request
        vertices = request.target_zone.vertices

        if not vertices:
            if request.fallback_center is None:
                self._give_up(convergence, reason="empty polygon without fallback center")
                return
            self._center_at_fallback_zoom(convergence, request.fallback_center)
            return

        bounds = Bounds.from_coordinates(vertices)
        convergence.attempt_count += 1
        try:
            self._viewport.fit_bounds(bounds, self.polygon_padding(request), self._config.max_zoom)
        except Exception as e:
            self._command_failed(convergence, "fit_bounds", e)
            self._give_up(convergence, reason="fit_bounds failed")
            return

        self._converge(convergence)

    def _center_at_fallback_zoom(self, convergence: CameraConvergenceState, center: Coordinate) -> None:
        convergence.attempt_count += 1
        try:
            self._viewport.pan_zoom_to(center, self._config.fallback_zoom, animate=True)
        except Exception as e:
            self._command_failed(convergence, "pan_zoom_to", e)
            self._give_up(convergence, reason="pan_zoom_to failed")
            return

        self._converge(convergence)

    # ---------------- Circle retry loop ----------------

    def _attempt_circle(self, convergence: CameraConvergenceState) -> None:
        zone = convergence.request.target_zone
        convergence.attempt_count += 1
        zoom = self.circle_zoom(zone, convergence.request.viewport_size_px[0])

        # One listener and one settle timer per attempt, armed before the command
        self._release(convergence)
        convergence.detach_listener = self._viewport.on_move_complete(
            self._guarded(convergence, self._on_settled)
        )
        self._arm(convergence, self._config.settle_timeout_s, self._on_settle_timeout)

        try:
            self._viewport.pan_zoom_to(zone.center, zoom, animate=True)
        except Exception as e:
            self._command_failed(convergence, "pan_zoom_to", e)
            self._release(convergence)
            self._retry_or_give_up(convergence)

    def _on_settle_timeout(self, convergence: CameraConvergenceState) -> None:
        self._logger.debug(
            event=LogEvent.VIEWPORT_SETTLE_TIMEOUT,
            message="No move-complete before settle timeout",
            metadata={
                'request_id': convergence.request_id,
                'attempt': convergence.attempt_count,
            }
        )
        self._on_settled(convergence)

    def _on_settled(self, convergence: CameraConvergenceState) -> None:
        self._release(convergence)

        zone = convergence.request.target_zone
        distance = haversine_distance_m(self._viewport.get_center(), zone.center)
        if distance <= self.tolerance_m(zone):
            self._converge(convergence)
        else:
            self._retry_or_give_up(convergence, distance)

    def _retry_or_give_up(self, convergence: CameraConvergenceState, distance_m: Optional[float] = None) -> None:
        if convergence.attempt_count < self._config.max_attempts:
            self._logger.info(
                event=LogEvent.FOCUS_RETRY,
                message="Viewport off target, retrying",
                metadata={
                    'request_id': convergence.request_id,
                    'attempt': convergence.attempt_count,
                    'distance_m': distance_m,
                }
            )
            self._arm(convergence, self._config.retry_backoff_s, self._attempt_circle)
        else:
            self._give_up(convergence, reason="attempt budget exhausted", distance_m=distance_m)

    # ---------------- Terminal transitions ----------------

    def _converge(self, convergence: CameraConvergenceState) -> None:
        self._release(convergence)
        convergence.state = FocusState.CONVERGED
        self._logger.info(
            event=LogEvent.FOCUS_CONVERGED,
            message="Focus converged",
            metadata={
                'request_id': convergence.request_id,
                'attempts': convergence.attempt_count,
            }
        )
        self._notify(convergence)

    def _give_up(self, convergence: CameraConvergenceState, reason: str, distance_m: Optional[float] = None) -> None:
        self._release(convergence)
        convergence.state = FocusState.GAVE_UP
        self._logger.warning(
            event=LogEvent.FOCUS_GAVE_UP,
            message="Focus gave up; viewport left at last commanded position",
            metadata={
                'request_id': convergence.request_id,
                'attempts': convergence.attempt_count,
                'reason': reason,
                'distance_m': distance_m,
            }
        )
        self._notify(convergence)

    def _command_failed(self, convergence: CameraConvergenceState, command: str, error: Exception) -> None:
        self._logger.warning(
            event=LogEvent.VIEWPORT_COMMAND_FAILED,
            message=f"Viewport {command} raised",
            metadata={
                'request_id': convergence.request_id,
                'attempt': convergence.attempt_count,
            },
            exc_info=error,
        )

    # ---------------- Timers, listeners, notifications ----------------

    def _is_live(self, convergence: CameraConvergenceState) -> bool:
        return (
            not convergence.cancelled
            and self._current is convergence
            and convergence.state is FocusState.FRAMING
        )

    def _guarded(
        self,
        convergence: CameraConvergenceState,
        action: Callable[[CameraConvergenceState], None],
    ) -> Callable[[], None]:
        def callback() -> None:
            if self._is_live(convergence):
                action(convergence)

        return callback

    def _arm(
        self,
        convergence: CameraConvergenceState,
        delay: float,
        action: Callable[[CameraConvergenceState], None],
    ) -> None:
        handle: List[TimerHandle] = []

        def fire() -> None:
            # Handles are compared by identity; asyncio handles define __eq__
            convergence.pending_timers[:] = [
                h for h in convergence.pending_timers if h is not handle[0]
            ]
            if self._is_live(convergence):
                action(convergence)

        handle.append(self._scheduler.call_later(delay, fire))
        convergence.pending_timers.append(handle[0])

    @staticmethod
    def _release(convergence: CameraConvergenceState) -> None:
        for timer in convergence.pending_timers:
            timer.cancel()
        convergence.pending_timers.clear()

        if convergence.detach_listener is not None:
            convergence.detach_listener()
            convergence.detach_listener = None

    def _notify(self, convergence: CameraConvergenceState) -> None:
        for callback in list(self._subscribers.values()):
            callback(convergence.request_id, convergence.state)

    def _on_resize(self) -> None:
        if self._closed or self._last_request is None:
            return
        self.submit(replace(self._last_request, viewport_size_px=self._viewport.get_size()))
