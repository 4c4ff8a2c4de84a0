"""Shared fakes: recording structured logger, manual-clock scheduler, fake viewport."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest

from guardwatch_feed.logging import LogEvent
from guardwatch_zone.geometry.shapes import Bounds, Coordinate


class RecordingLogger:
    """Stands in for StructuredLogger; keeps (level, event, metadata) tuples."""

    def __init__(self):
        self.records: List[Tuple[str, LogEvent, Dict[str, Any]]] = []

    def _record(self, level, event, message, metadata=None, exc_info=None):
        self.records.append((level, event, dict(metadata or {})))

    def debug(self, event, message, metadata=None):
        self._record("DEBUG", event, message, metadata)

    def info(self, event, message, metadata=None):
        self._record("INFO", event, message, metadata)

    def warning(self, event, message, metadata=None, exc_info=None):
        self._record("WARNING", event, message, metadata, exc_info)

    def error(self, event, message, metadata=None, exc_info=None):
        self._record("ERROR", event, message, metadata, exc_info)

    def events(self, level: Optional[str] = None) -> List[LogEvent]:
        return [event for lvl, event, _ in self.records if level is None or lvl == level]


class _Timer:
    def __init__(self, when: float, callback: Callable[..., Any], args: Tuple[Any, ...]):
        self.when = when
        self.callback = callback
        self.args = args
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """call_later() driven by advance(); nothing runs until time is advanced."""

    def __init__(self):
        self.now = 0.0
        self._timers: List[_Timer] = []

    def call_later(self, delay, callback, *args):
        timer = _Timer(self.now + delay, callback, args)
        self._timers.append(timer)
        return timer

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while True:
            due = [t for t in self._timers if not t.cancelled and t.when <= target]
            if not due:
                break
            timer = min(due, key=lambda t: t.when)
            self._timers.remove(timer)
            self.now = timer.when
            timer.callback(*timer.args)
        self.now = target

    @property
    def pending(self) -> int:
        return sum(1 for t in self._timers if not t.cancelled)


class FakeViewport:
    """
    Viewport double with instrumentation.

    settle maps a commanded center to the center the view actually lands on.
    notify=False lands the move without ever emitting move-complete.
    """

    def __init__(
        self,
        scheduler: ManualScheduler,
        size: Tuple[int, int] = (800, 600),
        settle: Optional[Callable[[Coordinate], Coordinate]] = None,
        move_delay: float = 0.1,
        notify: bool = True,
    ):
        self.scheduler = scheduler
        self.size = size
        self.settle = settle or (lambda center: center)
        self.move_delay = move_delay
        self.notify = notify

        self.center = Coordinate(0.0, 0.0)
        self.zoom = 0.0
        self.fail_next = 0
        self.calls: List[Tuple[float, str, Any, float]] = []
        self.fit_padding: Optional[Tuple[int, int]] = None
        self.max_listeners_seen = 0

        self._token = 0
        self.move_listeners: Dict[int, Callable[[], None]] = {}
        self.resize_listeners: Dict[int, Callable[[], None]] = {}

    def _maybe_fail(self) -> None:
        if self.fail_next:
            self.fail_next -= 1
            raise RuntimeError("map not ready")

    def pan_zoom_to(self, center, zoom, animate=True):
        self.calls.append((self.scheduler.now, "pan_zoom_to", center, zoom))
        self._maybe_fail()
        self.zoom = zoom
        landed = self.settle(center)
        if self.notify:
            self.scheduler.call_later(self.move_delay, self._complete, landed)
        else:
            self.center = landed

    def fit_bounds(self, bounds: Bounds, padding_px, max_zoom):
        self.calls.append((self.scheduler.now, "fit_bounds", bounds, max_zoom))
        self._maybe_fail()
        self.fit_padding = padding_px
        self.center = bounds.center

    def get_size(self):
        return self.size

    def get_center(self):
        return self.center

    def on_move_complete(self, callback):
        return self._subscribe(self.move_listeners, callback)

    def on_resize(self, callback):
        return self._subscribe(self.resize_listeners, callback)

    def resize(self, width: int, height: int) -> None:
        self.size = (width, height)
        for callback in list(self.resize_listeners.values()):
            callback()

    def pan_calls(self) -> List[Tuple[float, str, Any, float]]:
        return [call for call in self.calls if call[1] == "pan_zoom_to"]

    def _subscribe(self, registry, callback):
        self._token += 1
        token = self._token
        registry[token] = callback
        self.max_listeners_seen = max(self.max_listeners_seen, len(self.move_listeners))

        def detach():
            registry.pop(token, None)

        return detach

    def _complete(self, landed: Coordinate) -> None:
        self.center = landed
        for callback in list(self.move_listeners.values()):
            callback()


@pytest.fixture
def event_log() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def viewport(scheduler) -> FakeViewport:
    return FakeViewport(scheduler)


@pytest.fixture
def make_viewport(scheduler) -> Callable[..., FakeViewport]:
    def factory(**kwargs) -> FakeViewport:
        return FakeViewport(scheduler, **kwargs)

    return factory
