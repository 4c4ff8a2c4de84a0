"""
Camera Layer
============

Bounded Context: Driving a map viewport onto zones (stateful, cancellable).

Responsibilities:
- Viewport / Scheduler contracts (no map library dependency)
- Focus state machine with bounded retries and supersession
- In-memory SimulatedViewport for the CLI, rendering and tests

Design Philosophy:
- Injected capabilities (scheduler, move-complete, resize)
- One live request; everything older is cancelled before new commands
- Give-up is a soft terminal state, never an exception
"""

from guardwatch_zone.camera.config import FramingConfig
from guardwatch_zone.camera.controller import (
    CameraConvergenceState,
    CameraFramingController,
    FocusRequest,
    FocusState,
    TERMINAL_STATES,
)
from guardwatch_zone.camera.viewport import Scheduler, SimulatedViewport, TimerHandle, Viewport

__all__ = [
    "FramingConfig",
    "CameraConvergenceState",
    "CameraFramingController",
    "FocusRequest",
    "FocusState",
    "TERMINAL_STATES",
    "Scheduler",
    "SimulatedViewport",
    "TimerHandle",
    "Viewport",
]
