"""
Presence Tracker Module
=======================

Stateful tracker for guard zone entries and exits across polls.

Design:
- Encapsulates verdict history ((guard_id, site_id) -> was_inside)
- Works with GeofenceEvaluator.detect_presence_changes()
- Thread-safe via encapsulation (caller must synchronize)
- Can be reset or pruned
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Set, Tuple

from guardwatch_zone.geometry.evaluator import GeofenceEvaluator, PresenceKey
from guardwatch_zone.models import GuardPosition, Site


class PresenceTransition(str, Enum):
    ENTER = "enter"
    EXIT = "exit"


@dataclass(frozen=True)
class PresenceEvent:
    """A guard crossing a site's zone boundary between two polls."""

    guard_id: str
    site_id: str
    transition: PresenceTransition


class PresenceTracker:
    """
    Remembers the last inside/outside verdict per (guard, site).

    The first sighting of a pair is recorded but is not a transition.

    Usage:
        tracker = PresenceTracker()

        # Each poll
        events = tracker.update(positions, sites)

        # Or drive the evaluator directly
        entered, exited, tracker.state = GeofenceEvaluator.detect_presence_changes(
            positions, sites, tracker.state
        )
    """

    def __init__(self):
        self._state: Dict[PresenceKey, bool] = {}

    @property
    def state(self) -> Dict[PresenceKey, bool]:
        return self._state

    @state.setter
    def state(self, new_state: Dict[PresenceKey, bool]) -> None:
        self._state = new_state

    def update(self, positions: Iterable[GuardPosition], sites: Iterable[Site]) -> List[PresenceEvent]:
        """
        Feed one poll's observations.

        Returns:
            ENTER events followed by EXIT events for this poll
        """
        entered, exited, self._state = GeofenceEvaluator.detect_presence_changes(
            positions, sites, self._state
        )
        events = [
            PresenceEvent(guard_id, site_id, PresenceTransition.ENTER)
            for guard_id, site_id in entered
        ]
        events.extend(
            PresenceEvent(guard_id, site_id, PresenceTransition.EXIT)
            for guard_id, site_id in exited
        )
        return events

    def is_inside(self, guard_id: str, site_id: str) -> bool:
        """Last verdict for a pair (False when never seen)."""
        return self._state.get((guard_id, site_id), False)

    def reset(self) -> None:
        """Forget all verdicts."""
        self._state.clear()

    def prune(self, active_guard_ids: Set[str]) -> None:
        """
        Drop verdicts for guards no longer in the roster.

        Args:
            active_guard_ids: Guards still being tracked
        """
        stale: List[Tuple[str, str]] = [key for key in self._state if key[0] not in active_guard_ids]
        for key in stale:
            del self._state[key]

    def __len__(self) -> int:
        return len(self._state)

    def __repr__(self) -> str:
        return f"PresenceTracker(tracked={len(self._state)})"
