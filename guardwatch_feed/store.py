"""
Guard Store
===========

Bounded Context: The single in-process copy of sites and guards.

Design:
- Explicit store with subscribe/notify (no shared module-level arrays)
- Readers get immutable FeedSnapshot values
- threading.Lock guards mutations; callbacks run outside the lock
"""

import itertools
import threading
from typing import Callable, Dict, Iterable, Mapping, Optional

from guardwatch_feed.schemas import FeedSnapshot, GuardRecord, LatLng, SiteRecord

SnapshotCallback = Callable[[FeedSnapshot], None]


class GuardStore:
    """
    Holds the latest sites and guards and notifies subscribers on change.

    Usage:
        store = GuardStore()
        unsubscribe = store.subscribe(lambda snapshot: render(snapshot))
        store.replace(sites, guards)
        unsubscribe()

    Thread Safety:
        Mutations are serialized; subscribers are called on the mutating thread.
    """

    def __init__(self, snapshot: Optional[FeedSnapshot] = None):
        self._lock = threading.Lock()
        self._snapshot = snapshot or FeedSnapshot()
        self._tokens = itertools.count()
        self._subscribers: Dict[int, SnapshotCallback] = {}

    def snapshot(self) -> FeedSnapshot:
        with self._lock:
            return self._snapshot

    def subscribe(self, callback: SnapshotCallback) -> Callable[[], None]:
        """
        Register for change notifications.

        Returns:
            Callable that removes the subscription
        """
        with self._lock:
            token = next(self._tokens)
            self._subscribers[token] = callback

        def unsubscribe() -> None:
            with self._lock:
                self._subscribers.pop(token, None)

        return unsubscribe

    def replace(self, sites: Iterable[SiteRecord], guards: Iterable[GuardRecord]) -> FeedSnapshot:
        """Swap in a full set of sites and guards."""
        return self.replace_snapshot(FeedSnapshot(sites=tuple(sites), guards=tuple(guards)))

    def replace_snapshot(self, snapshot: FeedSnapshot) -> FeedSnapshot:
        with self._lock:
            self._snapshot = snapshot
            subscribers = list(self._subscribers.values())

        for callback in subscribers:
            callback(snapshot)
        return snapshot

    def update_positions(self, positions: Mapping[str, Optional[LatLng]]) -> FeedSnapshot:
        """
        Move guards to new positions (None clears the fix).

        Unknown guard ids are ignored.

        Args:
            positions: {guard_id: new_location}

        Returns:
            The new snapshot
        """
        with self._lock:
            current = self._snapshot
            guards = tuple(
                record.with_location(positions[record.id]) if record.id in positions else record
                for record in current.guards
            )
            snapshot = FeedSnapshot(sites=current.sites, guards=guards, skipped=current.skipped)
            self._snapshot = snapshot
            subscribers = list(self._subscribers.values())

        for callback in subscribers:
            callback(snapshot)
        return snapshot

    def __len__(self) -> int:
        with self._lock:
            return len(self._snapshot.guards)
