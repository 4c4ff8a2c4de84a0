"""Guard store notifications and the position simulator."""

from __future__ import annotations

import random

import pytest

from guardwatch_feed.logging import LogEvent
from guardwatch_feed.schemas import FeedSnapshot, GuardRecord, LatLng, SiteRecord
from guardwatch_feed.simulation import PositionSimulator
from guardwatch_feed.store import GuardStore
from guardwatch_zone.geometry.primitives import haversine_distance_m
from guardwatch_zone.models import GuardStatus

HUB = LatLng(28.4950, 77.0895)


def _make_store():
    site = SiteRecord(id="site-1", name="Tower", location=HUB, geofence_radius=150.0)
    guards = [
        GuardRecord(id="g1", name="A", status=GuardStatus.ONLINE, location=HUB),
        GuardRecord(id="g2", name="B", status=GuardStatus.PANIC, location=HUB),
        GuardRecord(id="g3", name="C", status=GuardStatus.OFFLINE, location=None),
    ]
    store = GuardStore()
    store.replace([site], guards)
    return store


@pytest.mark.unit
class TestGuardStore:
    def test_starts_empty(self):
        store = GuardStore()
        assert store.snapshot() == FeedSnapshot()
        assert len(store) == 0

    def test_replace_notifies_with_snapshot(self):
        store = GuardStore()
        received = []
        store.subscribe(received.append)

        snapshot = store.replace([], [GuardRecord(id="g1", name="A", status=GuardStatus.IDLE)])

        assert received == [snapshot]
        assert store.snapshot() is snapshot
        assert len(store) == 1

    def test_unsubscribe(self):
        store = GuardStore()
        received = []
        unsubscribe = store.subscribe(received.append)
        unsubscribe()
        unsubscribe()

        store.replace([], [])
        assert received == []

    def test_update_positions(self):
        store = _make_store()
        moved = LatLng(28.5, 77.1)

        snapshot = store.update_positions({"g1": moved, "g3": moved, "unknown": moved})

        by_id = {g.id: g for g in snapshot.guards}
        assert by_id["g1"].location == moved
        assert by_id["g3"].location == moved
        assert by_id["g2"].location == HUB
        assert by_id["g1"].last_seen is not None
        assert len(snapshot.sites) == 1

    def test_update_positions_can_clear_a_fix(self):
        store = _make_store()
        snapshot = store.update_positions({"g1": None})
        assert snapshot.guards[0].location is None

    def test_subscriber_can_read_store(self):
        store = _make_store()
        seen = []
        # Callbacks run outside the lock
        store.subscribe(lambda snapshot: seen.append(len(store)))

        store.update_positions({"g1": LatLng(28.5, 77.1)})
        assert seen == [3]


@pytest.mark.unit
class TestPositionSimulator:
    def test_moves_only_located_non_emergency_guards(self, event_log):
        store = _make_store()
        simulator = PositionSimulator(store, max_step_m=25.0, rng=random.Random(7), logger=event_log)

        moved = simulator.tick()

        by_id = {g.id: g for g in store.snapshot().guards}
        assert moved == 1
        assert by_id["g2"].location == HUB
        assert by_id["g3"].location is None
        assert LogEvent.FEED_SIMULATION_TICK in event_log.events("DEBUG")

    def test_steps_are_bounded(self, event_log):
        store = _make_store()
        simulator = PositionSimulator(store, max_step_m=25.0, rng=random.Random(1), logger=event_log)

        for _ in range(20):
            before = {g.id: g.location for g in store.snapshot().guards}
            simulator.tick()
            after = store.snapshot().guards[0].location
            step = haversine_distance_m(before["g1"].to_coordinate(), after.to_coordinate())
            assert step <= 25.0 + 1e-6

    def test_zero_step_still_writes_through(self, event_log):
        store = _make_store()
        notified = []
        store.subscribe(notified.append)

        PositionSimulator(store, max_step_m=0.0, logger=event_log).tick()

        assert len(notified) == 1
        assert store.snapshot().guards[0].location.lat == pytest.approx(HUB.lat)

    def test_negative_step_is_rejected(self):
        with pytest.raises(ValueError):
            PositionSimulator(GuardStore(), max_step_m=-1.0)
