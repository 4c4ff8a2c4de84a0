"""Monitor service polling and lifecycle."""

from __future__ import annotations

import time

import httpx
import pytest

from guardwatch_feed.client import DashboardApiClient
from guardwatch_feed.logging import LogEvent
from guardwatch_feed.schemas import LatLng
from guardwatch_monitor.config import FeedConfig, MonitorConfig
from guardwatch_monitor.service import MonitorService

SNAPSHOT = """
sites:
  - id: "site-1"
    name: "Cyber Hub Tower B"
    location: {lat: 28.4950, lng: 77.0895}
    geofenceType: "radius"
    geofenceRadius: 150
    isActive: true
guards:
  - id: "guard-1"
    name: "Ravi Kumar"
    status: "online"
    siteId: "site-1"
    location: {lat: 28.4952, lng: 77.0891}
  - id: "guard-2"
    name: "Meera Joshi"
    status: "offline"
    location: null
"""

FAR_AWAY = LatLng(28.6139, 77.2090)
INSIDE = LatLng(28.4951, 77.0894)


def _make_service(tmp_path, event_log, poll_interval_s=30.0):
    path = tmp_path / "snapshot.yaml"
    path.write_text(SNAPSHOT)
    config = MonitorConfig(
        service_id="test_monitor",
        feed=FeedConfig(snapshot_path=path, poll_interval_s=poll_interval_s),
    )
    return MonitorService(config, event_logger=event_log)


def _presence(event_log):
    return [
        (event, metadata["guard_id"], metadata["site_id"])
        for _, event, metadata in event_log.records
        if event in (LogEvent.GEOFENCE_ENTER, LogEvent.GEOFENCE_EXIT)
    ]


@pytest.mark.unit
class TestPollOnce:
    def test_snapshot_file_feeds_stats(self, tmp_path, event_log):
        service = _make_service(tmp_path, event_log)

        stats = service.poll_once()

        assert stats.total_guards == 2
        assert stats.total_sites == 1
        assert stats.active_sites == 1
        assert service.get_stats() == stats
        assert service.registry.list_sites() == {"site-1": True}
        assert LogEvent.GEOFENCE_STATS_UPDATED in event_log.events("INFO")

    def test_first_sighting_is_not_a_transition(self, tmp_path, event_log):
        service = _make_service(tmp_path, event_log)
        service.poll_once()
        assert _presence(event_log) == []

    def test_presence_exit_then_enter(self, tmp_path, event_log):
        service = _make_service(tmp_path, event_log)
        service.poll_once()

        service.store.update_positions({"guard-1": FAR_AWAY})
        service.poll_once()
        service.store.update_positions({"guard-1": INSIDE})
        service.poll_once()

        assert _presence(event_log) == [
            (LogEvent.GEOFENCE_EXIT, "guard-1", "site-1"),
            (LogEvent.GEOFENCE_ENTER, "guard-1", "site-1"),
        ]

    def test_snapshot_file_is_read_once(self, tmp_path, event_log):
        service = _make_service(tmp_path, event_log)
        service.poll_once()

        service.store.update_positions({"guard-2": INSIDE})
        stats = service.poll_once()

        by_id = {g.id: g for g in service.store.snapshot().guards}
        assert by_id["guard-2"].location == INSIDE
        assert stats.total_guards == 2

    def test_local_disable_survives_polls(self, tmp_path, event_log):
        service = _make_service(tmp_path, event_log)
        service.poll_once()

        service.registry.disable_site("site-1")
        stats = service.poll_once()

        assert stats.active_sites == 0

    def test_failed_api_poll_keeps_last_snapshot(self, tmp_path, event_log):
        responses = {"healthy": True}

        def handler(request):
            if not responses["healthy"]:
                return httpx.Response(503)
            if request.url.path == "/api/sites":
                return httpx.Response(200, json=[])
            return httpx.Response(200, json=[{"id": "guard-1", "name": "Ravi", "status": "online"}])

        client = DashboardApiClient(
            "http://dashboard.local",
            transport=httpx.MockTransport(handler),
            logger=event_log,
        )
        config = MonitorConfig(service_id="api_monitor", feed=FeedConfig(base_url="http://dashboard.local"))
        service = MonitorService(config, client=client, event_logger=event_log)

        assert service.poll_once().total_guards == 1
        responses["healthy"] = False
        assert service.poll_once().total_guards == 1

        assert LogEvent.FEED_POLL_FAILED in event_log.events("WARNING")
        client.close()


@pytest.mark.unit
class TestLifecycle:
    def test_start_polls_and_stop_joins(self, tmp_path, event_log):
        service = _make_service(tmp_path, event_log, poll_interval_s=0.05)

        service.start()
        deadline = time.monotonic() + 5.0
        while service.get_stats().total_guards == 0 and time.monotonic() < deadline:
            time.sleep(0.01)
        service.stop()

        assert service.get_stats().total_guards == 2
        assert not service.is_running
        assert not service.poller_thread.is_alive()
        events = event_log.events("INFO")
        assert LogEvent.MONITOR_STARTED in events
        assert events[-1] == LogEvent.MONITOR_STOPPED

    def test_stop_without_start_is_a_no_op(self, tmp_path, event_log):
        service = _make_service(tmp_path, event_log)
        service.stop()
        assert event_log.events() == []
