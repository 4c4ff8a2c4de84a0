"""Dashboard API client over httpx.MockTransport."""

from __future__ import annotations

import httpx
import pytest

from guardwatch_feed.client import DashboardApiClient, FeedError
from guardwatch_feed.logging import LogEvent

SITES = [
    {
        "id": "site-1",
        "name": "Cyber Hub Tower B",
        "location": {"lat": 28.4950, "lng": 77.0895},
        "geofenceType": "radius",
        "geofenceRadius": 150,
        "isActive": True,
    },
    {"id": "site-broken", "name": "No location"},
]

GUARDS = [
    {
        "id": "guard-1",
        "name": "Ravi Kumar",
        "status": "online",
        "siteId": "site-1",
        "location": {"lat": 28.4952, "lng": 77.0891},
    },
    {"id": "guard-2", "name": "Meera Joshi", "status": "offline", "location": None},
]


def _make_client(handler, event_log):
    return DashboardApiClient(
        "http://dashboard.local/",
        transport=httpx.MockTransport(handler),
        logger=event_log,
    )


def _api(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/api/sites":
        return httpx.Response(200, json=SITES)
    if request.url.path == "/api/guards":
        return httpx.Response(200, json=GUARDS)
    return httpx.Response(404)


@pytest.mark.unit
class TestDashboardApiClient:
    def test_fetch_snapshot(self, event_log):
        with _make_client(_api, event_log) as client:
            snapshot = client.fetch_snapshot()

        assert [s.id for s in snapshot.sites] == ["site-1"]
        assert [g.id for g in snapshot.guards] == ["guard-1", "guard-2"]
        assert snapshot.skipped == 1
        assert LogEvent.DESERIALIZATION_ERROR in event_log.events("ERROR")
        assert LogEvent.FEED_POLL_SUCCESS in event_log.events("DEBUG")

    def test_fetch_sites_and_guards_separately(self, event_log):
        with _make_client(_api, event_log) as client:
            assert [s.id for s in client.fetch_sites()] == ["site-1"]
            assert client.fetch_guards()[1].location is None

    def test_base_url_is_normalized(self, event_log):
        client = _make_client(_api, event_log)
        assert client.base_url == "http://dashboard.local"
        client.close()

    def test_sends_user_agent(self, event_log):
        seen = []

        def handler(request):
            seen.append(request.headers["User-Agent"])
            return httpx.Response(200, json=[])

        with _make_client(handler, event_log) as client:
            client.fetch_sites()

        assert seen == ["guardwatch/1.0"]

    def test_http_error_becomes_feed_error(self, event_log):
        with _make_client(lambda request: httpx.Response(503), event_log) as client:
            with pytest.raises(FeedError, match="/api/sites"):
                client.fetch_snapshot()

    def test_transport_error_becomes_feed_error(self, event_log):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with _make_client(handler, event_log) as client:
            with pytest.raises(FeedError):
                client.fetch_guards()

    def test_invalid_json_becomes_feed_error(self, event_log):
        with _make_client(lambda request: httpx.Response(200, text="<html>"), event_log) as client:
            with pytest.raises(FeedError, match="invalid JSON"):
                client.fetch_sites()

    def test_non_list_payload_becomes_feed_error(self, event_log):
        with _make_client(lambda request: httpx.Response(200, json={"sites": []}), event_log) as client:
            with pytest.raises(FeedError, match="expected a list"):
                client.fetch_sites()
