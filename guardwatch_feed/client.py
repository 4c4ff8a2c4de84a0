"""
Dashboard API Client
====================

Bounded Context: Polling the dashboard REST API for sites and guards.

Design:
- Synchronous httpx client (one per DashboardApiClient, reused across polls)
- Polling only; there is no push channel
- Transport errors and non-2xx responses raise FeedError
- Malformed records are skipped and logged, never abort the poll

Endpoints:
    GET {base_url}/api/sites   -> [SiteRecord, ...]
    GET {base_url}/api/guards  -> [GuardRecord, ...]
"""

from typing import Any, List, Optional

import httpx

from guardwatch_feed.logging import LogEvent, StructuredLogger, create_logger
from guardwatch_feed.schemas import FeedSnapshot, GuardRecord, SiteRecord, parse_records

_USER_AGENT = "guardwatch/1.0"


class FeedError(RuntimeError):
    """The data source could not be read."""


class DashboardApiClient:
    """
    Reads sites and guards from the dashboard API.

    Usage:
        with DashboardApiClient("http://localhost:3001") as client:
            snapshot = client.fetch_snapshot()

    Thread Safety:
        One poller at a time; httpx.Client is not shared across threads here.
    """

    def __init__(
        self,
        base_url: str,
        timeout_s: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
        logger: Optional[StructuredLogger] = None,
    ):
        """
        Args:
            base_url: API root (e.g. "http://localhost:3001")
            timeout_s: Per-request timeout
            transport: Custom httpx transport (tests use httpx.MockTransport)
            logger: Structured logger (default: guardwatch.feed)
        """
        self.base_url = base_url.rstrip("/")
        self._logger = logger or create_logger("feed")
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout_s,
            transport=transport,
            headers={"User-Agent": _USER_AGENT},
        )

    def __enter__(self) -> "DashboardApiClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def _get_list(self, path: str) -> List[Any]:
        try:
            resp = self._client.get(path)
            resp.raise_for_status()
            payload = resp.json()
        except httpx.HTTPError as e:
            raise FeedError(f"GET {path} failed: {e}") from e
        except ValueError as e:
            raise FeedError(f"GET {path} returned invalid JSON: {e}") from e

        if not isinstance(payload, list):
            raise FeedError(f"GET {path} returned {type(payload).__name__}, expected a list")
        return payload

    def fetch_sites(self) -> List[SiteRecord]:
        """
        Raises:
            FeedError: On transport, HTTP or payload-shape failure
        """
        records, _ = parse_records(self._get_list("/api/sites"), SiteRecord.from_dict, "site", self._logger)
        return records

    def fetch_guards(self) -> List[GuardRecord]:
        """
        Raises:
            FeedError: On transport, HTTP or payload-shape failure
        """
        records, _ = parse_records(self._get_list("/api/guards"), GuardRecord.from_dict, "guard", self._logger)
        return records

    def fetch_snapshot(self) -> FeedSnapshot:
        """
        Read sites and guards in one poll.

        Raises:
            FeedError: If either endpoint fails
        """
        sites, skipped_sites = parse_records(
            self._get_list("/api/sites"), SiteRecord.from_dict, "site", self._logger
        )
        guards, skipped_guards = parse_records(
            self._get_list("/api/guards"), GuardRecord.from_dict, "guard", self._logger
        )
        snapshot = FeedSnapshot(
            sites=tuple(sites),
            guards=tuple(guards),
            skipped=skipped_sites + skipped_guards,
        )

        self._logger.debug(
            event=LogEvent.FEED_POLL_SUCCESS,
            message="Fetched sites and guards",
            metadata={
                'sites': len(snapshot.sites),
                'guards': len(snapshot.guards),
                'skipped': snapshot.skipped,
            }
        )
        return snapshot
