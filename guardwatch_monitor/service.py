"""
Monitor Service - Polling orchestrator for the live dashboard.

This module provides the MonitorService class which keeps the in-process
view of sites and guards fresh: it polls the data source, syncs the site
registry, recomputes dashboard statistics, and reports guards entering or
leaving site zones.

Threading Model:
- Poller Thread (ours): poll_once() every poll_interval_s
- Callers may also call poll_once() directly (serialized by a lock)

Thread Safety:
- store: GuardStore (internal lock)
- registry: SiteRegistry (internal lock)
- counter / tracker: only touched inside poll_once() under _poll_lock
"""

import logging
import threading
from typing import List, Optional

from guardwatch_feed.client import DashboardApiClient, FeedError
from guardwatch_feed.logging import LogEvent, StructuredLogger, create_logger
from guardwatch_feed.schemas import FeedSnapshot
from guardwatch_feed.simulation import PositionSimulator
from guardwatch_feed.store import GuardStore
from guardwatch_monitor.config import MonitorConfig
from guardwatch_monitor.registry import SiteRegistry
from guardwatch_zone.analytics.counter import DashboardCounter, DashboardStats
from guardwatch_zone.analytics.tracker import PresenceEvent, PresenceTracker, PresenceTransition

logger = logging.getLogger(__name__)


class MonitorService:
    """
    Dashboard monitor service.

    Each poll:
    1. Refresh the store (API poll, or snapshot file on first poll)
    2. Advance simulated positions (when enabled)
    3. Sync the site registry
    4. Recompute DashboardStats from effective statuses
    5. Feed the PresenceTracker and log ENTER/EXIT events

    A failed API poll is logged and the last good snapshot is kept.

    Usage:
        config = MonitorConfig.from_yaml("config/guardwatch.yaml")
        service = MonitorService(config)

        service.start()
        service.wait()  # Blocks until Ctrl+C
    """

    def __init__(
        self,
        config: MonitorConfig,
        client: Optional[DashboardApiClient] = None,
        store: Optional[GuardStore] = None,
        event_logger: Optional[StructuredLogger] = None,
    ):
        """
        Initialize monitor service.

        Args:
            config: Monitor configuration
            client: API client (default: built from config.feed.base_url)
            store: Guard store (default: a new empty store)
            event_logger: Structured logger for feed/geofence events
        """
        self.config = config
        self.events = event_logger or create_logger("monitor")

        self.store = store or GuardStore()
        self.registry = SiteRegistry()
        self.counter = DashboardCounter()
        self.tracker = PresenceTracker()

        self.client = client
        if self.client is None and config.feed.base_url:
            self.client = DashboardApiClient(
                config.feed.base_url,
                timeout_s=config.feed.timeout_s,
                logger=self.events,
            )

        self.simulator: Optional[PositionSimulator] = None
        if config.feed.simulate:
            self.simulator = PositionSimulator(self.store, max_step_m=config.feed.simulation_step_m)

        self._snapshot_loaded = False
        self._poll_lock = threading.Lock()

        # Lifecycle state
        self.poller_thread: Optional[threading.Thread] = None
        self.stop_event = threading.Event()
        self._running = False

        logger.info(f"MonitorService initialized for service_id={config.service_id}")

    # ---------------- Polling ----------------

    def _refresh_store(self) -> None:
        if self.client is not None:
            try:
                self.store.replace_snapshot(self.client.fetch_snapshot())
            except FeedError as e:
                self.events.warning(
                    event=LogEvent.FEED_POLL_FAILED,
                    message="Poll failed; keeping last snapshot",
                    metadata={'base_url': self.client.base_url},
                    exc_info=e,
                )
        elif not self._snapshot_loaded and self.config.feed.snapshot_path is not None:
            snapshot = FeedSnapshot.from_file(self.config.feed.snapshot_path, logger=self.events)
            self.store.replace_snapshot(snapshot)
            self._snapshot_loaded = True

        if self.simulator is not None:
            self.simulator.tick()

    def poll_once(self) -> DashboardStats:
        """
        Run one poll cycle.

        Returns:
            Fresh dashboard statistics
        """
        with self._poll_lock:
            self._refresh_store()

            snapshot = self.store.snapshot()
            self.registry.sync(snapshot.core_sites())
            sites = self.registry.snapshot()
            guards = snapshot.core_guards()

            stats = self.counter.update(guards, sites)

            positions = [g.position for g in guards if g.position is not None]
            presence_events = self.tracker.update(positions, sites)
            self.tracker.prune({g.id for g in guards})

        self._log_presence(presence_events)
        self.events.info(
            event=LogEvent.GEOFENCE_STATS_UPDATED,
            message=str(stats),
            metadata=stats.to_dict(),
        )
        return stats

    def _log_presence(self, presence_events: List[PresenceEvent]) -> None:
        for presence in presence_events:
            entering = presence.transition == PresenceTransition.ENTER
            self.events.info(
                event=LogEvent.GEOFENCE_ENTER if entering else LogEvent.GEOFENCE_EXIT,
                message="Guard entered site zone" if entering else "Guard left site zone",
                metadata={'guard_id': presence.guard_id, 'site_id': presence.site_id},
            )

    def get_stats(self) -> DashboardStats:
        """Statistics from the last poll."""
        return self.counter.get_stats()

    # ---------------- Lifecycle ----------------

    def _poll_loop(self):
        """Poller thread body: poll, then sleep until the next interval or stop."""
        logger.info("Monitor poll loop started")

        while not self.stop_event.is_set():
            try:
                self.poll_once()
            except Exception as e:
                logger.error(f"Poll cycle failed: {e}", exc_info=True)

            self.stop_event.wait(self.config.feed.poll_interval_s)

        logger.info("Monitor poll loop stopped")

    def start(self):
        """
        Start the monitor service (non-blocking).

        Use wait() to block until service stops.
        """
        if self._running:
            logger.warning("Service already running")
            return

        logger.info("Starting monitor service")
        self.stop_event.clear()

        self.poller_thread = threading.Thread(
            target=self._poll_loop,
            name="MonitorPollerThread",
            daemon=True
        )
        self.poller_thread.start()
        self._running = True

        self.events.info(
            event=LogEvent.MONITOR_STARTED,
            message="Monitor service started",
            metadata={
                'service_id': self.config.service_id,
                'poll_interval_s': self.config.feed.poll_interval_s,
            }
        )

    def wait(self):
        """
        Block until the service stops (Ctrl+C stops it).
        """
        if not self._running:
            logger.warning("Service not running")
            return

        try:
            while self.poller_thread is not None and self.poller_thread.is_alive():
                self.poller_thread.join(timeout=0.5)
        except KeyboardInterrupt:
            logger.info("Received KeyboardInterrupt, stopping...")
            self.stop()

    def stop(self):
        """
        Stop the monitor service gracefully.
        """
        if not self._running:
            logger.warning("Service not running")
            return

        logger.info("Stopping monitor service")

        self.stop_event.set()
        if self.poller_thread:
            self.poller_thread.join(timeout=5.0)
            logger.info("Monitor poller thread stopped")

        if self.client is not None:
            self.client.close()

        self._running = False
        self.events.info(
            event=LogEvent.MONITOR_STOPPED,
            message="Monitor service stopped",
            metadata={'service_id': self.config.service_id}
        )

    @property
    def is_running(self) -> bool:
        return self._running
