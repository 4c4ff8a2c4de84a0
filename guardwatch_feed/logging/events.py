"""
Structured Log Event Types
==========================

Bounded Context: Observability Event Taxonomy

This module defines typed event names for structured logging.

Design:
- Enum-based (prevents typos, enables autocomplete)
- Hierarchical naming (namespace.category.action)
- Searchable in log aggregators (Elasticsearch, CloudWatch Insights)

Event Naming Convention:
    <component>.<category>.<action>

    component: focus, viewport, feed, geofence, monitor, error
    category: poll, presence, stats
    action: success, failed, enter, exit

Example Log Query (CloudWatch Insights):
    fields @timestamp, event, message, metadata.site_id
    | filter event = "focus.gave_up"
    | stats count() by bin(1h)
"""

from enum import Enum


class LogEvent(str, Enum):
    """
    Typed log event names for structured logging.

    Categories:
    - focus.*: Camera framing lifecycle
    - viewport.*: Viewport command outcomes
    - feed.*: Site/guard data source polling
    - geofence.*: Presence transitions and stats
    - monitor.*: Monitor service lifecycle
    - error.*: Error conditions
    """

    # ========== Focus Events ==========
    FOCUS_STARTED = "focus.started"
    """Focus request accepted and framing started."""

    FOCUS_RETRY = "focus.retry"
    """Settled center outside tolerance, retry scheduled."""

    FOCUS_CONVERGED = "focus.converged"
    """Viewport settled within tolerance of the target."""

    FOCUS_GAVE_UP = "focus.gave_up"
    """Attempt budget exhausted; viewport left at last commanded position."""

    FOCUS_CANCELLED = "focus.cancelled"
    """In-flight request superseded or torn down."""

    # ========== Viewport Events ==========
    VIEWPORT_COMMAND_FAILED = "viewport.command_failed"
    """Viewport raised while executing a pan/zoom or fit command."""

    VIEWPORT_SETTLE_TIMEOUT = "viewport.settle_timeout"
    """No move-complete notification before the settle timeout."""

    # ========== Feed Events ==========
    FEED_POLL_SUCCESS = "feed.poll.success"
    """Sites and guards fetched from the data source."""

    FEED_POLL_FAILED = "feed.poll.failed"
    """Data source poll failed; last snapshot kept."""

    FEED_SIMULATION_TICK = "feed.simulation.tick"
    """Simulated positions advanced one tick."""

    # ========== Geofence Events ==========
    GEOFENCE_ENTER = "geofence.presence.enter"
    """Guard entered a site's zone."""

    GEOFENCE_EXIT = "geofence.presence.exit"
    """Guard left a site's zone."""

    GEOFENCE_STATS_UPDATED = "geofence.stats.updated"
    """Dashboard statistics recomputed."""

    # ========== Monitor Events ==========
    MONITOR_STARTED = "monitor.started"
    """Monitor service polling loop started."""

    MONITOR_STOPPED = "monitor.stopped"
    """Monitor service polling loop stopped."""

    # ========== Error Events ==========
    DESERIALIZATION_ERROR = "error.deserialization"
    """Failed to parse a record from JSON."""


# Event categories for filtering
FOCUS_EVENTS = {
    LogEvent.FOCUS_STARTED,
    LogEvent.FOCUS_RETRY,
    LogEvent.FOCUS_CONVERGED,
    LogEvent.FOCUS_GAVE_UP,
    LogEvent.FOCUS_CANCELLED,
    LogEvent.VIEWPORT_COMMAND_FAILED,
    LogEvent.VIEWPORT_SETTLE_TIMEOUT,
}

FEED_EVENTS = {
    LogEvent.FEED_POLL_SUCCESS,
    LogEvent.FEED_POLL_FAILED,
    LogEvent.FEED_SIMULATION_TICK,
}

GEOFENCE_EVENTS = {
    LogEvent.GEOFENCE_ENTER,
    LogEvent.GEOFENCE_EXIT,
    LogEvent.GEOFENCE_STATS_UPDATED,
}

ERROR_EVENTS = {
    LogEvent.DESERIALIZATION_ERROR,
}
