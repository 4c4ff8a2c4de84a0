"""
Structured Logging for Guardwatch
=================================

Bounded Context: Observability

JSON-structured logging shared by the feed, the camera controller and the
monitor service.

Public API
----------
    LogEvent: Typed event names (enum)
    StructuredLogger: JSON logger implementation
    create_logger: Factory function

Example:
    >>> from guardwatch_feed.logging import create_logger, LogEvent
    >>> logger = create_logger("monitor")
    >>> logger.info(
    ...     event=LogEvent.GEOFENCE_ENTER,
    ...     message="Guard entered site zone",
    ...     metadata={'guard_id': 'g-7', 'site_id': 's-2'}
    ... )
"""

from .events import (
    ERROR_EVENTS,
    FEED_EVENTS,
    FOCUS_EVENTS,
    GEOFENCE_EVENTS,
    LogEvent,
)
from .structured import StructuredLogger, create_logger

__all__ = [
    'LogEvent',
    'StructuredLogger',
    'create_logger',
    'FOCUS_EVENTS',
    'FEED_EVENTS',
    'GEOFENCE_EVENTS',
    'ERROR_EVENTS',
]
