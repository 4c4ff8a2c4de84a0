"""
Structured JSON Logger
=====================

Bounded Context: Observability Infrastructure

Every record is a single JSON document, so dashboards and log shippers can
filter guardwatch output by component, event name or site/guard id without
parsing free text.

Design:
- One JSON line per record: timestamp (UTC), level, component, event,
  message, metadata, exception
- Event names come from the LogEvent enum, never free strings
- Bound context: bind(site_id=...) returns a logger whose records always
  carry those keys (the underlying stdlib logger is shared)
- Handlers belong to the entry point (logging.basicConfig); a private
  stream handler is only installed when nothing is configured

Example:
    >>> logger = create_logger("monitor", service_id="hq_monitor")
    >>> logger.info(
    ...     event=LogEvent.GEOFENCE_ENTER,
    ...     message="Guard entered site zone",
    ...     metadata={'guard_id': 'guard-1', 'site_id': 'site-1'}
    ... )

Output:
    {"timestamp": "2026-03-02T09:14:05.123456+00:00", "level": "INFO",
     "component": "monitor", "event": "geofence.presence.enter",
     "message": "Guard entered site zone",
     "metadata": {"service_id": "hq_monitor", "guard_id": "guard-1", "site_id": "site-1"}}
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .events import LogEvent

Metadata = Optional[Dict[str, Any]]


class JSONFormatter(logging.Formatter):
    """StructuredLogger messages are already JSON; emit them unchanged."""

    def format(self, record: logging.LogRecord) -> str:
        return record.getMessage()


class StructuredLogger:
    """
    Component logger that writes LogEvent records as JSON.

    Attributes:
        component: Component name ("camera", "feed", "monitor", ...)
        logger_name: Name of the stdlib logger records go to
        logger: The stdlib logger itself
        context: Keys merged into every record's metadata
    """

    def __init__(
        self,
        component: str,
        level: int = logging.INFO,
        logger_name: Optional[str] = None,
        context: Metadata = None,
    ):
        self.component = component
        self.logger_name = logger_name or f"guardwatch.{component}"
        self.logger = logging.getLogger(self.logger_name)
        self.logger.setLevel(level)
        self.context: Dict[str, Any] = dict(context or {})

        if not self.logger.handlers and not logging.getLogger().handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(JSONFormatter())
            self.logger.addHandler(handler)
            self.logger.propagate = False

    def bind(self, **context: Any) -> "StructuredLogger":
        """
        Derive a logger that adds ``context`` to every record.

        Keys given per call in ``metadata`` win over bound keys.
        """
        bound = StructuredLogger.__new__(StructuredLogger)
        bound.component = self.component
        bound.logger_name = self.logger_name
        bound.logger = self.logger
        bound.context = {**self.context, **context}
        return bound

    def _entry(
        self,
        level: int,
        event: LogEvent,
        message: str,
        metadata: Metadata,
        exc_info: Optional[BaseException],
    ) -> Dict[str, Any]:
        entry: Dict[str, Any] = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': logging.getLevelName(level),
            'component': self.component,
            'event': event.value,
            'message': message,
        }

        merged = {**self.context, **(metadata or {})}
        if merged:
            entry['metadata'] = merged

        if exc_info is not None:
            entry['exception'] = {
                'type': type(exc_info).__name__,
                'message': str(exc_info),
            }
        return entry

    def _emit(
        self,
        level: int,
        event: LogEvent,
        message: str,
        metadata: Metadata = None,
        exc_info: Optional[BaseException] = None,
    ) -> None:
        # Skip JSON encoding for records nobody will see (simulation ticks)
        if not self.logger.isEnabledFor(level):
            return

        document = json.dumps(self._entry(level, event, message, metadata, exc_info), default=str)
        # Tracebacks only for errors; warnings carry the exception summary
        self.logger.log(level, document, exc_info=exc_info if level >= logging.ERROR else None)

    def debug(self, event: LogEvent, message: str, metadata: Metadata = None) -> None:
        self._emit(logging.DEBUG, event, message, metadata)

    def info(self, event: LogEvent, message: str, metadata: Metadata = None) -> None:
        """
        Log a normal lifecycle event.

        Args:
            event: Typed log event
            message: Human-readable message
            metadata: Event fields (request_id, site_id, guard_id, ...)
        """
        self._emit(logging.INFO, event, message, metadata)

    def warning(
        self,
        event: LogEvent,
        message: str,
        metadata: Metadata = None,
        exc_info: Optional[BaseException] = None
    ) -> None:
        """
        Log a degraded-but-handled condition (failed poll, focus gave up).

        The exception, when given, is summarized in the record; no traceback.
        """
        self._emit(logging.WARNING, event, message, metadata, exc_info)

    def error(
        self,
        event: LogEvent,
        message: str,
        metadata: Metadata = None,
        exc_info: Optional[BaseException] = None
    ) -> None:
        """
        Log a record that had to be dropped.

        Example:
            >>> try:
            ...     SiteRecord.from_dict(payload)
            ... except ValueError as e:
            ...     logger.error(
            ...         event=LogEvent.DESERIALIZATION_ERROR,
            ...         message="Dropping malformed site",
            ...         exc_info=e,
            ...     )
        """
        self._emit(logging.ERROR, event, message, metadata, exc_info)

    def set_level(self, level: int) -> None:
        self.logger.setLevel(level)


def create_logger(component: str, level: int = logging.INFO, **context: Any) -> StructuredLogger:
    """
    Build the StructuredLogger for a component.

    Example:
        >>> events = create_logger("monitor", service_id="hq_monitor")
    """
    return StructuredLogger(component=component, level=level, context=context)
