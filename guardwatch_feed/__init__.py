"""
Guardwatch Feed
===============

Bounded Context: Where site and guard data comes from.

Responsibilities:
- Wire schemas for the dashboard REST API
- Structured JSON logging shared by every package
- Polling client (httpx), in-process store, position simulator

Design:
- Polling only; no push delivery
- Bad records are skipped and logged at the boundary
- The core engine receives plain models, never this package's I/O
"""

# Logging first: the core engine imports it during package initialization
from guardwatch_feed.logging import LogEvent, StructuredLogger, create_logger
from guardwatch_feed.schemas import FeedSnapshot, GeofenceType, GuardRecord, LatLng, SiteRecord, Timestamp
from guardwatch_feed.client import DashboardApiClient, FeedError
from guardwatch_feed.store import GuardStore
from guardwatch_feed.simulation import PositionSimulator

__all__ = [
    "LogEvent",
    "StructuredLogger",
    "create_logger",
    "FeedSnapshot",
    "GeofenceType",
    "GuardRecord",
    "LatLng",
    "SiteRecord",
    "Timestamp",
    "DashboardApiClient",
    "FeedError",
    "GuardStore",
    "PositionSimulator",
]
