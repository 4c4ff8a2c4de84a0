"""
guardwatch_monitor - Polling monitor service for the guard dashboard

This package keeps an in-process view of sites and guards fresh and derives
dashboard statistics and presence events from it.

Architecture:
- MonitorService: Polling orchestrator
- SiteRegistry: Thread-safe site management
- MonitorConfig: Configuration management (YAML)

Threading Model:
- Monitor Poller Thread (ours): polls the data source every poll_interval_s
"""

from guardwatch_monitor.config import FeedConfig, MapConfig, MonitorConfig
from guardwatch_monitor.registry import SiteRegistry
from guardwatch_monitor.service import MonitorService

__all__ = [
    "FeedConfig",
    "MapConfig",
    "MonitorConfig",
    "SiteRegistry",
    "MonitorService",
]
