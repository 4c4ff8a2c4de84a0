"""
Analytics Layer
===============

Bounded Context: Dashboard counts and presence history.

Responsibilities:
- Dashboard statistics from effective statuses
- Zone entry/exit history across polls
- Immutable snapshots for readers

Design Philosophy:
- Mutable accumulators (DashboardCounter, PresenceTracker)
- Immutable outputs (DashboardStats, PresenceEvent)
- Recomputed on read; no cached membership
"""

from guardwatch_zone.analytics.counter import DashboardCounter, DashboardStats
from guardwatch_zone.analytics.tracker import PresenceEvent, PresenceTracker, PresenceTransition

__all__ = [
    "DashboardCounter",
    "DashboardStats",
    "PresenceEvent",
    "PresenceTracker",
    "PresenceTransition",
]
