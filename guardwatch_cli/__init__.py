"""
Guardwatch CLI - Command-line interface for the geofence engine.

Reads sites and guards from a snapshot file or the live API and answers
operator questions without the web dashboard.

Usage:
    guardwatch --snapshot data/demo_snapshot.yaml status
    guardwatch --api http://localhost:3001 stats
    guardwatch --snapshot data/demo_snapshot.yaml anchors
    guardwatch --snapshot data/demo_snapshot.yaml render --out live_map.png
    guardwatch --snapshot data/demo_snapshot.yaml focus site-1
"""

__version__ = "1.0.0"
