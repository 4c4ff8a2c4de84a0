"""
Wire Schemas for the Dashboard API
==================================

Bounded Context: Site and guard records at the REST boundary.

Records serialize with to_dict() using the API's camelCase field names and
map onto core models with to_site() / to_guard().

Public API
----------
    SiteRecord, GeofenceType: Site wire record
    GuardRecord: Guard wire record
    LatLng, Timestamp: Shared value types
    FeedSnapshot: Sites and guards read together
"""

from .common import LatLng, Timestamp
from .guard import GuardRecord
from .site import GeofenceType, SiteRecord
from .snapshot import FeedSnapshot, parse_records

__all__ = [
    'LatLng',
    'Timestamp',
    'GuardRecord',
    'GeofenceType',
    'SiteRecord',
    'FeedSnapshot',
    'parse_records',
]
