"""
Feed Snapshot
=============

Bounded Context: One consistent read of sites and guards.

Design:
- Immutable pair of record tuples
- Malformed records are skipped (and logged), never abort the whole read
- Same shape for the REST poll and for snapshot files on disk
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, TypeVar

import yaml

from guardwatch_feed.logging import LogEvent, StructuredLogger
from guardwatch_zone.models import Guard, Site
from .guard import GuardRecord
from .site import SiteRecord

RecordT = TypeVar('RecordT')


def parse_records(
    items: Iterable[Any],
    parser: Callable[[Dict[str, Any]], RecordT],
    kind: str,
    logger: Optional[StructuredLogger] = None,
) -> Tuple[List[RecordT], int]:
    """
    Parse wire dicts, skipping the malformed ones.

    Args:
        items: Raw JSON objects
        parser: Record from_dict()
        kind: Record kind for log messages ("site", "guard")
        logger: Receives one error.deserialization per skipped record

    Returns:
        (records, skipped_count)
    """
    records: List[RecordT] = []
    skipped = 0
    for index, item in enumerate(items):
        try:
            if not isinstance(item, dict):
                raise ValueError(f"Expected an object, got {type(item).__name__}")
            records.append(parser(item))
        except ValueError as e:
            skipped += 1
            if logger is not None:
                logger.error(
                    event=LogEvent.DESERIALIZATION_ERROR,
                    message=f"Skipping malformed {kind} record",
                    metadata={'index': index, 'id': item.get('id') if isinstance(item, dict) else None},
                    exc_info=e,
                )
    return records, skipped


@dataclass(frozen=True)
class FeedSnapshot:
    """
    Sites and guards read together.

    Attributes:
        sites: Site records
        guards: Guard records
        skipped: Malformed records dropped while reading
    """
    sites: Tuple[SiteRecord, ...] = ()
    guards: Tuple[GuardRecord, ...] = ()
    skipped: int = 0

    def core_sites(self) -> List[Site]:
        return [record.to_site() for record in self.sites]

    def core_guards(self) -> List[Guard]:
        return [record.to_guard() for record in self.guards]

    def find_site(self, site_id: str) -> Optional[SiteRecord]:
        for record in self.sites:
            if record.id == site_id:
                return record
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'sites': [record.to_dict() for record in self.sites],
            'guards': [record.to_dict() for record in self.guards],
        }

    @classmethod
    def from_dict(
        cls,
        data: Dict[str, Any],
        logger: Optional[StructuredLogger] = None,
    ) -> 'FeedSnapshot':
        """
        Build from {'sites': [...], 'guards': [...]}.

        Raises:
            ValueError: If data is not a mapping
        """
        if not isinstance(data, dict):
            raise ValueError(f"Snapshot must be a mapping, got {type(data).__name__}")

        sites, skipped_sites = parse_records(data.get('sites') or [], SiteRecord.from_dict, 'site', logger)
        guards, skipped_guards = parse_records(data.get('guards') or [], GuardRecord.from_dict, 'guard', logger)
        return cls(sites=tuple(sites), guards=tuple(guards), skipped=skipped_sites + skipped_guards)

    @classmethod
    def from_file(cls, path: Path, logger: Optional[StructuredLogger] = None) -> 'FeedSnapshot':
        """
        Load a JSON or YAML snapshot file.

        Example YAML:
            sites:
              - id: "site-1"
                name: "Cyber Hub Tower B"
                location: {lat: 28.4950, lng: 77.0895}
                geofenceType: "radius"
                geofenceRadius: 150
            guards:
              - id: "guard-1"
                name: "Ravi Kumar"
                status: "online"
                siteId: "site-1"
                location: {lat: 28.4952, lng: 77.0891}
        """
        with open(path) as f:
            data = yaml.safe_load(f)
        return cls.from_dict(data or {}, logger=logger)
