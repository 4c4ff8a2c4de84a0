"""
Site Registry - Thread-safe site management.

This module provides the SiteRegistry class which manages the known sites
in a thread-safe manner. The monitor service syncs it from every poll;
operators can disable a site locally without touching the data source.

Thread Safety:
- Uses threading.Lock for protecting site dict mutations
- Snapshot pattern for reads to minimize lock holding time
- Site objects are immutable (frozen dataclass)
"""

import threading
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Set

from guardwatch_zone.geometry.anchor import resolve_anchor
from guardwatch_zone.geometry.shapes import CircularZone, PolygonalZone, Zone
from guardwatch_zone.models import Site


class SiteRegistry:
    """
    Thread-safe registry of sites.

    Thread Safety Guarantees:
    - add_site(), remove_site(), update_zone(), sync(): Write operations (acquire lock)
    - enable_site(), disable_site(): Write operations (acquire lock)
    - snapshot(), active_sites(), list_sites(), get_site_info(): Read operations

    Local overrides:
        disable_site() is remembered across sync() calls, so a site an
        operator switched off stays off until enable_site().

    Usage:
        registry = SiteRegistry()
        registry.sync(snapshot.core_sites())
        registry.disable_site("site-3")

        sites = registry.snapshot()  # immutable Site values
    """

    def __init__(self):
        """Initialize empty registry."""
        self._sites: Dict[str, Site] = {}
        self._disabled: Set[str] = set()
        self._lock = threading.Lock()

    def _effective(self, site: Site) -> Site:
        if site.id in self._disabled and site.active:
            return replace(site, active=False)
        return site

    def add_site(self, site: Site) -> None:
        """
        Add a site to the registry.

        Raises:
            ValueError: If site id already exists
        """
        with self._lock:
            if site.id in self._sites:
                raise ValueError(f"Site '{site.id}' already exists")
            self._sites[site.id] = site

    def remove_site(self, site_id: str) -> None:
        """
        Raises:
            KeyError: If site_id does not exist
        """
        with self._lock:
            if site_id not in self._sites:
                raise KeyError(f"Site '{site_id}' not found")
            del self._sites[site_id]
            self._disabled.discard(site_id)

    def update_zone(self, site_id: str, zone: Zone) -> None:
        """
        Replace a site's zone (type may change: a site owns one zone at a time).

        Raises:
            KeyError: If site_id does not exist
        """
        with self._lock:
            if site_id not in self._sites:
                raise KeyError(f"Site '{site_id}' not found")
            self._sites[site_id] = replace(self._sites[site_id], zone=zone)

    def enable_site(self, site_id: str) -> None:
        """
        Clear a local disable (the data source's isActive still applies).

        Raises:
            KeyError: If site_id does not exist
        """
        with self._lock:
            if site_id not in self._sites:
                raise KeyError(f"Site '{site_id}' not found")
            self._disabled.discard(site_id)

    def disable_site(self, site_id: str) -> None:
        """
        Raises:
            KeyError: If site_id does not exist
        """
        with self._lock:
            if site_id not in self._sites:
                raise KeyError(f"Site '{site_id}' not found")
            self._disabled.add(site_id)

    def sync(self, sites: Iterable[Site]) -> None:
        """Replace every site with the data source's current list."""
        new_sites = {site.id: site for site in sites}
        with self._lock:
            self._sites = new_sites
            self._disabled &= set(new_sites)

    def snapshot(self) -> List[Site]:
        """All sites with local overrides applied."""
        with self._lock:
            return [self._effective(site) for site in self._sites.values()]

    def active_sites(self) -> List[Site]:
        return [site for site in self.snapshot() if site.active]

    def list_sites(self) -> Dict[str, bool]:
        """
        Returns:
            Dictionary mapping site_id to active status
        """
        return {site.id: site.active for site in self.snapshot()}

    def get_site_info(self, site_id: str) -> Dict[str, Any]:
        """
        Get information about a specific site.

        Returns:
            Dictionary with zone_type, active, anchor and zone parameters

        Raises:
            KeyError: If site_id does not exist
        """
        with self._lock:
            if site_id not in self._sites:
                raise KeyError(f"Site '{site_id}' not found")
            site = self._effective(self._sites[site_id])

        anchor = resolve_anchor(site.zone, site.coordinate)
        info: Dict[str, Any] = {
            "name": site.name,
            "active": site.active,
            "anchor": anchor.as_tuple(),
        }
        if isinstance(site.zone, CircularZone):
            info["zone_type"] = "circle"
            info["radius_m"] = site.zone.radius_m
        elif isinstance(site.zone, PolygonalZone):
            info["zone_type"] = "polygon"
            info["vertices"] = [v.as_tuple() for v in site.zone.vertices]
        return info

    def __len__(self) -> int:
        with self._lock:
            return len(self._sites)
