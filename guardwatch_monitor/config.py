"""
Configuration schema for the guardwatch monitor service.

This module defines the configuration structure for the monitor: where
sites and guards come from, how the live map is sized, and the camera
framing policy.
"""

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Optional, Tuple

import yaml

from guardwatch_zone.camera.config import FramingConfig
from guardwatch_zone.geometry.shapes import Coordinate


@dataclass(frozen=True)
class FeedConfig:
    """Data source configuration (REST API or snapshot file)."""

    base_url: Optional[str] = None
    snapshot_path: Optional[Path] = None
    poll_interval_s: float = 30.0
    timeout_s: float = 10.0
    simulate: bool = False
    simulation_step_m: float = 25.0

    def __post_init__(self):
        """Validate feed configuration."""
        if self.base_url is None and self.snapshot_path is None:
            raise ValueError("feed needs either base_url or snapshot_path")

        if self.base_url is not None and not self.base_url.startswith(("http://", "https://")):
            raise ValueError(
                f"base_url must start with http:// or https://, got {self.base_url}"
            )

        if self.poll_interval_s <= 0:
            raise ValueError(
                f"poll_interval_s must be > 0, got {self.poll_interval_s}"
            )

        if self.timeout_s <= 0:
            raise ValueError(
                f"timeout_s must be > 0, got {self.timeout_s}"
            )

        if self.simulation_step_m < 0:
            raise ValueError(
                f"simulation_step_m must be >= 0, got {self.simulation_step_m}"
            )


@dataclass(frozen=True)
class MapConfig:
    """Live map view configuration."""

    size_wh: Tuple[int, int] = (1280, 720)  # (width, height)
    default_center: Coordinate = Coordinate(latitude=28.6139, longitude=77.2090)
    default_zoom: float = 10.0

    def __post_init__(self):
        """Validate map configuration."""
        width, height = self.size_wh
        if width <= 0 or height <= 0:
            raise ValueError(
                f"size_wh must have positive dimensions, got {self.size_wh}"
            )
        if width > 8192 or height > 8192:
            raise ValueError(
                f"size_wh dimensions too large (max 8192x8192), got {self.size_wh}"
            )

        if not 0 <= self.default_zoom <= 22:
            raise ValueError(
                f"default_zoom must be in [0, 22], got {self.default_zoom}"
            )


@dataclass(frozen=True)
class MonitorConfig:
    """
    Main configuration for the monitor service.

    This configuration is loaded from YAML and validated at startup.
    Immutable after construction (frozen dataclass).
    """

    service_id: str
    feed: FeedConfig
    map: MapConfig = field(default_factory=MapConfig)
    framing: FramingConfig = field(default_factory=FramingConfig)
    log_file: Optional[Path] = None

    def __post_init__(self):
        """Validate monitor configuration."""
        if not self.service_id:
            raise ValueError("service_id cannot be empty")

    @classmethod
    def from_yaml(cls, yaml_path: Path) -> "MonitorConfig":
        """
        Load configuration from YAML file.

        Example YAML:
            service_id: "hq_monitor"

            feed:
              base_url: "http://localhost:3001"
              poll_interval_s: 30
              timeout_s: 10

            map:
              size_wh: [1280, 720]  # [width, height]
              default_center: [28.6139, 77.2090]  # [lat, lng]
              default_zoom: 10

            framing:
              max_attempts: 4
              retry_backoff_s: 0.3

            log_file: "./logs/monitor.log"
        """
        with open(yaml_path) as f:
            data = yaml.safe_load(f) or {}

        feed_data = dict(data.get("feed", {}))
        if feed_data.get("snapshot_path") is not None:
            snapshot_path = Path(feed_data["snapshot_path"])
            # Relative snapshot paths are resolved against the config file
            if not snapshot_path.is_absolute():
                snapshot_path = Path(yaml_path).parent / snapshot_path
            feed_data["snapshot_path"] = snapshot_path
        feed = FeedConfig(**feed_data)

        map_data = dict(data.get("map", {}))
        if "size_wh" in map_data:
            map_data["size_wh"] = tuple(map_data["size_wh"])
        if "default_center" in map_data:
            lat, lng = map_data["default_center"]
            map_data["default_center"] = Coordinate(latitude=float(lat), longitude=float(lng))
        map_config = MapConfig(**map_data)

        framing_data = data.get("framing", {}) or {}
        known = {f.name for f in fields(FramingConfig)}
        unknown = set(framing_data) - known
        if unknown:
            raise ValueError(f"Unknown framing options: {sorted(unknown)}")
        framing = FramingConfig(**framing_data)

        log_file = data.get("log_file")

        return cls(
            service_id=data["service_id"],
            feed=feed,
            map=map_config,
            framing=framing,
            log_file=Path(log_file) if log_file else None,
        )
