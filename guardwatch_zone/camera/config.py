"""
Framing configuration for the camera controller.

Defaults are the production framing policy; the monitor's YAML config can
override any of them under the ``framing`` key.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class FramingConfig:
    """Camera framing policy."""

    max_attempts: int = 4
    retry_backoff_s: float = 0.3
    min_tolerance_m: float = 30.0
    tolerance_radius_fraction: float = 0.6
    circle_diameter_fraction: float = 0.6
    polygon_padding_fraction: float = 0.12
    min_zoom: float = 3.0
    max_zoom: float = 16.0
    fallback_zoom: float = 16.0
    settle_timeout_s: float = 2.0
    overview_padding_px: int = 50

    def __post_init__(self):
        """Validate framing configuration."""
        if self.max_attempts < 1:
            raise ValueError(
                f"max_attempts must be >= 1, got {self.max_attempts}"
            )

        if self.retry_backoff_s < 0 or self.settle_timeout_s <= 0:
            raise ValueError(
                f"retry_backoff_s must be >= 0 and settle_timeout_s > 0, "
                f"got {self.retry_backoff_s} and {self.settle_timeout_s}"
            )

        if self.min_tolerance_m < 0 or self.tolerance_radius_fraction < 0:
            raise ValueError("Convergence tolerances must be non-negative")

        if not 0.0 < self.circle_diameter_fraction <= 1.0:
            raise ValueError(
                f"circle_diameter_fraction must be in (0.0, 1.0], "
                f"got {self.circle_diameter_fraction}"
            )

        if not 0.0 <= self.polygon_padding_fraction < 0.5:
            raise ValueError(
                f"polygon_padding_fraction must be in [0.0, 0.5), "
                f"got {self.polygon_padding_fraction}"
            )

        if not self.min_zoom <= self.max_zoom:
            raise ValueError(
                f"min_zoom ({self.min_zoom}) must not exceed max_zoom ({self.max_zoom})"
            )

        if self.overview_padding_px < 0:
            raise ValueError(
                f"overview_padding_px must be >= 0, got {self.overview_padding_px}"
            )
