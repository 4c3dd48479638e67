"""Tunable settings for projection rendering."""
from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Optional, Tuple

# Amounts are charted in units of 10,000 (man-yen).
DISPLAY_UNIT = 10_000

DEFAULT_PATTERN_CANDIDATES: Tuple[str, ...] = (
    "images/border-bg.webp",
    "./images/border-bg.webp",
    "/images/border-bg.webp",
)


@dataclass(frozen=True)
class ChartSettings:
    # Surface
    default_width: float = 535.0
    default_height: float = 390.0
    base_dpi: float = 100.0
    padding_left: float = 50.0
    padding_right: float = 12.0
    padding_top: float = 30.0
    padding_bottom: float = 28.0

    # Projection
    base_rate_percent: float = 2.0
    tax_rate: float = 0.20315
    periods: int = 12
    engine: str = "auto"

    # Decorative fill
    pattern_candidates: Tuple[str, ...] = DEFAULT_PATTERN_CANDIDATES
    asset_root: Optional[str] = None
    pattern_timeout: float = 3.0

    # Per-point entrance animation (milliseconds)
    animate: bool = True
    point_stagger_ms: float = 50.0
    x_duration_ms: float = 300.0
    y_duration_ms: float = 600.0
    frame_interval: float = 1 / 60

    # Connector resolution (seconds)
    retry_limit: int = 10
    retry_interval: float = 0.05
    settle_delay: float = 0.1

    # Band outlines are cardinal splines; 0 draws straight segments
    line_tension: float = 0.4
    curve_samples: int = 12

    # Styling
    principal_fallback_color: str = "#E8E8E8"
    base_color: str = "#D5EFFF"
    selected_color: str = "#44AD9D"
    tick_color: str = "#666666"
    connector_color: str = "#333333"
    tick_font_size: float = 10.0
    callout_font_size: float = 12.0

    # Texts
    principal_label: str = "Principal"
    growth_label: str = "Growth at {rate}%"
    callout_description: str = "Saved at {rate}%"
    currency_unit: str = "yen"
    axis_unit_label: str = "(x10,000 yen)"
    year_suffix: str = "y"

    # Callout placement
    callout_margin: float = 10.0
    base_callout_y_percent: float = 35.0
    selected_callout_y_percent: float = 10.0
    selected_callout_x_factor: float = 1.5

    def replace(self, **changes) -> "ChartSettings":
        return dataclasses.replace(self, **changes)


DEFAULT_SETTINGS = ChartSettings()


__all__ = ["ChartSettings", "DEFAULT_PATTERN_CANDIDATES", "DEFAULT_SETTINGS", "DISPLAY_UNIT"]
