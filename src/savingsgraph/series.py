"""Conversion of yearly projections into stacked chart layers."""
from __future__ import annotations

from typing import Optional, Sequence

from .config import DISPLAY_UNIT
from .model import StackedLayer, StackedLayers, YearlyPoint


def adapt_series(series: Sequence[YearlyPoint]) -> StackedLayers:
    """Turn absolute running totals into three additive bands.

    Each band holds the difference from the band below it, so stacking the
    three bands reproduces ``selected_total`` at every year.
    """

    layers = StackedLayers([], [], [])
    for point in series:
        principal = point.principal / DISPLAY_UNIT
        base_total = point.base_total / DISPLAY_UNIT
        selected_total = point.selected_total / DISPLAY_UNIT
        layers.principal.append(StackedLayer(point.year, principal))
        layers.base.append(StackedLayer(point.year, base_total - principal))
        layers.selected.append(StackedLayer(point.year, selected_total - base_total))
    return layers


def series_maximum(series: Sequence[YearlyPoint]) -> Optional[float]:
    """Largest total across both scenarios, taken from the raw series."""

    if not series:
        return None
    return max(max(p.base_total, p.selected_total) for p in series)


def stack_heights(layers: StackedLayers) -> list:
    return [
        p.y + b.y + s.y
        for p, b, s in zip(layers.principal, layers.base, layers.selected)
    ]


def final_index(layers: StackedLayers, horizon_years: int) -> int:
    """Point index tracked by the connectors (-1 when nothing is rendered)."""

    return min(horizon_years, len(layers.base) - 1, len(layers.selected) - 1)


__all__ = ["adapt_series", "final_index", "series_maximum", "stack_heights"]
