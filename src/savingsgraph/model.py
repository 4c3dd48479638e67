"""Value types shared by the projection, scaling and overlay layers."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, NamedTuple, Tuple


@dataclass(frozen=True)
class YearlyPoint:
    """One yearly snapshot produced by the simulation engine."""

    year: int
    principal: float
    base_total: float
    selected_total: float


class StackedLayer(NamedTuple):
    x: float
    y: float


class StackedLayers(NamedTuple):
    """The three additive bands handed to the renderer (display units)."""

    principal: List[StackedLayer]
    base: List[StackedLayer]
    selected: List[StackedLayer]


@dataclass(frozen=True)
class AxisScale:
    max: float
    step: float


@dataclass(frozen=True)
class ConnectorGeometry:
    length: float
    angle_degrees: float


@dataclass(frozen=True)
class SimulationSummary:
    years: int
    principal: float
    base_total: float
    selected_total: float
    difference: float


class ChartPoint(NamedTuple):
    """Surface-relative pixel coordinate of a rendered data point."""

    x: float
    y: float

    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y)


@dataclass(frozen=True)
class Rect:
    """Viewport rectangle in CSS pixels; ``top`` is above ``bottom``."""

    left: float
    top: float
    right: float
    bottom: float

    @classmethod
    def from_size(cls, left: float, top: float, width: float, height: float) -> "Rect":
        return cls(left, top, left + width, top + height)

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top

    @property
    def top_left(self) -> Tuple[float, float]:
        return self.left, self.top

    @property
    def bottom_right(self) -> Tuple[float, float]:
        return self.right, self.bottom

    def offset(self, dx: float, dy: float) -> "Rect":
        return Rect(self.left + dx, self.top + dy, self.right + dx, self.bottom + dy)


__all__ = [
    "AxisScale",
    "ChartPoint",
    "ConnectorGeometry",
    "Rect",
    "SimulationSummary",
    "StackedLayer",
    "StackedLayers",
    "YearlyPoint",
]
