"""Per-point entrance animation for the stacked chart."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Dict

Easing = Callable[[float], float]


def linear(t: float) -> float:
    return t


def ease_out_quart(t: float) -> float:
    return 1.0 - (1.0 - t) ** 4


EASINGS: Dict[str, Easing] = {"linear": linear, "easeOutQuart": ease_out_quart}


@dataclass(frozen=True)
class PropertyAnimation:
    easing: str
    duration_ms: float
    stagger_ms: float

    def delay(self, index: int) -> float:
        return index * self.stagger_ms

    def progress(self, elapsed_ms: float, index: int) -> float:
        """Eased progress in [0, 1], or NaN before the point has started."""

        local = elapsed_ms - self.delay(index)
        if local < 0:
            return math.nan
        if self.duration_ms <= 0 or local >= self.duration_ms:
            return 1.0
        return EASINGS[self.easing](local / self.duration_ms)


@dataclass(frozen=True)
class PointAnimation:
    """Independent x and y animations; the chart-level duration stays zero."""

    x: PropertyAnimation
    y: PropertyAnimation
    duration_ms: float = 0.0

    def total_ms(self, count: int) -> float:
        if count <= 0:
            return 0.0
        last = count - 1
        return max(self.x.delay(last) + self.x.duration_ms, self.y.delay(last) + self.y.duration_ms)

    def interpolate(self, elapsed_ms, index, x_from, x_to, y_from, y_to):
        """Current (x, y) of point ``index``; NaN x means not yet visible."""

        px = self.x.progress(elapsed_ms, index)
        py = self.y.progress(elapsed_ms, index)
        x = x_from + (x_to - x_from) * px if not math.isnan(px) else math.nan
        y = y_from + (y_to - y_from) * py if not math.isnan(py) else y_from
        return x, y


def point_animation(stagger_ms: float = 50.0, x_duration_ms: float = 300.0, y_duration_ms: float = 600.0) -> PointAnimation:
    return PointAnimation(
        x=PropertyAnimation("linear", x_duration_ms, stagger_ms),
        y=PropertyAnimation("easeOutQuart", y_duration_ms, stagger_ms),
    )


__all__ = [
    "EASINGS",
    "PointAnimation",
    "PropertyAnimation",
    "ease_out_quart",
    "linear",
    "point_animation",
]
