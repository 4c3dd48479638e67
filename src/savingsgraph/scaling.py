"""Y-axis ceiling selection for the projection chart."""
from __future__ import annotations

import math
from typing import Sequence, Tuple

from .config import DISPLAY_UNIT
from .model import AxisScale

AXIS_MARGIN = 1.1

# (upper bound of the margined value in display units, step)
AXIS_TIERS: Tuple[Tuple[float, int], ...] = (
    (100, 20),
    (500, 100),
    (1000, 100),
    (2500, 200),
    (5000, 500),
)
AXIS_FALLBACK_STEP = 1000


def step_for(margined: float, tiers: Sequence[Tuple[float, int]] = AXIS_TIERS) -> int:
    """Return the tick step for a margined display value."""

    for bound, step in tiers:
        if margined <= bound:
            return step
    return AXIS_FALLBACK_STEP


def _ceil_to(value: float, step: float) -> float:
    # Guard against 1320.0000000002 style noise pushing a value up a full step.
    quotient = round(value / step, 9)
    return math.ceil(quotient) * step


def scale(max_value: float) -> AxisScale:
    """Return the axis ceiling and tick step (display units) for ``max_value``."""

    if not math.isfinite(max_value) or max_value <= 0:
        raise ValueError(f"Axis maximum must be finite and positive, got {max_value!r}")
    margined = max_value / DISPLAY_UNIT * AXIS_MARGIN
    step = step_for(margined)
    return AxisScale(max=_ceil_to(margined, step), step=step)


def align(axis: AxisScale) -> AxisScale:
    """Round ``axis.max`` up to a multiple of ``axis.step`` (idempotent)."""

    return AxisScale(max=_ceil_to(axis.max, axis.step), step=axis.step)


def tick_values(axis: AxisScale) -> list:
    count = int(round(axis.max / axis.step))
    return [i * axis.step for i in range(count + 1)]


__all__ = ["AXIS_FALLBACK_STEP", "AXIS_MARGIN", "AXIS_TIERS", "align", "scale", "step_for", "tick_values"]
