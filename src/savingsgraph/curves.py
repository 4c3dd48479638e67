"""Cardinal spline smoothing for band outlines."""
from __future__ import annotations

import math
from typing import List, Sequence, Tuple

import numpy as np

Point = Tuple[float, float]

DEFAULT_TENSION = 0.4


def control_points(prev: Point, cur: Point, nxt: Point, tension: float) -> Tuple[Point, Point]:
    """Bezier handles before and after ``cur``, scaled by neighbour distance."""

    d01 = math.hypot(cur[0] - prev[0], cur[1] - prev[1])
    d12 = math.hypot(nxt[0] - cur[0], nxt[1] - cur[1])
    total = d01 + d12
    s01 = d01 / total if total else 0.0
    s12 = d12 / total if total else 0.0
    dx = nxt[0] - prev[0]
    dy = nxt[1] - prev[1]
    fa = tension * s01
    fb = tension * s12
    return (cur[0] - fa * dx, cur[1] - fa * dy), (cur[0] + fb * dx, cur[1] + fb * dy)


def smooth_outline(points: Sequence[Point], tension: float = DEFAULT_TENSION, samples: int = 12) -> List[Point]:
    """Sample a curve through ``points`` with ``samples`` steps per segment.

    Every input point is kept on the curve; fewer than three points, or a
    non-positive tension, come back as straight segments.
    """

    pts = [(float(x), float(y)) for x, y in points]
    if tension <= 0 or samples <= 1 or len(pts) < 3:
        return pts

    before: List[Point] = []
    after: List[Point] = []
    last = len(pts) - 1
    for i, cur in enumerate(pts):
        prev = pts[i - 1] if i > 0 else cur
        nxt = pts[i + 1] if i < last else cur
        handle_in, handle_out = control_points(prev, cur, nxt, tension)
        before.append(handle_in)
        after.append(handle_out)

    t = np.linspace(0.0, 1.0, samples + 1)[1:, None]
    u = 1.0 - t
    out: List[Point] = [pts[0]]
    for i in range(last):
        p0, c1, c2, p3 = (np.asarray(p) for p in (pts[i], after[i], before[i + 1], pts[i + 1]))
        segment = u**3 * p0 + 3 * u**2 * t * c1 + 3 * u * t**2 * c2 + t**3 * p3
        out.extend((float(x), float(y)) for x, y in segment)
    return out


__all__ = ["DEFAULT_TENSION", "control_points", "smooth_outline"]
