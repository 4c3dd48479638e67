"""Contribution timeline math for savingsgraph."""
from __future__ import annotations

from typing import List, Tuple

try:  # Optional NumPy support for accelerated simulations
    import numpy as _np  # type: ignore
except Exception:  # pragma: no cover - NumPy is optional at runtime
    _np = None

HAS_NUMPY = _np is not None

# Yearly snapshots as (year, gross balance) pairs, year 0 first.
Timeline = List[Tuple[int, float]]


def _per_period(monthly_amount: float, m: int) -> float:
    if m <= 0:
        raise ValueError(f"Periods per year must be positive, got {m}")
    # Contributions are quoted per calendar month regardless of precision.
    return monthly_amount * 12.0 / m


def timeline_py(monthly_amount: float, r: float, years: int, m: int = 12) -> Timeline:
    """Pure-Python periodic simulation with yearly snapshots."""

    contribution = _per_period(monthly_amount, m)
    i = r / m
    value = 0.0
    out: Timeline = [(0, 0.0)]
    for period in range(1, years * m + 1):
        value = (value + contribution) * (1 + i)
        if period % m == 0:
            out.append((period // m, value))
    return out


def timeline_np(monthly_amount: float, r: float, years: int, m: int = 12) -> Timeline:
    """Vectorized periodic simulation with yearly snapshots (requires NumPy)."""

    if not HAS_NUMPY:
        return timeline_py(monthly_amount, r, years, m)

    assert _np is not None  # for type checkers
    contribution = _per_period(monthly_amount, m)
    periods = years * m
    growth = 1 + r / m
    if periods <= 0:
        return [(0, 0.0)]

    adds = _np.full(periods, contribution, dtype=_np.float64)
    powers = growth ** _np.arange(periods, dtype=_np.float64)
    conv = _np.convolve(adds, powers, mode="full")[:periods]
    values = _np.concatenate(([0.0], growth * conv))
    return [(k // m, float(values[k])) for k in range(0, periods + 1, m)]


def timeline(monthly_amount, r, years, m=12, use_numpy=True) -> Timeline:
    if use_numpy and HAS_NUMPY:
        return timeline_np(monthly_amount, r, years, m)
    return timeline_py(monthly_amount, r, years, m)


def contributed(monthly_amount: float, year: int) -> float:
    return monthly_amount * 12.0 * year


def after_tax(gross: float, principal: float, tax_rate: float) -> float:
    """Tax only the gain over ``principal``; losses are not credited."""

    gain = gross - principal
    if gain <= 0:
        return gross
    return principal + gain * (1.0 - tax_rate)


__all__ = [
    "HAS_NUMPY",
    "Timeline",
    "after_tax",
    "contributed",
    "timeline",
    "timeline_np",
    "timeline_py",
]
