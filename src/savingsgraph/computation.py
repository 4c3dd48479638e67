"""Yearly series production for the projection chart."""
from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from .finance import HAS_NUMPY, after_tax, contributed, timeline
from .model import SimulationSummary, YearlyPoint

logger = logging.getLogger(__name__)

BASE_RATE_PERCENT = 2
DEFAULT_TAX_RATE = 0.20315


def resolve_use_numpy(engine: str) -> bool:
    """Return True if the NumPy engine should be used for simulations."""

    normalized = engine.lower()
    if normalized not in {"auto", "numpy", "python"}:
        raise ValueError(f"Unknown engine '{engine}' (expected auto/numpy/python)")
    if normalized == "numpy":
        if not HAS_NUMPY:
            raise RuntimeError("NumPy requested but not installed.")
        return True
    if normalized == "python":
        return False
    return HAS_NUMPY


def compute_yearly_series(
    interest_rate_percent: float,
    monthly_amount: float,
    horizon_years: int,
    *,
    base_rate_percent: float = BASE_RATE_PERCENT,
    tax_rate: float = DEFAULT_TAX_RATE,
    periods: int = 12,
    engine: str = "auto",
) -> List[YearlyPoint]:
    """Project after-tax balances at the reference and selected rates.

    Returns one point per year for ``0..horizon_years`` inclusive, or an empty
    list when the inputs cannot produce a projection.
    """

    if horizon_years < 0 or monthly_amount < 0 or periods <= 0:
        logger.info(
            "No projection for rate=%s monthly=%s years=%s",
            interest_rate_percent,
            monthly_amount,
            horizon_years,
        )
        return []
    use_numpy = resolve_use_numpy(engine)
    base_curve = timeline(monthly_amount, base_rate_percent / 100.0, horizon_years, periods, use_numpy)
    selected_curve = timeline(
        monthly_amount, interest_rate_percent / 100.0, horizon_years, periods, use_numpy
    )

    series: List[YearlyPoint] = []
    for (year, base_gross), (_, selected_gross) in zip(base_curve, selected_curve):
        principal = contributed(monthly_amount, year)
        series.append(
            YearlyPoint(
                year=year,
                principal=float(round(principal)),
                base_total=float(round(after_tax(base_gross, principal, tax_rate))),
                selected_total=float(round(after_tax(selected_gross, principal, tax_rate))),
            )
        )
    return series


def compute_summary(series: Sequence[YearlyPoint]) -> Optional[SimulationSummary]:
    """Final-year figures shown next to the chart."""

    if not series:
        return None
    final = series[-1]
    return SimulationSummary(
        years=final.year,
        principal=final.principal,
        base_total=final.base_total,
        selected_total=final.selected_total,
        difference=final.selected_total - final.base_total,
    )


__all__ = [
    "BASE_RATE_PERCENT",
    "DEFAULT_TAX_RATE",
    "compute_summary",
    "compute_yearly_series",
    "resolve_use_numpy",
]
