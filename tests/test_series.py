"""Tests for stacked layer conversion."""

from __future__ import annotations

import math

import pytest

from savingsgraph.model import YearlyPoint
from savingsgraph.series import adapt_series, final_index, series_maximum, stack_heights

pytestmark = pytest.mark.unit


def _series() -> list[YearlyPoint]:
    return [
        YearlyPoint(year=0, principal=0, base_total=0, selected_total=0),
        YearlyPoint(year=1, principal=360_000, base_total=362_900, selected_total=367_800),
        YearlyPoint(year=2, principal=720_000, base_total=731_700, selected_total=751_300),
        YearlyPoint(year=3, principal=1_080_000, base_total=1_106_500, selected_total=1_151_900),
    ]


def test_adapt_series_emits_differences_in_display_units() -> None:
    """Each band holds the gap to the band below, divided by 10,000."""

    layers = adapt_series(_series())

    assert [p.x for p in layers.principal] == [0, 1, 2, 3]
    assert layers.principal[1].y == pytest.approx(36.0)
    assert layers.base[1].y == pytest.approx(0.29)
    assert layers.selected[1].y == pytest.approx(0.49)
    assert layers.selected[3].y == pytest.approx(4.54)


def test_stacked_height_equals_selected_total() -> None:
    """The three bands stack back up to the selected total at every year."""

    series = _series()
    heights = stack_heights(adapt_series(series))

    for point, height in zip(series, heights):
        assert math.isclose(height, point.selected_total / 10_000, abs_tol=1e-9)


def test_stacked_height_holds_when_selected_trails_base() -> None:
    """A negative top band still sums correctly; the relationship is not enforced."""

    series = [YearlyPoint(year=0, principal=100, base_total=300, selected_total=200)]
    layers = adapt_series(series)

    assert layers.selected[0].y == pytest.approx(-0.01)
    assert stack_heights(layers)[0] == pytest.approx(0.02)


def test_adapt_series_empty_is_noop() -> None:
    """An empty series yields three empty layers."""

    layers = adapt_series([])
    assert layers.principal == [] and layers.base == [] and layers.selected == []


def test_series_maximum_reads_raw_totals() -> None:
    """The axis maximum comes from the totals, never from the deltas."""

    series = _series()
    assert series_maximum(series) == 1_151_900
    series.append(YearlyPoint(year=4, principal=1_440_000, base_total=1_500_000, selected_total=1_400_000))
    assert series_maximum(series) == 1_500_000
    assert series_maximum([]) is None


def test_final_index_is_capped_by_horizon_and_layer_length() -> None:
    """The tracked index never points past the rendered points."""

    layers = adapt_series(_series())
    assert final_index(layers, 3) == 3
    assert final_index(layers, 10) == 3
    assert final_index(layers, 2) == 2
    assert final_index(adapt_series([]), 5) == -1
