"""Tests for connector segment math."""

from __future__ import annotations

import math

import pytest

from savingsgraph.geometry import connector_geometry, segment_end, surface_offset
from savingsgraph.model import ChartPoint, ConnectorGeometry, Rect

pytestmark = pytest.mark.unit

CONTAINER = Rect(100, 50, 635, 440)


def test_surface_offset_is_relative_to_container() -> None:
    """The offset is the surface's top-left minus the container's."""

    assert surface_offset(Rect(120, 60, 655, 450), CONTAINER) == (20, 10)


def test_connector_runs_from_anchor_corner_to_point() -> None:
    """A 3-4-5 displacement yields length 5 and the matching angle."""

    anchor = Rect(150, 100, 200, 120)  # bottom-right (200, 120) -> (100, 70) in container
    surface = Rect(100, 50, 635, 440)
    point = ChartPoint(103, 74)

    geometry = connector_geometry(anchor, CONTAINER, surface, point)

    assert geometry is not None
    assert geometry.length == pytest.approx(5.0)
    assert geometry.angle_degrees == pytest.approx(math.degrees(math.atan2(4, 3)))


def test_connector_includes_surface_offset() -> None:
    """Points are surface-relative and shifted by the surface offset."""

    anchor = Rect(150, 100, 200, 120)
    shifted = Rect(110, 50, 645, 440)

    geometry = connector_geometry(anchor, CONTAINER, shifted, ChartPoint(93, 74))

    assert geometry is not None
    assert geometry.length == pytest.approx(5.0)
    # Without the offset the same point would sit on the anchor's corner.
    assert connector_geometry(anchor, CONTAINER, shifted, ChartPoint(90, 70)) is None


@pytest.mark.parametrize(
    ("point", "sign_x", "sign_y"),
    [
        (ChartPoint(400, 300), 1, 1),
        (ChartPoint(10, 300), -1, 1),
        (ChartPoint(400, 5), 1, -1),
        (ChartPoint(10, 5), -1, -1),
    ],
)
def test_angle_sign_follows_displacement(point: ChartPoint, sign_x: int, sign_y: int) -> None:
    """Rebuilding dx/dy from length and angle restores the displacement signs."""

    anchor = Rect(150, 100, 200, 120)
    geometry = connector_geometry(anchor, CONTAINER, CONTAINER, point)
    assert geometry is not None

    theta = math.radians(geometry.angle_degrees)
    dx = geometry.length * math.cos(theta)
    dy = geometry.length * math.sin(theta)
    assert math.copysign(1, dx) == sign_x
    assert math.copysign(1, dy) == sign_y
    assert dx == pytest.approx(point.x - 100)
    assert dy == pytest.approx(point.y - 70)


def test_zero_length_connector_is_rejected() -> None:
    """A point sitting on the anchor corner produces no geometry."""

    anchor = Rect(150, 100, 200, 120)
    assert connector_geometry(anchor, CONTAINER, CONTAINER, ChartPoint(100, 70)) is None


def test_non_finite_inputs_are_rejected() -> None:
    """NaN points or unsettled rectangles never publish geometry."""

    anchor = Rect(150, 100, 200, 120)
    assert connector_geometry(anchor, CONTAINER, CONTAINER, ChartPoint(math.nan, 10)) is None
    broken = Rect(150, 100, math.inf, 120)
    assert connector_geometry(broken, CONTAINER, CONTAINER, ChartPoint(10, 10)) is None


def test_segment_end_reaches_target() -> None:
    """Walking the geometry from the origin lands on the target point."""

    geometry = ConnectorGeometry(length=5.0, angle_degrees=math.degrees(math.atan2(-4, 3)))
    end = segment_end((10.0, 20.0), geometry)
    assert end == (pytest.approx(13.0), pytest.approx(16.0))
