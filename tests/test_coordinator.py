"""Tests for the end-to-end render cycle."""

from __future__ import annotations

import asyncio

import pytest

from savingsgraph.coordinator import RenderCoordinator
from savingsgraph.model import AxisScale, Rect, YearlyPoint
from savingsgraph.overlay import LINE_ANGLE, LINE_LENGTH, OverlayContainer
from savingsgraph.pattern import PatternCache
from savingsgraph.resolver import ResolverState
from savingsgraph.surface import DrawingSurface

pytestmark = pytest.mark.integration


def _coordinator(settings, failing_cache, sleep, engine=None) -> RenderCoordinator:
    return RenderCoordinator(settings, engine=engine, pattern_cache=failing_cache, sleep=sleep)


def test_render_builds_layers_axis_and_connectors(surface, settings, failing_cache, sleep) -> None:
    """5% / 30,000 per month / 20 years yields 21 points and two connectors."""

    coordinator = _coordinator(settings, failing_cache, sleep)

    async def scenario():
        cycle = await coordinator.render(surface, 5, 30_000, 20)
        return cycle, await cycle.settled()

    cycle, geometry = asyncio.run(scenario())

    assert len(cycle.series) == 21
    assert all(len(layer) == 21 for layer in cycle.layers)
    assert cycle.selected_index == 20
    assert cycle.axis.max % cycle.axis.step == 0
    assert cycle.axis.max >= max(p.selected_total for p in cycle.series) / 10_000
    assert cycle.pattern is None
    assert set(geometry) == {"base", "selected"}
    assert cycle.resolver.state is ResolverState.RESOLVED
    container = surface.container
    for kind in ("base", "selected"):
        style = container.anchor(kind).style
        assert style[LINE_LENGTH].endswith("px")
        assert style[LINE_ANGLE].endswith("deg")
    assert len(container.lines) == 2


def test_connector_ends_on_tracked_points(surface, settings, failing_cache, sleep) -> None:
    """The drawn line ends at the final-year point of its series."""

    coordinator = _coordinator(settings, failing_cache, sleep)

    async def scenario():
        cycle = await coordinator.render(surface, 5, 30_000, 20)
        await cycle.settled()
        return cycle

    cycle = asyncio.run(scenario())

    for line in surface.container.lines:
        index = 1 if line.kind == "base" else 2
        point = cycle.chart.point_position(index, cycle.selected_index)
        assert line.end[0] == pytest.approx(point.x, abs=1e-6)
        assert line.end[1] == pytest.approx(point.y, abs=1e-6)


def test_axis_comes_from_the_engine_maximum(surface, settings, failing_cache, sleep) -> None:
    """A 12,000,000 peak produces a 1400 / 200 axis."""

    def engine(rate, monthly, years):
        return [
            YearlyPoint(0, 0, 0, 0),
            YearlyPoint(1, 5_000_000, 8_000_000, 12_000_000),
        ]

    coordinator = _coordinator(settings, failing_cache, sleep, engine=engine)
    cycle = asyncio.run(coordinator.render(surface, 5, 1, 1))

    assert cycle.axis == AxisScale(max=1400, step=200)
    assert cycle.chart.ax.get_ylim() == (0, 1400)


@pytest.mark.parametrize(
    "engine",
    [
        lambda rate, monthly, years: [],
        lambda rate, monthly, years: [YearlyPoint(0, 0, 0, 0), YearlyPoint(1, 0, 0, 0)],
        lambda rate, monthly, years: [YearlyPoint(0, 0, float("nan"), 0)],
    ],
    ids=["empty", "zero-maximum", "nan-maximum"],
)
def test_render_aborts_on_unusable_series(engine, surface, settings, failing_cache, sleep) -> None:
    """Unusable projections abort without a chart or overlays."""

    coordinator = _coordinator(settings, failing_cache, sleep, engine=engine)

    assert asyncio.run(coordinator.render(surface, 5, 30_000, 20)) is None
    assert coordinator.chart is None
    assert surface.container.callouts == []


def test_render_aborts_without_surface_or_container(settings, failing_cache, sleep) -> None:
    """Missing hosts are a silent no-op."""

    coordinator = _coordinator(settings, failing_cache, sleep)

    assert asyncio.run(coordinator.render(None, 5, 30_000, 20)) is None
    assert asyncio.run(coordinator.render(DrawingSurface(None), 5, 30_000, 20)) is None


def test_rerender_replaces_previous_chart(surface, settings, failing_cache, sleep) -> None:
    """Two renders leave exactly one chart and one set of overlays."""

    coordinator = _coordinator(settings, failing_cache, sleep)

    async def scenario():
        first = await coordinator.render(surface, 5, 30_000, 20)
        await first.settled()
        second = await coordinator.render(surface, 3, 20_000, 10)
        await second.settled()
        return first, second

    first, second = asyncio.run(scenario())

    assert first.chart.destroyed
    assert not second.chart.destroyed
    assert coordinator.chart is second.chart
    assert len(surface.figure.axes) == 1
    assert len(surface.container.callouts) == 2
    assert len(surface.container.lines) == 2
    assert "3%" in surface.container.callout("selected").description


def test_rerender_with_same_arguments_is_idempotent(surface, settings, failing_cache, sleep) -> None:
    """Rendering the same inputs twice yields the same layers and geometry."""

    coordinator = _coordinator(settings, failing_cache, sleep)

    async def scenario():
        first = await coordinator.render(surface, 5, 30_000, 20)
        first_geometry = await first.settled()
        second = await coordinator.render(surface, 5, 30_000, 20)
        second_geometry = await second.settled()
        return first, first_geometry, second, second_geometry

    first, first_geometry, second, second_geometry = asyncio.run(scenario())

    assert set(first_geometry) == {"base", "selected"}
    assert first_geometry == second_geometry
    assert first.layers == second.layers
    assert first.axis == second.axis
    assert len(surface.container.lines) == 2
    assert len(surface.figure.axes) == 1


def test_loader_errors_of_any_kind_render_without_pattern(surface, settings, sleep) -> None:
    """An unexpected loader exception does not escape the render."""

    async def broken_loader(location: str):
        raise RuntimeError("decoder crashed")

    cache = PatternCache(loader=broken_loader)
    coordinator = RenderCoordinator(settings, pattern_cache=cache, sleep=sleep)

    async def scenario():
        cycle = await coordinator.render(surface, 5, 30_000, 20)
        return cycle, await cycle.settled()

    cycle, geometry = asyncio.run(scenario())

    assert cycle.pattern is None
    assert cache.has_failed("missing/border-bg.webp")
    assert set(geometry) == {"base", "selected"}


def test_superseded_cycle_never_publishes(surface, settings, failing_cache, sleep) -> None:
    """A render started over an unfinished one cancels its connector work."""

    animated = settings.replace(animate=True)
    coordinator = RenderCoordinator(animated, pattern_cache=failing_cache, sleep=sleep)

    async def scenario():
        first = await coordinator.render(surface, 5, 30_000, 3)
        second = await coordinator.render(surface, 5, 30_000, 3)
        return await first.settled(), await second.settled(), first

    first_geometry, second_geometry, first = asyncio.run(scenario())

    assert first_geometry == {}
    assert first.chart.destroyed
    assert set(second_geometry) == {"base", "selected"}


def test_teardown_clears_overlays(surface, settings, failing_cache, sleep) -> None:
    """Tearing down removes the chart, callouts and lines."""

    coordinator = _coordinator(settings, failing_cache, sleep)

    async def scenario():
        cycle = await coordinator.render(surface, 5, 30_000, 20)
        await cycle.settled()

    asyncio.run(scenario())
    coordinator.teardown()

    assert coordinator.chart is None
    assert coordinator.cycle is None
    assert surface.container.callouts == []
    assert surface.container.lines == []
    assert surface.figure.axes == []


def test_surface_is_sized_from_container(settings, failing_cache, sleep) -> None:
    """The bitmap follows the container width times the pixel ratio."""

    container = OverlayContainer(Rect.from_size(0, 0, 300, 200))
    surface = DrawingSurface(container, device_pixel_ratio=2.0, settings=settings)
    coordinator = _coordinator(settings, failing_cache, sleep)

    async def scenario():
        cycle = await coordinator.render(surface, 5, 30_000, 10)
        return await cycle.settled()

    geometry = asyncio.run(scenario())

    assert (surface.pixel_width, surface.pixel_height) == (600, 400)
    assert surface.style_width == "300px"
    assert set(geometry) == {"base", "selected"}
