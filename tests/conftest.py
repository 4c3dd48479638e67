"""Pytest fixtures shared across the savingsgraph tests."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

import pytest

from savingsgraph.config import DEFAULT_SETTINGS, ChartSettings
from savingsgraph.model import Rect
from savingsgraph.overlay import OverlayContainer
from savingsgraph.pattern import PatternCache
from savingsgraph.surface import DrawingSurface


async def instant_sleep(_seconds: float) -> None:
    """Yield to the loop without waiting on the wall clock."""

    await asyncio.sleep(0)


async def instant_delay() -> None:
    await asyncio.sleep(0)


@pytest.fixture
def sleep():
    """Injected sleep for coordinators and charts."""

    return instant_sleep


@pytest.fixture
def delay():
    """Injected retry delay for connector resolvers."""

    return instant_delay


@pytest.fixture
def settings() -> ChartSettings:
    """Settings with animation off so rendering tests draw a single frame."""

    return DEFAULT_SETTINGS.replace(animate=False, pattern_candidates=("missing/border-bg.webp",))


@pytest.fixture
def surface(settings: ChartSettings) -> DrawingSurface:
    """A 535x390 surface at the origin of its container."""

    container = OverlayContainer(Rect.from_size(0, 0, 535, 390))
    return DrawingSurface(container, device_pixel_ratio=1.0, settings=settings)


@pytest.fixture
def failing_cache() -> PatternCache:
    """A pattern cache whose loader always fails, so charts use the flat fill."""

    async def loader(location: str):
        raise OSError(f"no such file: {location}")

    return PatternCache(loader=loader)


def pytest_collection_modifyitems(items: Sequence[pytest.Item]) -> None:
    """Enforce that every test has exactly one speed marker.

    - `unit`: pure, fast tests with no rendering.
    - `integration`: tests drawing on a matplotlib canvas or touching files.
    """

    invalid: list[str] = []
    for item in items:
        has_unit = item.get_closest_marker("unit") is not None
        has_integration = item.get_closest_marker("integration") is not None
        if has_unit == has_integration:
            invalid.append(item.nodeid)

    if invalid:
        joined = "\n".join(f"- {nodeid}" for nodeid in invalid)
        raise pytest.UsageError(
            "Each test must have exactly one speed marker: `@pytest.mark.unit` or "
            "`@pytest.mark.integration`.\n"
            f"Offending tests:\n{joined}"
        )
