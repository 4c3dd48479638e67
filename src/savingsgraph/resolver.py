"""Deferred connector resolution once the chart animation has settled."""
from __future__ import annotations

import asyncio
import enum
import logging
from typing import Awaitable, Callable, Dict, Optional, Protocol, Tuple

from .geometry import connector_geometry
from .model import ChartPoint, ConnectorGeometry, Rect

logger = logging.getLogger(__name__)

Delay = Callable[[], Awaitable[None]]

# (series name, dataset index in the stacked chart)
TRACKED_SERIES: Tuple[Tuple[str, int], ...] = (("base", 1), ("selected", 2))

DEFAULT_RETRY_LIMIT = 10


class ResolvedChart(Protocol):
    destroyed: bool

    @property
    def chart_area(self) -> Optional[Rect]: ...

    def point_position(self, dataset_index: int, index: int) -> Optional[ChartPoint]: ...


class ResolverState(enum.Enum):
    PENDING = "pending"
    RESOLVED = "resolved"
    ABANDONED = "abandoned"


def frame_delay(frame_interval: float = 1 / 60, extra: float = 0.05) -> Delay:
    """Wait one rendering frame and then ``extra`` seconds."""

    async def delay() -> None:
        await asyncio.sleep(frame_interval)
        await asyncio.sleep(extra)

    return delay


class ConnectorResolver:
    """Polls until anchors, chart area and tracked points are all available.

    Each check that finds something missing waits on ``delay`` and tries
    again, up to ``retry_limit`` retries, after which resolution is abandoned
    without an error. A torn-down chart or detached container ends polling
    straight away.
    """

    def __init__(self, delay: Optional[Delay] = None, retry_limit: int = DEFAULT_RETRY_LIMIT) -> None:
        self._delay = delay or frame_delay()
        self.retry_limit = retry_limit
        self.state = ResolverState.PENDING
        self.attempts = 0

    def _abandon(self, reason: str) -> Dict[str, ConnectorGeometry]:
        logger.debug("Connector resolution abandoned after %d attempt(s): %s", self.attempts, reason)
        self.state = ResolverState.ABANDONED
        return {}

    def _ready_inputs(self, chart, overlay, selected_index):
        anchors = {}
        for name, _ in TRACKED_SERIES:
            anchor = overlay.anchor(name)
            if anchor is None:
                return None, "anchors missing"
            rect = anchor.bounding_rect()
            if rect is None:
                return None, "anchors not laid out"
            anchors[name] = rect
        if chart.chart_area is None:
            return None, "chart area not ready"
        points = {}
        for name, dataset_index in TRACKED_SERIES:
            point = chart.point_position(dataset_index, selected_index)
            if point is None or not point.is_finite():
                return None, "points not resolvable"
            points[name] = point
        return (anchors, points), ""

    async def resolve(self, chart: ResolvedChart, overlay, surface, selected_index: int) -> Dict[str, ConnectorGeometry]:
        """Measure and publish connector geometry for both tracked series.

        Returns the geometries that were applied, keyed by series name; an
        empty mapping when resolution was abandoned.
        """

        self.state = ResolverState.PENDING
        self.attempts = 0
        await self._delay()
        while True:
            self.attempts += 1
            if chart.destroyed or not overlay.attached:
                return self._abandon("chart was torn down")
            inputs, reason = self._ready_inputs(chart, overlay, selected_index)
            if inputs is not None:
                break
            if self.attempts > self.retry_limit:
                return self._abandon(reason)
            logger.debug("Connector attempt %d not ready: %s", self.attempts, reason)
            await self._delay()

        anchors, points = inputs
        container_rect = overlay.rect
        surface_rect = surface.bounding_rect()
        published: Dict[str, ConnectorGeometry] = {}
        for name, _ in TRACKED_SERIES:
            geometry = connector_geometry(anchors[name], container_rect, surface_rect, points[name])
            if geometry is None:
                logger.debug("Rejected degenerate connector for '%s'", name)
                continue
            overlay.apply_connector(name, geometry)
            published[name] = geometry
        self.state = ResolverState.RESOLVED
        return published


__all__ = [
    "ConnectorResolver",
    "Delay",
    "ResolvedChart",
    "ResolverState",
    "TRACKED_SERIES",
    "frame_delay",
]
