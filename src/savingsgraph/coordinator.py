"""Orchestration of one projection render cycle."""
from __future__ import annotations

import asyncio
import logging
import math
from typing import Callable, Dict, List, Optional, Sequence

from .animation import point_animation
from .computation import compute_summary, compute_yearly_series
from .config import DEFAULT_SETTINGS, ChartSettings
from .hooks import default_hooks
from .model import AxisScale, ConnectorGeometry, SimulationSummary, StackedLayers, YearlyPoint
from .pattern import ImagePattern, PatternCache, candidate_paths, shared_cache
from .renderer import ChartConfig, ChartContext, Dataset, MatplotlibChart, PostDrawHook, Sleep
from .reporting import format_rate
from .resolver import ConnectorResolver, Delay
from .scaling import align, scale
from .series import adapt_series, final_index, series_maximum
from .surface import DrawingSurface

logger = logging.getLogger(__name__)

SeriesEngine = Callable[[float, float, int], List[YearlyPoint]]


class RenderCycle:
    """Everything one ``render`` call produced, plus its pending work."""

    def __init__(
        self,
        series: Sequence[YearlyPoint],
        summary: Optional[SimulationSummary],
        axis: AxisScale,
        layers: StackedLayers,
        pattern: Optional[ImagePattern],
        chart: MatplotlibChart,
        selected_index: int,
    ) -> None:
        self.series = series
        self.summary = summary
        self.axis = axis
        self.layers = layers
        self.pattern = pattern
        self.chart = chart
        self.selected_index = selected_index
        self.animation: Optional[asyncio.Future] = None
        self.connectors: Optional[asyncio.Future] = None
        self.resolver: Optional[ConnectorResolver] = None

    async def settled(self) -> Dict[str, ConnectorGeometry]:
        """Wait for the animation and connector resolution to finish."""

        if self.animation is not None:
            await self.animation
        if self.connectors is None:
            return {}
        return await self.connectors


class RenderCoordinator:
    """Owns one chart and its overlays; redraws them on every ``render``.

    Render calls on one coordinator must not overlap: each call tears down
    the previous cycle before building a new one. Only the pattern cache is
    shared between coordinators.
    """

    def __init__(
        self,
        settings: ChartSettings = DEFAULT_SETTINGS,
        engine: Optional[SeriesEngine] = None,
        pattern_cache: Optional[PatternCache] = None,
        sleep: Optional[Sleep] = None,
        hooks: Optional[Sequence[PostDrawHook]] = None,
    ) -> None:
        self.settings = settings
        self._engine = engine or self._default_engine
        self._patterns = pattern_cache or shared_cache(settings.pattern_timeout)
        self._sleep = sleep or asyncio.sleep
        self._hooks = list(hooks) if hooks is not None else default_hooks()
        self._chart: Optional[MatplotlibChart] = None
        self._surface: Optional[DrawingSurface] = None
        self.cycle: Optional[RenderCycle] = None

    @property
    def chart(self) -> Optional[MatplotlibChart]:
        return self._chart

    def _default_engine(self, interest_rate, monthly_amount, horizon_years) -> List[YearlyPoint]:
        s = self.settings
        return compute_yearly_series(
            interest_rate,
            monthly_amount,
            horizon_years,
            base_rate_percent=s.base_rate_percent,
            tax_rate=s.tax_rate,
            periods=s.periods,
            engine=s.engine,
        )

    def _frame_then(self, extra: float) -> Delay:
        async def delay() -> None:
            await self._sleep(self.settings.frame_interval)
            await self._sleep(extra)

        return delay

    def teardown(self, surface: Optional[DrawingSurface] = None) -> None:
        """Drop the current chart and every overlay it left behind."""

        if self._chart is not None:
            self._chart.destroy()
            self._chart = None
        for target in (self._surface, surface):
            if target is not None and target.container is not None:
                target.container.remove_overlays()
        self.cycle = None

    def _datasets(self, layers: StackedLayers, interest_rate: float, pattern) -> List[Dataset]:
        s = self.settings
        return [
            Dataset(s.principal_label, layers.principal, None if pattern is not None else s.principal_fallback_color),
            Dataset(s.growth_label.format(rate=format_rate(s.base_rate_percent)), layers.base, s.base_color),
            Dataset(s.growth_label.format(rate=format_rate(interest_rate)), layers.selected, s.selected_color),
        ]

    async def render(
        self,
        surface: Optional[DrawingSurface],
        interest_rate: float,
        monthly_amount: float,
        horizon_years: int,
    ) -> Optional[RenderCycle]:
        """Redraw the projection; returns None when the render was aborted."""

        s = self.settings
        self.teardown(surface)
        if surface is None or surface.container is None:
            logger.info("Render skipped: no drawing surface container")
            return None
        self._surface = surface
        surface.size_to_container()

        series = self._engine(interest_rate, monthly_amount, horizon_years)
        if not series:
            logger.info("Render skipped: empty projection series")
            return None

        max_value = series_maximum(series)
        if max_value is None or not math.isfinite(max_value) or max_value <= 0:
            logger.info("Render skipped: unusable maximum %r", max_value)
            return None

        axis = align(scale(max_value))
        layers = adapt_series(series)

        pattern = await self._patterns.acquire(candidate_paths(s.pattern_candidates, s.asset_root))
        if pattern is None:
            logger.debug("Rendering without decorative pattern")

        animation = (
            point_animation(s.point_stagger_ms, s.x_duration_ms, s.y_duration_ms) if s.animate else None
        )
        config = ChartConfig(
            datasets=self._datasets(layers, interest_rate, pattern),
            x_max=horizon_years,
            y_axis=axis,
            animation=animation,
        )
        context = ChartContext(
            interest_rate=interest_rate,
            horizon_years=horizon_years,
            series=series,
            pattern=pattern,
        )
        chart = MatplotlibChart(surface, config, context, hooks=self._hooks, settings=s)
        self._chart = chart

        cycle = RenderCycle(
            series=series,
            summary=compute_summary(series),
            axis=axis,
            layers=layers,
            pattern=pattern,
            chart=chart,
            selected_index=final_index(layers, horizon_years),
        )
        self.cycle = cycle

        def on_complete(done: MatplotlibChart) -> None:
            cycle.connectors = asyncio.ensure_future(self._resolve_connectors(cycle, done, surface))

        logger.info(
            "Rendering %d-year projection at %s%% (axis max=%s step=%s)",
            horizon_years,
            interest_rate,
            axis.max,
            axis.step,
        )
        cycle.animation = asyncio.ensure_future(chart.animate(on_complete, sleep=self._sleep))
        return cycle

    async def _resolve_connectors(
        self, cycle: RenderCycle, chart: MatplotlibChart, surface: DrawingSurface
    ) -> Dict[str, ConnectorGeometry]:
        s = self.settings
        await self._frame_then(s.settle_delay)()
        resolver = ConnectorResolver(delay=self._frame_then(s.retry_interval), retry_limit=s.retry_limit)
        cycle.resolver = resolver
        return await resolver.resolve(chart, surface.container, surface, cycle.selected_index)


__all__ = ["RenderCoordinator", "RenderCycle", "SeriesEngine"]
