"""Stacked area chart drawn on a matplotlib surface."""
from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Optional, Sequence, Tuple

from .animation import PointAnimation
from .config import DEFAULT_SETTINGS, ChartSettings
from .curves import smooth_outline
from .model import AxisScale, ChartPoint, Rect, StackedLayer, YearlyPoint
from .scaling import tick_values
from .surface import DrawingSurface

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[Any]]
PostDrawHook = Callable[["MatplotlibChart"], None]
CompletionCallback = Callable[["MatplotlibChart"], None]


@dataclass
class Dataset:
    label: str
    points: List[StackedLayer]
    color: Optional[str]
    stack: str = "stack1"


@dataclass
class ChartConfig:
    datasets: List[Dataset]
    x_max: int
    y_axis: AxisScale
    x_step: int = 5
    animation: Optional[PointAnimation] = None


@dataclass
class ChartContext:
    """Per-render values the post-draw hooks read."""

    interest_rate: float
    horizon_years: int
    series: Sequence[YearlyPoint]
    pattern: Any = None


def x_ticks(x_max: int, step: int = 5) -> List[int]:
    ticks = list(range(0, x_max + 1, step)) if step > 0 else [0]
    if not ticks or ticks[-1] != x_max:
        ticks.append(x_max)
    return ticks


class MatplotlibChart:
    """A stacked line/area chart with per-point entrance animation.

    Mirrors what a browser charting engine exposes once it has laid out:
    a chart area, and for every dataset the on-screen position of each
    point (surface-relative CSS pixels).
    """

    def __init__(
        self,
        surface: DrawingSurface,
        config: ChartConfig,
        context: ChartContext,
        hooks: Sequence[PostDrawHook] = (),
        settings: ChartSettings = DEFAULT_SETTINGS,
    ) -> None:
        self.surface = surface
        self.figure = surface.figure
        self.config = config
        self.context = context
        self.hooks = tuple(hooks)
        self.settings = settings
        self.destroyed = False
        self.complete = False
        self.frames_drawn = 0
        self.frame_artists: List[Any] = []
        self._fills: List[Any] = []
        self._chart_area: Optional[Rect] = None
        self._current: List[List[Tuple[float, float]]] = []
        self._tops = self._stack_tops()
        self.ax = self._build_axes()

    # ---------- layout ----------
    def _stack_tops(self) -> List[List[float]]:
        tops: List[List[float]] = []
        running: List[float] = []
        for dataset in self.config.datasets:
            if not running:
                running = [0.0] * len(dataset.points)
            running = [base + p.y for base, p in zip(running, dataset.points)]
            tops.append(running)
        return tops

    def _build_axes(self):
        s = self.settings
        width = self.surface.css_width or s.default_width
        height = self.surface.css_height or s.default_height
        left = s.padding_left / width
        bottom = s.padding_bottom / height
        ax = self.figure.add_axes(
            [left, bottom, 1 - left - s.padding_right / width, 1 - bottom - s.padding_top / height]
        )
        ax.set_autoscale_on(False)
        ax.set_xlim(0, self.config.x_max)
        ax.set_ylim(0, self.config.y_axis.max)
        ax.grid(False)
        for side in ("top", "right"):
            ax.spines[side].set_visible(False)

        xt = x_ticks(self.config.x_max, self.config.x_step)
        ax.set_xticks(xt)
        ax.set_xticklabels(
            [f"{v}{s.year_suffix}" if v == self.config.x_max else str(v) for v in xt]
        )
        yt = tick_values(self.config.y_axis)
        ax.set_yticks(yt)
        ax.set_yticklabels([str(int(v)) if float(v).is_integer() else str(v) for v in yt])
        ax.tick_params(labelsize=s.tick_font_size, colors=s.tick_color, pad=6)
        return ax

    @property
    def chart_area(self) -> Optional[Rect]:
        """Surface-relative plot rectangle, available once a frame was drawn."""

        return self._chart_area

    def layout_area(self) -> Rect:
        bbox = self.ax.get_window_extent()
        left, top = self.surface.display_to_surface(bbox.x0, bbox.y1)
        right, bottom = self.surface.display_to_surface(bbox.x1, bbox.y0)
        return Rect(left, top, right, bottom)

    def pixel_for(self, x: float, y: float) -> ChartPoint:
        if math.isnan(x):
            return ChartPoint(math.nan, math.nan)
        dx, dy = self.ax.transData.transform((x, y))
        return ChartPoint(*self.surface.display_to_surface(dx, dy))

    def pixel_for_value(self, value: float) -> float:
        return self.pixel_for(0, value).y

    def dataset_values(self, dataset_index: int) -> List[Tuple[float, float]]:
        if dataset_index >= len(self._current):
            return []
        return list(self._current[dataset_index])

    def dataset_points(self, dataset_index: int) -> List[ChartPoint]:
        return [self.pixel_for(x, y) for x, y in self.dataset_values(dataset_index)]

    def point_position(self, dataset_index: int, index: int) -> Optional[ChartPoint]:
        if self._chart_area is None or self.destroyed:
            return None
        values = self.dataset_values(dataset_index)
        if not 0 <= index < len(values):
            return None
        return self.pixel_for(*values[index])

    def band_outline(self, values: Sequence[Tuple[float, float]]) -> List[Tuple[float, float]]:
        """Smoothed top edge through ``values`` in data coordinates.

        The curve is built in display space so the tension looks the same on
        both axes; it passes through every data point.
        """

        tension = self.settings.line_tension
        if tension <= 0 or len(values) < 3:
            return [(float(x), float(y)) for x, y in values]
        display = self.ax.transData.transform(values)
        smoothed = smooth_outline(display, tension, self.settings.curve_samples)
        return [(float(x), float(y)) for x, y in self.ax.transData.inverted().transform(smoothed)]

    @property
    def point_count(self) -> int:
        return max((len(d.points) for d in self.config.datasets), default=0)

    # ---------- frames ----------
    def _frame_values(self, elapsed_ms: Optional[float]) -> List[List[Tuple[float, float]]]:
        anim = self.config.animation
        frame: List[List[Tuple[float, float]]] = []
        for dataset, tops in zip(self.config.datasets, self._tops):
            xs = [p.x for p in dataset.points]
            if anim is None or elapsed_ms is None:
                frame.append(list(zip(xs, tops)))
                continue
            values = []
            for i, (x, top) in enumerate(zip(xs, tops)):
                x_from = xs[i - 1] if i > 0 else x
                values.append(anim.interpolate(elapsed_ms, i, x_from, x, 0.0, top))
            frame.append(values)
        return frame

    def _clear_frame(self) -> None:
        for artist in self._fills + self.frame_artists:
            artist.remove()
        self._fills = []
        self.frame_artists = []

    def render_frame(self, elapsed_ms: Optional[float] = None) -> None:
        """Draw the chart at ``elapsed_ms`` into the animation (None = final)."""

        if self.destroyed:
            return
        self._clear_frame()
        self._current = self._frame_values(elapsed_ms)
        lower: Optional[List[Tuple[float, float]]] = None
        for dataset, values in zip(self.config.datasets, self._current):
            visible = [(x, y) for x, y in values if not math.isnan(x)]
            if not visible:
                lower = None
                continue
            upper = self.band_outline(visible)
            if lower is None:
                lower = [(visible[0][0], 0.0), (visible[-1][0], 0.0)]
            xs, ys = zip(*(upper + lower[::-1]))
            self._fills.extend(
                self.ax.fill(
                    xs,
                    ys,
                    facecolor=dataset.color or "none",
                    edgecolor=dataset.color or "none",
                    linewidth=0,
                    label=dataset.label,
                )
            )
            lower = upper

        for hook in self.hooks:
            hook(self)

        self.surface.canvas.draw()
        self.frames_drawn += 1
        self._chart_area = self.layout_area()
        if self.surface.container is not None:
            self.surface.container.mark_laid_out()

    async def animate(self, on_complete: Optional[CompletionCallback] = None, sleep: Optional[Sleep] = None) -> bool:
        """Run the entrance animation, then call ``on_complete``.

        Time advances one frame interval per drawn frame. Returns False when
        the chart was destroyed before the animation finished.
        """

        sleep = sleep or asyncio.sleep
        anim = self.config.animation
        total = anim.total_ms(self.point_count) if anim is not None else 0.0
        step_ms = self.settings.frame_interval * 1000.0
        elapsed = 0.0
        while not self.destroyed:
            if anim is None:
                self.render_frame(None)
                break
            self.render_frame(min(elapsed, total))
            if elapsed >= total:
                break
            await sleep(self.settings.frame_interval)
            elapsed += step_ms
        if self.destroyed:
            logger.debug("Animation stopped: chart destroyed")
            return False
        self.complete = True
        logger.debug("Animation complete after %d frame(s)", self.frames_drawn)
        if on_complete is not None:
            on_complete(self)
        return True

    def destroy(self) -> None:
        if self.destroyed:
            return
        self._clear_frame()
        self.destroyed = True
        self._chart_area = None
        self.ax.remove()


__all__ = [
    "ChartConfig",
    "ChartContext",
    "CompletionCallback",
    "Dataset",
    "MatplotlibChart",
    "PostDrawHook",
    "x_ticks",
]
