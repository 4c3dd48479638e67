"""Post-draw hooks that extend each rendered chart frame.

The renderer calls these in a fixed order after the stacked bands of a frame
are built and before the frame is rasterized:

1. ``pattern_fill``  paints the principal band with the decorative pattern
2. ``axis_unit_label``  captions the y-axis with its display unit
3. ``value_callouts``  (re)creates the two final-year callouts
"""
from __future__ import annotations

import logging
import math
from typing import List, Optional

from matplotlib.patches import Polygon

from .model import Rect, YearlyPoint
from .overlay import LABEL_X, LABEL_Y, ValueCallout
from .renderer import MatplotlibChart, PostDrawHook
from .reporting import format_amount, format_rate

logger = logging.getLogger(__name__)

PRINCIPAL_DATASET = 0
BASE_DATASET = 1
SELECTED_DATASET = 2


def pattern_fill(chart: MatplotlibChart) -> None:
    pattern = chart.context.pattern
    values = chart.dataset_values(PRINCIPAL_DATASET)
    visible = [(x, y) for x, y in values if not math.isnan(x)]
    if pattern is None or not visible:
        return

    ax = chart.ax
    outline = [(visible[0][0], 0.0)] + chart.band_outline(visible) + [(visible[-1][0], 0.0)]
    clip = Polygon(outline, closed=True, transform=ax.transData, facecolor="none", edgecolor="none")
    width = max(int(round(ax.bbox.width)), 1)
    height = max(int(round(ax.bbox.height)), 1)
    image = ax.imshow(
        pattern.tiled(width, height),
        extent=(0, chart.config.x_max, 0, chart.config.y_axis.max),
        aspect="auto",
        interpolation="nearest",
        zorder=1.5,
    )
    image.set_clip_path(clip)
    chart.frame_artists.append(image)


def axis_unit_label(chart: MatplotlibChart) -> None:
    settings = chart.settings
    area = chart.layout_area()
    top_tick_y = chart.pixel_for_value(chart.config.y_axis.max)
    fx = (area.left - 10) / chart.surface.css_width
    fy = 1.0 - (top_tick_y - 15) / chart.surface.css_height
    text = chart.figure.text(
        fx,
        fy,
        settings.axis_unit_label,
        ha="right",
        va="bottom",
        fontsize=settings.tick_font_size + 2,
        color=settings.tick_color,
    )
    chart.frame_artists.append(text)


def _final_point(series, horizon_years: int) -> Optional[YearlyPoint]:
    for point in reversed(series):
        if point.year == horizon_years:
            return point
    return None


def _place_callout(chart: MatplotlibChart, callout: ValueCallout, x: float, y_percent: float) -> None:
    surface = chart.surface
    settings = chart.settings
    container = surface.container
    height = container.rect.height if container.rect.height > 0 else surface.css_height
    y = height * y_percent / 100.0
    callout.style.set_property(LABEL_X, f"{x}px")
    callout.style.set_property(LABEL_Y, f"{y_percent}%")

    line_height = settings.callout_font_size * 1.6
    fx, fy = surface.container_to_figure(x, y)
    description = chart.figure.text(
        fx, fy, callout.description, ha="left", va="top",
        fontsize=settings.callout_font_size * 0.85, color=settings.tick_color,
    )
    amount_x, amount_y = surface.container_to_figure(x, y + line_height)
    amount = chart.figure.text(
        amount_x, amount_y, callout.amount_text, ha="left", va="top",
        fontsize=settings.callout_font_size, fontweight="bold",
    )
    callout.artists.extend([description, amount])

    def measure() -> Rect:
        renderer = surface.canvas.get_renderer()
        return surface.display_bbox_to_viewport(amount.get_window_extent(renderer=renderer))

    callout.anchor.bind(measure)


def value_callouts(chart: MatplotlibChart) -> None:
    context = chart.context
    container = chart.surface.container
    if container is None or not context.series or not context.horizon_years:
        return

    base_values = chart.dataset_values(BASE_DATASET)
    selected_values = chart.dataset_values(SELECTED_DATASET)
    if not base_values or not selected_values:
        return
    index = min(context.horizon_years, len(base_values) - 1, len(selected_values) - 1)
    if index < 0:
        return
    final = _final_point(context.series, context.horizon_years)
    if final is None:
        logger.debug("No point for year %s; callouts skipped", context.horizon_years)
        return

    base_point = chart.pixel_for(*base_values[index])
    selected_point = chart.pixel_for(*selected_values[index])
    graph_x = base_point.x
    if math.isnan(graph_x):
        graph_x = chart.pixel_for(final.year, 0).x
    if any(math.isnan(v) for v in (base_point.y, selected_point.y, graph_x)):
        return

    settings = chart.settings
    offset_x, _ = chart.surface.offset
    area = chart.layout_area()
    label_x = offset_x + area.left + settings.callout_margin

    unit = settings.currency_unit
    base = ValueCallout(
        kind="base",
        description=settings.callout_description.format(rate=format_rate(settings.base_rate_percent)),
        amount_text=f"{format_amount(final.base_total)} {unit}",
    )
    container.add_callout(base)
    _place_callout(chart, base, label_x, settings.base_callout_y_percent)

    selected = ValueCallout(
        kind="selected",
        description=settings.callout_description.format(rate=format_rate(context.interest_rate)),
        amount_text=f"{format_amount(final.selected_total)} {unit}",
    )
    container.add_callout(selected)
    _place_callout(
        chart, selected, label_x * settings.selected_callout_x_factor, settings.selected_callout_y_percent
    )


def default_hooks() -> List[PostDrawHook]:
    return [pattern_fill, axis_unit_label, value_callouts]


__all__ = [
    "axis_unit_label",
    "default_hooks",
    "pattern_fill",
    "value_callouts",
]
