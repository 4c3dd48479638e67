"""Headless matplotlib drawing surface with an overlay container."""
from __future__ import annotations

import logging
from typing import Optional, Tuple

from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure
from matplotlib.lines import Line2D

from .config import DEFAULT_SETTINGS, ChartSettings
from .model import Rect
from .overlay import OverlayContainer

logger = logging.getLogger(__name__)


class DrawingSurface:
    """A figure sized like a high-density canvas element.

    ``container`` is the overlay host the figure sits in; ``offset`` is the
    figure's top-left corner relative to the container in CSS pixels. Layout
    positions handed out by the surface are viewport coordinates (y grows
    downward) in CSS pixels.
    """

    def __init__(
        self,
        container: Optional[OverlayContainer],
        device_pixel_ratio: float = 1.0,
        offset: Tuple[float, float] = (0.0, 0.0),
        settings: ChartSettings = DEFAULT_SETTINGS,
    ) -> None:
        self.container = container
        self.device_pixel_ratio = device_pixel_ratio or 1.0
        self.offset = offset
        self.settings = settings
        self.figure = Figure()
        self.canvas = FigureCanvasAgg(self.figure)
        self.pixel_width = 0
        self.pixel_height = 0
        self.css_width = 0.0
        self.css_height = 0.0
        # Height is left to the surrounding layout, only the width is pinned.
        self.style_width: Optional[str] = None
        if container is not None:
            container.line_drawer = self.draw_segment

    def size_to_container(self) -> None:
        box = self.container.rect if self.container is not None else None
        width = box.width if box is not None and box.width > 0 else self.settings.default_width
        height = box.height if box is not None and box.height > 0 else self.settings.default_height
        dpr = self.device_pixel_ratio
        self.css_width = width
        self.css_height = height
        self.pixel_width = int(round(width * dpr))
        self.pixel_height = int(round(height * dpr))
        self.style_width = f"{width}px"

        dpi = self.settings.base_dpi * dpr
        self.figure.set_dpi(dpi)
        self.figure.set_size_inches(self.pixel_width / dpi, self.pixel_height / dpi)
        logger.debug(
            "Surface sized to %sx%s css px (%dx%d bitmap, dpr=%s)",
            width,
            height,
            self.pixel_width,
            self.pixel_height,
            dpr,
        )

    def bounding_rect(self) -> Rect:
        left, top = self.offset
        if self.container is not None:
            left += self.container.rect.left
            top += self.container.rect.top
        return Rect.from_size(left, top, self.css_width, self.css_height)

    # ---------- coordinate conversion ----------
    def display_to_surface(self, x: float, y: float) -> Tuple[float, float]:
        """Figure display pixels (origin bottom-left) to surface CSS pixels."""

        dpr = self.device_pixel_ratio
        return x / dpr, (self.pixel_height - y) / dpr

    def display_bbox_to_viewport(self, bbox) -> Rect:
        left, top = self.display_to_surface(bbox.x0, bbox.y1)
        right, bottom = self.display_to_surface(bbox.x1, bbox.y0)
        return Rect(left, top, right, bottom).offset(*self.bounding_rect().top_left)

    def container_to_figure(self, x: float, y: float) -> Tuple[float, float]:
        """Container-relative CSS pixels to figure fraction coordinates."""

        sx = x - self.offset[0]
        sy = y - self.offset[1]
        return sx / self.css_width, 1.0 - sy / self.css_height

    # ---------- drawing ----------
    def draw_segment(self, kind: str, start, end) -> Line2D:
        x0, y0 = self.container_to_figure(*start)
        x1, y1 = self.container_to_figure(*end)
        line = Line2D(
            [x0, x1],
            [y0, y1],
            transform=self.figure.transFigure,
            color=self.settings.connector_color,
            linewidth=1.0,
            gid=f"connector-{kind}",
        )
        self.figure.add_artist(line)
        self.canvas.draw_idle()
        return line

    def save(self, path: str, **kwargs) -> None:
        self.figure.savefig(path, dpi=self.figure.dpi, **kwargs)


__all__ = ["DrawingSurface"]
