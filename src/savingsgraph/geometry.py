"""Connector segment math between a callout anchor and a chart point."""
from __future__ import annotations

import math
from typing import Optional, Tuple

from .model import ChartPoint, ConnectorGeometry, Rect


def surface_offset(surface_rect: Rect, container_rect: Rect) -> Tuple[float, float]:
    return surface_rect.left - container_rect.left, surface_rect.top - container_rect.top


def connector_geometry(
    anchor_rect: Rect,
    container_rect: Rect,
    surface_rect: Rect,
    point: ChartPoint,
) -> Optional[ConnectorGeometry]:
    """Segment from the anchor's bottom-right corner to ``point``.

    All positions are taken relative to the container's top-left corner.
    Returns None for a degenerate or non-finite result, which happens when
    the anchor has not reached its final size yet.
    """

    offset_x, offset_y = surface_offset(surface_rect, container_rect)
    target_x = offset_x + point.x
    target_y = offset_y + point.y
    corner_x, corner_y = anchor_rect.bottom_right
    origin_x = corner_x - container_rect.left
    origin_y = corner_y - container_rect.top

    dx = target_x - origin_x
    dy = target_y - origin_y
    length = math.hypot(dx, dy)
    angle = math.degrees(math.atan2(dy, dx))
    if not (math.isfinite(length) and math.isfinite(angle)) or length <= 0:
        return None
    return ConnectorGeometry(length=length, angle_degrees=angle)


def segment_end(origin: Tuple[float, float], geometry: ConnectorGeometry) -> Tuple[float, float]:
    """Far end of a segment drawn from ``origin`` (y grows downward)."""

    theta = math.radians(geometry.angle_degrees)
    return (
        origin[0] + geometry.length * math.cos(theta),
        origin[1] + geometry.length * math.sin(theta),
    )


__all__ = ["connector_geometry", "segment_end", "surface_offset"]
