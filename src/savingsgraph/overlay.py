"""Callouts and connector lines layered over the chart surface."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from .geometry import segment_end
from .model import ConnectorGeometry, Rect

logger = logging.getLogger(__name__)

LINE_LENGTH = "--line-length"
LINE_ANGLE = "--line-angle"
LABEL_X = "--label-x"
LABEL_Y = "--label-y"

Point = Tuple[float, float]
LineDrawer = Callable[[str, Point, Point], Any]


class StyleDeclaration(dict):
    """String-valued style properties, like an element's inline style."""

    def set_property(self, name: str, value: str) -> None:
        self[name] = value

    def remove_property(self, name: str) -> None:
        self.pop(name, None)

    def get_property(self, name: str) -> str:
        return self.get(name, "")


class CalloutAnchor:
    """The amount element of a callout; connectors start at its corner."""

    def __init__(self, measure: Optional[Callable[[], Optional[Rect]]] = None) -> None:
        self.style = StyleDeclaration()
        self._measure = measure
        self.laid_out = False

    def bind(self, measure: Callable[[], Optional[Rect]]) -> None:
        self._measure = measure

    def bounding_rect(self) -> Optional[Rect]:
        if not self.laid_out or self._measure is None:
            return None
        return self._measure()

    def set_property(self, name: str, value: str) -> None:
        self.style.set_property(name, value)

    def remove_property(self, name: str) -> None:
        self.style.remove_property(name)


@dataclass
class ValueCallout:
    kind: str
    description: str
    amount_text: str
    anchor: CalloutAnchor = field(default_factory=CalloutAnchor)
    style: StyleDeclaration = field(default_factory=StyleDeclaration)
    artists: List[Any] = field(default_factory=list)


@dataclass
class ConnectorLine:
    kind: str
    geometry: ConnectorGeometry
    origin: Point
    end: Point
    artist: Any = None


def _remove_artist(artist: Any) -> None:
    try:
        artist.remove()
    except (ValueError, NotImplementedError):
        # Already detached from its figure.
        pass


class OverlayContainer:
    """Holds the overlay elements placed above one drawing surface."""

    def __init__(self, rect: Rect) -> None:
        self.rect = rect
        self.attached = True
        self.line_drawer: Optional[LineDrawer] = None
        self._callouts: Dict[str, ValueCallout] = {}
        self._lines: List[ConnectorLine] = []

    @property
    def callouts(self) -> List[ValueCallout]:
        return list(self._callouts.values())

    @property
    def lines(self) -> List[ConnectorLine]:
        return list(self._lines)

    def callout(self, kind: str) -> Optional[ValueCallout]:
        return self._callouts.get(kind)

    def anchor(self, kind: str) -> Optional[CalloutAnchor]:
        callout = self._callouts.get(kind)
        return callout.anchor if callout else None

    def add_callout(self, callout: ValueCallout) -> None:
        previous = self._callouts.pop(callout.kind, None)
        if previous is not None:
            self._discard_callout(previous)
        self._callouts[callout.kind] = callout

    def mark_laid_out(self) -> None:
        for callout in self._callouts.values():
            callout.anchor.laid_out = True

    def _discard_callout(self, callout: ValueCallout) -> None:
        callout.anchor.remove_property(LINE_LENGTH)
        callout.anchor.remove_property(LINE_ANGLE)
        callout.anchor.laid_out = False
        for artist in callout.artists:
            _remove_artist(artist)
        callout.artists.clear()

    def remove_callouts(self) -> None:
        for callout in self._callouts.values():
            self._discard_callout(callout)
        self._callouts.clear()

    def remove_lines(self) -> None:
        for line in self._lines:
            if line.artist is not None:
                _remove_artist(line.artist)
        self._lines.clear()

    def remove_overlays(self) -> None:
        self.remove_callouts()
        self.remove_lines()

    def apply_connector(self, kind: str, geometry: ConnectorGeometry) -> bool:
        """Publish geometry on the callout's anchor and draw its line."""

        anchor = self.anchor(kind)
        if anchor is None:
            return False
        rect = anchor.bounding_rect()
        anchor.set_property(LINE_LENGTH, f"{geometry.length}px")
        anchor.set_property(LINE_ANGLE, f"{geometry.angle_degrees}deg")
        for stale in [line for line in self._lines if line.kind == kind]:
            if stale.artist is not None:
                _remove_artist(stale.artist)
            self._lines.remove(stale)
        if rect is None:
            return True
        corner_x, corner_y = rect.bottom_right
        origin = (corner_x - self.rect.left, corner_y - self.rect.top)
        line = ConnectorLine(kind, geometry, origin, segment_end(origin, geometry))
        if self.line_drawer is not None:
            line.artist = self.line_drawer(kind, line.origin, line.end)
        self._lines.append(line)
        logger.debug(
            "Connector '%s': length=%.1fpx angle=%.1fdeg",
            kind,
            geometry.length,
            geometry.angle_degrees,
        )
        return True

    def detach(self) -> None:
        self.remove_overlays()
        self.attached = False


__all__ = [
    "CalloutAnchor",
    "ConnectorLine",
    "LABEL_X",
    "LABEL_Y",
    "LINE_ANGLE",
    "LINE_LENGTH",
    "OverlayContainer",
    "StyleDeclaration",
    "ValueCallout",
]
