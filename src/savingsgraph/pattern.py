"""Shared asynchronous cache for the decorative principal-band pattern."""
from __future__ import annotations

import asyncio
import enum
import logging
import os
from dataclasses import dataclass
from typing import Awaitable, Callable, Iterable, Optional, Set

import numpy as np
from matplotlib import image as mimage

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 3.0


@dataclass(frozen=True, eq=False)
class ImagePattern:
    """An RGBA tile that can be repeated over an arbitrary pixel area."""

    image: np.ndarray
    source: str = ""

    @property
    def tile_size(self):
        return self.image.shape[1], self.image.shape[0]

    def tiled(self, width: int, height: int) -> np.ndarray:
        tile_w, tile_h = self.tile_size
        reps_y = -(-max(height, 1) // tile_h)
        reps_x = -(-max(width, 1) // tile_w)
        reps = (reps_y, reps_x) + (1,) * (self.image.ndim - 2)
        return np.tile(self.image, reps)[:height, :width]


PatternLoader = Callable[[str], Awaitable[ImagePattern]]


async def load_image_pattern(location: str) -> ImagePattern:
    """Read an image from disk off the event loop."""

    image = await asyncio.to_thread(mimage.imread, location)
    if image.ndim < 2 or image.size == 0:
        raise ValueError(f"Pattern image '{location}' is empty")
    return ImagePattern(image=np.asarray(image), source=location)


class LoadState(enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    RESOLVED = "resolved"


class PatternCache:
    """Loads the pattern at most once and dedups concurrent requests.

    While a load is in flight every other caller awaits the same future. A
    successful handle is kept for the life of the cache; failed locations are
    remembered and never retried.
    """

    def __init__(self, loader: Optional[PatternLoader] = None, timeout: float = DEFAULT_TIMEOUT) -> None:
        self._loader = loader or load_image_pattern
        self._timeout = timeout
        self._handle: Optional[ImagePattern] = None
        self._inflight: Optional[asyncio.Future] = None
        self._failed: Set[str] = set()
        self._state = LoadState.IDLE
        self.load_count = 0

    @property
    def handle(self) -> Optional[ImagePattern]:
        return self._handle

    @property
    def state(self) -> LoadState:
        return self._state

    def has_failed(self, location: str) -> bool:
        return location in self._failed

    async def load(self, location: str) -> Optional[ImagePattern]:
        if self._handle is not None:
            return self._handle
        if self._inflight is not None:
            return await asyncio.shield(self._inflight)
        if location in self._failed:
            return None

        loop = asyncio.get_running_loop()
        self._inflight = loop.create_future()
        self._state = LoadState.LOADING
        self.load_count += 1
        result: Optional[ImagePattern] = None
        try:
            result = await asyncio.wait_for(self._loader(location), self._timeout)
        except asyncio.TimeoutError:
            logger.warning("Pattern '%s' did not load within %.1fs", location, self._timeout)
            self._failed.add(location)
        except (OSError, ValueError) as exc:
            logger.warning("Pattern '%s' failed to load: %s", location, exc)
            self._failed.add(location)
        except Exception:
            # Any other loader error also leaves the chart without a pattern.
            logger.warning("Pattern '%s' failed to load", location, exc_info=True)
            self._failed.add(location)
        else:
            logger.debug("Pattern loaded from '%s'", location)
            self._handle = result
        finally:
            future, self._inflight = self._inflight, None
            self._state = LoadState.RESOLVED
            if not future.done():
                future.set_result(result)
        return result

    async def acquire(self, candidates: Iterable[str]) -> Optional[ImagePattern]:
        """Try each candidate location in order until one loads."""

        for location in candidates:
            handle = await self.load(location)
            if handle is not None:
                return handle
        return None


def candidate_paths(candidates: Iterable[str], asset_root: Optional[str] = None) -> list:
    """Resolve configured locations, trying ``asset_root`` variants first."""

    resolved = []
    for location in candidates:
        if asset_root and not os.path.isabs(location):
            resolved.append(os.path.join(asset_root, os.path.normpath(location)))
        resolved.append(location)
    seen = set()
    return [p for p in resolved if not (p in seen or seen.add(p))]


_shared: Optional[PatternCache] = None


def shared_cache(timeout: float = DEFAULT_TIMEOUT) -> PatternCache:
    """The process-wide cache used when no cache is injected.

    ``timeout`` only applies to the call that creates the cache.
    """

    global _shared
    if _shared is None:
        _shared = PatternCache(timeout=timeout)
    return _shared


__all__ = [
    "ImagePattern",
    "LoadState",
    "PatternCache",
    "PatternLoader",
    "candidate_paths",
    "load_image_pattern",
    "shared_cache",
]
