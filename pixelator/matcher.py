# pixelator/matcher.py
from __future__ import annotations

"""
Nearest palette colour lookup with a per-instance result cache.

A matcher is built once per quantisation stage: the palette is converted into
the metric's colour space up front, and results are cached by the rounded
pixel packed into a 24-bit key. The cache lives and dies with the matcher.
"""

from dataclasses import dataclass
from typing import Dict, Sequence

import numpy as np
from numpy.typing import NDArray

from .colour_distance import (
    ColourMetric,
    distance_function,
    to_metric_space,
)
from .core_types import RGBTuple, U8RGB, palette_to_array


@dataclass(frozen=True)
class MatchResult:
    """Matched colour and its distance (0 when detail was preserved)."""

    rgb: RGBTuple
    distance: float


def pack_rgb_key(r: int, g: int, b: int) -> int:
    """Pack a 0..255 triple into a 24-bit integer."""
    return (r << 16) | (g << 8) | b


def _round_channel(value: float) -> int:
    # Half-up rounding, then clamp.
    v = int(np.floor(float(value) + 0.5))
    return 0 if v < 0 else 255 if v > 255 else v


class NearestColourMatcher:
    """
    Closest palette entry under a chosen metric.

    Args:
      palette         : ordered palette, at least one colour
      metric          : ColourMetric (or its string name)
      preserve_detail : threshold in metric units; when > 0 and the best
                        distance is within it, the rounded source pixel is
                        returned instead of the palette colour
    """

    def __init__(
        self,
        palette: Sequence[RGBTuple],
        metric: ColourMetric = ColourMetric.OKLAB,
        preserve_detail: float = 0.0,
    ) -> None:
        if len(palette) == 0:
            raise ValueError("cannot match against an empty palette")
        if preserve_detail < 0:
            raise ValueError("preserve_detail threshold must be >= 0")
        self.metric = ColourMetric.parse(metric)
        self.preserve_detail = float(preserve_detail)
        self.palette_rgb: U8RGB = palette_to_array(palette)
        self._palette_tuples = [tuple(int(c) for c in row) for row in self.palette_rgb]
        self._palette_space = to_metric_space(self.palette_rgb, self.metric)
        self._distance = distance_function(self.metric)
        self._cache: Dict[int, MatchResult] = {}
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return int(self.palette_rgb.shape[0])

    @property
    def cache_size(self) -> int:
        return len(self._cache)

    def match(self, r: float, g: float, b: float) -> MatchResult:
        """Match one pixel; float channels are rounded and clamped first."""
        ri, gi, bi = _round_channel(r), _round_channel(g), _round_channel(b)
        key = pack_rgb_key(ri, gi, bi)
        cached = self._cache.get(key)
        if cached is not None:
            self.hits += 1
            return cached
        self.misses += 1

        pixel = to_metric_space((ri, gi, bi), self.metric)
        dists = self._distance(pixel, self._palette_space)
        # argmin keeps the first minimum, like a strict '<' scan
        best = int(np.argmin(dists))
        best_dist = float(dists[best])

        if self.preserve_detail > 0 and best_dist <= self.preserve_detail:
            result = MatchResult((ri, gi, bi), 0.0)
        else:
            result = MatchResult(self._palette_tuples[best], best_dist)  # type: ignore[arg-type]

        self._cache[key] = result
        return result

    def match_many(self, rgb: NDArray[np.floating]) -> NDArray[np.uint8]:
        """
        Match rows of an (N,3) array. Each distinct rounded colour goes
        through match() once, so the cache is shared with per-pixel calls.
        """
        flat = np.asarray(rgb, dtype=np.float64).reshape(-1, 3)
        if flat.shape[0] == 0:
            return np.zeros((0, 3), dtype=np.uint8)
        rounded = np.clip(np.floor(flat + 0.5), 0, 255).astype(np.int64)
        keys = (rounded[:, 0] << 16) | (rounded[:, 1] << 8) | rounded[:, 2]
        uniq, inverse = np.unique(keys, return_inverse=True)

        mapped = np.empty((uniq.shape[0], 3), dtype=np.uint8)
        for i, key in enumerate(uniq.tolist()):
            res = self.match(key >> 16, (key >> 8) & 0xFF, key & 0xFF)
            mapped[i] = res.rgb
        return mapped[inverse.reshape(-1)]


__all__ = ["MatchResult", "NearestColourMatcher", "pack_rgb_key"]
