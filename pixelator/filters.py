# pixelator/filters.py
from __future__ import annotations

"""
Preprocessing filters that flatten source detail before resampling.

- median    : per-channel median over a clamped square window
- bilateral : spatial Gaussian x colour-similarity weights, out-of-bounds skipped
- kuwahara  : mean of the lowest-variance quadrant ("painterly" flattening)

Strength is 0..100 and maps to a radius per filter. Alpha passes through.
"""

from enum import Enum

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view
from numpy.typing import NDArray

from .core_types import U8RGBA, assert_u8_rgba

# Element budget for one median window block (rows x width x window area).
_MEDIAN_BLOCK_ELEMS = 4_000_000


class PreprocessMethod(str, Enum):
    NONE = "none"
    MEDIAN = "median"
    BILATERAL = "bilateral"
    KUWAHARA = "kuwahara"

    @classmethod
    def parse(cls, value: "str | PreprocessMethod | None") -> "PreprocessMethod":
        if value is None or value == "":
            return cls.NONE
        if isinstance(value, PreprocessMethod):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            names = ", ".join(m.value for m in cls)
            raise ValueError(
                f"unknown preprocessing method {value!r} (expected one of: {names})"
            ) from None


# Strength -> radius


def median_radius(strength: float) -> int:
    return max(1, int(np.floor(float(strength) / 100.0 * 10.0)))


def bilateral_radius(strength: float) -> int:
    return max(2, int(np.floor(float(strength) / 100.0 * 12.0)))


def kuwahara_radius(strength: float) -> int:
    return max(2, int(np.floor(float(strength) / 100.0 * 14.0)))


def _to_u8(values: np.ndarray) -> NDArray[np.uint8]:
    return np.rint(np.clip(values, 0.0, 255.0)).astype(np.uint8)


# Median


def median_filter(rgba: U8RGBA, strength: float) -> U8RGBA:
    """Per-channel middle value of the (2r+1)^2 window; edges clamp."""
    src = assert_u8_rgba(rgba)
    height, width = src.shape[:2]
    radius = median_radius(strength)
    size = 2 * radius + 1
    mid = (size * size) // 2
    out = src.copy()

    padded = np.pad(src[..., :3], ((radius, radius), (radius, radius), (0, 0)), mode="edge")
    rows_per_block = max(1, _MEDIAN_BLOCK_ELEMS // max(1, width * size * size))
    for y0 in range(0, height, rows_per_block):
        y1 = min(height, y0 + rows_per_block)
        band = padded[y0 : y1 + 2 * radius]
        for c in range(3):
            windows = sliding_window_view(band[..., c], (size, size))
            flat = windows.reshape(y1 - y0, width, size * size)
            out[y0:y1, :, c] = np.partition(flat, mid, axis=-1)[..., mid]
    return out


# Bilateral


def bilateral_filter(rgba: U8RGBA, strength: float) -> U8RGBA:
    """
    Weighted mean over a square window. Weight = spatial Gaussian per offset
    times a colour term looked up by the summed absolute RGB difference.
    Neighbours outside the image are skipped.
    """
    src = assert_u8_rgba(rgba)
    height, width = src.shape[:2]
    radius = bilateral_radius(strength)
    sigma_spatial = radius / 2.0
    sigma_colour = 30.0 + float(strength) * 1.5

    offsets = np.arange(-radius, radius + 1, dtype=np.float64)
    spatial = np.exp(-(offsets * offsets) / (2.0 * sigma_spatial * sigma_spatial))
    diffs = np.arange(256 * 3, dtype=np.float64)
    colour_lut = np.exp(diffs * diffs * (-1.0 / (2.0 * sigma_colour * sigma_colour)))

    rgb = src[..., :3].astype(np.int32)
    pad = ((radius, radius), (radius, radius), (0, 0))
    padded = np.pad(rgb, pad, mode="constant")
    inside = np.pad(
        np.ones((height, width), dtype=bool), pad[:2], mode="constant", constant_values=False
    )

    acc = np.zeros((height, width, 3), dtype=np.float64)
    weight_sum = np.zeros((height, width), dtype=np.float64)
    for iy, dy in enumerate(range(-radius, radius + 1)):
        ys = slice(radius + dy, radius + dy + height)
        for ix, dx in enumerate(range(-radius, radius + 1)):
            xs = slice(radius + dx, radius + dx + width)
            neighbour = padded[ys, xs]
            dist = np.abs(neighbour - rgb).sum(axis=-1)
            w = spatial[iy] * spatial[ix] * colour_lut[dist] * inside[ys, xs]
            acc += neighbour * w[..., None]
            weight_sum += w

    out = src.copy()
    out[..., :3] = _to_u8(acc / weight_sum[..., None])
    return out


# Kuwahara


def _summed_area(values: np.ndarray) -> NDArray[np.int64]:
    """Zero-padded summed-area table: S[y, x] = sum(values[:y, :x])."""
    table = np.zeros((values.shape[0] + 1, values.shape[1] + 1), dtype=np.int64)
    table[1:, 1:] = values.astype(np.int64).cumsum(axis=0).cumsum(axis=1)
    return table


def _box_sum(table: np.ndarray, y0, y1, x0, x1) -> NDArray[np.int64]:
    """Sum over inclusive [y0..y1] x [x0..x1] per pixel."""
    return table[y1 + 1, x1 + 1] - table[y0, x1 + 1] - table[y1 + 1, x0] + table[y0, x0]


def kuwahara_filter(rgba: U8RGBA, strength: float) -> U8RGBA:
    """
    Four inclusive quadrants (TL, TR, BL, BR) of side r+1 around each pixel,
    clipped at the border; output the mean of the lowest-variance quadrant.
    Fully transparent pixels are left untouched.
    """
    src = assert_u8_rgba(rgba)
    height, width = src.shape[:2]
    radius = kuwahara_radius(strength)

    sums = [_summed_area(src[..., c]) for c in range(3)]
    sq = _summed_area((src[..., :3].astype(np.int64) ** 2).sum(axis=-1))

    ys = np.arange(height, dtype=np.int64)[:, None]
    xs = np.arange(width, dtype=np.int64)[None, :]
    top, bottom = np.maximum(ys - radius, 0), np.minimum(ys + radius, height - 1)
    left, right = np.maximum(xs - radius, 0), np.minimum(xs + radius, width - 1)
    quadrants = (
        (top, ys, left, xs),  # TL
        (top, ys, xs, right),  # TR
        (ys, bottom, left, xs),  # BL
        (ys, bottom, xs, right),  # BR
    )

    means = np.empty((4, height, width, 3), dtype=np.float64)
    variances = np.empty((4, height, width), dtype=np.float64)
    for q, (y0, y1, x0, x1) in enumerate(quadrants):
        count = ((y1 - y0 + 1) * (x1 - x0 + 1)).astype(np.float64)
        for c in range(3):
            means[q, ..., c] = _box_sum(sums[c], y0, y1, x0, x1) / count
        variances[q] = _box_sum(sq, y0, y1, x0, x1) / count - (means[q] ** 2).sum(axis=-1)

    best = np.argmin(variances, axis=0)  # first minimum keeps TL, TR, BL, BR order
    chosen = np.take_along_axis(means, best[None, ..., None], axis=0)[0]

    out = src.copy()
    visible = src[..., 3] != 0
    out[..., :3][visible] = _to_u8(chosen[visible])
    return out


def preprocess(rgba: U8RGBA, method: "PreprocessMethod | str | None", strength: float) -> U8RGBA:
    """Dispatch to the requested filter; 'none' returns the input unchanged."""
    method = PreprocessMethod.parse(method)
    if method is PreprocessMethod.MEDIAN:
        return median_filter(rgba, strength)
    if method is PreprocessMethod.BILATERAL:
        return bilateral_filter(rgba, strength)
    if method is PreprocessMethod.KUWAHARA:
        return kuwahara_filter(rgba, strength)
    return rgba


__all__ = [
    "PreprocessMethod",
    "median_radius",
    "bilateral_radius",
    "kuwahara_radius",
    "median_filter",
    "bilateral_filter",
    "kuwahara_filter",
    "preprocess",
]
