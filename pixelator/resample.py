# pixelator/resample.py
from __future__ import annotations

"""
RGBA resizing: nearest, bilinear (area averaging when shrinking), Lanczos-3.

All functions take an (H, W, 4) uint8 array and return a new
(height, width, 4) uint8 array. Every channel, alpha included, is resampled.

Area averaging and Lanczos are separable: each axis is reduced to a short tap
list per destination index (source indices + weights), applied one axis at a
time on a float64 working copy.
"""

from enum import Enum
from typing import Tuple

import numpy as np
from numpy.typing import NDArray

from .core_types import U8RGBA, assert_u8_rgba

LANCZOS_A = 3

Taps = Tuple[NDArray[np.int64], NDArray[np.float64]]  # (dst, ntaps) each


class ResampleMethod(str, Enum):
    NEAREST = "nearest"
    BILINEAR = "bilinear"
    LANCZOS = "lanczos"

    @classmethod
    def parse(cls, value: "str | ResampleMethod | None") -> "ResampleMethod":
        if value is None or value == "":
            return cls.NEAREST
        if isinstance(value, ResampleMethod):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            names = ", ".join(m.value for m in cls)
            raise ValueError(
                f"unknown resampling method {value!r} (expected one of: {names})"
            ) from None


def _check_target(width: int, height: int) -> None:
    if int(width) <= 0 or int(height) <= 0:
        raise ValueError(f"target size must be positive, got {width}x{height}")


def _to_u8(values: np.ndarray) -> U8RGBA:
    """Clamp to [0,255] and round half-to-even, as a clamped byte store does."""
    return np.rint(np.clip(values, 0.0, 255.0)).astype(np.uint8)


# Tap construction


def _area_taps(src_len: int, dst_len: int) -> Taps:
    """Box taps: weight = overlap of [d*r, d*r + r) with each source cell."""
    ratio = src_len / dst_len
    start = np.arange(dst_len, dtype=np.float64) * ratio
    end = start + ratio
    first = np.floor(start).astype(np.int64)
    last = np.minimum(np.ceil(end).astype(np.int64), src_len)  # exclusive
    ntaps = int(np.max(last - first))

    idx = first[:, None] + np.arange(ntaps, dtype=np.int64)[None, :]
    weights = np.minimum(idx + 1, end[:, None]) - np.maximum(idx, start[:, None])
    weights = np.where((idx < last[:, None]) & (weights > 0.0), weights, 0.0)
    return np.clip(idx, 0, src_len - 1), weights


def _sinc(x: np.ndarray) -> np.ndarray:
    return np.sinc(x)  # sin(pi x) / (pi x), 1 at 0


def lanczos_kernel(x: np.ndarray, a: int = LANCZOS_A) -> NDArray[np.float64]:
    """Windowed sinc; zero outside (-a, a)."""
    x = np.asarray(x, dtype=np.float64)
    return np.where(np.abs(x) < a, _sinc(x) * _sinc(x / a), 0.0)


def _lanczos_taps(src_len: int, dst_len: int, a: int = LANCZOS_A) -> Taps:
    """Lanczos taps; support widens by the ratio when shrinking."""
    ratio = src_len / dst_len
    scale = ratio if ratio > 1.0 else 1.0
    radius = a * scale

    centre = (np.arange(dst_len, dtype=np.float64) + 0.5) * ratio - 0.5
    first = np.floor(centre - radius + 1.0).astype(np.int64)
    last = np.floor(centre + radius).astype(np.int64)  # inclusive
    ntaps = int(np.max(last - first)) + 1

    idx = first[:, None] + np.arange(ntaps, dtype=np.int64)[None, :]
    valid = (idx <= last[:, None]) & (idx >= 0) & (idx < src_len)
    weights = np.where(valid, lanczos_kernel((centre[:, None] - idx) / scale, a), 0.0)

    total = weights.sum(axis=1, keepdims=True)
    weights = np.divide(weights, total, out=np.zeros_like(weights), where=total != 0.0)
    return np.clip(idx, 0, src_len - 1), weights


def _normalise(weights: NDArray[np.float64]) -> NDArray[np.float64]:
    total = weights.sum(axis=1, keepdims=True)
    return np.divide(weights, total, out=np.zeros_like(weights), where=total > 0.0)


def _apply_taps(arr: np.ndarray, taps: Taps, axis: int) -> NDArray[np.float64]:
    """Weighted gather along axis 0 (rows) or 1 (columns)."""
    idx, weights = taps
    dst_len = idx.shape[0]
    shape = list(arr.shape)
    shape[axis] = dst_len
    out = np.zeros(shape, dtype=np.float64)
    for k in range(idx.shape[1]):
        w = weights[:, k]
        if not np.any(w):
            continue
        if axis == 0:
            out += w[:, None, None] * arr[idx[:, k], :, :]
        else:
            out += w[None, :, None] * arr[:, idx[:, k], :]
    return out


# Resamplers


def resample_nearest(rgba: U8RGBA, width: int, height: int) -> U8RGBA:
    """Index mapping srcX = floor(x * srcW / dstW) per axis."""
    src = assert_u8_rgba(rgba)
    _check_target(width, height)
    src_h, src_w = src.shape[:2]
    xs = (np.arange(width, dtype=np.int64) * src_w) // width
    ys = (np.arange(height, dtype=np.int64) * src_h) // height
    return src[ys[:, None], xs[None, :]].copy()


def resample_bilinear(rgba: U8RGBA, width: int, height: int) -> U8RGBA:
    """
    Area averaging when both axes shrink, otherwise four-tap bilinear
    with edge clamping.
    """
    src = assert_u8_rgba(rgba)
    _check_target(width, height)
    src_h, src_w = src.shape[:2]

    if width < src_w and height < src_h:
        work = src.astype(np.float64)
        xi, xw = _area_taps(src_w, width)
        yi, yw = _area_taps(src_h, height)
        work = _apply_taps(work, (xi, _normalise(xw)), axis=1)
        work = _apply_taps(work, (yi, _normalise(yw)), axis=0)
        return _to_u8(work)

    x_ratio = (src_w - 1) / width
    y_ratio = (src_h - 1) / height
    sx = np.arange(width, dtype=np.float64) * x_ratio
    sy = np.arange(height, dtype=np.float64) * y_ratio
    x1 = np.floor(sx).astype(np.int64)
    y1 = np.floor(sy).astype(np.int64)
    x2 = np.minimum(x1 + 1, src_w - 1)
    y2 = np.minimum(y1 + 1, src_h - 1)
    dx = (sx - x1)[None, :, None]
    dy = (sy - y1)[:, None, None]

    f = src.astype(np.float64)
    top = f[y1[:, None], x1[None, :]] * (1.0 - dx) + f[y1[:, None], x2[None, :]] * dx
    bottom = f[y2[:, None], x1[None, :]] * (1.0 - dx) + f[y2[:, None], x2[None, :]] * dx
    value = top * (1.0 - dy) + bottom * dy
    return np.clip(np.floor(value + 0.5), 0, 255).astype(np.uint8)


def resample_lanczos(rgba: U8RGBA, width: int, height: int) -> U8RGBA:
    """Separable Lanczos-3: horizontal pass, then vertical, float in between."""
    src = assert_u8_rgba(rgba)
    _check_target(width, height)
    src_h, src_w = src.shape[:2]

    work = _apply_taps(src.astype(np.float64), _lanczos_taps(src_w, width), axis=1)
    work = _apply_taps(work, _lanczos_taps(src_h, height), axis=0)
    return _to_u8(work)


def resample(
    rgba: U8RGBA, width: int, height: int, method: "ResampleMethod | str" = ResampleMethod.NEAREST
) -> U8RGBA:
    """Dispatch to the requested resampler."""
    method = ResampleMethod.parse(method)
    if method is ResampleMethod.LANCZOS:
        return resample_lanczos(rgba, width, height)
    if method is ResampleMethod.BILINEAR:
        return resample_bilinear(rgba, width, height)
    return resample_nearest(rgba, width, height)


__all__ = [
    "ResampleMethod",
    "LANCZOS_A",
    "lanczos_kernel",
    "resample_nearest",
    "resample_bilinear",
    "resample_lanczos",
    "resample",
]
