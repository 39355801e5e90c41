# pixelator/dither.py
from __future__ import annotations

"""
Palette quantisation with optional dithering.

Methods (tagged variant, see resolve_dither):
  NoDither       : plain nearest-colour mapping
  OrderedDither  : threshold matrix nudge before matching
  ErrorDiffusion : residual spread to unvisited neighbours by kernel taps

Alpha rules shared by every method:
  - alpha < 128: output alpha is 0, RGB is left as is, and the pixel never
    gives or receives diffused error
  - otherwise  : output alpha is 255 and RGB is a matched colour

One NearestColourMatcher (and its cache) serves a whole call.
"""

from dataclasses import dataclass
from typing import Union

import numpy as np

from .constants import ALPHA_OPAQUE, BASE_DITHER_STRENGTH, DITHER_MATRICES, ERROR_KERNELS
from .core_types import DitherMatrix, ErrorKernel, U8RGBA, assert_u8_rgba
from .matcher import NearestColourMatcher


@dataclass(frozen=True)
class NoDither:
    name: str = "none"


@dataclass(frozen=True)
class OrderedDither:
    matrix: DitherMatrix

    @property
    def name(self) -> str:
        return self.matrix.name


@dataclass(frozen=True)
class ErrorDiffusion:
    kernel: ErrorKernel

    @property
    def name(self) -> str:
        return self.kernel.name


DitherMethod = Union[NoDither, OrderedDither, ErrorDiffusion]


def resolve_dither(name: "str | DitherMethod | None") -> DitherMethod:
    """Map a method name ('none', a matrix name or a kernel name) to its variant."""
    if isinstance(name, (NoDither, OrderedDither, ErrorDiffusion)):
        return name
    key = (name or "none").strip().lower()
    if key == "none":
        return NoDither()
    if key in DITHER_MATRICES:
        return OrderedDither(DITHER_MATRICES[key])
    if key in ERROR_KERNELS:
        return ErrorDiffusion(ERROR_KERNELS[key])
    known = ", ".join(["none", *DITHER_MATRICES, *ERROR_KERNELS])
    raise ValueError(f"unknown dither method {name!r} (expected one of: {known})")


def _strength_fraction(strength: float) -> float:
    return float(np.clip(float(strength), 0.0, 100.0)) / 100.0


# Quantisers


def quantise(rgba: U8RGBA, matcher: NearestColourMatcher) -> U8RGBA:
    """Map every opaque pixel to its match; no dithering."""
    out = assert_u8_rgba(rgba).copy()
    opaque = out[..., 3] >= ALPHA_OPAQUE
    out[..., 3][~opaque] = 0
    if np.any(opaque):
        out[..., :3][opaque] = matcher.match_many(out[..., :3][opaque])
        out[..., 3][opaque] = 255
    return out


def ordered_dither(
    rgba: U8RGBA, matcher: NearestColourMatcher, matrix: DitherMatrix, strength: float
) -> U8RGBA:
    """
    Add (m[y % N][x % N] / divisor - 0.5) * 64 * strength to each channel,
    clamp, then match.
    """
    out = assert_u8_rgba(rgba).copy()
    height, width = out.shape[:2]
    opaque = out[..., 3] >= ALPHA_OPAQUE
    out[..., 3][~opaque] = 0
    if not np.any(opaque):
        return out

    thresholds = matrix.as_array()
    ys = np.arange(height) % matrix.size
    xs = np.arange(width) % matrix.size
    tile = thresholds[ys[:, None], xs[None, :]]
    nudge = (tile / matrix.divisor - 0.5) * BASE_DITHER_STRENGTH * _strength_fraction(strength)

    nudged = np.clip(out[..., :3].astype(np.float64) + nudge[..., None], 0.0, 255.0)
    out[..., :3][opaque] = matcher.match_many(nudged[opaque])
    out[..., 3][opaque] = 255
    return out


def error_diffusion_dither(
    rgba: U8RGBA, matcher: NearestColourMatcher, kernel: ErrorKernel, strength: float
) -> U8RGBA:
    """
    Raster-order error diffusion on a float working copy.
    The residual (current - matched) * strength is spread by the kernel taps,
    skipping out-of-bounds and transparent neighbours.
    """
    out = assert_u8_rgba(rgba).copy()
    height, width = out.shape[:2]
    work = out[..., :3].astype(np.float64)
    opaque = out[..., 3] >= ALPHA_OPAQUE
    out[..., 3][~opaque] = 0

    fraction = _strength_fraction(strength)
    taps = kernel.taps
    match = matcher.match

    for y in range(height):
        row_opaque = opaque[y]
        for x in range(width):
            if not row_opaque[x]:
                continue
            r, g, b = work[y, x]
            matched = match(r, g, b).rgb
            out[y, x, 0] = matched[0]
            out[y, x, 1] = matched[1]
            out[y, x, 2] = matched[2]
            out[y, x, 3] = 255

            if fraction == 0.0:
                continue
            er = (r - matched[0]) * fraction
            eg = (g - matched[1]) * fraction
            eb = (b - matched[2]) * fraction
            if er == 0.0 and eg == 0.0 and eb == 0.0:
                continue
            for dx, dy, f in taps:
                nx, ny = x + dx, y + dy
                if 0 <= nx < width and 0 <= ny < height and opaque[ny, nx]:
                    cell = work[ny, nx]
                    cell[0] += er * f
                    cell[1] += eg * f
                    cell[2] += eb * f
    return out


def apply_dither(
    rgba: U8RGBA,
    matcher: NearestColourMatcher,
    method: "DitherMethod | str | None" = None,
    strength: float = 100.0,
) -> U8RGBA:
    """Quantise an RGBA image against the matcher's palette with the given method."""
    variant = resolve_dither(method)
    if isinstance(variant, OrderedDither):
        return ordered_dither(rgba, matcher, variant.matrix, strength)
    if isinstance(variant, ErrorDiffusion):
        return error_diffusion_dither(rgba, matcher, variant.kernel, strength)
    if isinstance(variant, NoDither):
        return quantise(rgba, matcher)
    raise TypeError(f"unsupported dither variant {variant!r}")


__all__ = [
    "NoDither",
    "OrderedDither",
    "ErrorDiffusion",
    "DitherMethod",
    "resolve_dither",
    "quantise",
    "ordered_dither",
    "error_diffusion_dither",
    "apply_dither",
]
