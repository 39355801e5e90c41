# pixelator/colour_convert.py
from __future__ import annotations

"""
Colour conversions (sRGB, D65).

Exports:
  rgb_to_linear(srgb)
  rgb_to_xyz(rgb)
  xyz_to_lab(xyz)
  rgb_to_lab(rgb)
  rgb_to_oklab(rgb)

All functions accept a single (r, g, b) triple or any array shaped (..., 3)
with channels in 0..255, and return float64 arrays of the same shape.
"""

from typing import Sequence, Union

import numpy as np
from numpy.typing import NDArray

from .core_types import Lab, OkLab

ColourInput = Union[Sequence[float], NDArray[np.generic]]

# Linear sRGB -> XYZ (D65), rows X, Y, Z
_RGB_TO_XYZ = np.array(
    [
        [0.4124, 0.3576, 0.1805],
        [0.2126, 0.7152, 0.0722],
        [0.0193, 0.1192, 0.9505],
    ],
    dtype=np.float64,
)

# Reference white (D65), XYZ scaled to 100
_WHITE_D65 = np.array([95.047, 100.000, 108.883], dtype=np.float64)

_LAB_EPSILON = 0.008856
_LAB_KAPPA_SLOPE = 7.787

# OKLab: linear sRGB -> LMS, then LMS^(1/3) -> Lab
_OKLAB_M1 = np.array(
    [
        [0.4122214708, 0.5363325363, 0.0514459929],
        [0.2119034982, 0.6806995451, 0.1073969566],
        [0.0883024619, 0.2817188376, 0.6299787005],
    ],
    dtype=np.float64,
)
_OKLAB_M2 = np.array(
    [
        [0.2104542553, 0.7936177850, -0.0040720468],
        [1.9779984951, -2.4285922050, 0.4505937099],
        [0.0259040371, 0.7827717662, -0.8086757660],
    ],
    dtype=np.float64,
)


def _as_float_rgb(rgb: ColourInput) -> NDArray[np.float64]:
    arr = np.asarray(rgb, dtype=np.float64)
    if arr.shape[-1:] != (3,):
        raise ValueError(f"expected (..., 3) colour data, got shape {arr.shape}")
    return arr


# sRGB to linear


def rgb_to_linear(srgb: np.ndarray) -> NDArray[np.float64]:
    """
    Convert sRGB (non-linear 0..1) to linear RGB (0..1). Vectorised.
    Args:
      srgb: array[...] in 0..1 (float)
    Returns:
      float64 array of the same shape
    """
    v = np.asarray(srgb, dtype=np.float64)
    with np.errstate(invalid="ignore"):
        return np.where(v > 0.04045, ((v + 0.055) / 1.055) ** 2.4, v / 12.92)


# sRGB to XYZ to Lab (D65)


def rgb_to_xyz(rgb: ColourInput) -> NDArray[np.float64]:
    """sRGB 0..255 to XYZ (D65, Y in 0..100)."""
    linear = rgb_to_linear(_as_float_rgb(rgb) / 255.0) * 100.0
    return linear @ _RGB_TO_XYZ.T


def xyz_to_lab(xyz: ColourInput) -> Lab:
    """XYZ (D65, 0..100 scale) to CIE Lab."""
    t = np.asarray(xyz, dtype=np.float64) / _WHITE_D65
    with np.errstate(invalid="ignore"):
        f = np.where(
            t > _LAB_EPSILON, np.cbrt(t), _LAB_KAPPA_SLOPE * t + 16.0 / 116.0
        )
    fx, fy, fz = f[..., 0], f[..., 1], f[..., 2]

    out = np.empty(f.shape, dtype=np.float64)
    out[..., 0] = 116.0 * fy - 16.0
    out[..., 1] = 500.0 * (fx - fy)
    out[..., 2] = 200.0 * (fy - fz)
    return out


def rgb_to_lab(rgb: ColourInput) -> Lab:
    """
    sRGB to CIE Lab (D65).
    Accepts 0..255 channels. Preserves shape (...,3). Returns float64.
    """
    return xyz_to_lab(rgb_to_xyz(rgb))


# sRGB to OKLab


def rgb_to_oklab(rgb: ColourInput) -> OkLab:
    """
    sRGB 0..255 to OKLab (L in 0..1).
    Linearise, M1 to LMS, cube root, M2 to Lab.
    """
    linear = rgb_to_linear(_as_float_rgb(rgb) / 255.0)
    lms = linear @ _OKLAB_M1.T
    return np.cbrt(lms) @ _OKLAB_M2.T


__all__ = [
    "rgb_to_linear",
    "rgb_to_xyz",
    "xyz_to_lab",
    "rgb_to_lab",
    "rgb_to_oklab",
]
