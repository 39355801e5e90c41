# pixelator/adjust.py
from __future__ import annotations

"""
Global brightness / contrast / saturation adjustment on RGBA arrays.
"""

import numpy as np

from .core_types import U8RGBA, assert_u8_rgba

# Perceptual grey weights used by the saturation step.
GREY_WEIGHTS = np.array([0.2989, 0.5870, 0.1140], dtype=np.float64)


def contrast_factor(contrast: float) -> float:
    """Standard contrast factor 259(c + 255) / (255(259 - c))."""
    c = float(contrast)
    if c >= 259.0:
        raise ValueError("contrast must be below 259")
    return (259.0 * (c + 255.0)) / (255.0 * (259.0 - c))


def needs_adjustment(brightness: float, contrast: float, saturation: float) -> bool:
    return bool(brightness) or bool(contrast) or bool(saturation)


def apply_colour_modifiers(
    rgba: U8RGBA, brightness: float = 0.0, contrast: float = 0.0, saturation: float = 0.0
) -> U8RGBA:
    """
    Brightness offset, then contrast around 128, then saturation scaling
    around perceptual grey. Channels clamp to 0..255 once at the end.
    Alpha is untouched.
    """
    src = assert_u8_rgba(rgba)
    rgb = src[..., :3].astype(np.float64)

    rgb += float(brightness)
    rgb = contrast_factor(contrast) * (rgb - 128.0) + 128.0

    if saturation:
        grey = (rgb @ GREY_WEIGHTS)[..., None]
        rgb = grey + (rgb - grey) * (1.0 + float(saturation) / 100.0)

    out = src.copy()
    out[..., :3] = np.rint(np.clip(rgb, 0.0, 255.0)).astype(np.uint8)
    return out


__all__ = ["GREY_WEIGHTS", "contrast_factor", "needs_adjustment", "apply_colour_modifiers"]
