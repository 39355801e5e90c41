# pixelator/image_io.py
from __future__ import annotations

"""
Image I/O helpers: Pillow decode/encode to and from PixelBuffer (RGBA, sRGB bytes).
"""

from pathlib import Path

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from .core_types import PixelBuffer


def load_image_rgba(path: Path) -> PixelBuffer:
    """Decode any Pillow-readable image, apply EXIF orientation, return RGBA."""
    with Image.open(path) as im0:
        im = ImageOps.exif_transpose(im0)
        arr = np.array(im.convert("RGBA"), dtype=np.uint8)
    return PixelBuffer.from_array(arr)


def save_image_rgba(path: Path, pixels: PixelBuffer) -> Path:
    """Write a PNG (the suffix is forced to .png); returns the written path."""
    if path.suffix.lower() != ".png":
        path = path.with_suffix(".png")
    Image.fromarray(np.ascontiguousarray(pixels.as_array())).save(path)
    return path


def has_semi_transparent(pixels: PixelBuffer) -> bool:
    """True if any pixel has 0 < alpha < 255 (those get binarised by dithering)."""
    alpha = pixels.as_array()[..., 3]
    return bool(np.any((alpha > 0) & (alpha < 255)))


def is_image_file(path: Path) -> bool:
    try:
        with Image.open(path) as im:
            im.seek(0)
            im.load()
        return True
    except (UnidentifiedImageError, OSError):
        return False


__all__ = [
    "load_image_rgba",
    "save_image_rgba",
    "has_semi_transparent",
    "is_image_file",
]
