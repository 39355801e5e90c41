"""Shared fixtures for pixelator tests."""
import numpy as np
import pytest


def make_rgba(rgb, alpha=255):
    """Build an (H, W, 4) uint8 image from an (H, W, 3) array-like."""
    rgb = np.asarray(rgb, dtype=np.uint8)
    out = np.empty(rgb.shape[:2] + (4,), dtype=np.uint8)
    out[..., :3] = rgb
    out[..., 3] = alpha
    return out


def solid(width, height, colour, alpha=255):
    """Uniform image of one colour."""
    rgb = np.broadcast_to(np.asarray(colour, dtype=np.uint8), (height, width, 3))
    return make_rgba(rgb, alpha)


@pytest.fixture
def bw_palette():
    return ((0, 0, 0), (255, 255, 255))


def gradient_image(size=32):
    """Square opaque image covering a spread of hues and lightness."""
    ys, xs = np.mgrid[0:size, 0:size] * (256 // size)
    rgb = np.stack([xs, ys, (xs + ys) // 2], axis=-1)
    return make_rgba(np.clip(rgb, 0, 255))


@pytest.fixture
def gradient():
    """32x32 opaque image covering a spread of hues and lightness."""
    return gradient_image(32)


@pytest.fixture
def scenario_2x2():
    """Two near-black and two near-white opaque pixels."""
    return make_rgba([[(0, 0, 0), (255, 255, 255)], [(10, 10, 10), (245, 245, 245)]])
