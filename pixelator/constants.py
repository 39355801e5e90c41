# pixelator/constants.py
"""
Global palettes, dither tables and tunables used across the project.

- GEOPIXELS_PALETTE, WPLACE_PALETTE, WPLACE_FREE_PALETTE
- DITHER_MATRICES (ordered), ERROR_KERNELS (error diffusion)
- Pipeline / suggestion policy numbers
"""
from __future__ import annotations

from typing import Dict, List

from .core_types import DitherMatrix, ErrorKernel

# =========================
# Built-in palettes (hex)
# =========================
GEOPIXELS_PALETTE: List[str] = [
    "#FFFFFF", "#F4F59F", "#FFCA3A", "#FF9F1C", "#FF595E", "#E71D36",
    "#F3BBC2", "#FF85A1", "#BD637D", "#CDB4DB", "#6A4C93", "#4D194D",
    "#A8D0DC", "#2EC4B6", "#1A535C", "#6D9DCD", "#1982C4", "#A1C181",
    "#8AC926", "#A0A0A0", "#6B4226", "#505050", "#CFD078", "#145A7A",
    "#8B1D24", "#C07F7A", "#C49A6C", "#5B7B1C", "#000000",
]  # fmt: skip

WPLACE_PALETTE: List[str] = [
    "#000000", "#3c3c3c", "#787878", "#aaaaaa", "#d2d2d2", "#ffffff",
    "#600018", "#a50e1e", "#ed1c24", "#fa8072", "#e45c1a", "#ff7f27",
    "#f6aa09", "#f9dd3b", "#fffabc", "#9c8431", "#c5ad31", "#e8d45f",
    "#4a6b3a", "#5a944a", "#84c573", "#0eb968", "#13e67b", "#87ff5e",
    "#0c816e", "#10aea6", "#13e1be", "#0f799f", "#60f7f2", "#bbfaf2",
    "#28509e", "#4093e4", "#7dc7ff", "#4d31b8", "#6b50f6", "#99b1fb",
    "#4a4284", "#7a71c4", "#b5aef1", "#780c99", "#aa38b9", "#e09ff9",
    "#cb007a", "#ec1f80", "#f38da9", "#9b5249", "#d18078", "#fab6a4",
    "#684634", "#95682a", "#dba463", "#7b6352", "#9c846b", "#d6b594",
    "#d18051", "#f8b277", "#ffc5a5", "#6d643f", "#948c6b", "#cdc59e",
    "#333941", "#6d758d", "#b3b9d1",
]  # fmt: skip

# Free tier of the wplace palette.
WPLACE_FREE_PALETTE: List[str] = [
    "#000000", "#3c3c3c", "#787878", "#d2d2d2", "#ffffff", "#600018",
    "#ed1c24", "#ff7f27", "#f6aa09", "#f9dd3b", "#fffabc", "#0eb968",
    "#13e67b", "#87ff5e", "#0c816e", "#10aea6", "#13e1be", "#60f7f2",
    "#28509e", "#4093e4", "#6b50f6", "#99b1fb", "#780c99", "#aa38b9",
    "#e09ff9", "#cb007a", "#ec1f80", "#f38da9", "#684634", "#95682a",
    "#f8b277",
]  # fmt: skip

# =========================
# Ordered dither matrices
# =========================
DITHER_MATRICES: Dict[str, DitherMatrix] = {
    "bayer-4x4": DitherMatrix(
        "bayer-4x4",
        ((0, 8, 2, 10), (12, 4, 14, 6), (3, 11, 1, 9), (15, 7, 13, 5)),
        4,
        16,
    ),
    "bayer-8x8": DitherMatrix(
        "bayer-8x8",
        (
            (0, 32, 8, 40, 2, 34, 10, 42),
            (48, 16, 56, 24, 50, 18, 58, 26),
            (12, 44, 4, 36, 14, 46, 6, 38),
            (60, 28, 52, 20, 62, 30, 54, 22),
            (3, 35, 11, 43, 1, 33, 9, 41),
            (51, 19, 59, 27, 49, 17, 57, 25),
            (15, 47, 7, 39, 13, 45, 5, 37),
            (63, 31, 55, 23, 61, 29, 53, 21),
        ),
        8,
        64,
    ),
    "halftone-dot": DitherMatrix(
        "halftone-dot",
        ((12, 5, 6, 13), (4, 0, 1, 7), (8, 2, 3, 11), (14, 9, 10, 15)),
        4,
        16,
    ),
    "diagonal-line": DitherMatrix(
        "diagonal-line",
        ((15, 7, 3, 7), (7, 3, 7, 15), (3, 7, 15, 7), (7, 15, 7, 3)),
        4,
        16,
    ),
    "cross-hatch": DitherMatrix(
        "cross-hatch",
        ((0, 8, 0, 8), (8, 15, 8, 15), (0, 8, 0, 8), (8, 15, 8, 15)),
        4,
        16,
    ),
    "grid": DitherMatrix(
        "grid",
        ((0, 0, 0, 0), (0, 15, 15, 0), (0, 15, 15, 0), (0, 0, 0, 0)),
        4,
        16,
    ),
}

# =========================
# Error diffusion kernels
# =========================
# Taps are (dx, dy, fraction); each kernel's fractions sum to 1.
ERROR_KERNELS: Dict[str, ErrorKernel] = {
    "floyd-steinberg": ErrorKernel(
        "floyd-steinberg",
        ((1, 0, 7 / 16), (-1, 1, 3 / 16), (0, 1, 5 / 16), (1, 1, 1 / 16)),
    ),
    "burkes": ErrorKernel(
        "burkes",
        (
            (1, 0, 8 / 32), (2, 0, 4 / 32),
            (-2, 1, 2 / 32), (-1, 1, 4 / 32), (0, 1, 8 / 32), (1, 1, 4 / 32), (2, 1, 2 / 32),
        ),
    ),
    "stucki": ErrorKernel(
        "stucki",
        (
            (1, 0, 8 / 42), (2, 0, 4 / 42),
            (-2, 1, 2 / 42), (-1, 1, 4 / 42), (0, 1, 8 / 42), (1, 1, 4 / 42), (2, 1, 2 / 42),
            (-2, 2, 1 / 42), (-1, 2, 2 / 42), (0, 2, 4 / 42), (1, 2, 2 / 42), (2, 2, 1 / 42),
        ),
    ),
    "sierra-2": ErrorKernel(
        "sierra-2",
        (
            (1, 0, 4 / 16), (2, 0, 3 / 16),
            (-2, 1, 1 / 16), (-1, 1, 2 / 16), (0, 1, 3 / 16), (1, 1, 2 / 16), (2, 1, 1 / 16),
        ),
    ),
    "sierra-lite": ErrorKernel(
        "sierra-lite",
        ((1, 0, 2 / 4), (-1, 1, 1 / 4), (0, 1, 1 / 4)),
    ),
}  # fmt: skip

# =========================
# Pipeline tunables
# =========================

# Pixels with alpha below this are transparent for dithering.
ALPHA_OPAQUE = 128

# Samples for k-means / suggestions need alpha strictly above this.
ALPHA_SAMPLE_MIN = 128

# Peak ordered-dither nudge in RGB units at strength 100.
BASE_DITHER_STRENGTH = 64.0

# k-means iteration cap.
KMEANS_MAX_ITERATIONS = 20

# Preprocess strength used when a request names a method without a strength.
DEFAULT_PREPROCESS_STRENGTH = 50

# Palette entries below this usage percentage are trivial.
TRIVIAL_USAGE_PERCENT = 0.1

# =========================
# Suggestion tunables
# =========================

# Approximate number of pixels sampled from the source image.
SUGGEST_SAMPLE_BUDGET = 4096

# Cluster counts for the default and "prefer distinct" modes.
SUGGEST_MAX_CLUSTERS = 128
SUGGEST_MAX_CLUSTERS_DISTINCT = 256

# Minimum CIE76 distance between two suggestions in "prefer distinct" mode.
MIN_DISTINCTNESS = 30.0

DEFAULT_NUM_SUGGESTIONS = 5


__all__ = [
    "GEOPIXELS_PALETTE",
    "WPLACE_PALETTE",
    "WPLACE_FREE_PALETTE",
    "DITHER_MATRICES",
    "ERROR_KERNELS",
    "ALPHA_OPAQUE",
    "ALPHA_SAMPLE_MIN",
    "BASE_DITHER_STRENGTH",
    "KMEANS_MAX_ITERATIONS",
    "DEFAULT_PREPROCESS_STRENGTH",
    "TRIVIAL_USAGE_PERCENT",
    "SUGGEST_SAMPLE_BUDGET",
    "SUGGEST_MAX_CLUSTERS",
    "SUGGEST_MAX_CLUSTERS_DISTINCT",
    "MIN_DISTINCTNESS",
    "DEFAULT_NUM_SUGGESTIONS",
]
