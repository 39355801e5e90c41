# pixelator/colour_distance.py
from __future__ import annotations

"""
Colour difference metrics.

Exports:
  ColourMetric                   : enum of the selectable metrics
  delta_e_cie76(lab1, lab2)
  delta_e_cie94(lab1, lab2)      : graphic-arts constants, lab1 is the reference
  delta_e_ciede2000(lab1, lab2)
  delta_e_redmean(rgb1, rgb2)    : weighted RGB, no space conversion
  delta_e_oklab(ok1, ok2)        : Euclidean OKLab scaled x100
  to_metric_space(rgb, metric)   : convert 0..255 colours into a metric's space
  distance_function(metric)      : metric -> function over converted colours
  distance(metric, rgb1, rgb2)   : convenience wrapper on raw RGB

Every metric broadcasts over (..., 3) inputs and returns float64 values >= 0.
One-to-many use: pass a single colour (3,) against a palette (P, 3).
"""

from enum import Enum
from typing import Callable, Dict

import numpy as np
from numpy.typing import NDArray

from .colour_convert import ColourInput, rgb_to_lab, rgb_to_oklab

DistanceFn = Callable[[np.ndarray, np.ndarray], NDArray[np.float64]]

_POW25_7 = 25.0**7  # 6103515625


class ColourMetric(str, Enum):
    """Selectable colour-match metrics."""

    OKLAB = "oklab"
    CIEDE2000 = "ciede2000"
    CIE94 = "cie94"
    CIE76 = "cie76"
    REDMEAN = "redmean"

    @classmethod
    def parse(cls, value: "str | ColourMetric | None") -> "ColourMetric":
        if value is None or value == "":
            return cls.OKLAB
        if isinstance(value, ColourMetric):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            names = ", ".join(m.value for m in cls)
            raise ValueError(
                f"unknown colour match algorithm {value!r} (expected one of: {names})"
            ) from None


def _split(arr: np.ndarray):
    a = np.asarray(arr, dtype=np.float64)
    return a[..., 0], a[..., 1], a[..., 2]


# CIELAB family


def delta_e_cie76(lab1: np.ndarray, lab2: np.ndarray) -> NDArray[np.float64]:
    """CIE76: Euclidean distance in CIELAB."""
    L1, a1, b1 = _split(lab1)
    L2, a2, b2 = _split(lab2)
    return np.sqrt((L1 - L2) ** 2 + (a1 - a2) ** 2 + (b1 - b2) ** 2)


def delta_e_cie94(lab1: np.ndarray, lab2: np.ndarray) -> NDArray[np.float64]:
    """
    CIE94, graphic-arts weighting (kL = SL = 1, K1 = 0.045, K2 = 0.015).
    Chroma weights come from lab1, so the metric is not symmetric.
    """
    L1, a1, b1 = _split(lab1)
    L2, a2, b2 = _split(lab2)

    dL = L1 - L2
    C1 = np.hypot(a1, b1)
    C2 = np.hypot(a2, b2)
    dC = C1 - C2
    da = a1 - a2
    db = b1 - b2
    dH = np.sqrt(np.maximum(da * da + db * db - dC * dC, 0.0))

    SC = 1.0 + 0.045 * C1
    SH = 1.0 + 0.015 * C1
    return np.sqrt(dL**2 + (dC / SC) ** 2 + (dH / SH) ** 2)


def delta_e_ciede2000(lab1: np.ndarray, lab2: np.ndarray) -> NDArray[np.float64]:
    """
    CIEDE2000 (kL = kC = kH = 1), vectorised.
    Hue difference and hue mean follow the reference branch rules for
    wrap-around and for achromatic colours.
    """
    L1, a1, b1 = _split(lab1)
    L2, a2, b2 = _split(lab2)

    C1 = np.hypot(a1, b1)
    C2 = np.hypot(a2, b2)
    C_bar7 = (0.5 * (C1 + C2)) ** 7
    G = 0.5 * (1.0 - np.sqrt(C_bar7 / (C_bar7 + _POW25_7)))

    a1p = (1.0 + G) * a1
    a2p = (1.0 + G) * a2
    C1p = np.hypot(a1p, b1)
    C2p = np.hypot(a2p, b2)

    h1p = np.degrees(np.arctan2(b1, a1p)) % 360.0
    h2p = np.degrees(np.arctan2(b2, a2p)) % 360.0

    dLp = L2 - L1
    dCp = C2p - C1p

    chroma_prod = C1p * C2p
    achromatic = chroma_prod == 0.0
    dh = h2p - h1p
    dhp = np.where(
        achromatic,
        0.0,
        np.where(
            np.abs(dh) <= 180.0, dh, np.where(dh > 180.0, dh - 360.0, dh + 360.0)
        ),
    )
    dHp = 2.0 * np.sqrt(chroma_prod) * np.sin(np.radians(dhp) / 2.0)

    L_bar_p = 0.5 * (L1 + L2)
    C_bar_p = 0.5 * (C1p + C2p)

    h_sum = h1p + h2p
    h_bar_p = np.where(
        achromatic,
        h_sum,
        np.where(
            np.abs(h1p - h2p) <= 180.0,
            0.5 * h_sum,
            np.where(h_sum < 360.0, 0.5 * (h_sum + 360.0), 0.5 * (h_sum - 360.0)),
        ),
    )

    T = (
        1.0
        - 0.17 * np.cos(np.radians(h_bar_p - 30.0))
        + 0.24 * np.cos(np.radians(2.0 * h_bar_p))
        + 0.32 * np.cos(np.radians(3.0 * h_bar_p + 6.0))
        - 0.20 * np.cos(np.radians(4.0 * h_bar_p - 63.0))
    )

    L_off2 = (L_bar_p - 50.0) ** 2
    S_l = 1.0 + (0.015 * L_off2) / np.sqrt(20.0 + L_off2)
    S_c = 1.0 + 0.045 * C_bar_p
    S_h = 1.0 + 0.015 * C_bar_p * T

    C_bar_p7 = C_bar_p**7
    R_c = 2.0 * np.sqrt(C_bar_p7 / (C_bar_p7 + _POW25_7))
    d_theta = 30.0 * np.exp(-(((h_bar_p - 275.0) / 25.0) ** 2))
    R_t = -R_c * np.sin(np.radians(2.0 * d_theta))

    tL = dLp / S_l
    tC = dCp / S_c
    tH = dHp / S_h
    return np.sqrt(np.maximum(tL * tL + tC * tC + tH * tH + R_t * tC * tH, 0.0))


# RGB / OKLab


def delta_e_redmean(rgb1: np.ndarray, rgb2: np.ndarray) -> NDArray[np.float64]:
    """Redmean weighted Euclidean distance directly on 0..255 RGB."""
    r1, g1, b1 = _split(rgb1)
    r2, g2, b2 = _split(rgb2)
    r_mean = 0.5 * (r1 + r2)
    dr = r1 - r2
    dg = g1 - g2
    db = b1 - b2
    return np.sqrt(
        (2.0 + r_mean / 256.0) * dr * dr
        + 4.0 * dg * dg
        + (2.0 + (255.0 - r_mean) / 256.0) * db * db
    )


def delta_e_oklab(ok1: np.ndarray, ok2: np.ndarray) -> NDArray[np.float64]:
    """Euclidean OKLab distance scaled x100 to sit in the CIELAB dE range."""
    L1, a1, b1 = _split(ok1)
    L2, a2, b2 = _split(ok2)
    return np.sqrt((L1 - L2) ** 2 + (a1 - a2) ** 2 + (b1 - b2) ** 2) * 100.0


# Dispatch

_DISTANCE_FUNCTIONS: Dict[ColourMetric, DistanceFn] = {
    ColourMetric.OKLAB: delta_e_oklab,
    ColourMetric.CIEDE2000: delta_e_ciede2000,
    ColourMetric.CIE94: delta_e_cie94,
    ColourMetric.CIE76: delta_e_cie76,
    ColourMetric.REDMEAN: delta_e_redmean,
}


def colour_space_for(metric: ColourMetric) -> str:
    """Name of the space a metric measures in: 'oklab', 'rgb' or 'lab'."""
    metric = ColourMetric.parse(metric)
    if metric is ColourMetric.OKLAB:
        return "oklab"
    if metric is ColourMetric.REDMEAN:
        return "rgb"
    return "lab"


def to_metric_space(rgb: ColourInput, metric: ColourMetric) -> NDArray[np.float64]:
    """Convert 0..255 RGB colours (..., 3) into the space the metric measures in."""
    space = colour_space_for(metric)
    if space == "oklab":
        return rgb_to_oklab(rgb)
    if space == "rgb":
        return np.asarray(rgb, dtype=np.float64)
    return rgb_to_lab(rgb)


def distance_function(metric: ColourMetric) -> DistanceFn:
    """Distance function over colours already converted by to_metric_space."""
    return _DISTANCE_FUNCTIONS[ColourMetric.parse(metric)]


def distance(
    metric: ColourMetric, rgb1: ColourInput, rgb2: ColourInput
) -> NDArray[np.float64]:
    """Distance between raw 0..255 RGB colours under the given metric."""
    metric = ColourMetric.parse(metric)
    fn = _DISTANCE_FUNCTIONS[metric]
    return fn(to_metric_space(rgb1, metric), to_metric_space(rgb2, metric))


__all__ = [
    "ColourMetric",
    "DistanceFn",
    "delta_e_cie76",
    "delta_e_cie94",
    "delta_e_ciede2000",
    "delta_e_redmean",
    "delta_e_oklab",
    "colour_space_for",
    "to_metric_space",
    "distance_function",
    "distance",
]
