# pixelator/colour_select.py
from __future__ import annotations

"""
Palette selection helpers.

Exports:
  colour_usage(rgba) -> list[ColourUsage]
  usage_percent_map(stats) -> dict[hex, percent]
  filter_trivial_colours(palette, stats, threshold=0.1) -> Palette
  sort_palette_by_usage(palette, stats) -> Palette
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Sequence, Union

import numpy as np

from .constants import TRIVIAL_USAGE_PERCENT
from .core_types import HexStr, Palette, RGBTuple, U8RGBA, assert_u8_rgba, normalise_hex, rgb_to_hex


@dataclass(frozen=True)
class ColourUsage:
    """How often one colour appears among visible pixels."""

    hex: HexStr
    count: int
    percent: float  # 0..100

    def to_dict(self) -> dict:
        return {"color": self.hex, "count": self.count, "percent": self.percent}

    @classmethod
    def from_mapping(cls, row: Mapping[str, object]) -> "ColourUsage":
        """Row with 'color' (or 'hex'), 'percent' and an optional 'count'."""
        hx = row.get("color", row.get("hex"))
        if hx is None:
            raise ValueError(f"usage row without a colour: {row!r}")
        return cls(
            normalise_hex(str(hx)),
            int(row.get("count") or 0),  # type: ignore[call-overload]
            float(row.get("percent", 0.0)),  # type: ignore[arg-type]
        )


StatsInput = Union[
    Sequence[ColourUsage], Sequence[Mapping[str, object]], Mapping[str, float]
]


def colour_usage(rgba: U8RGBA) -> List[ColourUsage]:
    """
    Count RGB colours over pixels with alpha > 0.
    Sorted by count descending; percent is share of visible pixels.
    """
    img = assert_u8_rgba(rgba)
    visible = img[..., 3] > 0
    if not np.any(visible):
        return []
    flat = img[..., :3][visible].reshape(-1, 3)
    uniques, counts = np.unique(flat, axis=0, return_counts=True)
    total = int(counts.sum())
    order = np.argsort(-counts, kind="stable")
    return [
        ColourUsage(
            hex=rgb_to_hex(uniques[i].tolist()),
            count=int(counts[i]),
            percent=float(counts[i]) / total * 100.0,
        )
        for i in order.tolist()
    ]


def usage_percent_map(stats: StatsInput) -> Dict[HexStr, float]:
    """
    Normalise usage statistics to {'#RRGGBB': percent}.
    Accepts ColourUsage rows, {'color', 'percent'} mappings, or a plain
    hex -> percent mapping.
    """
    out: Dict[HexStr, float] = {}
    if isinstance(stats, Mapping):
        for hx, pct in stats.items():
            out[normalise_hex(str(hx))] = float(pct)  # type: ignore[arg-type]
        return out
    for row in stats:
        usage = row if isinstance(row, ColourUsage) else ColourUsage.from_mapping(row)
        out[normalise_hex(usage.hex)] = usage.percent
    return out


def filter_trivial_colours(
    palette: Sequence[RGBTuple],
    stats: StatsInput,
    threshold: float = TRIVIAL_USAGE_PERCENT,
) -> Palette:
    """
    Drop palette colours that are absent from the stats or used below
    `threshold` percent. If nothing would survive, the palette is returned
    unchanged.
    """
    usage = usage_percent_map(stats)
    if not usage:
        return tuple(palette)
    kept: List[RGBTuple] = []
    for rgb in palette:
        pct = usage.get(rgb_to_hex(rgb), 0.0)
        if pct and pct >= threshold:
            kept.append(rgb)
    return tuple(kept) if kept else tuple(palette)


def sort_palette_by_usage(palette: Iterable[RGBTuple], stats: StatsInput) -> Palette:
    """Most used colours first; ties keep palette order."""
    usage = usage_percent_map(stats)
    pal = list(palette)
    return tuple(sorted(pal, key=lambda rgb: -usage.get(rgb_to_hex(rgb), 0.0)))


__all__ = [
    "ColourUsage",
    "StatsInput",
    "colour_usage",
    "usage_percent_map",
    "filter_trivial_colours",
    "sort_palette_by_usage",
]
