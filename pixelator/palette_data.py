# pixelator/palette_data.py
from __future__ import annotations

"""
Palette definitions and builders.

Exports:
  BUILTIN_PALETTES: dict[name, list[hex]]
  builtin_palette(name) -> Palette
  resolve_palette(description) -> Palette
    description: builtin name | "none" | hex list ("#aabbcc,#112233" or whitespace
                 separated) | "geopixels+<hex list>" (GeoPixels merged with extras)
  merge_palettes(*palettes) -> Palette (first occurrence wins)
"""

import re
from typing import Dict, Iterable, List

from .constants import GEOPIXELS_PALETTE, WPLACE_FREE_PALETTE, WPLACE_PALETTE
from .core_types import Palette, RGBTuple, hex_to_rgb, parse_palette

BUILTIN_PALETTES: Dict[str, List[str]] = {
    "geopixels": GEOPIXELS_PALETTE,
    "wplace": WPLACE_PALETTE,
    "wplace-free": WPLACE_FREE_PALETTE,
}

_HEX_TOKEN = re.compile(r"#?[0-9a-fA-F]{6}\b|#[0-9a-fA-F]{3}\b")


def builtin_palette(name: str) -> Palette:
    key = name.strip().lower()
    if key not in BUILTIN_PALETTES:
        known = ", ".join(BUILTIN_PALETTES)
        raise ValueError(f"unknown palette {name!r} (expected one of: {known})")
    return parse_palette(BUILTIN_PALETTES[key])


def parse_hex_list(text: str) -> Palette:
    """
    Pull every hex colour out of free text, e.g. a pasted list like
    '["#FF0000", "#00ff00"]' or 'ff0000 00ff00'.
    """
    return tuple(hex_to_rgb(tok) for tok in _HEX_TOKEN.findall(text))


def merge_palettes(*palettes: Iterable[RGBTuple]) -> Palette:
    """Concatenate palettes keeping the first occurrence of each colour."""
    seen = set()
    merged: List[RGBTuple] = []
    for pal in palettes:
        for rgb in pal:
            if rgb not in seen:
                seen.add(rgb)
                merged.append(rgb)
    return tuple(merged)


def resolve_palette(description: str) -> Palette:
    """Resolve a palette description (see module docstring)."""
    text = description.strip()
    key = text.lower()
    if key in ("", "none"):
        return ()
    if key in BUILTIN_PALETTES:
        return builtin_palette(key)
    if key.startswith("geopixels+"):
        return merge_palettes(builtin_palette("geopixels"), parse_hex_list(text[10:]))
    colours = parse_hex_list(text)
    if not colours:
        raise ValueError(f"no colours found in palette description {description!r}")
    return colours


__all__ = [
    "BUILTIN_PALETTES",
    "builtin_palette",
    "parse_hex_list",
    "merge_palettes",
    "resolve_palette",
]
