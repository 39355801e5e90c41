# pixelator/pipeline.py
from __future__ import annotations

"""
Pixelate pipeline and the request/response protocol around it.

run_pipeline(source, settings) stages, in order:
  0) brightness / contrast / saturation   (skipped when all are zero)
  1) preprocessing filter                  (skipped for 'none')
  2) resample to the target size           (always)
  3) k-means palette generation + recolour (when enabled and samples exist)
  4) quantise / dither against the palette (when the palette is non-empty,
     after the optional trivial-colour filter)

handle_message(message) is the single failure boundary: any exception becomes
one {'type': 'error', 'message': ...} response and no pixels are returned.

Request  {'type': 'pixelate', 'sourcePixels', 'settings'}
      -> {'type': 'success', 'resultPixels', 'generatedPalette'?}
Request  {'type': 'suggest', 'sourcePixels', 'palette', 'numSuggestions', 'preferDistinct'}
      -> {'type': 'suggestions', 'suggestions'}
A request 'id' is copied onto its response.
"""

import math
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

import numpy as np

from .adjust import apply_colour_modifiers, needs_adjustment
from .colour_select import filter_trivial_colours
from .constants import ALPHA_SAMPLE_MIN, DEFAULT_NUM_SUGGESTIONS, MIN_DISTINCTNESS
from .core_types import HexStr, Palette, PixelBuffer, RGBTuple, U8RGBA, parse_palette, rgb_to_hex
from .dither import apply_dither
from .filters import preprocess
from .kmeans import RngLike, kmeans, make_rng, opaque_samples
from .matcher import NearestColourMatcher
from .resample import resample
from .settings import PipelineSettings, config_pairs
from .suggest import suggest_colours
from .utils import debug_log, format_seconds_compact, print_config_line


@dataclass(frozen=True, eq=False)
class PipelineResult:
    pixels: PixelBuffer
    generated_palette: Optional[List[HexStr]] = None


def _source_array(source: Any) -> U8RGBA:
    if isinstance(source, np.ndarray):
        return PixelBuffer.from_array(source).as_array()
    return PixelBuffer.from_mapping(source).as_array()


def effective_palette(settings: PipelineSettings) -> Palette:
    """Palette used for the final quantisation, after the trivial-colour filter."""
    if settings.filter_trivial and settings.colour_stats:
        return filter_trivial_colours(
            settings.palette, settings.colour_stats, settings.trivial_threshold
        )
    return settings.palette


def kmeans_recolour(
    rgba: U8RGBA, k: int, metric: str, rng: RngLike = None
) -> Tuple[U8RGBA, Optional[List[HexStr]]]:
    """
    Cluster the opaque pixels (alpha > 128) into at most k colours and
    recolour those pixels to their nearest centre. Alpha is kept as is.
    Returns (image, generated palette hex) or (input, None) with no samples.
    """
    samples = opaque_samples(rgba)
    if samples.shape[0] == 0 or k <= 0:
        return rgba, None
    result = kmeans(samples, min(int(k), samples.shape[0]), rng=rng)
    if result.k == 0:
        return rgba, None

    generated: List[RGBTuple] = [
        tuple(int(math.floor(c + 0.5)) for c in row)  # type: ignore[misc]
        for row in result.centroids.tolist()
    ]
    matcher = NearestColourMatcher(generated, metric, 0.0)
    out = rgba.copy()
    opaque = out[..., 3] > ALPHA_SAMPLE_MIN
    out[..., :3][opaque] = matcher.match_many(out[..., :3][opaque])
    return out, [rgb_to_hex(rgb) for rgb in generated]


def run_pipeline(
    source: Any, settings: PipelineSettings, *, debug: bool = False
) -> PipelineResult:
    """
    Run one pixelate request. `source` is a PixelBuffer, a
    {'width', 'height', 'data'} mapping or an (H, W, 4) uint8 array; it is
    never modified.
    """
    t_start = time.perf_counter()
    if debug:
        print_config_line("pixelate", config_pairs(settings), debug=True)

    img = _source_array(source)
    stages: List[Tuple[str, float]] = []

    t0 = time.perf_counter()
    if needs_adjustment(settings.brightness, settings.contrast, settings.saturation):
        img = apply_colour_modifiers(
            img, settings.brightness, settings.contrast, settings.saturation
        )
        stages.append(("adjust", time.perf_counter() - t0))

    t0 = time.perf_counter()
    filtered = preprocess(img, settings.preprocess, settings.preprocess_strength)
    if filtered is not img:
        img = filtered
        stages.append((settings.preprocess, time.perf_counter() - t0))

    t0 = time.perf_counter()
    img = resample(img, settings.target_width, settings.target_height, settings.resampling)
    stages.append(("resample", time.perf_counter() - t0))

    generated: Optional[List[HexStr]] = None
    if settings.kmeans_enabled:
        t0 = time.perf_counter()
        img, generated = kmeans_recolour(
            img, settings.kmeans_colours, settings.colour_metric, make_rng(settings.seed)
        )
        stages.append(("kmeans", time.perf_counter() - t0))

    palette = effective_palette(settings)
    if palette:
        t0 = time.perf_counter()
        matcher = NearestColourMatcher(
            palette, settings.colour_metric, settings.preserve_detail
        )
        img = apply_dither(img, matcher, settings.dither, settings.dither_strength)
        stages.append((settings.dither, time.perf_counter() - t0))
        if debug:
            debug_log(
                f"palette {len(palette)}/{len(settings.palette)} colours, "
                f"cache {matcher.cache_size} entries ({matcher.hits:,} hits, {matcher.misses:,} misses)"
            )

    if debug:
        timings = ", ".join(f"{name}={format_seconds_compact(secs)}" for name, secs in stages)
        debug_log(
            f"pipeline {format_seconds_compact(time.perf_counter() - t_start)}  ({timings})"
        )
    return PipelineResult(PixelBuffer.from_array(img), generated)


# Message protocol


def _handle_pixelate(message: Mapping[str, Any], debug: bool) -> Dict[str, Any]:
    source = message.get("sourcePixels", message.get("imageData"))
    if source is None:
        raise ValueError("pixelate request has no sourcePixels")
    raw_settings = message.get("settings")
    if isinstance(raw_settings, PipelineSettings):
        settings = raw_settings
    elif isinstance(raw_settings, Mapping):
        settings = PipelineSettings.from_mapping(raw_settings)
    else:
        raise ValueError("pixelate request has no settings")

    result = run_pipeline(source, settings, debug=debug)
    response: Dict[str, Any] = {"type": "success", "resultPixels": result.pixels}
    if result.generated_palette is not None:
        response["generatedPalette"] = result.generated_palette
    return response


def _handle_suggest(message: Mapping[str, Any], debug: bool) -> Dict[str, Any]:
    source = message.get("sourcePixels", message.get("imageData"))
    if source is None:
        raise ValueError("suggest request has no sourcePixels")
    # older hosts nest the suggest options under 'settings'
    options: Mapping[str, Any] = message.get("settings") or {}

    def option(key: str) -> Any:
        value = message.get(key)
        return options.get(key) if value is None else value

    palette = parse_palette(option("palette") or ())
    count = int(option("numSuggestions") or DEFAULT_NUM_SUGGESTIONS)
    distinct = bool(option("preferDistinct") or False)
    min_distinctness = option("minDistinctness")

    t0 = time.perf_counter()
    suggestions = suggest_colours(
        _source_array(source),
        palette,
        count,
        distinct,
        min_distinctness=MIN_DISTINCTNESS if min_distinctness is None else float(min_distinctness),
        rng=option("seed"),
    )
    if debug:
        debug_log(
            f"suggest {len(suggestions)}/{count} colours (distinct={distinct}) "
            f"in {format_seconds_compact(time.perf_counter() - t0)}"
        )
    return {"type": "suggestions", "suggestions": suggestions}


def handle_message(message: Mapping[str, Any], *, debug: bool = False) -> Dict[str, Any]:
    """
    Answer one request message. Never raises for a bad request: failures
    come back as an error response. A missing 'type' means 'pixelate'.
    """
    request_id = message.get("id") if isinstance(message, Mapping) else None
    try:
        if not isinstance(message, Mapping):
            raise TypeError("request must be a mapping")
        kind = message.get("type") or "pixelate"
        if kind == "pixelate":
            response = _handle_pixelate(message, debug)
        elif kind == "suggest":
            response = _handle_suggest(message, debug)
        else:
            raise ValueError(f"unknown request type {kind!r}")
    except Exception as exc:
        if debug:
            debug_log(f"request failed: {exc!r}")
        response = {"type": "error", "message": str(exc) or type(exc).__name__}
    if request_id is not None:
        response["id"] = request_id
    return response


__all__ = [
    "PipelineResult",
    "effective_palette",
    "kmeans_recolour",
    "run_pipeline",
    "handle_message",
]
