#!/usr/bin/env python3
"""
pixelate.py
Turn an image into palette-constrained pixel art.

Usage:
  python pixelate.py INPUT [--out OUTPUT] --height H [--width W]
      --resample [nearest|bilinear|lanczos] --dither METHOD --strength S
      --metric [oklab|ciede2000|cie94|cie76|redmean] --palette PALETTE
      [--kmeans K] [--brightness B] [--contrast C] [--saturation S]
      [--preprocess [none|median|bilateral|kuwahara]] [--preprocess-strength P]
      [--preserve-detail T] [--filter-trivial] [--suggest N [--distinct]]
      [--seed SEED] [--debug]

Palettes:
  geopixels | wplace | wplace-free | none | "#aabbcc,#112233"
  | "geopixels+#aabbcc #112233" (GeoPixels plus extra colours)

Dither methods:
  none, bayer-4x4, bayer-8x8, halftone-dot, diagonal-line, cross-hatch, grid,
  floyd-steinberg, burkes, stucki, sierra-2, sierra-lite

Output:
  PNG. If --out is omitted, writes <stem>_pixel.png next to INPUT.

Notes:
  Requests run through pixelator.worker.PixelatorWorker, the same channel an
  interactive host would use. --filter-trivial first renders without the
  filter to measure colour usage, then renders again with it.
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

from pixelator.colour_distance import ColourMetric
from pixelator.colour_select import colour_usage
from pixelator.constants import DITHER_MATRICES, ERROR_KERNELS
from pixelator.core_types import PixelBuffer, rgb_to_hex
from pixelator.filters import PreprocessMethod
from pixelator.image_io import (
    has_semi_transparent,
    is_image_file,
    load_image_rgba,
    save_image_rgba,
)
from pixelator.palette_data import resolve_palette
from pixelator.resample import ResampleMethod
from pixelator.settings import PipelineSettings
from pixelator.utils import (
    colour_usage_lines,
    debug_log,
    enable_line_buffered_stdout,
    error,
    format_total_duration_compact,
    key_value_pairs_to_string,
    log,
    print_banner,
    print_config_line,
    warn,
)
from pixelator.worker import PixelatorWorker

# CLI args & small helpers

DITHER_CHOICES = ["none", *DITHER_MATRICES, *ERROR_KERNELS]


def parse_cli_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse CLI arguments for one pixelate run."""
    parser = argparse.ArgumentParser(
        prog="pixelate",
        description="Resize, filter and quantise an image into palette pixel art.",
    )
    parser.add_argument("src", type=Path, help="Input image")
    parser.add_argument("--out", type=Path, default=None, help="Output PNG path")
    parser.add_argument("--height", type=int, default=128, help="Output height in pixels")
    parser.add_argument(
        "--width",
        type=int,
        default=None,
        help="Output width. Omit to keep the source aspect ratio.",
    )
    parser.add_argument(
        "--resample",
        choices=[m.value for m in ResampleMethod],
        default=ResampleMethod.BILINEAR.value,
        help="Scaling filter.",
    )
    parser.add_argument("--dither", choices=DITHER_CHOICES, default="none")
    parser.add_argument(
        "--strength", type=float, default=100.0, help="Dither strength 0..100"
    )
    parser.add_argument(
        "--metric",
        choices=[m.value for m in ColourMetric],
        default=ColourMetric.OKLAB.value,
        help="Colour distance used for matching.",
    )
    parser.add_argument(
        "--palette", default="geopixels", help="Palette name, hex list, or 'none'"
    )
    parser.add_argument(
        "--kmeans",
        type=int,
        default=0,
        help="Generate a K-colour palette with k-means instead of using --palette",
    )
    parser.add_argument("--brightness", type=float, default=0.0)
    parser.add_argument("--contrast", type=float, default=0.0)
    parser.add_argument("--saturation", type=float, default=0.0)
    parser.add_argument(
        "--preprocess",
        choices=[m.value for m in PreprocessMethod],
        default=PreprocessMethod.NONE.value,
    )
    parser.add_argument(
        "--preprocess-strength", type=float, default=50.0, help="Filter strength 0..100"
    )
    parser.add_argument(
        "--preserve-detail",
        type=float,
        default=0.0,
        help="Keep source colours closer than this distance to the palette (0 = off)",
    )
    parser.add_argument(
        "--filter-trivial",
        action="store_true",
        help="Drop palette colours used by under 0.1%% of the output",
    )
    parser.add_argument(
        "--suggest", type=int, default=0, metavar="N", help="Suggest N colours to add"
    )
    parser.add_argument(
        "--distinct", action="store_true", help="Keep suggestions visually distinct"
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed for k-means")
    parser.add_argument("--debug", action="store_true", help="Verbose stage details")
    return parser.parse_args(argv)


def _target_width(args: argparse.Namespace, source: PixelBuffer) -> int:
    if args.width:
        return args.width
    return max(1, int(round(args.height * source.width / float(source.height))))


def _build_settings(args: argparse.Namespace, source: PixelBuffer) -> PipelineSettings:
    palette = resolve_palette(args.palette)
    if args.kmeans > 0 and palette:
        warn("--kmeans generates its own palette; ignoring --palette")
        palette = ()
    return PipelineSettings(
        target_width=_target_width(args, source),
        target_height=args.height,
        resampling=args.resample,
        dither=args.dither,
        dither_strength=args.strength,
        colour_metric=args.metric,
        preserve_detail=args.preserve_detail,
        use_kmeans=args.kmeans > 0,
        kmeans_colours=max(args.kmeans, 0),
        brightness=args.brightness,
        contrast=args.contrast,
        saturation=args.saturation,
        preprocess=args.preprocess,
        preprocess_strength=args.preprocess_strength,
        palette=palette,
        seed=args.seed,
    )


def _request(worker: PixelatorWorker, message: Dict[str, Any]) -> Dict[str, Any]:
    """Post one request and wait; error responses end the run with status 1."""
    response = worker.post(message).result()
    if response.get("type") == "error":
        error(str(response.get("message")))
        sys.exit(1)
    return response


# Entry point


def main(argv: Optional[List[str]] = None) -> None:
    enable_line_buffered_stdout()
    args = parse_cli_args(argv)

    src: Path = args.src
    if not src.is_file():
        error(f"not found: {src}")
        sys.exit(2)
    if not is_image_file(src):
        error(f"not an image: {src}")
        sys.exit(2)

    t_start = time.perf_counter()
    print_banner(src.name)
    source = load_image_rgba(src)
    try:
        settings = _build_settings(args, source)
    except ValueError as exc:
        error(str(exc))
        sys.exit(1)

    print_config_line(
        "run",
        [
            ("Source", f"{source.width}x{source.height}"),
            ("Output", f"{settings.target_width}x{settings.target_height}"),
            ("Palette", len(settings.palette) if settings.palette else "none"),
            ("Dither", settings.dither),
            ("Metric", settings.colour_metric),
        ],
        debug=False,
    )
    if has_semi_transparent(source) and settings.palette:
        warn("semi-transparent pixels become fully opaque or fully transparent")

    with PixelatorWorker(max_workers=1, debug=args.debug) as worker:
        if args.filter_trivial and settings.palette:
            first = _request(
                worker, {"type": "pixelate", "sourcePixels": source, "settings": settings}
            )
            stats = colour_usage(first["resultPixels"].as_array())
            settings = settings.with_changes(filter_trivial=True, colour_stats=tuple(stats))
            if args.debug:
                debug_log(f"usage pass found {len(stats)} colours")

        result = _request(
            worker, {"type": "pixelate", "sourcePixels": source, "settings": settings}
        )
        suggestions: List[str] = []
        if args.suggest > 0:
            suggest_palette = settings.palette or tuple(
                result.get("generatedPalette") or ()
            )
            suggestions = _request(
                worker,
                {
                    "type": "suggest",
                    "sourcePixels": source,
                    "palette": [rgb_to_hex(rgb) for rgb in suggest_palette],
                    "numSuggestions": args.suggest,
                    "preferDistinct": args.distinct,
                    "seed": args.seed,
                },
            )["suggestions"]

    pixels: PixelBuffer = result["resultPixels"]
    out_path = args.out or src.with_name(f"{src.stem}_pixel.png")
    out_path = save_image_rgba(out_path, pixels)

    log(f"Wrote {out_path.name} | size={pixels.width}x{pixels.height}")
    usage = colour_usage(pixels.as_array())
    log("Colours used:")
    for line in colour_usage_lines(usage, limit=0 if args.debug else 32):
        log(f"  {line}")
    log(f"Total pixels: {sum(row.count for row in usage):,}")

    generated = result.get("generatedPalette")
    if generated:
        log(f"Generated palette: {', '.join(generated)}")
    if args.suggest > 0:
        if suggestions:
            log(f"Suggested colours: {', '.join(suggestions)}")
        else:
            log("Suggested colours: (none)")

    if args.debug:
        debug_log(
            key_value_pairs_to_string(
                [("Colours", len(usage)), ("Suggestions", len(suggestions))]
            )
        )
    log(f"Total time {format_total_duration_compact(time.perf_counter() - t_start)}")


if __name__ == "__main__":
    main()
