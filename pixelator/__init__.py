# pixelator/__init__.py
"""
pixelator package.

Purpose:
  Turn arbitrary RGBA images into palette-constrained pixel art. See
  pixelate.py for the CLI.

Public API:
  run_pipeline     : one pixelate run (source pixels + settings -> result).
  handle_message   : request/response protocol ('pixelate' / 'suggest').
  PixelatorWorker  : non-cancelable background channel for requests.
  PipelineSettings : per-run configuration record.
  suggest_colours  : palette suggestions from k-means clusters.
  colour_convert   : sRGB -> XYZ -> CIELAB, sRGB -> OKLab.
  colour_distance  : oklab, ciede2000, cie94, cie76, redmean metrics.
  matcher          : cached nearest-colour matching.
  resample         : nearest, bilinear (area-aware), lanczos.
  dither           : quantisation, ordered dithering, error diffusion.
  kmeans           : k-means clustering of opaque pixels.
  filters / adjust : preprocessing filters and colour modifiers.
  palette_data     : built-in palettes and palette parsing.
  colour_select    : usage statistics and trivial-colour filtering.
  utils            : logging and formatting helpers.

Quick start:
  from pixelator import PipelineSettings, run_pipeline
  from pixelator.palette_data import builtin_palette
"""

__version__ = "0.1.0"

# Re-export namespaces for convenience.
from . import adjust
from . import colour_convert
from . import colour_distance
from . import colour_select
from . import constants
from . import core_types
from . import dither
from . import filters
from . import kmeans
from . import matcher
from . import palette_data
from . import resample
from . import suggest
from . import utils

from .core_types import PixelBuffer  # noqa: E402,F401
from .colour_distance import ColourMetric  # noqa: E402,F401
from .matcher import NearestColourMatcher  # noqa: E402,F401
from .settings import PipelineSettings  # noqa: E402,F401
from .pipeline import PipelineResult, handle_message, run_pipeline  # noqa: E402,F401
from .suggest import suggest_colours  # noqa: E402,F401
from .worker import PixelatorWorker, Response  # noqa: E402,F401

__all__ = [
    "__version__",
    "adjust",
    "colour_convert",
    "colour_distance",
    "colour_select",
    "constants",
    "core_types",
    "dither",
    "filters",
    "kmeans",
    "matcher",
    "palette_data",
    "resample",
    "suggest",
    "utils",
    "PixelBuffer",
    "ColourMetric",
    "NearestColourMatcher",
    "PipelineSettings",
    "PipelineResult",
    "handle_message",
    "run_pipeline",
    "suggest_colours",
    "PixelatorWorker",
    "Response",
]
