# pixelator/settings.py
from __future__ import annotations

"""
Per-run pipeline configuration.

Exports:
  PipelineSettings            frozen record of one pixelate request
  PipelineSettings.from_mapping(wire)   camelCase request keys -> settings
  PipelineSettings.to_mapping()         settings -> camelCase keys
  config_pairs(settings)      (label, value) pairs for print_config_line
"""

from dataclasses import dataclass, field, replace
from typing import Any, List, Mapping, Optional, Tuple

from .colour_distance import ColourMetric
from .colour_select import ColourUsage, usage_percent_map
from .constants import DEFAULT_PREPROCESS_STRENGTH, TRIVIAL_USAGE_PERCENT
from .core_types import Palette, parse_palette, rgb_to_hex
from .dither import resolve_dither
from .filters import PreprocessMethod
from .resample import ResampleMethod

DEFAULT_DITHER_STRENGTH = 100.0
DEFAULT_KMEANS_COLOURS = 16

# wire key -> field name
_WIRE_KEYS: Tuple[Tuple[str, str], ...] = (
    ("targetWidth", "target_width"),
    ("targetHeight", "target_height"),
    ("resamplingMethod", "resampling"),
    ("ditherMethod", "dither"),
    ("ditherStrength", "dither_strength"),
    ("colorMatchAlgorithm", "colour_metric"),
    ("preserveDetailThreshold", "preserve_detail"),
    ("useKmeans", "use_kmeans"),
    ("kmeansColors", "kmeans_colours"),
    ("brightness", "brightness"),
    ("contrast", "contrast"),
    ("saturation", "saturation"),
    ("preprocessingMethod", "preprocess"),
    ("preprocessingStrength", "preprocess_strength"),
    ("palette", "palette"),
    ("filterTrivialColors", "filter_trivial"),
    ("colorStats", "colour_stats"),
    ("trivialThreshold", "trivial_threshold"),
    ("seed", "seed"),
)


@dataclass(frozen=True)
class PipelineSettings:
    """
    Everything one pixelate run needs besides the source pixels.

    Enum-like fields hold normalised names ('bilinear', 'floyd-steinberg', ...);
    construction rejects unknown names and out-of-range values with ValueError.
    """

    target_width: int
    target_height: int
    resampling: str = ResampleMethod.NEAREST.value
    dither: str = "none"
    dither_strength: float = DEFAULT_DITHER_STRENGTH
    colour_metric: str = ColourMetric.OKLAB.value
    preserve_detail: float = 0.0
    use_kmeans: bool = False
    kmeans_colours: int = DEFAULT_KMEANS_COLOURS
    brightness: float = 0.0
    contrast: float = 0.0
    saturation: float = 0.0
    preprocess: str = PreprocessMethod.NONE.value
    preprocess_strength: float = DEFAULT_PREPROCESS_STRENGTH
    palette: Palette = ()
    filter_trivial: bool = False
    colour_stats: Tuple[ColourUsage, ...] = field(default=(), repr=False)
    trivial_threshold: float = TRIVIAL_USAGE_PERCENT
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        set_ = object.__setattr__
        width, height = int(self.target_width), int(self.target_height)
        if width <= 0 or height <= 0:
            raise ValueError(f"target size must be positive, got {width}x{height}")
        set_(self, "target_width", width)
        set_(self, "target_height", height)

        set_(self, "resampling", ResampleMethod.parse(self.resampling).value)
        set_(self, "dither", resolve_dither(self.dither).name)
        set_(self, "colour_metric", ColourMetric.parse(self.colour_metric).value)
        set_(self, "preprocess", PreprocessMethod.parse(self.preprocess).value)

        set_(self, "dither_strength", float(self.dither_strength))
        if not 0.0 <= self.dither_strength <= 100.0:
            raise ValueError("dither strength must be within 0..100")
        set_(self, "preserve_detail", float(self.preserve_detail))
        if self.preserve_detail < 0.0:
            raise ValueError("preserve detail threshold must be >= 0")
        set_(self, "kmeans_colours", int(self.kmeans_colours))
        set_(self, "preprocess_strength", float(self.preprocess_strength))
        if not 0.0 <= self.preprocess_strength <= 100.0:
            raise ValueError("preprocessing strength must be within 0..100")
        if float(self.contrast) >= 259.0:
            raise ValueError("contrast must be below 259")

        set_(self, "palette", parse_palette(self.palette))
        set_(self, "colour_stats", _coerce_stats(self.colour_stats))

    @property
    def kmeans_enabled(self) -> bool:
        return bool(self.use_kmeans) and self.kmeans_colours > 0

    def with_changes(self, **changes: Any) -> "PipelineSettings":
        return replace(self, **changes)

    @classmethod
    def from_mapping(cls, wire: Mapping[str, Any]) -> "PipelineSettings":
        """
        Build settings from a request mapping using the camelCase keys the
        host sends. Missing or null values take the defaults; a zero or
        missing preprocessing strength means the default strength.
        """
        if not isinstance(wire, Mapping):
            raise TypeError("settings must be a mapping")
        kwargs = {}
        for wire_key, name in _WIRE_KEYS:
            value = wire.get(wire_key)
            if value is None:
                value = wire.get(name)
            if value is not None:
                kwargs[name] = value
        for required in ("target_width", "target_height"):
            if required not in kwargs:
                raise ValueError(f"settings missing {required}")
        if not kwargs.get("preprocess_strength"):
            kwargs.pop("preprocess_strength", None)
        return cls(**kwargs)

    def to_mapping(self) -> dict:
        out = {}
        for wire_key, name in _WIRE_KEYS:
            value = getattr(self, name)
            if name == "palette":
                value = [rgb_to_hex(rgb) for rgb in value]
            elif name == "colour_stats":
                value = [row.to_dict() for row in value]
            out[wire_key] = value
        return out


def _coerce_stats(stats: Any) -> Tuple[ColourUsage, ...]:
    """Stats rows as ColourUsage; a plain hex -> percent mapping has no counts (0)."""
    if not stats:
        return ()
    if isinstance(stats, Mapping):
        return tuple(
            ColourUsage(hex=hx, count=0, percent=pct)
            for hx, pct in usage_percent_map(stats).items()
        )
    return tuple(
        row if isinstance(row, ColourUsage) else ColourUsage.from_mapping(row) for row in stats
    )


def config_pairs(settings: PipelineSettings) -> List[Tuple[str, Any]]:
    """Short (label, value) pairs describing a run, for the config log line."""
    pairs: List[Tuple[str, Any]] = [
        ("Size", f"{settings.target_width}x{settings.target_height}"),
        ("Resample", settings.resampling),
        ("Dither", settings.dither),
        ("Strength", settings.dither_strength),
        ("Metric", settings.colour_metric),
        ("Palette", len(settings.palette)),
    ]
    if settings.preserve_detail:
        pairs.append(("Detail", settings.preserve_detail))
    if settings.kmeans_enabled:
        pairs.append(("K-means", settings.kmeans_colours))
    if settings.preprocess != PreprocessMethod.NONE.value:
        pairs.append(("Filter", f"{settings.preprocess}@{settings.preprocess_strength:g}"))
    if settings.filter_trivial:
        pairs.append(("Trivial", True))
    return pairs


__all__ = [
    "DEFAULT_DITHER_STRENGTH",
    "DEFAULT_KMEANS_COLOURS",
    "PipelineSettings",
    "config_pairs",
]
