# pixelator/suggest.py
from __future__ import annotations

"""
Palette suggestions: colours the image uses a lot that the palette covers badly.

Steps:
  1) sample ~4096 opaque pixels evenly across the image
  2) k-means (k <= 128, or <= 256 when preferring distinct colours)
  3) score each cluster: CIE76 distance to the nearest palette colour x pixel count
  4) rank by score; take the top N, or greedily keep only candidates at least
     MIN_DISTINCTNESS away (CIE76) from every colour already picked

The scoring metric is fixed to CIE76 regardless of the pipeline's metric.
"""

import math
from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

from .colour_convert import rgb_to_lab
from .colour_distance import delta_e_cie76
from .constants import (
    DEFAULT_NUM_SUGGESTIONS,
    MIN_DISTINCTNESS,
    SUGGEST_MAX_CLUSTERS,
    SUGGEST_MAX_CLUSTERS_DISTINCT,
    SUGGEST_SAMPLE_BUDGET,
)
from .core_types import HexStr, RGBTuple, U8RGBA, assert_u8_rgba, palette_to_array, rgb_to_hex
from .kmeans import RngLike, kmeans, opaque_samples


@dataclass(frozen=True)
class Candidate:
    """One cluster centre scored against the palette."""

    rgb: RGBTuple
    hex: HexStr
    error: float  # min CIE76 distance to the palette
    count: int  # samples in the cluster
    total_error: float  # error * count


def sample_stride(total_pixels: int, budget: int = SUGGEST_SAMPLE_BUDGET) -> int:
    """Pixel stride so roughly `budget` pixels are visited."""
    return max(1, math.ceil(total_pixels / max(1, int(budget))))


def score_clusters(
    rgba: U8RGBA,
    palette: Sequence[RGBTuple],
    *,
    prefer_distinct: bool = False,
    sample_budget: int = SUGGEST_SAMPLE_BUDGET,
    rng: RngLike = None,
) -> List[Candidate]:
    """Cluster sampled pixels and rank clusters by total palette error, highest first."""
    img = assert_u8_rgba(rgba)
    total = int(img.shape[0] * img.shape[1])
    samples = opaque_samples(img, stride=sample_stride(total, sample_budget))
    if samples.shape[0] == 0 or len(palette) == 0:
        return []

    cap = SUGGEST_MAX_CLUSTERS_DISTINCT if prefer_distinct else SUGGEST_MAX_CLUSTERS
    result = kmeans(samples, min(cap, samples.shape[0]), rng=rng)
    counts = result.counts()

    pal_lab = rgb_to_lab(palette_to_array(palette))
    candidates: List[Candidate] = []
    for centroid, count in zip(result.centroids, counts.tolist()):
        if count == 0:
            continue
        rgb = tuple(int(math.floor(c + 0.5)) for c in centroid.tolist())
        err = float(np.min(delta_e_cie76(rgb_to_lab(rgb), pal_lab)))
        candidates.append(
            Candidate(
                rgb=rgb,  # type: ignore[arg-type]
                hex=rgb_to_hex(rgb),
                error=err,
                count=int(count),
                total_error=err * count,
            )
        )

    candidates.sort(key=lambda c: -c.total_error)
    return candidates


def pick_distinct(
    candidates: Sequence[Candidate], limit: int, min_distance: float = MIN_DISTINCTNESS
) -> List[Candidate]:
    """Greedy pick in rank order, skipping anything closer than min_distance to a pick."""
    selected: List[Candidate] = []
    selected_lab: List[np.ndarray] = []
    for cand in candidates:
        if len(selected) >= limit:
            break
        lab = rgb_to_lab(cand.rgb)
        if any(float(delta_e_cie76(lab, s)) < min_distance for s in selected_lab):
            continue
        selected.append(cand)
        selected_lab.append(lab)
    return selected


def suggest_colours(
    rgba: U8RGBA,
    palette: Sequence[RGBTuple],
    num_suggestions: int = DEFAULT_NUM_SUGGESTIONS,
    prefer_distinct: bool = False,
    *,
    sample_budget: int = SUGGEST_SAMPLE_BUDGET,
    min_distinctness: float = MIN_DISTINCTNESS,
    rng: RngLike = None,
) -> List[HexStr]:
    """
    Suggest up to num_suggestions hex colours missing from the palette.
    Empty palette, no opaque pixels, or a non-positive count give [].
    """
    if num_suggestions <= 0 or len(palette) == 0:
        return []
    ranked = score_clusters(
        rgba,
        palette,
        prefer_distinct=prefer_distinct,
        sample_budget=sample_budget,
        rng=rng,
    )
    if not prefer_distinct:
        return [c.hex for c in ranked[: int(num_suggestions)]]
    return [c.hex for c in pick_distinct(ranked, int(num_suggestions), min_distinctness)]


__all__ = [
    "Candidate",
    "sample_stride",
    "score_clusters",
    "pick_distinct",
    "suggest_colours",
]
