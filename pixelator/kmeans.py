# pixelator/kmeans.py
from __future__ import annotations

"""
Plain Lloyd k-means over RGB samples, used for palette discovery.

Exports:
  opaque_samples(rgba, stride=1) -> float64 [N,3]
  kmeans(samples, k, max_iterations=20, rng=None) -> ClusterResult

Not globally optimal: random distinct initial centroids, squared Euclidean
RGB assignment, mean update, empty clusters reseeded with a random sample,
early exit once no centroid moves.
"""

from typing import Union

import numpy as np
from numpy.typing import NDArray

from .constants import ALPHA_SAMPLE_MIN, KMEANS_MAX_ITERATIONS
from .core_types import ClusterResult, U8RGBA, assert_u8_rgba

RngLike = Union[np.random.Generator, int, None]

# Rows of samples handled per distance block.
_ASSIGN_BLOCK = 4096


def make_rng(rng: RngLike) -> np.random.Generator:
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)


def opaque_samples(rgba: U8RGBA, stride: int = 1) -> NDArray[np.float64]:
    """Every stride-th pixel (raster order) with alpha > 128, as float RGB rows."""
    flat = assert_u8_rgba(rgba).reshape(-1, 4)[:: max(1, int(stride))]
    keep = flat[:, 3] > ALPHA_SAMPLE_MIN
    return flat[keep, :3].astype(np.float64)


def _assign(samples: np.ndarray, centroids: np.ndarray) -> NDArray[np.int64]:
    """Nearest centroid per sample by squared Euclidean distance (first minimum wins)."""
    out = np.empty(samples.shape[0], dtype=np.int64)
    for start in range(0, samples.shape[0], _ASSIGN_BLOCK):
        block = samples[start : start + _ASSIGN_BLOCK]
        diff = block[:, None, :] - centroids[None, :, :]
        out[start : start + block.shape[0]] = np.argmin(
            np.einsum("nkc,nkc->nk", diff, diff), axis=1
        )
    return out


def _empty_result() -> ClusterResult:
    return ClusterResult(
        np.zeros((0, 3), dtype=np.float64), np.zeros((0,), dtype=np.int64)
    )


def kmeans(
    samples: np.ndarray,
    k: int,
    max_iterations: int = KMEANS_MAX_ITERATIONS,
    rng: RngLike = None,
) -> ClusterResult:
    """
    Cluster RGB samples into at most k groups.

    Returns centroids [k',3] and per-sample assignments, k' <= min(k, N).
    Assignments are recomputed against the final centroids and centroids
    that end up with no samples are dropped, so every returned cluster
    owns at least one sample.
    """
    data = np.asarray(samples, dtype=np.float64).reshape(-1, 3)
    n = int(data.shape[0])
    k = min(int(k), n)
    if k <= 0:
        return _empty_result()

    gen = make_rng(rng)
    centroids = data[gen.choice(n, size=k, replace=False)].copy()

    for _ in range(max(1, int(max_iterations))):
        assignments = _assign(data, centroids)
        counts = np.bincount(assignments, minlength=k)
        sums = np.zeros((k, 3), dtype=np.float64)
        np.add.at(sums, assignments, data)

        new_centroids = np.empty_like(centroids)
        filled = counts > 0
        new_centroids[filled] = sums[filled] / counts[filled, None]
        for j in np.flatnonzero(~filled).tolist():
            new_centroids[j] = data[int(gen.integers(n))]

        moved = not np.array_equal(new_centroids, centroids)
        centroids = new_centroids
        if not moved:
            break

    assignments = _assign(data, centroids)
    counts = np.bincount(assignments, minlength=k)
    if np.all(counts > 0):
        return ClusterResult(centroids, assignments)

    keep = np.flatnonzero(counts > 0)
    remap = np.full(k, -1, dtype=np.int64)
    remap[keep] = np.arange(keep.size, dtype=np.int64)
    return ClusterResult(centroids[keep], remap[assignments])


__all__ = ["RngLike", "make_rng", "opaque_samples", "kmeans"]
