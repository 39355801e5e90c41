"""Tests for k-means clustering of pixel samples."""
import numpy as np
import pytest

from conftest import make_rgba
from pixelator.kmeans import kmeans, opaque_samples


def _two_blobs(rng):
    a = rng.normal((30, 30, 30), 3.0, size=(200, 3))
    b = rng.normal((220, 40, 40), 3.0, size=(150, 3))
    return np.clip(np.vstack([a, b]), 0, 255)


class TestKMeans:
    """Bounds and cluster quality."""

    def test_separates_blobs(self):
        samples = _two_blobs(np.random.default_rng(1))
        result = kmeans(samples, 2, rng=7)
        assert result.k == 2
        centres = sorted(result.centroids.tolist())
        np.testing.assert_allclose(centres[0], [30, 30, 30], atol=2.0)
        np.testing.assert_allclose(centres[1], [220, 40, 40], atol=2.0)
        assert sorted(result.counts().tolist()) == [150, 200]

    @pytest.mark.parametrize("k", [1, 3, 8, 50])
    def test_no_empty_clusters(self, k):
        """Every returned centroid owns at least one sample."""
        samples = np.repeat(np.array([[0, 0, 0], [255, 255, 255], [9, 9, 9]], float), 4, axis=0)
        result = kmeans(samples, k, rng=3)
        assert result.k <= min(k, samples.shape[0])
        assert result.assignments.shape == (samples.shape[0],)
        assert np.all(result.counts() > 0)
        assert result.assignments.min() >= 0
        assert result.assignments.max() < result.k

    def test_k_larger_than_samples(self):
        samples = np.array([[1, 2, 3], [200, 100, 50]], dtype=np.float64)
        result = kmeans(samples, 10, rng=0)
        assert result.k == 2
        np.testing.assert_allclose(sorted(result.centroids.tolist()), sorted(samples.tolist()))

    @pytest.mark.parametrize("k", [0, -3])
    def test_non_positive_k(self, k):
        result = kmeans(np.ones((5, 3)), k)
        assert result.k == 0
        assert result.assignments.shape == (0,)

    def test_no_samples(self):
        assert kmeans(np.zeros((0, 3)), 4).k == 0

    def test_seeded_runs_repeat(self):
        samples = _two_blobs(np.random.default_rng(5))
        first = kmeans(samples, 4, rng=11)
        second = kmeans(samples, 4, rng=11)
        np.testing.assert_array_equal(first.centroids, second.centroids)
        np.testing.assert_array_equal(first.assignments, second.assignments)

    def test_assignments_are_nearest(self):
        samples = _two_blobs(np.random.default_rng(2))
        result = kmeans(samples, 3, rng=4)
        d = ((samples[:, None, :] - result.centroids[None, :, :]) ** 2).sum(axis=-1)
        np.testing.assert_array_equal(result.assignments, np.argmin(d, axis=1))


class TestSamples:
    def test_only_alpha_above_128(self):
        img = make_rgba([[(1, 1, 1), (2, 2, 2), (3, 3, 3)]])
        img[0, 0, 3] = 128
        img[0, 1, 3] = 129
        samples = opaque_samples(img)
        np.testing.assert_array_equal(samples, [[2, 2, 2], [3, 3, 3]])
        assert samples.dtype == np.float64

    def test_stride(self, gradient):
        assert opaque_samples(gradient, stride=4).shape == (32 * 32 // 4, 3)
