"""Tests for nearest, bilinear and Lanczos resampling."""
import numpy as np
import pytest

from conftest import make_rgba, solid
from pixelator.resample import (
    ResampleMethod,
    lanczos_kernel,
    resample,
    resample_bilinear,
    resample_lanczos,
    resample_nearest,
)


class TestNearest:
    def test_same_size_is_identity(self, gradient):
        """Resampling to the source size returns the source pixels exactly."""
        out = resample_nearest(gradient, 32, 32)
        np.testing.assert_array_equal(out, gradient)
        assert out is not gradient

    def test_downscale_picks_floor_indices(self):
        src = np.arange(4 * 4 * 4, dtype=np.uint8).reshape(4, 4, 4)
        out = resample_nearest(src, 2, 2)
        np.testing.assert_array_equal(out, src[[0, 2]][:, [0, 2]])

    def test_upscale_repeats(self):
        src = make_rgba([[(10, 20, 30), (40, 50, 60)]])
        out = resample_nearest(src, 4, 2)
        assert out.shape == (2, 4, 4)
        np.testing.assert_array_equal(out[:, :2, :3], np.full((2, 2, 3), [10, 20, 30]))
        np.testing.assert_array_equal(out[:, 2:, :3], np.full((2, 2, 3), [40, 50, 60]))


class TestBilinear:
    def test_uniform_downscale_keeps_value(self):
        """4x4 uniform grey to 2x2 stays exactly the same grey."""
        src = solid(4, 4, (128, 128, 128))
        out = resample_bilinear(src, 2, 2)
        assert out.shape == (2, 2, 4)
        np.testing.assert_array_equal(out, solid(2, 2, (128, 128, 128)))

    def test_area_average(self):
        """Halving averages each 2x2 block."""
        rgb = np.zeros((2, 2, 3), dtype=np.uint8)
        rgb[0, 0] = (200, 100, 0)
        rgb[1, 1] = (200, 100, 40)
        out = resample_bilinear(make_rgba(rgb), 1, 1)
        np.testing.assert_array_equal(out[0, 0], [100, 50, 10, 255])

    def test_non_integer_ratio_uniform(self):
        src = solid(7, 5, (33, 66, 99))
        np.testing.assert_array_equal(resample_bilinear(src, 3, 2), solid(3, 2, (33, 66, 99)))

    def test_upscale_endpoints(self):
        """Upscaling starts at the first source pixel."""
        src = make_rgba([[(0, 0, 0), (100, 100, 100)]])
        out = resample_bilinear(src, 4, 1)
        assert tuple(out[0, 0, :3]) == (0, 0, 0)
        assert np.all(np.diff(out[0, :, 0].astype(int)) >= 0)


class TestLanczos:
    def test_kernel_shape(self):
        np.testing.assert_allclose(lanczos_kernel(np.array([0.0, 1.0, 2.0, 3.0, 4.0])), [1, 0, 0, 0, 0], atol=1e-12)

    @pytest.mark.parametrize("size", [(8, 8), (3, 5), (20, 13)])
    def test_uniform_stays_uniform(self, size):
        src = solid(10, 10, (90, 180, 45))
        out = resample_lanczos(src, *size)
        assert out.shape == (size[1], size[0], 4)
        np.testing.assert_array_equal(out, solid(size[0], size[1], (90, 180, 45)))

    def test_hard_edge_keeps_sides(self):
        """A black | white edge stays dark on the left and light on the right."""
        rgb = np.zeros((8, 8, 3), dtype=np.uint8)
        rgb[:, 4:] = 255
        out = resample_lanczos(make_rgba(rgb), 5, 5)
        assert out.dtype == np.uint8
        assert out[:, 0, 0].max() < 64
        assert out[:, -1, 0].min() > 191


class TestDispatch:
    @pytest.mark.parametrize("method", list(ResampleMethod))
    def test_all_methods_reach_target_size(self, method, gradient):
        out = resample(gradient, 10, 7, method)
        assert out.shape == (7, 10, 4)

    def test_alpha_is_resampled(self):
        src = solid(4, 4, (0, 0, 0), alpha=0)
        out = resample(src, 2, 2, "bilinear")
        assert np.all(out[..., 3] == 0)

    @pytest.mark.parametrize("size", [(0, 4), (4, 0), (-1, 2)])
    def test_bad_target_size(self, size, gradient):
        with pytest.raises(ValueError):
            resample(gradient, *size, "nearest")

    def test_unknown_method(self, gradient):
        with pytest.raises(ValueError):
            resample(gradient, 4, 4, "bicubic")
