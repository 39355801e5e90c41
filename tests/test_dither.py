"""Tests for quantisation, ordered dithering and error diffusion."""
import numpy as np
import pytest

from conftest import make_rgba, solid
from pixelator.constants import DITHER_MATRICES, ERROR_KERNELS
from pixelator.dither import (
    ErrorDiffusion,
    NoDither,
    OrderedDither,
    apply_dither,
    error_diffusion_dither,
    resolve_dither,
)
from pixelator.matcher import NearestColourMatcher

ALL_METHODS = ["none", *DITHER_MATRICES, *ERROR_KERNELS]


class TestResolve:
    def test_variants(self):
        assert isinstance(resolve_dither("none"), NoDither)
        assert isinstance(resolve_dither(None), NoDither)
        assert isinstance(resolve_dither("bayer-8x8"), OrderedDither)
        assert isinstance(resolve_dither("Floyd-Steinberg"), ErrorDiffusion)

    def test_unknown(self):
        with pytest.raises(ValueError, match="unknown dither method"):
            resolve_dither("atkinson")

    def test_tables(self):
        """Six matrices with in-range thresholds; five kernels summing to one."""
        assert len(DITHER_MATRICES) == 6
        assert len(ERROR_KERNELS) == 5
        for matrix in DITHER_MATRICES.values():
            arr = matrix.as_array()
            assert arr.shape == (matrix.size, matrix.size)
            assert arr.min() >= 0 and arr.max() < matrix.divisor
        for kernel in ERROR_KERNELS.values():
            assert sum(f for _, _, f in kernel.taps) == pytest.approx(1.0)
            assert all(dy > 0 or dx > 0 for dx, dy, _ in kernel.taps)


class TestQuantise:
    def test_black_white_scenario(self, scenario_2x2, bw_palette):
        """Near-black pixels go black, near-white pixels go white."""
        matcher = NearestColourMatcher(bw_palette, "cie76")
        out = apply_dither(scenario_2x2, matcher, "none", 0)
        expected = make_rgba([[(0, 0, 0), (255, 255, 255)], [(0, 0, 0), (255, 255, 255)]])
        np.testing.assert_array_equal(out, expected)

    def test_input_not_modified(self, gradient, bw_palette):
        before = gradient.copy()
        apply_dither(gradient, NearestColourMatcher(bw_palette), "floyd-steinberg", 100)
        np.testing.assert_array_equal(gradient, before)

    @pytest.mark.parametrize("method", ALL_METHODS)
    def test_output_only_uses_palette(self, method, gradient):
        palette = ((0, 0, 0), (255, 255, 255), (255, 0, 0), (0, 255, 0), (0, 0, 255))
        out = apply_dither(gradient, NearestColourMatcher(palette), method, 100)
        used = {tuple(int(c) for c in px) for px in out[..., :3].reshape(-1, 3)}
        assert used <= set(palette)


class TestAlpha:
    """Transparent pixels are cleared and never take part in diffusion."""

    @pytest.mark.parametrize("method", ALL_METHODS)
    def test_alpha_invariant(self, method, gradient, bw_palette):
        img = gradient.copy()
        img[::3, ::2, 3] = 127
        img[1::4, 1::3, 3] = 0
        img[2, 2, 3] = 128
        out = apply_dither(img, NearestColourMatcher(bw_palette), method, 100)

        transparent = img[..., 3] < 128
        assert np.all(out[..., 3][transparent] == 0)
        assert np.all(out[..., 3][~transparent] == 255)
        np.testing.assert_array_equal(out[..., :3][transparent], img[..., :3][transparent])

    def test_transparent_pixels_do_not_diffuse(self, bw_palette):
        """A transparent neighbour neither gives nor receives error."""
        img = solid(3, 1, (100, 100, 100))
        img[0, 1, 3] = 0
        img[0, 1, :3] = (255, 255, 255)
        with_gap = error_diffusion_dither(
            img, NearestColourMatcher(bw_palette, "cie76"), ERROR_KERNELS["floyd-steinberg"], 100
        )
        # the right pixel receives nothing: taps from x=0 only reach x=1 on this row
        alone = solid(1, 1, (100, 100, 100))
        ref = error_diffusion_dither(
            alone, NearestColourMatcher(bw_palette, "cie76"), ERROR_KERNELS["floyd-steinberg"], 100
        )
        np.testing.assert_array_equal(with_gap[0, 2], ref[0, 0])
        np.testing.assert_array_equal(with_gap[0, 1, :3], (255, 255, 255))


class TestErrorDiffusion:
    @pytest.mark.parametrize("kernel", list(ERROR_KERNELS))
    def test_uniform_palette_colour_has_no_error(self, kernel):
        """An image already in the palette comes back unchanged."""
        colour = (255, 0, 0)
        img = solid(9, 7, colour)
        out = apply_dither(img, NearestColourMatcher(((0, 0, 0), colour, (255, 255, 255))), kernel, 100)
        np.testing.assert_array_equal(out, img)

    def test_mid_grey_mixes_both_colours(self, bw_palette):
        """Grey diffused against black and white produces a mix of both."""
        img = solid(16, 16, (128, 128, 128))
        out = apply_dither(img, NearestColourMatcher(bw_palette, "redmean"), "floyd-steinberg", 100)
        white_share = float(np.mean(out[..., 0] == 255))
        assert 0.3 < white_share < 0.7

    def test_zero_strength_equals_plain_quantise(self, gradient, bw_palette):
        plain = apply_dither(gradient, NearestColourMatcher(bw_palette), "none")
        for name in ERROR_KERNELS:
            out = apply_dither(gradient, NearestColourMatcher(bw_palette), name, 0)
            np.testing.assert_array_equal(out, plain)


class TestOrdered:
    def test_zero_strength_equals_plain_quantise(self, gradient, bw_palette):
        plain = apply_dither(gradient, NearestColourMatcher(bw_palette), "none")
        for name in DITHER_MATRICES:
            out = apply_dither(gradient, NearestColourMatcher(bw_palette), name, 0)
            np.testing.assert_array_equal(out, plain)

    def test_pattern_on_mid_grey(self, bw_palette):
        """Bayer thresholds split a mid grey into a repeating black/white pattern."""
        img = solid(8, 8, (128, 128, 128))
        out = apply_dither(img, NearestColourMatcher(bw_palette, "redmean"), "bayer-4x4", 100)
        values = set(np.unique(out[..., 0]).tolist())
        assert values == {0, 255}
        np.testing.assert_array_equal(out[:4, :4], out[4:, 4:])
