"""Tests for palette colour suggestions."""
import itertools

import pytest

from conftest import solid
from pixelator.colour_convert import rgb_to_lab
from pixelator.colour_distance import delta_e_cie76
from pixelator.core_types import hex_to_rgb
from pixelator.suggest import pick_distinct, sample_stride, score_clusters, suggest_colours


def _lab_distance(hex_a, hex_b):
    return float(delta_e_cie76(rgb_to_lab(hex_to_rgb(hex_a)), rgb_to_lab(hex_to_rgb(hex_b))))


class TestSuggestColours:
    def test_missing_colour_ranks_first(self, bw_palette):
        """A large red area the palette cannot express is suggested first."""
        img = solid(16, 16, (0, 0, 0))
        img[:, 8:, :3] = (255, 0, 0)
        out = suggest_colours(img, bw_palette, 1, rng=0)
        assert out == ["#FF0000"]

    def test_hex_format(self, gradient, bw_palette):
        out = suggest_colours(gradient, bw_palette, 5, rng=1)
        assert 0 < len(out) <= 5
        for hx in out:
            assert hx.startswith("#") and len(hx) == 7
            assert hx == hx.upper()

    def test_prefer_distinct_spacing(self, gradient, bw_palette):
        """Every pair of distinct-mode suggestions is at least 30 apart in CIELAB."""
        out = suggest_colours(gradient, bw_palette, 8, prefer_distinct=True, rng=2)
        assert len(out) >= 2
        for a, b in itertools.combinations(out, 2):
            assert _lab_distance(a, b) >= 30.0

    def test_custom_distinctness(self, gradient, bw_palette):
        out = suggest_colours(
            gradient, bw_palette, 8, prefer_distinct=True, min_distinctness=60.0, rng=2
        )
        for a, b in itertools.combinations(out, 2):
            assert _lab_distance(a, b) >= 60.0

    def test_empty_palette(self, gradient):
        assert suggest_colours(gradient, (), 5) == []

    def test_fully_transparent_image(self, bw_palette):
        assert suggest_colours(solid(8, 8, (255, 0, 0), alpha=0), bw_palette, 5) == []

    def test_zero_requested(self, gradient, bw_palette):
        assert suggest_colours(gradient, bw_palette, 0) == []


class TestScoring:
    def test_sorted_by_total_error(self, gradient, bw_palette):
        ranked = score_clusters(gradient, bw_palette, rng=3)
        totals = [c.total_error for c in ranked]
        assert totals == sorted(totals, reverse=True)
        for cand in ranked:
            assert cand.total_error == pytest.approx(cand.error * cand.count)

    def test_sample_stride(self):
        assert sample_stride(4096) == 1
        assert sample_stride(4097) == 2
        assert sample_stride(100, budget=10) == 10
        assert sample_stride(0) == 1

    def test_pick_distinct_limit(self, gradient, bw_palette):
        ranked = score_clusters(gradient, bw_palette, rng=4)
        assert len(pick_distinct(ranked, 2)) <= 2
        assert pick_distinct(ranked, 0) == []
