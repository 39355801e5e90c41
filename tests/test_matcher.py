"""Tests for the cached nearest-colour matcher."""
import numpy as np
import pytest

from pixelator.colour_distance import ColourMetric
from pixelator.matcher import NearestColourMatcher, pack_rgb_key

PALETTE = ((0, 0, 0), (255, 255, 255), (255, 0, 0), (0, 0, 255))


class TestNearestColourMatcher:
    """Palette lookups, caching and detail preservation."""

    @pytest.mark.parametrize("metric", list(ColourMetric))
    def test_palette_entries_match_themselves(self, metric):
        matcher = NearestColourMatcher(PALETTE, metric)
        for colour in PALETTE:
            result = matcher.match(*colour)
            assert result.rgb == colour
            assert result.distance == pytest.approx(0.0, abs=1e-9)

    def test_near_colours(self):
        matcher = NearestColourMatcher(PALETTE, "cie76")
        assert matcher.match(10, 10, 10).rgb == (0, 0, 0)
        assert matcher.match(240, 20, 20).rgb == (255, 0, 0)
        assert matcher.match(245, 245, 245).rgb == (255, 255, 255)

    def test_cache_counts_hits(self):
        """The second lookup of a colour is served from the cache."""
        matcher = NearestColourMatcher(PALETTE, "oklab")
        first = matcher.match(12, 34, 56)
        second = matcher.match(12, 34, 56)
        assert first is second
        assert matcher.hits == 1
        assert matcher.misses == 1
        assert matcher.cache_size == 1

    def test_float_channels_round_and_clamp(self):
        """Floats share a cache entry with their rounded, clamped integer colour."""
        matcher = NearestColourMatcher(PALETTE, "oklab")
        matcher.match(12.4, 33.6, 56.0)
        matcher.match(12, 34, 56)
        assert matcher.cache_size == 1
        assert matcher.match(-40.0, 300.0, 0.0) is matcher.match(0, 255, 0)

    def test_first_minimum_wins(self):
        """With duplicate entries the earlier one is returned."""
        matcher = NearestColourMatcher(((9, 9, 9), (0, 0, 0), (0, 0, 0)), "cie76")
        assert matcher.match(1, 1, 1).rgb == (0, 0, 0)

    def test_preserve_detail_keeps_close_pixels(self):
        """A pixel within the threshold keeps its own colour with distance 0."""
        matcher = NearestColourMatcher(PALETTE, "cie76", preserve_detail=5.0)
        result = matcher.match(3, 3, 3)
        assert result.rgb == (3, 3, 3)
        assert result.distance == 0.0

    def test_preserve_detail_snaps_far_pixels(self):
        matcher = NearestColourMatcher(PALETTE, "cie76", preserve_detail=5.0)
        assert matcher.match(60, 60, 60).rgb == (0, 0, 0)

    def test_zero_threshold_always_snaps(self):
        matcher = NearestColourMatcher(PALETTE, "cie76", preserve_detail=0.0)
        assert matcher.match(1, 1, 1).rgb == (0, 0, 0)

    def test_match_many(self):
        matcher = NearestColourMatcher(PALETTE, "cie76")
        rows = np.array([[5, 5, 5], [250, 250, 250], [5, 5, 5], [200, 10, 30]], dtype=np.float64)
        out = matcher.match_many(rows)
        assert out.dtype == np.uint8
        np.testing.assert_array_equal(
            out, [[0, 0, 0], [255, 255, 255], [0, 0, 0], [255, 0, 0]]
        )
        # three distinct colours, each matched once
        assert matcher.misses == 3

    def test_match_many_empty(self):
        matcher = NearestColourMatcher(PALETTE)
        assert matcher.match_many(np.zeros((0, 3))).shape == (0, 3)

    def test_empty_palette_rejected(self):
        with pytest.raises(ValueError):
            NearestColourMatcher(())

    def test_negative_threshold_rejected(self):
        with pytest.raises(ValueError):
            NearestColourMatcher(PALETTE, preserve_detail=-1.0)


def test_pack_rgb_key():
    assert pack_rgb_key(0x12, 0x34, 0x56) == 0x123456
