"""Tests for colour space conversion and distance metrics."""
import numpy as np
import pytest

from pixelator.colour_convert import rgb_to_lab, rgb_to_linear, rgb_to_oklab, rgb_to_xyz
from pixelator.colour_distance import (
    ColourMetric,
    delta_e_cie76,
    delta_e_cie94,
    delta_e_ciede2000,
    distance,
)

SAMPLE_COLOURS = [
    (0, 0, 0),
    (255, 255, 255),
    (255, 0, 0),
    (0, 128, 255),
    (17, 200, 93),
    (128, 128, 128),
    (250, 5, 250),
]


class TestConversions:
    """sRGB -> XYZ -> CIELAB and sRGB -> OKLab."""

    def test_linearisation_branches(self):
        """Small values use the linear segment, larger ones the power curve."""
        v = np.array([0.04, 0.5, 1.0])
        out = rgb_to_linear(v)
        assert out[0] == pytest.approx(0.04 / 12.92)
        assert out[1] == pytest.approx(((0.5 + 0.055) / 1.055) ** 2.4)
        assert out[2] == pytest.approx(1.0)

    def test_white_xyz_is_d65(self):
        """White maps to the D65 white point scaled to 100."""
        np.testing.assert_allclose(rgb_to_xyz((255, 255, 255)), [95.05, 100.0, 108.9], atol=0.01)

    def test_lab_black_and_white(self):
        np.testing.assert_allclose(rgb_to_lab((0, 0, 0)), [0.0, 0.0, 0.0], atol=1e-9)
        np.testing.assert_allclose(rgb_to_lab((255, 255, 255)), [100.0, 0.0, 0.0], atol=0.05)

    def test_lab_red_reference(self):
        """Pure sRGB red is about L=53.24, a=80.09, b=67.20."""
        np.testing.assert_allclose(rgb_to_lab((255, 0, 0)), [53.24, 80.09, 67.20], atol=0.05)

    def test_oklab_white(self):
        np.testing.assert_allclose(rgb_to_oklab((255, 255, 255)), [1.0, 0.0, 0.0], atol=1e-3)

    def test_vectorised_matches_scalar(self):
        """Converting an array gives the same rows as converting one at a time."""
        arr = np.asarray(SAMPLE_COLOURS, dtype=np.float64)
        batch = rgb_to_lab(arr)
        for row, colour in zip(batch, SAMPLE_COLOURS):
            np.testing.assert_allclose(row, rgb_to_lab(colour))
        assert rgb_to_oklab(arr.reshape(7, 1, 3)).shape == (7, 1, 3)


class TestDistances:
    """Five metrics, shared contract."""

    @pytest.mark.parametrize("metric", list(ColourMetric))
    def test_identity_is_zero(self, metric):
        """distance(x, x) == 0 for every metric."""
        for colour in SAMPLE_COLOURS:
            assert float(distance(metric, colour, colour)) == pytest.approx(0.0, abs=1e-9)

    @pytest.mark.parametrize("metric", list(ColourMetric))
    def test_non_negative_and_separating(self, metric):
        d = float(distance(metric, (0, 0, 0), (255, 255, 255)))
        assert d > 0.0

    def test_cie76_black_white(self):
        d = delta_e_cie76(rgb_to_lab((0, 0, 0)), rgb_to_lab((255, 255, 255)))
        assert float(d) == pytest.approx(100.0, abs=0.05)

    def test_ciede2000_reference_pair(self):
        """First pair of the Sharma et al. CIEDE2000 test data."""
        d = delta_e_ciede2000(
            np.array([50.0, 2.6772, -79.7751]), np.array([50.0, 0.0, -82.7485])
        )
        assert float(d) == pytest.approx(2.0425, abs=1e-4)

    def test_ciede2000_hue_wraparound_pair(self):
        """Sharma pair 17: hues on both sides of 0 degrees."""
        d = delta_e_ciede2000(
            np.array([50.0, 2.5, 0.0]), np.array([73.0, 25.0, -18.0])
        )
        assert float(d) == pytest.approx(27.1492, abs=1e-4)

    def test_cie94_lightness_only(self):
        """With equal chroma and hue, CIE94 reduces to the lightness difference."""
        d = delta_e_cie94(np.array([50.0, 0.0, 0.0]), np.array([60.0, 0.0, 0.0]))
        assert float(d) == pytest.approx(10.0)

    def test_one_to_many_broadcast(self):
        pal = rgb_to_lab(np.array([(0, 0, 0), (255, 255, 255), (255, 0, 0)], dtype=np.float64))
        d = delta_e_ciede2000(rgb_to_lab((250, 10, 10)), pal)
        assert d.shape == (3,)
        assert int(np.argmin(d)) == 2

    def test_oklab_scaled(self):
        """OKLab distance is Euclidean x100, so black-white is about 100."""
        assert float(distance("oklab", (0, 0, 0), (255, 255, 255))) == pytest.approx(100.0, abs=0.1)


class TestMetricParsing:
    def test_parse_names(self):
        assert ColourMetric.parse("CIE76") is ColourMetric.CIE76
        assert ColourMetric.parse(None) is ColourMetric.OKLAB
        assert ColourMetric.parse(ColourMetric.REDMEAN) is ColourMetric.REDMEAN

    def test_parse_unknown(self):
        with pytest.raises(ValueError, match="unknown colour match algorithm"):
            ColourMetric.parse("cmc")
