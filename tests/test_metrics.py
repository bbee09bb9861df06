"""Tests for the sort key metrics."""

import itertools

import numpy as np
import pytest

from metrics import (
    Metric,
    clamp_thresholds,
    hue,
    key_function,
    luminance,
    parse_metric,
    saturation,
    sort_key,
    threshold_upper_boundary,
)

CHANNEL_STEPS = range(0, 256, 17)


def sample_pixels():
    for r, g, b in itertools.product(CHANNEL_STEPS, repeat=3):
        yield (r, g, b, 255)


class TestLuminance:
    def test_primaries(self):
        assert luminance((255, 0, 0, 255)) == 54
        assert luminance((0, 255, 0, 255)) == 182
        assert luminance((0, 0, 255, 255)) == 18

    def test_gray_equals_level(self):
        for level in (0, 1, 77, 128, 254, 255):
            assert luminance((level, level, level, 255)) == level

    def test_alpha_is_ignored(self):
        assert luminance((40, 90, 200, 0)) == luminance((40, 90, 200, 255))

    def test_accepts_numpy_pixels(self):
        pixel = np.array([255, 255, 255, 255], dtype=np.uint8)
        assert luminance(pixel) == 255


class TestHue:
    @pytest.mark.parametrize(
        "pixel, expected",
        [
            ((255, 0, 0, 255), 0),
            ((255, 255, 0, 255), 60),
            ((0, 255, 0, 255), 120),
            ((0, 255, 255, 255), 180),
            ((0, 0, 255, 255), 240),
            ((255, 0, 255, 255), 300),
        ],
    )
    def test_color_wheel(self, pixel, expected):
        assert hue(pixel) == expected

    def test_negative_hue_wraps_and_truncates(self):
        # -0.235 degrees wraps to 359.76, truncated to 359
        assert hue((255, 0, 1, 255)) == 359

    def test_truncates_toward_zero(self):
        # (128 - 0) / 255 * 60 = 30.1...
        assert hue((255, 128, 0, 255)) == 30


class TestSaturation:
    def test_pure_color_is_fully_saturated(self):
        assert saturation((255, 0, 0, 255)) == 255
        assert saturation((0, 0, 128, 255)) == 255

    def test_hsl_saturation_values(self):
        assert saturation((128, 64, 64, 255)) == 85
        assert saturation((200, 100, 100, 255)) == 121

    def test_near_white_with_chroma(self):
        assert saturation((255, 255, 254, 255)) == 255


class TestGrayPixelConvention:
    """Gray pixels have no hue or saturation; by convention both keys are 0."""

    @pytest.mark.parametrize("level", [0, 1, 100, 254, 255])
    def test_gray_hue_and_saturation_are_zero(self, level):
        pixel = (level, level, level, 255)
        assert hue(pixel) == 0
        assert saturation(pixel) == 0

    def test_gray_falls_into_low_hue_window(self):
        # A gray pixel selects together with pure reds under a [0, 10] hue window
        assert 0 <= sort_key(Metric.HUE, (90, 90, 90, 255)) <= 10


class TestDomains:
    def test_luminance_domain(self):
        assert all(0 <= luminance(p) <= 255 for p in sample_pixels())

    def test_saturation_domain(self):
        assert all(0 <= saturation(p) <= 255 for p in sample_pixels())

    def test_hue_domain(self):
        assert all(0 <= hue(p) < 360 for p in sample_pixels())

    def test_random_pixels_within_upper_boundary(self):
        rng = np.random.default_rng(3)
        pixels = rng.integers(0, 256, size=(500, 4), dtype=np.uint8)
        for metric in Metric:
            upper = threshold_upper_boundary(metric)
            keys = [sort_key(metric, p) for p in pixels]
            assert min(keys) >= 0
            assert max(keys) <= upper

    def test_keys_are_ints(self):
        pixel = np.array([12, 200, 99, 255], dtype=np.uint8)
        for metric in Metric:
            assert isinstance(sort_key(metric, pixel), int)


class TestKeyFunction:
    def test_each_metric_selects_its_function(self):
        assert key_function(Metric.LUMINANCE) is luminance
        assert key_function(Metric.HUE) is hue
        assert key_function(Metric.SATURATION) is saturation

    def test_unknown_metric(self):
        with pytest.raises(ValueError):
            key_function("brightness")

    def test_upper_boundaries(self):
        assert threshold_upper_boundary(Metric.LUMINANCE) == 255
        assert threshold_upper_boundary(Metric.SATURATION) == 255
        assert threshold_upper_boundary(Metric.HUE) == 359


class TestParseMetric:
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("l", Metric.LUMINANCE),
            ("h", Metric.HUE),
            ("s", Metric.SATURATION),
            ("Hue", Metric.HUE),
            (" SATURATION ", Metric.SATURATION),
            ("luminance", Metric.LUMINANCE),
        ],
    )
    def test_valid_names(self, name, expected):
        assert parse_metric(name) is expected

    @pytest.mark.parametrize("name", ["x", "", "brightness", "red"])
    def test_invalid_names(self, name):
        with pytest.raises(ValueError):
            parse_metric(name)


class TestClampThresholds:
    def test_in_range_pair_unchanged(self):
        assert clamp_thresholds(Metric.LUMINANCE, 10, 200) == (10, 200)

    def test_high_clamped_to_metric_domain(self):
        assert clamp_thresholds(Metric.LUMINANCE, 0, 360) == (0, 255)
        assert clamp_thresholds(Metric.HUE, 0, 360) == (0, 359)

    def test_negative_low_clamped_to_zero(self):
        assert clamp_thresholds(Metric.SATURATION, -5, 40) == (0, 40)

    def test_low_never_exceeds_high(self):
        low, high = clamp_thresholds(Metric.LUMINANCE, 300, 255)
        assert low <= high
        assert (low, high) == (255, 255)

    def test_switching_metric_reclamps(self):
        low, high = clamp_thresholds(Metric.HUE, 280, 350)
        assert clamp_thresholds(Metric.LUMINANCE, low, high) == (255, 255)
