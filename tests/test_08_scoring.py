#!/usr/bin/env python3
"""
Test 8: Pattern and Confidence Scoring
Tests the text pattern heuristics, confidence weighting and recommendation rules
"""

import numpy as np
import pytest

from label_vision.postprocessing import confidence_analyzer as advice
from label_vision.postprocessing.confidence_analyzer import ConfidenceAnalyzer
from label_vision.preprocessing.pattern_analyzer import PatternAnalyzer
from label_vision.types import TextQuality, TextRegion


def column_stripes(size=40, period=4):
    """Alternating 0/1 vertical bars."""
    columns = (np.arange(size) // period) % 2
    return np.tile(columns.astype(np.float64), (size, 1))


def row_stripes(size=40, period=1):
    rows = (np.arange(size) // period) % 2 == 0
    return np.tile(rows.astype(np.float64)[:, None], (1, size))


class TestPatternAnalyzer:

    def setup_method(self):
        self.analyzer = PatternAnalyzer({})

    def test_horizontal_lines(self):
        # 9 transitions over a 40 px scanline, on every scanline
        assert self.analyzer.horizontal_line_score(column_stripes()) == pytest.approx(9 / 40)

    def test_horizontal_lines_ignore_flat_rows(self):
        assert self.analyzer.horizontal_line_score(np.zeros((40, 40))) == 0.0

    def test_character_density_ideal_band(self):
        # 9 * 40 transitions over 40 * 39 pixels, about 0.23
        assert self.analyzer.character_density_score(column_stripes()) == 1.0

    def test_character_density_acceptable_band(self):
        # period 8: 4 transitions per row, 160 / 1560 is about 0.10 (ideal);
        # period 20: 1 per row, 40 / 1560 is about 0.03 (outside both bands)
        assert self.analyzer.character_density_score(column_stripes(period=8)) == 1.0
        assert self.analyzer.character_density_score(column_stripes(period=20)) == 0.0
        # period 12: 3 per row, 120 / 1560 is about 0.077 (acceptable)
        assert self.analyzer.character_density_score(column_stripes(period=12)) == 0.5

    def test_regular_spacing(self):
        # alternating rows give 19 peaks and 19 valleys against 40 / 10 expected
        assert self.analyzer.regular_spacing_score(row_stripes()) == 1.0

    def test_regular_spacing_needs_both_peaks_and_valleys(self):
        gray = np.zeros((40, 40))
        gray[::4] = 1.0
        assert self.analyzer.regular_spacing_score(gray) == 0.0

    def test_plateaus_are_not_peaks(self):
        assert self.analyzer.regular_spacing_score(row_stripes(period=4)) == 0.0

    def test_average_over_regions(self):
        gray = np.zeros((100, 100))
        gray[0:40, 0:40] = column_stripes()
        regions = [TextRegion(0, 0, 40, 40), TextRegion(50, 50, 40, 40)]

        expected_first = (9 / 40 + 0.0 + 1.0) / 3
        assert self.analyzer.analyze(gray, regions) == pytest.approx(expected_first / 2)

    def test_no_regions(self):
        assert self.analyzer.analyze(np.zeros((10, 10)), []) == 0.0


class TestConfidenceAnalyzer:

    def setup_method(self):
        self.analyzer = ConfidenceAnalyzer({})

    def _quality(self, contrast=1.0, sharpness=0.5, brightness=0.5, noise=0.0, overall=0.9):
        return TextQuality(contrast, sharpness, brightness, noise, overall)

    def test_region_score(self):
        regions = [TextRegion(0, 0, 10, 10, confidence=0.6), TextRegion(0, 0, 10, 10, confidence=0.9)]
        assert self.analyzer.region_score(regions) == pytest.approx((2 / 3) * 0.75)
        assert self.analyzer.region_score([]) == 0.0

    def test_full_evidence(self):
        regions = [TextRegion(0, 0, 10, 10, confidence=1.0)] * 3
        confidence = self.analyzer.calculate_confidence(self._quality(), regions, 1.0)
        assert confidence == pytest.approx(1.0)

    def test_minimal_evidence(self):
        quality = self._quality(contrast=0.0, sharpness=0.0, brightness=0.0)
        # only the 0.1 brightness floor contributes
        assert self.analyzer.calculate_confidence(quality, [], 0.0) == pytest.approx(0.015)

    def test_confidence_is_clamped(self):
        quality = self._quality(contrast=5.0)
        assert self.analyzer.calculate_confidence(quality, [], 0.0) == 1.0

    def test_all_warnings_in_order(self):
        quality = TextQuality(contrast=0.1, sharpness=0.01, brightness=0.1, noise=0.5, overall=0.2)

        recommendations = self.analyzer.generate_recommendations(quality, [], 0.1)

        assert recommendations == [
            advice.LOW_CONFIDENCE, advice.LOW_CONTRAST, advice.BLURRY,
            advice.TOO_DARK, advice.NOISY, advice.NO_REGIONS,
        ]

    def test_bright_image(self):
        quality = self._quality(brightness=0.95)
        regions = [TextRegion(0, 0, 10, 10)]
        assert advice.TOO_BRIGHT in self.analyzer.generate_recommendations(quality, regions, 0.5)

    def test_too_many_regions(self):
        regions = [TextRegion(0, 0, 10, 10)] * 11
        recommendations = self.analyzer.generate_recommendations(self._quality(), regions, 0.5)
        assert recommendations == [advice.TOO_MANY_REGIONS]

    def test_good_capture(self):
        regions = [TextRegion(0, 0, 10, 10)] * 3
        recommendations = self.analyzer.generate_recommendations(self._quality(), regions, 0.9)
        assert recommendations == [advice.GOOD_QUALITY]


class TestScoreTypes:

    def test_pattern_scores_are_python_floats(self):
        analyzer = PatternAnalyzer({})
        patch = row_stripes()

        assert type(analyzer.horizontal_line_score(column_stripes())) is float
        assert type(analyzer.regular_spacing_score(patch)) is float
        assert type(analyzer.character_density_score(patch)) is float
        assert type(analyzer.analyze(patch, [TextRegion(0, 0, 40, 40)])) is float

    def test_confidence_is_python_float(self):
        quality = TextQuality(np.float64(0.5), 0.05, 0.5, 0.0, 0.6)
        regions = [TextRegion(0, 0, 10, 10, confidence=0.9)]

        confidence = ConfidenceAnalyzer({}).calculate_confidence(quality, regions, np.float64(0.4))

        assert type(confidence) is float
