#!/usr/bin/env python3
"""
Test 5: Quality Analyzer
Tests contrast, sharpness, brightness, noise and the overall score
"""

import numpy as np
import pytest

from label_vision.postprocessing.confidence_analyzer import normalize_brightness
from label_vision.preprocessing.quality_analyzer import QualityAnalyzer


class TestQualityAnalyzer:

    def setup_method(self):
        self.analyzer = QualityAnalyzer({})

    def test_uniform_image(self):
        quality = self.analyzer.analyze(np.full((50, 60), 0.5))

        assert quality.contrast == 0.0
        assert quality.sharpness == 0.0
        assert quality.noise == 0.0
        assert quality.brightness == pytest.approx(0.5)
        # (0 + 0 + 1 + 1) / 4
        assert quality.overall == pytest.approx(0.5)

    def test_single_bright_pixel(self):
        gray = np.zeros((5, 5))
        gray[2, 2] = 1.0

        # interior is 3x3: |laplacian| is 4 at the centre and 1 at its four neighbours
        assert self.analyzer.calculate_sharpness(gray) == pytest.approx(8 / 9)
        # deviation is 1 at the centre and 0.25 at each neighbour
        assert self.analyzer.calculate_noise(gray) == pytest.approx(2 / 9)
        assert self.analyzer.calculate_contrast(gray) == 1.0
        assert self.analyzer.calculate_brightness(gray) == pytest.approx(1 / 25)

    def test_tiny_images_have_no_sharpness_or_noise(self):
        gray = np.array([[0.0, 1.0], [1.0, 0.0]])
        assert self.analyzer.calculate_sharpness(gray) == 0.0
        assert self.analyzer.calculate_noise(gray) == 0.0
        assert self.analyzer.calculate_contrast(gray) == 1.0

    def test_noise_is_quarter_of_sharpness(self):
        rng = np.random.default_rng(7)
        gray = rng.random((40, 30))
        assert self.analyzer.calculate_noise(gray) == pytest.approx(
            self.analyzer.calculate_sharpness(gray) / 4)

    def test_scaled_sharpness_is_capped(self):
        assert self.analyzer.scaled_sharpness(0.05) == pytest.approx(0.5)
        assert self.analyzer.scaled_sharpness(0.5) == 1.0

    @pytest.mark.parametrize("brightness, expected", [
        (0.3, 1.0), (0.5, 1.0), (0.7, 1.0),
        (0.2, 0.7), (0.75, 0.7), (0.8, 0.7),
        (0.1, 0.4), (0.85, 0.4), (0.9, 0.4),
        (0.05, 0.1), (0.95, 0.1),
    ])
    def test_brightness_normalization(self, brightness, expected):
        assert normalize_brightness(brightness) == expected
