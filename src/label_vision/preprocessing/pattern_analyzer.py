# src/label_vision/preprocessing/pattern_analyzer.py
"""
Text pattern scoring for detected regions.

Three heuristics, each in [0, 1], are averaged per region:
- horizontal lines: intensity transitions along a few scanlines
- regular spacing: alternating bright/dark rows in the row-mean profile
- character density: share of strong horizontal transitions
"""

import numpy as np
import logging
from typing import Dict, Any, List

from ..types import TextRegion
from ..utils.config import get_config_value

logger = logging.getLogger(__name__)


class PatternAnalyzer:
    """Scores how text-like the content of each region is."""

    def __init__(self, config: Dict[str, Any]):
        self.config = config

        self.scanlines = int(get_config_value(config, 'text_detection.patterns.scanlines', 5))
        self.line_threshold = get_config_value(
            config, 'text_detection.patterns.line_transition_threshold', 0.3)
        self.line_density_range = tuple(get_config_value(
            config, 'text_detection.patterns.line_density_range', [0.1, 0.8]))
        self.peak_prominence = get_config_value(config, 'text_detection.patterns.peak_prominence', 0.1)
        self.char_threshold = get_config_value(
            config, 'text_detection.patterns.char_transition_threshold', 0.2)
        self.char_density_ideal = tuple(get_config_value(
            config, 'text_detection.patterns.char_density_ideal', [0.1, 0.4]))
        self.char_density_acceptable = tuple(get_config_value(
            config, 'text_detection.patterns.char_density_acceptable', [0.05, 0.6]))

    def analyze(self, gray: np.ndarray, regions: List[TextRegion]) -> float:
        """Average pattern score over all regions; 0 when there are none."""
        if not regions:
            return 0.0

        total = 0.0
        for region in regions:
            patch = self._crop(gray, region)
            total += (
                self.horizontal_line_score(patch)
                + self.regular_spacing_score(patch)
                + self.character_density_score(patch)
            ) / 3

        return float(total / len(regions))

    @staticmethod
    def _crop(gray: np.ndarray, region: TextRegion) -> np.ndarray:
        x, y = int(region.x), int(region.y)
        return gray[y:y + int(region.height), x:x + int(region.width)]

    def horizontal_line_score(self, patch: np.ndarray) -> float:
        """Transition density along evenly spaced scanlines."""
        height, width = patch.shape
        if height == 0 or width == 0:
            return 0.0

        low, high = self.line_density_range
        score = 0.0
        for i in range(self.scanlines):
            row = (height * i) // self.scanlines
            transitions = np.count_nonzero(np.abs(np.diff(patch[row])) > self.line_threshold)
            density = float(transitions) / width
            if low < density < high:
                score += density

        return score / self.scanlines

    def regular_spacing_score(self, patch: np.ndarray) -> float:
        """Count prominent peaks and valleys in the row-mean profile."""
        rows = patch.shape[0]
        if rows < 3 or patch.shape[1] == 0:
            return 0.0

        profile = patch.mean(axis=1)
        prev, curr, nxt = profile[:-2], profile[1:-1], profile[2:]

        peaks = (curr > prev) & (curr > nxt) & (curr - np.minimum(prev, nxt) > self.peak_prominence)
        valleys = (curr < prev) & (curr < nxt) & (np.maximum(prev, nxt) - curr > self.peak_prominence)

        regularity = min(np.count_nonzero(peaks), np.count_nonzero(valleys)) / (rows / 10)
        return float(min(regularity, 1.0))

    def character_density_score(self, patch: np.ndarray) -> float:
        """Bucket the share of strong horizontal transitions."""
        height, width = patch.shape
        pixels = height * (width - 1)
        if pixels <= 0:
            return 0.0

        transitions = np.count_nonzero(np.abs(np.diff(patch, axis=1)) > self.char_threshold)
        density = float(transitions) / pixels

        ideal_low, ideal_high = self.char_density_ideal
        ok_low, ok_high = self.char_density_acceptable
        if ideal_low <= density <= ideal_high:
            return 1.0
        if ok_low < density < ok_high:
            return 0.5
        return 0.0


__all__ = ['PatternAnalyzer']
