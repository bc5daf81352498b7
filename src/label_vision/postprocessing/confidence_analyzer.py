"""
Label Vision - Confidence Analysis Module
ONLY JOB: Combine quality, region and pattern scores into a confidence and
turn the measurements into user-facing capture advice.
"""

import logging
from typing import Dict, Any, List

from ..types import TextQuality, TextRegion
from ..utils.config import get_config_value

logger = logging.getLogger(__name__)


# Advice strings, in the order the rules are evaluated
LOW_CONFIDENCE = "Little or no text detected in the image"
LOW_CONTRAST = "Increase contrast: use better lighting or adjust the exposure"
BLURRY = "Image is blurry: hold the camera steady and focus on the text"
TOO_DARK = "Image is too dark: add more light or use the flash"
TOO_BRIGHT = "Image is too bright: reduce the exposure or avoid direct light"
NOISY = "Too much noise in the image: clean the camera lens"
NO_REGIONS = "No text regions found: center the label in the frame"
TOO_MANY_REGIONS = "Too many regions detected: move closer to the main text"
GOOD_QUALITY = "Good quality for OCR: proceed with scanning"


def normalize_brightness(brightness: float) -> float:
    """Score mean brightness: full credit in [0.3, 0.7], less in wider bands."""
    if 0.3 <= brightness <= 0.7:
        return 1.0
    if 0.2 <= brightness <= 0.8:
        return 0.7
    if 0.1 <= brightness <= 0.9:
        return 0.4
    return 0.1


class ConfidenceAnalyzer:
    """Weighted text confidence and rule-based recommendations."""

    def __init__(self, config: Dict[str, Any]):
        self.config = config

        self.weights = {
            'contrast': get_config_value(config, 'text_detection.weights.contrast', 0.25),
            'sharpness': get_config_value(config, 'text_detection.weights.sharpness', 0.25),
            'brightness': get_config_value(config, 'text_detection.weights.brightness', 0.15),
            'regions': get_config_value(config, 'text_detection.weights.regions', 0.20),
            'patterns': get_config_value(config, 'text_detection.weights.patterns', 0.15),
        }
        self.sharpness_scale = get_config_value(config, 'text_detection.sharpness_scale', 10)
        self.region_count_target = get_config_value(config, 'text_detection.region_count_target', 3)

        self.thresholds = {
            'min_confidence': get_config_value(config, 'text_detection.min_text_confidence', 0.3),
            'low_contrast': get_config_value(config, 'text_detection.recommendations.low_contrast', 0.3),
            'low_sharpness': get_config_value(config, 'text_detection.recommendations.low_sharpness', 0.2),
            'dark': get_config_value(config, 'text_detection.recommendations.dark', 0.2),
            'bright': get_config_value(config, 'text_detection.recommendations.bright', 0.8),
            'noisy': get_config_value(config, 'text_detection.recommendations.noisy', 0.4),
            'max_regions': get_config_value(config, 'text_detection.recommendations.max_regions', 10),
            'good_overall': get_config_value(config, 'text_detection.recommendations.good_overall', 0.7),
            'good_confidence': get_config_value(config, 'text_detection.recommendations.good_confidence', 0.6),
        }

    def region_score(self, regions: List[TextRegion]) -> float:
        """Count bonus (saturating at region_count_target) times mean region confidence."""
        if not regions:
            return 0.0
        count_bonus = min(len(regions) / self.region_count_target, 1.0)
        mean_confidence = sum(r.confidence for r in regions) / len(regions)
        return count_bonus * mean_confidence

    def calculate_confidence(self, quality: TextQuality, regions: List[TextRegion],
                             pattern_score: float) -> float:
        """Weighted sum of the quality and region evidence, clamped to [0, 1]."""
        confidence = (
            quality.contrast * self.weights['contrast']
            + min(quality.sharpness * self.sharpness_scale, 1.0) * self.weights['sharpness']
            + normalize_brightness(quality.brightness) * self.weights['brightness']
            + self.region_score(regions) * self.weights['regions']
            + pattern_score * self.weights['patterns']
        )
        return float(min(max(confidence, 0.0), 1.0))

    def generate_recommendations(self, quality: TextQuality, regions: List[TextRegion],
                                 confidence: float) -> List[str]:
        """Ordered advice; several rules may fire."""
        t = self.thresholds
        recommendations = []

        if confidence < t['min_confidence']:
            recommendations.append(LOW_CONFIDENCE)

        if quality.contrast < t['low_contrast']:
            recommendations.append(LOW_CONTRAST)

        if quality.sharpness < t['low_sharpness']:
            recommendations.append(BLURRY)

        if quality.brightness < t['dark']:
            recommendations.append(TOO_DARK)
        elif quality.brightness > t['bright']:
            recommendations.append(TOO_BRIGHT)

        if quality.noise > t['noisy']:
            recommendations.append(NOISY)

        if not regions:
            recommendations.append(NO_REGIONS)
        elif len(regions) > t['max_regions']:
            recommendations.append(TOO_MANY_REGIONS)

        if quality.overall > t['good_overall'] and confidence > t['good_confidence']:
            recommendations.append(GOOD_QUALITY)

        return recommendations


__all__ = [
    'ConfidenceAnalyzer',
    'normalize_brightness',
    'LOW_CONFIDENCE',
    'LOW_CONTRAST',
    'BLURRY',
    'TOO_DARK',
    'TOO_BRIGHT',
    'NOISY',
    'NO_REGIONS',
    'TOO_MANY_REGIONS',
    'GOOD_QUALITY',
]
