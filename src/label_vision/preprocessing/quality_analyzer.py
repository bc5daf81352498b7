# src/label_vision/preprocessing/quality_analyzer.py
"""
Image quality analyzer for text detection.
Measures contrast, sharpness, brightness and noise of a grayscale buffer.
"""

import cv2
import numpy as np
import logging
from typing import Dict, Any

from ..types import TextQuality
from ..utils.config import get_config_value
from ..postprocessing.confidence_analyzer import normalize_brightness

logger = logging.getLogger(__name__)


class QualityAnalyzer:
    """
    Analyzes grayscale image quality for text detection.
    All inputs are float arrays in [0, 1] with shape (height, width).
    """

    def __init__(self, config: Dict[str, Any]):
        """
        Initialize quality analyzer with configuration.

        Args:
            config: Configuration dictionary from config system
        """
        self.config = config
        self.sharpness_scale = get_config_value(config, 'text_detection.sharpness_scale', 10)

    def analyze(self, gray: np.ndarray) -> TextQuality:
        """
        Compute quality metrics for a grayscale buffer.

        Args:
            gray: Grayscale image in [0, 1]

        Returns:
            TextQuality with raw contrast, sharpness, brightness, noise and
            the derived overall score
        """
        contrast = self.calculate_contrast(gray)
        sharpness = self.calculate_sharpness(gray)
        brightness = self.calculate_brightness(gray)
        noise = self.calculate_noise(gray)

        overall = (contrast + sharpness + (1.0 - noise) + normalize_brightness(brightness)) / 4

        logger.debug(
            f"Quality: contrast={contrast:.3f} sharpness={sharpness:.4f} "
            f"brightness={brightness:.3f} noise={noise:.4f} overall={overall:.3f}"
        )
        return TextQuality(
            contrast=contrast,
            sharpness=sharpness,
            brightness=brightness,
            noise=noise,
            overall=overall,
        )

    def scaled_sharpness(self, sharpness: float) -> float:
        """Sharpness stretched into [0, 1] for scoring."""
        return min(sharpness * self.sharpness_scale, 1.0)

    @staticmethod
    def calculate_contrast(gray: np.ndarray) -> float:
        """Dynamic range of the buffer (max - min)."""
        return float(gray.max() - gray.min())

    @staticmethod
    def _interior_laplacian(gray: np.ndarray) -> np.ndarray:
        # ksize=1 is the 4-neighbour stencil; border rows and columns are dropped
        laplacian = cv2.Laplacian(gray, cv2.CV_64F, ksize=1)
        return laplacian[1:-1, 1:-1]

    @classmethod
    def calculate_sharpness(cls, gray: np.ndarray) -> float:
        """Mean absolute 4-neighbour Laplacian over interior pixels."""
        if gray.shape[0] < 3 or gray.shape[1] < 3:
            return 0.0
        return float(np.abs(cls._interior_laplacian(gray)).mean())

    @staticmethod
    def calculate_brightness(gray: np.ndarray) -> float:
        """Mean intensity."""
        return float(gray.mean())

    @staticmethod
    def calculate_noise(gray: np.ndarray) -> float:
        """Mean absolute deviation of each interior pixel from its 4 neighbours' mean."""
        if gray.shape[0] < 3 or gray.shape[1] < 3:
            return 0.0
        center = gray[1:-1, 1:-1]
        neighbours = (gray[1:-1, :-2] + gray[1:-1, 2:] + gray[:-2, 1:-1] + gray[2:, 1:-1]) / 4
        return float(np.abs(center - neighbours).mean())


__all__ = ['QualityAnalyzer']
