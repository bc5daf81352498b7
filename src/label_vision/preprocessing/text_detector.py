# src/label_vision/preprocessing/text_detector.py
"""
Heuristic text detection for product label photos.

Estimates whether an image contains text, where the text-like regions are
and how suitable the photo is for OCR. No characters are recognised.

Detection never raises: unreadable images and analysis errors are logged
and reported as a zero-confidence result whose single recommendation
explains the failure.

Examples
--------
    detector = TextDetector()
    result = asyncio.run(detector.detect_text(Path("label.jpg").read_bytes()))
    if not result.has_text:
        print(result.top_recommendations())
"""

import asyncio
import logging
from dataclasses import replace
from typing import Dict, Any, List, Optional, Sequence

import numpy as np

from ..exceptions import ImageDecodingError
from ..types import AnalysisImage, QuickCheckResult, TextDetectionResult, TextQuality
from ..utils.config import load_config, get_config_value
from ..utils.geometry import scale_rect
from ..utils.images import prepare_analysis_image, prepare_fixed_size_image
from ..postprocessing.confidence_analyzer import ConfidenceAnalyzer
from .edge_detector import sobel_magnitude
from .pattern_analyzer import PatternAnalyzer
from .quality_analyzer import QualityAnalyzer
from .region_finder import RegionFinder

logger = logging.getLogger(__name__)

LOAD_FAILED = "Could not load image"
ANALYSIS_FAILED = "Text analysis failed"


class TextDetector:
    """
    Estimates text presence, text regions and capture quality.
    Holds only configuration, so one instance can serve concurrent calls.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize detector components.

        Args:
            config: Full configuration dictionary; loaded from the packaged
                defaults when omitted
        """
        self.config = config if config is not None else load_config()

        self.max_analysis_size = int(get_config_value(self.config, 'text_detection.max_analysis_size', 800))
        self.min_text_confidence = get_config_value(self.config, 'text_detection.min_text_confidence', 0.3)
        self.quick_size = int(get_config_value(self.config, 'quick_check.size', 200))
        self.quick_min_confidence = get_config_value(self.config, 'quick_check.min_confidence', 0.25)

        self.quality_analyzer = QualityAnalyzer(self.config)
        self.region_finder = RegionFinder(self.config)
        self.pattern_analyzer = PatternAnalyzer(self.config)
        self.confidence_analyzer = ConfidenceAnalyzer(self.config)

    async def detect_text(self, image: Any) -> TextDetectionResult:
        """
        Analyze an image for text.

        Args:
            image: Encoded bytes, a file path, an OpenCV array or a PIL image

        Returns:
            TextDetectionResult with regions in native image pixels
        """
        loop = asyncio.get_running_loop()
        try:
            analysis = await loop.run_in_executor(
                None, prepare_analysis_image, image, self.max_analysis_size
            )
        except ImageDecodingError as e:
            logger.warning(f"Could not load image: {e}")
            return self._create_failure_result(LOAD_FAILED)
        except Exception as e:
            logger.error(f"Unexpected error while loading image: {e}")
            return self._create_failure_result(LOAD_FAILED)

        try:
            result = self.analyze(analysis.pixels)
        except Exception as e:
            logger.error(f"Text analysis failed: {e}")
            return self._create_failure_result(ANALYSIS_FAILED)

        return self._to_native_coordinates(result, analysis)

    async def detect_many(self, images: Sequence[Any]) -> List[TextDetectionResult]:
        """Detect text in several images concurrently, keeping input order."""
        return list(await asyncio.gather(*(self.detect_text(image) for image in images)))

    def analyze(self, gray: np.ndarray) -> TextDetectionResult:
        """
        Run the detection heuristics on a grayscale buffer in [0, 1].

        Region coordinates are in the buffer's pixel space.
        """
        quality = self.quality_analyzer.analyze(gray)
        edges = sobel_magnitude(gray)
        regions = self.region_finder.find_regions(edges)
        pattern_score = self.pattern_analyzer.analyze(gray, regions)

        confidence = self.confidence_analyzer.calculate_confidence(quality, regions, pattern_score)
        recommendations = self.confidence_analyzer.generate_recommendations(quality, regions, confidence)

        logger.debug(f"Detection: confidence={confidence:.3f} regions={len(regions)} "
                     f"patterns={pattern_score:.3f}")

        return TextDetectionResult(
            has_text=bool(confidence > self.min_text_confidence),
            confidence=confidence,
            quality=quality,
            text_regions=regions,
            recommendations=recommendations,
        )

    async def quick_text_check(self, image: Any) -> QuickCheckResult:
        """
        Cheap pre-filter on a small square thumbnail.

        Uses contrast and sharpness only; any failure yields (False, 0.0).
        """
        loop = asyncio.get_running_loop()
        try:
            gray = await loop.run_in_executor(None, prepare_fixed_size_image, image, self.quick_size)
            contrast = self.quality_analyzer.calculate_contrast(gray)
            sharpness = self.quality_analyzer.calculate_sharpness(gray)
        except Exception as e:
            logger.warning(f"Quick text check failed: {e}")
            return QuickCheckResult(has_text=False, confidence=0.0)

        confidence = (contrast + self.quality_analyzer.scaled_sharpness(sharpness)) / 2
        return QuickCheckResult(has_text=bool(confidence > self.quick_min_confidence),
                                confidence=float(confidence))

    @staticmethod
    def _to_native_coordinates(result: TextDetectionResult,
                               analysis: AnalysisImage) -> TextDetectionResult:
        """Map regions from the downscaled buffer back to the decoded image size."""
        if analysis.scale_x == 1 and analysis.scale_y == 1:
            return result

        regions = []
        for region in result.text_regions:
            box = scale_rect(region, analysis.scale_x, analysis.scale_y)
            regions.append(replace(region, x=box.x, y=box.y, width=box.width, height=box.height))

        return replace(result, text_regions=regions)

    @staticmethod
    def _create_failure_result(reason: str) -> TextDetectionResult:
        """Create the zero-confidence result used for every failure."""
        return TextDetectionResult(
            has_text=False,
            confidence=0.0,
            quality=TextQuality(contrast=0.0, sharpness=0.0, brightness=0.0, noise=1.0, overall=0.0),
            text_regions=[],
            recommendations=[reason],
        )


__all__ = ['TextDetector', 'LOAD_FAILED', 'ANALYSIS_FAILED']
