"""Heuristic text detection for product label photos, with human-in-the-loop training.

Estimates whether a photo contains text, where the text-like regions are and
how suitable the capture is for OCR, and improves those estimates with
bounding boxes that annotators drew for the same image.

Examples
--------
    import asyncio
    from label_vision import detect_text, TextDetectionPipeline

    # Quick detection
    result = asyncio.run(detect_text("label.jpg"))
    print(result.has_text, result.confidence, result.top_recommendations())

    # Detection improved with stored corrections
    pipeline = TextDetectionPipeline()
    improved = asyncio.run(pipeline.analyze("label.jpg"))
"""

from typing import Any, Dict, Optional

from .pipeline import TextDetectionPipeline
from .preprocessing.text_detector import TextDetector
from .training import (
    KeyValueStore,
    InMemoryKeyValueStore,
    FileKeyValueStore,
    TrainingStore,
    AnnotationSession,
    generate_image_hash,
    export_filename,
)
from .types import (
    BoundingBox,
    ConfidenceLevel,
    DisplayGeometry,
    FeedbackRating,
    ImageDimensions,
    PipelineResult,
    QuickCheckResult,
    TextDetectionResult,
    TextQuality,
    TextRegion,
    TextRegionAnnotation,
    TrainingData,
    TrainingStats,
    UserFeedback,
)
from .exceptions import (
    LabelVisionError,
    ImageDecodingError,
    ConfigurationError,
    ValidationError,
    TrainingDataError,
)
from .utils.geometry import iou, screen_to_image, image_to_screen, normalize, denormalize
from .utils.config import get_config_value, get_default_config, load_config
from .utils.logging import setup_logging

__version__ = "1.0.0"

__all__ = [
    'TextDetector',
    'TextDetectionPipeline',
    'KeyValueStore',
    'InMemoryKeyValueStore',
    'FileKeyValueStore',
    'TrainingStore',
    'AnnotationSession',
    'generate_image_hash',
    'export_filename',
    'BoundingBox',
    'ConfidenceLevel',
    'DisplayGeometry',
    'FeedbackRating',
    'ImageDimensions',
    'PipelineResult',
    'QuickCheckResult',
    'TextDetectionResult',
    'TextQuality',
    'TextRegion',
    'TextRegionAnnotation',
    'TrainingData',
    'TrainingStats',
    'UserFeedback',
    'LabelVisionError',
    'ImageDecodingError',
    'ConfigurationError',
    'ValidationError',
    'TrainingDataError',
    'iou',
    'screen_to_image',
    'image_to_screen',
    'normalize',
    'denormalize',
    'detect_text',
    'quick_text_check',
    'configure_logging',
]


async def detect_text(image: Any, config: Optional[Dict[str, Any]] = None) -> TextDetectionResult:
    """Detect text in an image using default settings.

    Convenience function for one-off calls. For repeated use, create a
    TextDetector once and reuse it.
    """
    return await TextDetector(config).detect_text(image)


async def quick_text_check(image: Any, config: Optional[Dict[str, Any]] = None) -> QuickCheckResult:
    """Fast low-resolution check whether an image is worth analyzing."""
    return await TextDetector(config).quick_text_check(image)


def configure_logging(level: Optional[str] = None, log_file: str = None,
                      config_path: Optional[str] = None) -> None:
    """Configure logging level and output destination for the library.

    Without an explicit level, ``logging.level`` from the configuration
    (packaged defaults merged with ``config_path``) is used.
    """
    if level is None:
        level = get_config_value(load_config(config_path), 'logging.level', "WARNING")
    setup_logging(level=level, log_file=log_file)


# Quiet by default; applications opt in with configure_logging()
setup_logging(level=get_config_value(get_default_config(), 'logging.level', "WARNING"))
