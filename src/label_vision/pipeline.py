"""Detection pipeline with training-data feedback.

Runs text detection, hashes the image bytes, applies stored user
corrections for that hash and, when corrections were added, nudges the
confidence upwards.

Examples
--------
    from label_vision import TextDetectionPipeline, FileKeyValueStore, TrainingStore

    pipeline = TextDetectionPipeline(store=TrainingStore(FileKeyValueStore("training")))
    result = asyncio.run(pipeline.analyze("label.jpg"))
    print(result.image_hash, result.improved, result.detection.confidence)

    session = pipeline.start_annotation(result)
"""

import asyncio
from dataclasses import replace
from pathlib import Path
from typing import Union, Optional, Dict, Any

from .types import PipelineResult, TextRegionAnnotation, utc_now_iso
from .exceptions import ValidationError
from .preprocessing.text_detector import TextDetector
from .training.hashing import generate_image_hash
from .training.session import AnnotationSession
from .training.training_store import TrainingStore
from .utils.config import load_config, get_config_value
from .utils.images import read_image_bytes
from .utils.logging import setup_logger


class TextDetectionPipeline:
    """Text detection improved by stored human corrections.

    Coordinates the TextDetector with the TrainingStore so that regions a
    user drew for an image are reapplied whenever the same bytes are
    analyzed again.
    """

    def __init__(self, config_path: Optional[str] = None,
                 store: Optional[TrainingStore] = None,
                 config: Optional[Dict[str, Any]] = None):
        """Initialize the pipeline with optional custom config and store."""
        self.logger = setup_logger(self.__class__.__name__)
        self.config = config if config is not None else load_config(config_path)

        self.detector = TextDetector(self.config)
        self.store = store if store is not None else TrainingStore(config=self.config)

        self.hash_length = int(get_config_value(self.config, 'training.hash_length', 16))
        self.confidence_boost = get_config_value(self.config, 'training.improved_confidence_boost', 0.1)
        self.min_text_confidence = self.detector.min_text_confidence

    async def analyze(self, image: Union[bytes, bytearray, memoryview, str, Path]) -> PipelineResult:
        """Detect text in encoded image bytes or an image file.

        Detection failures are reported in the result, like
        TextDetector.detect_text. Unsupported input types raise
        ValidationError and unreadable files raise ImageDecodingError.
        """
        if isinstance(image, (str, Path)):
            loop = asyncio.get_running_loop()
            data = await loop.run_in_executor(None, read_image_bytes, image)
        elif isinstance(image, (bytes, bytearray, memoryview)):
            data = bytes(image)
        else:
            raise ValidationError(
                f"Pipeline input must be image bytes or a path, got {type(image).__name__}",
                parameter="image", expected_type="bytes",
            )

        detection = await self.detector.detect_text(data)
        image_hash = generate_image_hash(data, self.hash_length)

        created_at = utc_now_iso()
        wrapped = [
            TextRegionAnnotation.from_region(region, image_hash, f"auto_{index}", created_at=created_at)
            for index, region in enumerate(detection.text_regions, start=1)
        ]
        annotations = self.store.improve(wrapped, image_hash)

        improved = len(annotations) != len(detection.text_regions)
        if improved:
            confidence = float(min(detection.confidence + self.confidence_boost, 1.0))
            detection = replace(
                detection,
                text_regions=list(annotations),
                confidence=confidence,
                has_text=bool(confidence > self.min_text_confidence),
            )
            self.logger.info(f"Applied {len(annotations) - len(wrapped)} stored corrections "
                             f"for {image_hash}")

        return PipelineResult(
            detection=detection,
            image_hash=image_hash,
            annotations=annotations,
            improved=improved,
        )

    def start_annotation(self, result: PipelineResult) -> AnnotationSession:
        """Open an annotation session seeded with the automatic detections."""
        detected = [a for a in result.annotations if not a.user_marked]
        return AnnotationSession.start(result.image_hash, self.store, detected)


__all__ = ['TextDetectionPipeline']
