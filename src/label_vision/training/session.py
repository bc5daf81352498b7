"""Human annotation workflow for one image.

An AnnotationSession collects rectangles drawn over a displayed image,
converts them from screen to native image pixels and persists them, together
with the automatic detections and the annotator's ratings, as one
TrainingData record.
"""

import time
import logging
from dataclasses import replace
from typing import List, Optional, Sequence

from ..types import (
    BoundingBox, DisplayGeometry, ImageDimensions, TextRegionAnnotation,
    TrainingData, UserFeedback, utc_now_iso,
)
from ..utils.config import get_config_value
from ..utils.geometry import screen_to_image
from .training_store import TrainingStore

logger = logging.getLogger(__name__)

DEFAULT_RATING = 3


def rect_from_drag(start_x: float, start_y: float, end_x: float, end_y: float) -> BoundingBox:
    """Rectangle spanned by a pointer drag in any direction."""
    return BoundingBox(
        x=min(start_x, end_x),
        y=min(start_y, end_y),
        width=abs(end_x - start_x),
        height=abs(end_y - start_y),
    )


class AnnotationSession:
    """
    Editable set of user annotations for one image hash.

    Automatic detections are kept read-only alongside the user's
    rectangles; both end up in the saved record.
    """

    def __init__(self, image_hash: str, store: TrainingStore,
                 detected: Sequence[TextRegionAnnotation] = (),
                 user_annotations: Sequence[TextRegionAnnotation] = (),
                 feedback: Optional[UserFeedback] = None):
        self.image_hash = image_hash
        self.store = store
        self.detected = list(detected)
        self.user_annotations = list(user_annotations)
        self.feedback = feedback or UserFeedback(DEFAULT_RATING, DEFAULT_RATING)
        self.is_complete = False

        self.min_annotation_size = get_config_value(store.config, 'training.min_annotation_size', 10)

    @classmethod
    def start(cls, image_hash: str, store: TrainingStore,
              detected: Sequence[TextRegionAnnotation] = ()) -> "AnnotationSession":
        """Open a session, resuming earlier user annotations and ratings for the image."""
        existing = store.get(image_hash)
        if existing is None:
            return cls(image_hash, store, detected)

        logger.info(f"Resuming {len(existing.user_annotations)} annotations for {image_hash}")
        return cls(
            image_hash,
            store,
            detected,
            user_annotations=existing.user_annotations,
            feedback=existing.user_feedback,
        )

    @property
    def annotations(self) -> List[TextRegionAnnotation]:
        """Detected regions followed by user annotations."""
        return self.detected + self.user_annotations

    def _next_id(self) -> str:
        used = {a.id for a in self.annotations}
        stamp = int(time.time() * 1000)
        while f"user_{stamp}" in used:
            stamp += 1
        return f"user_{stamp}"

    def add_region(self, screen_rect, display: DisplayGeometry) -> Optional[TextRegionAnnotation]:
        """
        Add a rectangle drawn on screen.

        Args:
            screen_rect: Rectangle in screen pixels (x, y, width, height)
            display: Where and how large the image is rendered

        Returns:
            The new annotation in native image pixels, or None when the
            rectangle is smaller than the minimum size on screen
        """
        if screen_rect.width < self.min_annotation_size or screen_rect.height < self.min_annotation_size:
            logger.debug(f"Ignoring {screen_rect.width}x{screen_rect.height} rectangle below minimum size")
            return None

        box = screen_to_image(screen_rect, display)
        annotation = TextRegionAnnotation(
            x=box.x,
            y=box.y,
            width=box.width,
            height=box.height,
            confidence=1.0,
            id=self._next_id(),
            label=f"Region {len(self.user_annotations) + 1}",
            user_marked=True,
            created_at=utc_now_iso(),
            image_hash=self.image_hash,
        )
        self.user_annotations.append(annotation)
        return annotation

    def remove(self, annotation_id: str) -> bool:
        """Delete a user annotation; returns False if the id is unknown."""
        remaining = [a for a in self.user_annotations if a.id != annotation_id]
        removed = len(remaining) != len(self.user_annotations)
        self.user_annotations = remaining
        return removed

    def relabel(self, annotation_id: str, label: str) -> bool:
        """Rename a user annotation; returns False if the id is unknown."""
        for i, annotation in enumerate(self.user_annotations):
            if annotation.id == annotation_id:
                self.user_annotations[i] = replace(annotation, label=label)
                return True
        return False

    def reset(self) -> None:
        """Drop all user annotations and restore default ratings."""
        self.user_annotations = []
        self.feedback = UserFeedback(DEFAULT_RATING, DEFAULT_RATING)

    def set_feedback(self, overall_quality: int, detection_accuracy: int,
                     comments: Optional[str] = None) -> UserFeedback:
        """Record the annotator's 1-5 ratings."""
        self.feedback = UserFeedback(overall_quality, detection_accuracy, comments)
        return self.feedback

    def to_training_data(self, dimensions: ImageDimensions) -> TrainingData:
        return TrainingData(
            image_hash=self.image_hash,
            original_dimensions=dimensions,
            annotations=self.annotations,
            user_feedback=self.feedback,
            created_at=utc_now_iso(),
        )

    def complete(self, dimensions: ImageDimensions) -> TrainingData:
        """Persist the session and mark it complete."""
        data = self.to_training_data(dimensions)
        self.store.save(data)
        self.is_complete = True
        logger.info(f"Saved {len(self.user_annotations)} user annotations for {self.image_hash}")
        return data


__all__ = ['AnnotationSession', 'rect_from_drag']
