"""
Shared fixtures: synthetic label images and training records.
"""

import sys
import os
from datetime import datetime, timedelta, timezone

import cv2
import numpy as np
import pytest

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from label_vision.types import (  # noqa: E402
    ImageDimensions, TextRegionAnnotation, TrainingData, UserFeedback,
)
from label_vision.utils.config import load_config  # noqa: E402


FIXED_NOW = datetime(2024, 6, 15, 12, 0, 0, tzinfo=timezone.utc)


def striped_block_image(width=400, height=300, block=(100, 100, 200, 100), stripe=4):
    """White BGR image with a block of horizontal black/white stripes.

    Black stripes start at the block's top row.
    """
    image = np.full((height, width, 3), 255, dtype=np.uint8)
    x, y, w, h = block
    for row in range(y, y + h):
        if ((row - y) // stripe) % 2 == 0:
            image[row, x:x + w] = 0
    return image


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def gray_image():
    """Uniform mid-gray BGR image."""
    return np.full((300, 400, 3), 128, dtype=np.uint8)


@pytest.fixture
def striped_image():
    """400x300 image with stripes in the block x 100..300, y 100..200."""
    return striped_block_image()


@pytest.fixture
def striped_png(striped_image):
    ok, encoded = cv2.imencode(".png", striped_image)
    assert ok
    return encoded.tobytes()


@pytest.fixture
def large_striped_image():
    """1600x1200 image with 8px stripes in the block x 200..600, y 200..400."""
    return striped_block_image(1600, 1200, (200, 200, 400, 200), stripe=8)


@pytest.fixture
def now():
    return FIXED_NOW


def _iso(moment):
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@pytest.fixture
def make_annotation():
    def _make(annotation_id, x, y, width, height, user_marked=True, confidence=1.0, image_hash="hash"):
        return TextRegionAnnotation(
            x=x, y=y, width=width, height=height,
            confidence=confidence,
            id=annotation_id,
            label=f"label {annotation_id}",
            user_marked=user_marked,
            created_at=_iso(FIXED_NOW),
            image_hash=image_hash,
        )
    return _make


@pytest.fixture
def make_record():
    def _make(image_hash, age_days=0.0, annotations=None, feedback=None, now=FIXED_NOW):
        return TrainingData(
            image_hash=image_hash,
            original_dimensions=ImageDimensions(400, 300),
            annotations=list(annotations or []),
            user_feedback=feedback,
            created_at=_iso(now - timedelta(days=age_days)),
        )
    return _make


@pytest.fixture
def feedback():
    return UserFeedback(overall_quality=4, detection_accuracy=5, comments="clear label")
