"""Data structures and type definitions for the label-vision library.

Defines the enums and dataclasses used for detection results, quality
metrics, annotations and persisted training records. Records that are
persisted or exported serialise to the camelCase JSON shape used by the
annotation UI (``imageHash``, ``userMarked``, ``estimatedCharCount``...).

Examples
--------
    from label_vision import TextDetector

    result = asyncio.run(TextDetector().detect_text("label.jpg"))
    print(f"Has text: {result.has_text} ({result.confidence_level.value})")
    for region in result.text_regions:
        print(region.x, region.y, region.width, region.height, region.confidence)
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from numbers import Real
from typing import List, Dict, Optional, Tuple, Any
import numpy as np

from .exceptions import ValidationError, TrainingDataError


class ConfidenceLevel(Enum):
    """Coarse confidence buckets shown next to detections."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @classmethod
    def from_score(cls, confidence: float) -> "ConfidenceLevel":
        if confidence >= 0.7:
            return cls.HIGH
        if confidence >= 0.4:
            return cls.MEDIUM
        return cls.LOW


class FeedbackRating(Enum):
    """Labels for the 1-5 ratings annotators give."""
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"

    @classmethod
    def from_score(cls, rating: float) -> "FeedbackRating":
        if rating >= 4:
            return cls.EXCELLENT
        if rating >= 3:
            return cls.GOOD
        if rating >= 2:
            return cls.FAIR
        return cls.POOR


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    if not isinstance(value, str):
        raise ValidationError("Timestamp must be a string", parameter="created_at",
                              expected_type="str")
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as e:
        raise ValidationError(f"Invalid timestamp: {value!r}", parameter="created_at") from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _number(data: Dict[str, Any], key: str, default: Any = None) -> float:
    """Read a numeric field from a JSON dict, rejecting bools and strings."""
    if key not in data:
        if default is None:
            raise KeyError(key)
        return default
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, Real):
        raise TypeError(f"Field '{key}' must be a number, got {type(value).__name__}")
    return value


@dataclass
class BoundingBox:
    """Axis-aligned rectangle in pixel coordinates (top-left origin)."""
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center(self) -> Tuple[float, float]:
        """Get center coordinates."""
        return (self.x + self.width / 2, self.y + self.height / 2)

    @property
    def area(self) -> float:
        """Get area in pixels."""
        return self.width * self.height

    @property
    def corners(self) -> List[Tuple[float, float]]:
        """Get four corner coordinates."""
        return [
            (self.x, self.y),
            (self.right, self.y),
            (self.right, self.bottom),
            (self.x, self.bottom)
        ]

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BoundingBox":
        return cls(
            x=_number(data, "x"),
            y=_number(data, "y"),
            width=_number(data, "width"),
            height=_number(data, "height"),
        )


@dataclass
class TextRegion:
    """Rectangle believed to contain text.

    ``estimated_char_count`` is a coarse proxy derived from edge pixels, not a
    character count.
    """
    x: float
    y: float
    width: float
    height: float
    confidence: float = 0.0
    estimated_char_count: int = 0

    @property
    def bbox(self) -> BoundingBox:
        return BoundingBox(self.x, self.y, self.width, self.height)

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def confidence_level(self) -> ConfidenceLevel:
        return ConfidenceLevel.from_score(self.confidence)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "confidence": self.confidence,
            "estimatedCharCount": self.estimated_char_count,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TextRegion":
        return cls(**_region_fields(data))


def _region_fields(data: Dict[str, Any]) -> Dict[str, Any]:
    width = _number(data, "width")
    height = _number(data, "height")
    if width < 0 or height < 0:
        raise ValueError("Region width and height must be non-negative")
    return {
        "x": _number(data, "x"),
        "y": _number(data, "y"),
        "width": width,
        "height": height,
        "confidence": _number(data, "confidence", 0.0),
        "estimated_char_count": int(_number(data, "estimatedCharCount", 0)),
    }


@dataclass
class TextRegionAnnotation(TextRegion):
    """A text region stored for training.

    ``user_marked`` is True for rectangles drawn by a person and False for
    automatic detections that were wrapped for storage.
    """
    id: str = ""
    label: str = ""
    user_marked: bool = False
    created_at: str = field(default_factory=utc_now_iso)
    image_hash: str = ""

    @classmethod
    def from_region(cls, region: TextRegion, image_hash: str, annotation_id: str,
                    label: str = "", created_at: Optional[str] = None) -> "TextRegionAnnotation":
        """Wrap an automatic detection as an annotation."""
        return cls(
            x=region.x,
            y=region.y,
            width=region.width,
            height=region.height,
            confidence=region.confidence,
            estimated_char_count=region.estimated_char_count,
            id=annotation_id,
            label=label,
            user_marked=False,
            created_at=created_at or utc_now_iso(),
            image_hash=image_hash,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            "id": self.id,
            "label": self.label,
            "userMarked": self.user_marked,
            "createdAt": self.created_at,
            "imageHash": self.image_hash,
        })
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TextRegionAnnotation":
        annotation_id = data["id"]
        user_marked = data.get("userMarked", False)
        if not isinstance(annotation_id, str) or not annotation_id:
            raise ValueError("Annotation id must be a non-empty string")
        if not isinstance(user_marked, bool):
            raise TypeError("Field 'userMarked' must be a boolean")
        return cls(
            **_region_fields(data),
            id=annotation_id,
            label=str(data.get("label") or ""),
            user_marked=user_marked,
            created_at=str(data.get("createdAt") or utc_now_iso()),
            image_hash=str(data.get("imageHash", "")),
        )


@dataclass
class TextQuality:
    """Image quality metrics computed from the grayscale buffer."""
    contrast: float
    sharpness: float
    brightness: float
    noise: float
    overall: float

    def to_dict(self) -> Dict[str, float]:
        return {
            "contrast": self.contrast,
            "sharpness": self.sharpness,
            "brightness": self.brightness,
            "noise": self.noise,
            "overall": self.overall,
        }


@dataclass
class TextDetectionResult:
    """Complete output of one detection call."""
    has_text: bool
    confidence: float
    quality: TextQuality
    text_regions: List[TextRegion] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)

    @property
    def confidence_level(self) -> ConfidenceLevel:
        return ConfidenceLevel.from_score(self.confidence)

    @property
    def region_count(self) -> int:
        return len(self.text_regions)

    def top_recommendations(self, limit: int = 2) -> List[str]:
        """First ``limit`` recommendations, in rule order."""
        return self.recommendations[:limit]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hasText": self.has_text,
            "confidence": self.confidence,
            "textRegions": [region.to_dict() for region in self.text_regions],
            "quality": self.quality.to_dict(),
            "recommendations": list(self.recommendations),
        }


@dataclass
class QuickCheckResult:
    """Result of the low-resolution pre-filter."""
    has_text: bool
    confidence: float


@dataclass
class AnalysisImage:
    """Grayscale buffer in [0, 1] prepared for analysis.

    ``pixels`` has shape (height, width). ``original_width`` and
    ``original_height`` are the decoded image size before downscaling.
    """
    pixels: np.ndarray
    original_width: int
    original_height: int

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def scale_x(self) -> float:
        """Factor from analysis x coordinates to native image x coordinates."""
        return self.original_width / self.width

    @property
    def scale_y(self) -> float:
        return self.original_height / self.height


@dataclass
class ImageDimensions:
    width: int
    height: int

    def to_dict(self) -> Dict[str, int]:
        return {"width": self.width, "height": self.height}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ImageDimensions":
        return cls(width=_number(data, "width"), height=_number(data, "height"))


@dataclass
class UserFeedback:
    """Annotator ratings (1-5) for one image."""
    overall_quality: int
    detection_accuracy: int
    comments: Optional[str] = None

    def __post_init__(self):
        for name in ("overall_quality", "detection_accuracy"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, Real) or not 1 <= value <= 5:
                raise ValidationError(f"{name} must be between 1 and 5, got {value!r}",
                                      parameter=name, expected_type="int")

    @property
    def quality_rating(self) -> FeedbackRating:
        return FeedbackRating.from_score(self.overall_quality)

    @property
    def accuracy_rating(self) -> FeedbackRating:
        return FeedbackRating.from_score(self.detection_accuracy)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "overallQuality": self.overall_quality,
            "detectionAccuracy": self.detection_accuracy,
        }
        if self.comments is not None:
            data["comments"] = self.comments
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserFeedback":
        return cls(
            overall_quality=data["overallQuality"],
            detection_accuracy=data["detectionAccuracy"],
            comments=data.get("comments"),
        )


@dataclass
class TrainingData:
    """Persisted annotations and feedback for one image, keyed by content hash."""
    image_hash: str
    original_dimensions: ImageDimensions
    annotations: List[TextRegionAnnotation] = field(default_factory=list)
    user_feedback: Optional[UserFeedback] = None
    created_at: str = field(default_factory=utc_now_iso)

    def __post_init__(self):
        if not self.image_hash:
            raise ValidationError("image_hash must not be empty", parameter="image_hash")
        parse_timestamp(self.created_at)
        seen = set()
        for annotation in self.annotations:
            if annotation.id in seen:
                raise ValidationError(f"Duplicate annotation id: {annotation.id}",
                                      parameter="annotations")
            seen.add(annotation.id)

    @property
    def created(self) -> datetime:
        return parse_timestamp(self.created_at)

    @property
    def user_annotations(self) -> List[TextRegionAnnotation]:
        return [a for a in self.annotations if a.user_marked]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "imageHash": self.image_hash,
            "originalDimensions": self.original_dimensions.to_dict(),
            "annotations": [a.to_dict() for a in self.annotations],
            "userFeedback": self.user_feedback.to_dict() if self.user_feedback else None,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TrainingData":
        """Build a record from its JSON form.

        Raises TrainingDataError for any missing field, wrong type or invalid
        value, so callers can reject a payload as a whole.
        """
        image_hash = data.get("imageHash") if isinstance(data, dict) else None
        try:
            if not isinstance(data, dict):
                raise TypeError(f"Training record must be an object, got {type(data).__name__}")
            if not isinstance(image_hash, str):
                raise TypeError("Field 'imageHash' must be a string")
            annotations = data.get("annotations", [])
            if not isinstance(annotations, list):
                raise TypeError("Field 'annotations' must be a list")
            feedback = data.get("userFeedback")
            return cls(
                image_hash=image_hash,
                original_dimensions=ImageDimensions.from_dict(data["originalDimensions"]),
                annotations=[TextRegionAnnotation.from_dict(a) for a in annotations],
                user_feedback=UserFeedback.from_dict(feedback) if feedback else None,
                created_at=data["createdAt"],
            )
        except TrainingDataError:
            raise
        except (KeyError, TypeError, ValueError, ValidationError) as e:
            raise TrainingDataError(f"Malformed training record: {e}",
                                    image_hash=image_hash if isinstance(image_hash, str) else None) from e


@dataclass
class TrainingStats:
    """Aggregate figures over all stored training records."""
    total_images: int
    total_annotations: int
    average_quality: float
    average_accuracy: float
    recent_activity_count: int


@dataclass
class DisplayGeometry:
    """How an image is shown on screen.

    ``left``/``top`` is the rendered element's origin in screen pixels,
    ``rendered_*`` its on-screen size and ``natural_*`` the decoded image size.
    """
    left: float
    top: float
    rendered_width: float
    rendered_height: float
    natural_width: float
    natural_height: float

    def __post_init__(self):
        for name in ("rendered_width", "rendered_height", "natural_width", "natural_height"):
            if getattr(self, name) <= 0:
                raise ValidationError(f"{name} must be positive", parameter=name)

    @property
    def scale_x(self) -> float:
        """Screen-to-image factor along x."""
        return self.natural_width / self.rendered_width

    @property
    def scale_y(self) -> float:
        return self.natural_height / self.rendered_height


@dataclass
class PipelineResult:
    """Detection after stored user corrections were applied.

    ``annotations`` are the detected regions wrapped for storage (plus any
    appended user corrections); ``improved`` is True when corrections changed
    the number of regions.
    """
    detection: TextDetectionResult
    image_hash: str
    annotations: List[TextRegionAnnotation] = field(default_factory=list)
    improved: bool = False

    @property
    def user_corrections(self) -> List[TextRegionAnnotation]:
        """Stored user rectangles that matched no detection and were appended."""
        return [a for a in self.annotations if a.user_marked]


__all__ = [
    'ConfidenceLevel',
    'FeedbackRating',
    'utc_now_iso',
    'parse_timestamp',
    'BoundingBox',
    'TextRegion',
    'TextRegionAnnotation',
    'TextQuality',
    'TextDetectionResult',
    'QuickCheckResult',
    'AnalysisImage',
    'ImageDimensions',
    'UserFeedback',
    'TrainingData',
    'TrainingStats',
    'DisplayGeometry',
    'PipelineResult',
]
