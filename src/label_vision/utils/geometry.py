"""Rectangle geometry and coordinate-space conversions.

Functions accept any object exposing ``x``, ``y``, ``width`` and ``height``
(BoundingBox, TextRegion, TextRegionAnnotation) and return new BoundingBox
instances; inputs are never modified.

Coordinate spaces:
- Screen: pixels as rendered, relative to the page, after CSS scaling
- Image: native pixels of the decoded image (top-left origin)
- Relative: image coordinates divided by the image size, in [0, 1]
"""

import math
from typing import Iterable, Optional

from ..exceptions import ValidationError
from ..types import BoundingBox, DisplayGeometry, ImageDimensions


def round_half_up(value: float) -> int:
    """Round to the nearest integer, ties towards positive infinity."""
    return int(math.floor(value + 0.5))


def area(rect) -> float:
    """Area in pixels (0 if degenerate)."""
    return max(0.0, rect.width) * max(0.0, rect.height)


def intersection(a, b) -> Optional[BoundingBox]:
    """Intersection rectangle, or None if the rectangles do not overlap."""
    x1 = max(a.x, b.x)
    y1 = max(a.y, b.y)
    x2 = min(a.x + a.width, b.x + b.width)
    y2 = min(a.y + a.height, b.y + b.height)
    if x2 <= x1 or y2 <= y1:
        return None
    return BoundingBox(x1, y1, x2 - x1, y2 - y1)


def iou(a, b) -> float:
    """Intersection-over-Union in [0, 1]; 0 for disjoint rectangles or an empty union."""
    inter = intersection(a, b)
    if inter is None:
        return 0.0
    inter_area = area(inter)
    union = area(a) + area(b) - inter_area
    return inter_area / union if union > 0 else 0.0


def enclosing_rect(rects: Iterable) -> BoundingBox:
    """Minimal rectangle containing every input rectangle."""
    rects = list(rects)
    if not rects:
        raise ValidationError("enclosing_rect needs at least one rectangle", parameter="rects")
    x1 = min(r.x for r in rects)
    y1 = min(r.y for r in rects)
    x2 = max(r.x + r.width for r in rects)
    y2 = max(r.y + r.height for r in rects)
    return BoundingBox(x1, y1, x2 - x1, y2 - y1)


def scale_rect(rect, sx: float, sy: float) -> BoundingBox:
    """Scale a rectangle about the origin, snapping to whole pixels."""
    x1 = round_half_up(rect.x * sx)
    y1 = round_half_up(rect.y * sy)
    x2 = round_half_up((rect.x + rect.width) * sx)
    y2 = round_half_up((rect.y + rect.height) * sy)
    return BoundingBox(x1, y1, x2 - x1, y2 - y1)


def screen_to_image(rect, display: DisplayGeometry) -> BoundingBox:
    """Map a screen-space rectangle to native image pixels."""
    return BoundingBox(
        x=(rect.x - display.left) * display.scale_x,
        y=(rect.y - display.top) * display.scale_y,
        width=rect.width * display.scale_x,
        height=rect.height * display.scale_y,
    )


def image_to_screen(rect, display: DisplayGeometry) -> BoundingBox:
    """Inverse of screen_to_image."""
    return BoundingBox(
        x=rect.x / display.scale_x + display.left,
        y=rect.y / display.scale_y + display.top,
        width=rect.width / display.scale_x,
        height=rect.height / display.scale_y,
    )


def _check_dimensions(dimensions: ImageDimensions) -> None:
    if dimensions.width <= 0 or dimensions.height <= 0:
        raise ValidationError(
            f"Image dimensions must be positive, got {dimensions.width}x{dimensions.height}",
            parameter="dimensions",
        )


def normalize(rect, dimensions: ImageDimensions) -> BoundingBox:
    """Convert absolute pixels to [0, 1]-relative coordinates."""
    _check_dimensions(dimensions)
    return BoundingBox(
        x=rect.x / dimensions.width,
        y=rect.y / dimensions.height,
        width=rect.width / dimensions.width,
        height=rect.height / dimensions.height,
    )


def denormalize(rect, dimensions: ImageDimensions) -> BoundingBox:
    """Convert [0, 1]-relative coordinates back to absolute pixels."""
    _check_dimensions(dimensions)
    return BoundingBox(
        x=rect.x * dimensions.width,
        y=rect.y * dimensions.height,
        width=rect.width * dimensions.width,
        height=rect.height * dimensions.height,
    )


__all__ = [
    'round_half_up',
    'area',
    'intersection',
    'iou',
    'enclosing_rect',
    'scale_rect',
    'screen_to_image',
    'image_to_screen',
    'normalize',
    'denormalize',
]
