"""Image decoding and grayscale preparation for analysis.

Accepts encoded bytes (JPEG/PNG/WebP), file paths, OpenCV arrays (BGR, BGRA
or grayscale) and PIL images, and turns them into the float grayscale buffer
the detectors work on. Does NOT perform quality analysis or region finding -
those belong in preprocessing modules.

Unlike the detectors, these helpers raise ImageDecodingError on bad input;
TextDetector converts that into a failure result.

Examples
--------
    from label_vision.utils.images import decode_image, prepare_analysis_image

    rgb = decode_image(Path("label.jpg").read_bytes())
    analysis = prepare_analysis_image(rgb, max_size=800)
    print(analysis.width, analysis.height, analysis.scale_x)
"""

import cv2
import numpy as np
from PIL import Image
from pathlib import Path
from typing import Union, Tuple, Any
import logging

from ..exceptions import ImageDecodingError
from ..types import AnalysisImage

logger = logging.getLogger(__name__)

ImageInput = Union[bytes, bytearray, memoryview, str, Path, np.ndarray, Image.Image]

# ITU-R BT.601 luma weights, applied to R, G, B
LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114], dtype=np.float64)


def read_image_bytes(image_path: Union[str, Path]) -> bytes:
    """Read the raw encoded bytes of an image file."""
    try:
        return Path(image_path).read_bytes()
    except OSError as e:
        raise ImageDecodingError(f"Could not read image file: {e}",
                                 source=str(image_path), operation="read") from e


def _array_to_rgb(image: np.ndarray) -> np.ndarray:
    """Convert an OpenCV-convention array to uint8 RGB."""
    if image.size == 0 or image.ndim not in (2, 3):
        raise ImageDecodingError(f"Unsupported array shape {image.shape}", operation="convert")

    if image.dtype == np.uint16:
        image = (image >> 8).astype(np.uint8)
    elif np.issubdtype(image.dtype, np.floating):
        image = np.round(np.clip(image, 0.0, 1.0) * 255).astype(np.uint8)
    elif image.dtype != np.uint8:
        raise ImageDecodingError(f"Unsupported array dtype {image.dtype}", operation="convert")

    if image.ndim == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2RGB)

    channels = image.shape[2]
    if channels == 1:
        return cv2.cvtColor(image[:, :, 0], cv2.COLOR_GRAY2RGB)
    if channels == 3:
        return cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
    if channels == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2RGB)

    raise ImageDecodingError(f"Unsupported channel count {channels}", operation="convert")


def decode_image(image: Any) -> np.ndarray:
    """Decode any supported input to a uint8 RGB array of shape (h, w, 3)."""
    if isinstance(image, Image.Image):
        try:
            return np.asarray(image.convert("RGB"), dtype=np.uint8)
        except (OSError, ValueError) as e:
            raise ImageDecodingError(f"Could not convert PIL image: {e}",
                                     source="PIL.Image", operation="convert") from e

    if isinstance(image, np.ndarray):
        return _array_to_rgb(image)

    source = "bytes"
    if isinstance(image, (str, Path)):
        source = str(image)
        image = read_image_bytes(image)

    if not isinstance(image, (bytes, bytearray, memoryview)):
        raise ImageDecodingError(f"Unsupported image input type: {type(image).__name__}",
                                 operation="decode")

    buffer = np.frombuffer(image, dtype=np.uint8)
    if buffer.size == 0:
        raise ImageDecodingError("Empty image data", source=source, operation="decode")

    decoded = cv2.imdecode(buffer, cv2.IMREAD_COLOR)
    if decoded is None:
        raise ImageDecodingError("Could not decode image data", source=source, operation="decode")

    return cv2.cvtColor(decoded, cv2.COLOR_BGR2RGB)


def compute_analysis_size(width: int, height: int, max_size: int) -> Tuple[int, int]:
    """Target (width, height) so the longer side does not exceed max_size.

    Images are never upscaled.
    """
    scale = min(max_size / width, max_size / height, 1.0)
    return max(1, int(width * scale)), max(1, int(height * scale))


def resize_image(image: np.ndarray, target_size: Tuple[int, int]) -> np.ndarray:
    """Resize image to target dimensions (width, height)."""
    width, height = target_size
    if (image.shape[1], image.shape[0]) == (width, height):
        return image

    shrinking = width <= image.shape[1] and height <= image.shape[0]
    interpolation = cv2.INTER_AREA if shrinking else cv2.INTER_LINEAR
    return cv2.resize(image, (width, height), interpolation=interpolation)


def to_grayscale(rgb: np.ndarray) -> np.ndarray:
    """Luminance-weighted grayscale in [0, 1] as float64, shape (h, w)."""
    return rgb.astype(np.float64) @ LUMA_WEIGHTS / 255.0


def prepare_analysis_image(image: Any, max_size: int = 800) -> AnalysisImage:
    """Decode, downscale and convert an image for analysis."""
    rgb = decode_image(image)
    original_height, original_width = rgb.shape[:2]

    target = compute_analysis_size(original_width, original_height, max_size)
    resized = resize_image(rgb, target)
    if target != (original_width, original_height):
        logger.debug(f"Downscaled {original_width}x{original_height} to {target[0]}x{target[1]}")

    return AnalysisImage(
        pixels=to_grayscale(resized),
        original_width=original_width,
        original_height=original_height,
    )


def prepare_fixed_size_image(image: Any, size: int) -> np.ndarray:
    """Decode and squash an image to size x size grayscale (aspect ratio ignored)."""
    rgb = decode_image(image)
    return to_grayscale(resize_image(rgb, (size, size)))


def validate_image(image: Any) -> bool:
    """Check that an input can be decoded to a non-empty image."""
    try:
        rgb = decode_image(image)
    except ImageDecodingError as e:
        logger.debug(f"Image validation failed: {e}")
        return False
    return rgb.shape[0] >= 1 and rgb.shape[1] >= 1


__all__ = [
    'ImageInput',
    'read_image_bytes',
    'decode_image',
    'compute_analysis_size',
    'resize_image',
    'to_grayscale',
    'prepare_analysis_image',
    'prepare_fixed_size_image',
    'validate_image',
]
