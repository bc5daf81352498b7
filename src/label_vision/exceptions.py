"""Exception classes for the label-vision library.

Defines the exception hierarchy for text detection and training-data errors.
All exceptions inherit from LabelVisionError for easy catching.

Text detection itself never raises to the caller: decode and processing
failures are converted into a zero-confidence result. These classes surface
from the lower-level helpers (image decoding, configuration, geometry,
training-data parsing) for callers that use them directly.

Examples
--------
    from label_vision.exceptions import LabelVisionError, ImageDecodingError
    from label_vision.utils.images import decode_image

    try:
        image = decode_image(b"not an image")
    except ImageDecodingError as e:
        print(f"Unreadable image: {e}")
    except LabelVisionError as e:
        print(f"Label vision failed: {e}")
"""


class LabelVisionError(Exception):
    """Base exception for all label-vision errors."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (Details: {self.details})"
        return self.message


class ImageDecodingError(LabelVisionError):
    """Raised when an image cannot be loaded, decoded or converted."""

    def __init__(self, message: str, source: str = None, operation: str = None):
        details = {}
        if source:
            details["source"] = source
        if operation:
            details["operation"] = operation

        super().__init__(message, details)
        self.source = source
        self.operation = operation


class ConfigurationError(LabelVisionError):
    """Raised when configuration is invalid or missing."""

    def __init__(self, message: str, config_key: str = None, config_value=None):
        details = {}
        if config_key:
            details["config_key"] = config_key
        if config_value is not None:
            details["config_value"] = str(config_value)

        super().__init__(message, details)
        self.config_key = config_key
        self.config_value = config_value


class ValidationError(LabelVisionError):
    """Raised when input validation fails."""

    def __init__(self, message: str, parameter: str = None, expected_type: str = None):
        details = {}
        if parameter:
            details["parameter"] = parameter
        if expected_type:
            details["expected_type"] = expected_type

        super().__init__(message, details)
        self.parameter = parameter
        self.expected_type = expected_type


class TrainingDataError(LabelVisionError):
    """Raised when stored or imported training data is malformed."""

    def __init__(self, message: str, image_hash: str = None):
        details = {}
        if image_hash:
            details["image_hash"] = image_hash

        super().__init__(message, details)
        self.image_hash = image_hash


__all__ = [
    'LabelVisionError',
    'ImageDecodingError',
    'ConfigurationError',
    'ValidationError',
    'TrainingDataError',
]
