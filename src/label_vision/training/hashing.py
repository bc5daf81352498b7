"""Content hashing for training-data keys.

Training records are keyed by a hash of the encoded image bytes, so the same
file maps to the same record regardless of its name or location.
"""

import hashlib
from pathlib import Path
from typing import Union

from ..exceptions import ValidationError

DEFAULT_HASH_LENGTH = 16
_CHUNK_SIZE = 64 * 1024


def generate_image_hash(data: Union[bytes, bytearray, memoryview, str, Path],
                        length: int = DEFAULT_HASH_LENGTH) -> str:
    """SHA-256 of the raw image bytes as lowercase hex, truncated to ``length``.

    Args:
        data: Encoded image bytes or a path to the image file
        length: Number of hex characters to keep (1-64)

    Returns:
        Hex digest prefix

    Example:
        >>> generate_image_hash(b"abc")
        'ba7816bf8f01cfea'
    """
    if not 1 <= length <= 64:
        raise ValidationError(f"Hash length must be between 1 and 64, got {length}",
                              parameter="length", expected_type="int")

    sha256 = hashlib.sha256()
    if isinstance(data, (bytes, bytearray, memoryview)):
        sha256.update(data)
    elif isinstance(data, (str, Path)):
        with open(data, "rb") as f:
            for chunk in iter(lambda: f.read(_CHUNK_SIZE), b""):
                sha256.update(chunk)
    else:
        raise ValidationError(f"Cannot hash {type(data).__name__}; expected bytes or a path",
                              parameter="data", expected_type="bytes")

    return sha256.hexdigest()[:length]


__all__ = ['generate_image_hash', 'DEFAULT_HASH_LENGTH']
