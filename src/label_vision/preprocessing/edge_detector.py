"""Sobel edge magnitude for region finding."""

import cv2
import numpy as np


def sobel_magnitude(gray: np.ndarray) -> np.ndarray:
    """Per-pixel gradient magnitude of a [0, 1] grayscale buffer.

    Uses 3x3 Sobel kernels; border pixels are left at 0 so only interior
    pixels contribute edges.
    """
    magnitude = np.zeros_like(gray, dtype=np.float64)
    if gray.shape[0] < 3 or gray.shape[1] < 3:
        return magnitude

    gx = cv2.Sobel(gray, cv2.CV_64F, 1, 0, ksize=3)
    gy = cv2.Sobel(gray, cv2.CV_64F, 0, 1, ksize=3)
    magnitude[1:-1, 1:-1] = np.hypot(gx[1:-1, 1:-1], gy[1:-1, 1:-1])
    return magnitude


__all__ = ['sobel_magnitude']
