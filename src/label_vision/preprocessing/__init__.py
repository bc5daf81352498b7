"""
Preprocessing package: image quality, edges, regions, patterns and the
TextDetector that ties them together.
"""

from .quality_analyzer import QualityAnalyzer
from .edge_detector import sobel_magnitude
from .region_finder import RegionFinder
from .pattern_analyzer import PatternAnalyzer
from .text_detector import TextDetector

__all__ = [
    'QualityAnalyzer',
    'sobel_magnitude',
    'RegionFinder',
    'PatternAnalyzer',
    'TextDetector',
]
