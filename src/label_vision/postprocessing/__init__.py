"""
Postprocessing package: confidence aggregation and capture recommendations.
"""

from .confidence_analyzer import ConfidenceAnalyzer, normalize_brightness

__all__ = ['ConfidenceAnalyzer', 'normalize_brightness']
