"""
Utility modules for the label-vision library.
"""

from .config import load_config, get_config_value
from .logging import setup_logger, setup_logging, get_logger
from .images import decode_image, prepare_analysis_image, validate_image
from .geometry import iou, screen_to_image, image_to_screen, normalize, denormalize

__all__ = [
    'load_config',
    'get_config_value',
    'setup_logger',
    'setup_logging',
    'get_logger',
    'decode_image',
    'prepare_analysis_image',
    'validate_image',
    'iou',
    'screen_to_image',
    'image_to_screen',
    'normalize',
    'denormalize',
]
