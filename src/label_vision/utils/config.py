"""Configuration management for the label-vision library.

Handles loading, merging, and validating configuration from YAML files.
Configuration priority: defaults -> resources/default.yaml -> custom config.

Examples
--------
    from label_vision.utils.config import load_config, get_config_value

    config = load_config()
    config = load_config("custom_config.yaml")

    block_size = get_config_value(config, 'text_detection.block_size', 20)
"""

import yaml
from pathlib import Path
from typing import Dict, Any, Optional, Union
from copy import deepcopy
import logging

from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# SHA-256 hex digest length
MAX_HASH_LENGTH = 64
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def get_resource_path(filename: str) -> Path:
    """Get path to a resource file in the resources directory."""
    current_dir = Path(__file__).parent
    resources_dir = current_dir.parent / "resources"
    return resources_dir / filename


def load_yaml_file(file_path: Union[str, Path]) -> Dict[str, Any]:
    """Load and parse a YAML configuration file."""
    file_path = Path(file_path)

    if not file_path.exists():
        raise ConfigurationError(f"Configuration file not found: {file_path}")

    try:
        with open(file_path, 'r', encoding='utf-8') as file:
            content = yaml.safe_load(file)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Failed to parse YAML file {file_path}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Failed to load configuration file {file_path}: {e}") from e

    if content is None:
        logger.warning(f"Empty configuration file: {file_path}")
        return {}

    if not isinstance(content, dict):
        raise ConfigurationError(
            f"Configuration file must contain a dictionary, got {type(content).__name__}"
        )

    return content


def merge_configs(base_config: Dict[str, Any],
                  override_config: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge two configuration dictionaries, override takes precedence."""
    merged = deepcopy(base_config)

    def _deep_merge(base_dict: Dict[str, Any], override_dict: Dict[str, Any]) -> None:
        for key, value in override_dict.items():
            if (key in base_dict
                    and isinstance(base_dict[key], dict)
                    and isinstance(value, dict)):
                _deep_merge(base_dict[key], value)
            else:
                base_dict[key] = deepcopy(value)

    _deep_merge(merged, override_config)
    return merged


def get_default_config() -> Dict[str, Any]:
    """Get hardcoded default configuration as fallback."""
    return {
        "text_detection": {
            "max_analysis_size": 800,
            "min_text_confidence": 0.3,
            "edge_threshold": 0.1,
            "block_size": 20,
            "min_edge_density": 0.1,
            "min_edge_strength": 0.2,
            "chars_per_edge_pixels": 10,
            "merge_distance": 40,
            "min_region_area": 400,
            "sharpness_scale": 10,
            "region_count_target": 3,
            "patterns": {
                "scanlines": 5,
                "line_transition_threshold": 0.3,
                "line_density_range": [0.1, 0.8],
                "peak_prominence": 0.1,
                "char_transition_threshold": 0.2,
                "char_density_ideal": [0.1, 0.4],
                "char_density_acceptable": [0.05, 0.6],
            },
            "weights": {
                "contrast": 0.25,
                "sharpness": 0.25,
                "brightness": 0.15,
                "regions": 0.20,
                "patterns": 0.15,
            },
            "recommendations": {
                "low_contrast": 0.3,
                "low_sharpness": 0.2,
                "dark": 0.2,
                "bright": 0.8,
                "noisy": 0.4,
                "max_regions": 10,
                "good_overall": 0.7,
                "good_confidence": 0.6,
            },
        },
        "quick_check": {
            "size": 200,
            "min_confidence": 0.25,
        },
        "training": {
            "storage_key": "text_training",
            "max_records": 100,
            "overlap_threshold": 0.3,
            "matched_confidence_floor": 0.8,
            "new_region_confidence": 0.9,
            "retention_days": 30,
            "recent_activity_days": 7,
            "hash_length": 16,
            "improved_confidence_boost": 0.1,
            "min_annotation_size": 10,
        },
        "logging": {
            "level": "WARNING",
        },
    }


def get_config_value(config: Dict[str, Any],
                     key_path: str,
                     default: Any = None) -> Any:
    """Get nested configuration value using dot notation (e.g., 'training.max_records')."""
    keys = key_path.split('.')
    current = config

    for key in keys:
        if isinstance(current, dict) and key in current:
            current = current[key]
        else:
            return default

    return current


def load_config(config_path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """Load, merge and validate configuration.

    A missing or unreadable custom file raises ConfigurationError; a broken
    packaged default.yaml is logged and the hard-coded defaults are used.
    """
    config = get_default_config()
    logger.debug("Started with default configuration")

    default_resource = get_resource_path("default.yaml")
    if default_resource.exists():
        try:
            config = merge_configs(config, load_yaml_file(default_resource))
            logger.debug("Loaded default.yaml from resources")
        except ConfigurationError as e:
            logger.warning(f"Could not load default.yaml: {e}")

    if config_path:
        custom_config = load_yaml_file(config_path)
        config = merge_configs(config, custom_config)
        logger.info(f"Loaded custom configuration from: {config_path}")

    validate_config(config)
    return config


def _require_positive(config: Dict[str, Any], key_path: str) -> None:
    value = get_config_value(config, key_path)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ConfigurationError(f"'{key_path}' must be a positive number",
                                 config_key=key_path, config_value=value)


def _require_unit(config: Dict[str, Any], key_path: str) -> None:
    value = get_config_value(config, key_path)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not 0 <= value <= 1:
        raise ConfigurationError(f"'{key_path}' must be between 0 and 1",
                                 config_key=key_path, config_value=value)


def validate_config(config: Dict[str, Any]) -> bool:
    """Validate sizes, thresholds and training bounds."""
    for section in ("text_detection", "quick_check", "training"):
        if not isinstance(config.get(section), dict):
            raise ConfigurationError(f"Missing '{section}' section in configuration",
                                     config_key=section)

    for key_path in (
        "text_detection.max_analysis_size",
        "text_detection.block_size",
        "text_detection.chars_per_edge_pixels",
        "text_detection.merge_distance",
        "text_detection.sharpness_scale",
        "text_detection.region_count_target",
        "text_detection.patterns.scanlines",
        "quick_check.size",
        "training.max_records",
        "training.retention_days",
        "training.recent_activity_days",
        "training.hash_length",
        "training.min_annotation_size",
    ):
        _require_positive(config, key_path)

    for key_path in (
        "text_detection.min_text_confidence",
        "text_detection.edge_threshold",
        "text_detection.min_edge_density",
        "text_detection.patterns.line_transition_threshold",
        "text_detection.patterns.peak_prominence",
        "text_detection.patterns.char_transition_threshold",
        "quick_check.min_confidence",
        "training.overlap_threshold",
        "training.matched_confidence_floor",
        "training.new_region_confidence",
        "training.improved_confidence_boost",
    ):
        _require_unit(config, key_path)

    weights = get_config_value(config, "text_detection.weights", {})
    for name, weight in weights.items():
        _require_unit(config, f"text_detection.weights.{name}")

    hash_length = get_config_value(config, "training.hash_length")
    if hash_length > MAX_HASH_LENGTH:
        raise ConfigurationError(
            f"'training.hash_length' must not exceed {MAX_HASH_LENGTH} hex characters",
            config_key="training.hash_length", config_value=hash_length
        )

    level = get_config_value(config, "logging.level", "WARNING")
    if not isinstance(level, str) or level.upper() not in LOG_LEVELS:
        raise ConfigurationError(f"'logging.level' must be one of {', '.join(LOG_LEVELS)}",
                                 config_key="logging.level", config_value=level)

    floor = get_config_value(config, "training.matched_confidence_floor")
    new_confidence = get_config_value(config, "training.new_region_confidence")
    if new_confidence < floor:
        raise ConfigurationError(
            "'training.new_region_confidence' must not be below 'training.matched_confidence_floor'",
            config_key="training.new_region_confidence", config_value=new_confidence
        )

    logger.debug("Configuration validation passed")
    return True


__all__ = [
    'load_config',
    'merge_configs',
    'validate_config',
    'get_default_config',
    'get_resource_path',
    'load_yaml_file',
    'get_config_value',
]
