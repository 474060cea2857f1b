"""
Configuration management for PhotoSweep
"""

import yaml
import os
import re
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Dict, Any, Optional, Tuple, Union
import logging

from .exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.yaml"

# Step sizes for chunking and yielding
_POSITIVE_SETTINGS = frozenset({'signature_chunk_size', 'categorize_yield_every'})

DEFAULT_SCREENSHOT_RESOLUTIONS: Tuple[Tuple[int, int], ...] = (
    (1080, 1920),  # iPhone X
    (1242, 2208),  # iPhone 6/7/8 Plus
    (750, 1334),   # iPhone 6/7/8
    (1440, 2560),  # Android common
    (1080, 2340),  # iPhone 12/13
    (1170, 2532),  # iPhone 14
    (1179, 2556),  # iPhone 14 Pro
    (1284, 2778),  # iPhone 14 Pro Max
)


@dataclass(frozen=True)
class DetectionSettings:
    """
    Heuristic constants for the detection pipeline.

    None of these values has a documented derivation; they are kept as
    named settings so a caller can override any of them.
    """
    # Signature quantization
    size_bucket_bytes: int = 1000
    time_bucket_ms: int = 60000

    # Duplicate grouping
    filename_pass_max_existing: int = 10
    filename_pass_cap: int = 20

    # Windowed similarity scan
    window_radius: int = 25
    similar_size_ratio: float = 0.1
    similar_size_floor_bytes: int = 10000
    similar_time_threshold_ms: int = 60000
    max_similar: int = 5
    burst_min_neighbors: int = 2

    # Screenshot detection
    square_tolerance_px: int = 10
    screenshot_tolerance_px: int = 50
    screenshot_resolutions: Tuple[Tuple[int, int], ...] = DEFAULT_SCREENSHOT_RESOLUTIONS

    # Low quality detection
    low_quality_min_bytes: int = 50000
    low_quality_min_pixels: int = 1000000
    low_quality_bytes_per_pixel: float = 0.1

    # Old / unused detection
    old_unused_days: int = 365

    # Scheduling
    signature_chunk_size: int = 50
    categorize_yield_every: int = 25

    @property
    def old_unused_ms(self) -> int:
        return self.old_unused_days * 24 * 60 * 60 * 1000

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]]) -> 'DetectionSettings':
        """
        Build settings from the `detection` section of a config dictionary

        Args:
            config: Full configuration dictionary (as returned by load_config)

        Returns:
            DetectionSettings with defaults for every key not present

        Raises:
            ConfigError: If a value cannot be used for its setting
        """
        section = (config or {}).get('detection') or {}
        if not isinstance(section, dict):
            raise ConfigError(f"'detection' section must be a mapping, got {type(section).__name__}")

        return cls().with_overrides(**section)

    def with_overrides(self, **overrides: Any) -> 'DetectionSettings':
        """Return a copy with the given settings replaced."""
        known = {f.name: f for f in fields(self)}
        values = {}

        for key, value in overrides.items():
            if key not in known:
                logger.warning(f"Ignoring unknown detection setting: {key}")
                continue
            if key == 'screenshot_resolutions':
                values[key] = _parse_resolutions(value)
                continue

            default = getattr(self, key)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigError(f"Detection setting '{key}' must be a number, got {value!r}")
            if isinstance(default, int):
                if not float(value).is_integer():
                    raise ConfigError(f"Detection setting '{key}' must be a whole number, got {value!r}")
                value = int(value)
                if key in _POSITIVE_SETTINGS and value < 1:
                    raise ConfigError(f"Detection setting '{key}' must be at least 1, got {value}")
            values[key] = value

        return replace(self, **values)


def _parse_resolutions(value: Any) -> Tuple[Tuple[int, int], ...]:
    try:
        resolutions = tuple((int(width), int(height)) for width, height in value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"screenshot_resolutions must be a list of [width, height] pairs: {e}")
    return resolutions


def _expand_env_vars(obj: Union[Dict, Any]) -> Union[Dict, Any]:
    """
    Recursively expand environment variables in config values.
    Supports ${VAR_NAME} syntax.
    """
    if isinstance(obj, dict):
        return {key: _expand_env_vars(value) for key, value in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(item) for item in obj]
    elif isinstance(obj, str):
        pattern = r'\$\{([^}]+)\}'
        def replace_var(match):
            var_name = match.group(1)
            return os.getenv(var_name, match.group(0))  # Return original if not found
        return re.sub(pattern, replace_var, obj)
    else:
        return obj


def load_config(config_path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """
    Load configuration from YAML file

    Args:
        config_path: Path to config file. If None, uses the packaged config.yaml

    Returns:
        Configuration dictionary
    """
    config_path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH

    if not config_path.exists():
        logger.warning(f"Config file not found: {config_path}. Using defaults.")
        return get_default_config()

    try:
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Failed to load config from {config_path}: {e}")
        return get_default_config()

    logger.info(f"Loaded configuration from {config_path}")
    return _expand_env_vars(config)


def get_default_config() -> Dict[str, Any]:
    """
    Get default configuration values

    Returns:
        Default configuration dictionary
    """
    settings = DetectionSettings()
    detection = {f.name: getattr(settings, f.name) for f in fields(settings)}
    detection['screenshot_resolutions'] = [list(r) for r in settings.screenshot_resolutions]

    return {
        'detection': detection,
        'cleanup': {
            'large_file_bytes': 5 * 1024 * 1024,
        },
        'logging': {
            'level': 'INFO',
            'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            'color': True,
        },
    }


def save_config(config: Dict[str, Any], config_path: Path) -> bool:
    """
    Save configuration to YAML file

    Args:
        config: Configuration dictionary to save
        config_path: Path where to save the config

    Returns:
        True if successful, False otherwise
    """
    try:
        with open(config_path, 'w') as f:
            yaml.safe_dump(config, f, default_flow_style=False, indent=2)
        logger.info(f"Saved configuration to {config_path}")
        return True
    except OSError as e:
        logger.error(f"Failed to save config to {config_path}: {e}")
        return False


def get_config_value(config: Dict[str, Any], key_path: str, default: Any = None) -> Any:
    """
    Get a nested configuration value using dot notation

    Args:
        config: Configuration dictionary
        key_path: Dot-separated key path (e.g., 'detection.window_radius')
        default: Default value if key not found

    Returns:
        Configuration value or default
    """
    keys = key_path.split('.')
    value = config

    try:
        for key in keys:
            value = value[key]
        return value
    except (KeyError, TypeError):
        return default


def update_config_value(config: Dict[str, Any], key_path: str, value: Any) -> None:
    """
    Update a nested configuration value using dot notation

    Args:
        config: Configuration dictionary to update
        key_path: Dot-separated key path (e.g., 'detection.window_radius')
        value: New value to set
    """
    keys = key_path.split('.')
    current = config

    for key in keys[:-1]:
        if key not in current:
            current[key] = {}
        current = current[key]

    current[keys[-1]] = value
