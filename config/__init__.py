"""Configuration loading for the UI health monitor."""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


DEFAULT_CONFIG_PATH = Path(__file__).parent / 'default.yaml'
CONFIG_ENV_VAR = 'UIHEALTH_CONFIG'


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Load monitor configuration from a YAML file.

    Resolution order: explicit path, then the UIHEALTH_CONFIG environment
    variable, then the bundled default.yaml.

    Args:
        config_path: Path to config file.

    Returns:
        Dictionary with 'monitor', 'github' and 'logging' sections (any of
        which may be absent in a user file).

    Raises:
        FileNotFoundError: If the config file does not exist.
        yaml.YAMLError: If the config file is invalid YAML.
    """
    path_str = config_path or os.environ.get(CONFIG_ENV_VAR)
    path = Path(path_str).expanduser() if path_str else DEFAULT_CONFIG_PATH

    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    with open(path, 'r', encoding='utf-8') as f:
        config = yaml.safe_load(f)

    return config or {}


def get_config_value(config: Dict[str, Any], key_path: str, default: Any = None) -> Any:
    """Get a nested configuration value using dot notation.

    Args:
        config: Configuration dictionary.
        key_path: Dot-separated path (e.g., 'monitor.health_check_interval').
        default: Value returned when any key along the path is missing.

    Returns:
        The configuration value or default.
    """
    value: Any = config
    for key in key_path.split('.'):
        if not isinstance(value, dict) or key not in value:
            return default
        value = value[key]
    return value


__all__ = ['load_config', 'get_config_value', 'DEFAULT_CONFIG_PATH', 'CONFIG_ENV_VAR']
