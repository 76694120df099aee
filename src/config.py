"""Configuration loader for the pipelines dashboard.

All configurable values come from config/config.yaml.
Configuration is validated at load time using Pydantic.
Typos and invalid values fail fast with clear error messages.

The DASHBOARD_METRICS_URL environment variable, when set, overrides
dashboard.metrics_url.

Usage:
    from src.config import load_config, get, get_validated_config

    # Load and validate (call once at startup)
    load_config("config/config.yaml")

    # Get values by dot-path
    interval = get("dashboard.refresh_interval")

    # Or use the typed config object (preferred)
    config = get_validated_config()
    interval = config.dashboard.refresh_interval
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml

from .config_schema import AppConfig, validate_config_dict

METRICS_URL_ENV = "DASHBOARD_METRICS_URL"

# Global config instances
_config: dict[str, Any] | None = None
_validated_config: AppConfig | None = None

# Default config path
DEFAULT_CONFIG_PATH: Path = Path(__file__).parent.parent / "config" / "config.yaml"


def load_config(config_path: str | Path | None = None) -> dict[str, Any]:
    """Load and validate configuration from YAML file.

    Args:
        config_path: Path to config file. Defaults to config/config.yaml.

    Returns:
        Configuration dictionary, after environment overrides.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        pydantic.ValidationError: If config is invalid.
    """
    global _config, _validated_config

    path: Path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        loaded: Any = yaml.safe_load(f)
        if not isinstance(loaded, dict):
            loaded = {}

    metrics_url = os.environ.get(METRICS_URL_ENV)
    if metrics_url:
        loaded.setdefault("dashboard", {})["metrics_url"] = metrics_url

    _validated_config = validate_config_dict(loaded)
    _config = loaded
    return _config


def get_config() -> dict[str, Any]:
    """Get the loaded configuration dict. Loads default if not already loaded.

    For typed access, use get_validated_config() instead.
    """
    if _config is None:
        load_config()
    if _config is None:
        raise RuntimeError("Config failed to load. Call load_config() first.")
    return _config


def get_validated_config() -> AppConfig:
    """Get the validated configuration object.

    Loads default config if not already loaded.
    """
    if _validated_config is None:
        load_config()
    if _validated_config is None:
        raise RuntimeError("Validated config failed to load. Call load_config() first.")
    return _validated_config


def get(key: str, default: Any = None) -> Any:
    """Get a config value by dot-separated key path.

    Examples:
        get("dashboard.metrics_url")
        get("logging.level")
    """
    value: Any = get_config()
    for k in key.split("."):
        if isinstance(value, dict) and k in value:
            value = value[k]
        else:
            return default
    return value


def set_config_value(key: str, value: Any) -> None:
    """Set a config value by dot-separated key path and re-validate.

    Used for runtime overrides (e.g., CLI args).

    Raises:
        pydantic.ValidationError: If the new value is invalid.
    """
    global _validated_config

    config = get_config()
    keys = key.split(".")
    target = config
    for k in keys[:-1]:
        target = target.setdefault(k, {})
    target[keys[-1]] = value

    _validated_config = validate_config_dict(config)
