"""Pydantic schema for configuration validation.

All config values are validated at startup. Typos and invalid values
fail fast with clear error messages.

Usage:
    from src.config_schema import load_validated_config, AppConfig
    config = load_validated_config("config/config.yaml")
    # config is now a validated AppConfig instance
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator


# =============================================================================
# BASE MODEL WITH STRICT VALIDATION
# =============================================================================

class StrictModel(BaseModel):
    """Base model that rejects unknown fields (catches typos)."""

    model_config = ConfigDict(extra="forbid")


# =============================================================================
# DASHBOARD MODEL
# =============================================================================

class DashboardConfig(StrictModel):
    """Dashboard server and refresh configuration."""

    host: str = Field(
        default="0.0.0.0",
        description="Host to bind (0.0.0.0 for all interfaces)"
    )
    port: int = Field(
        default=8000,
        gt=0,
        description="Port number"
    )
    metrics_url: str = Field(
        default="http://localhost:8080/metrics",
        description="Exporter metrics endpoint to read the exposition from"
    )
    refresh_interval: float = Field(
        default=30.0,
        gt=0,
        description="Seconds between automatic refreshes"
    )
    auto_refresh: bool = Field(
        default=False,
        description="Start with auto refresh enabled"
    )
    request_timeout: float = Field(
        default=10.0,
        gt=0,
        description="Timeout in seconds for fetching the metrics endpoint"
    )
    cors_origins: list[str] = Field(
        default_factory=lambda: ["*"],
        description="Allowed CORS origins"
    )
    recent_pipelines_limit: int = Field(
        default=0,
        ge=0,
        description="Max pipelines returned per view (0 = unlimited)"
    )

    @field_validator("metrics_url")
    @classmethod
    def validate_metrics_url(cls, v: str) -> str:
        """Only http(s) endpoints can be fetched."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"metrics_url must be an http(s) URL, got {v!r}")
        return v


# =============================================================================
# LOGGING MODEL
# =============================================================================

class LoggingConfig(StrictModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Root log level"
    )
    format: str = Field(
        default="%(asctime)s %(levelname)s %(name)s: %(message)s",
        description="logging.Formatter format string"
    )


# =============================================================================
# ROOT CONFIG MODEL
# =============================================================================

class AppConfig(StrictModel):
    """Root configuration model for the entire application.

    All fields have sensible defaults, so an empty config file is valid.
    """

    dashboard: DashboardConfig = Field(default_factory=DashboardConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# =============================================================================
# LOADING FUNCTIONS
# =============================================================================

def load_validated_config(config_path: str | Path = "config/config.yaml") -> AppConfig:
    """Load and validate configuration from YAML file.

    Args:
        config_path: Path to config YAML file.

    Returns:
        Validated AppConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        pydantic.ValidationError: If config is invalid (with detailed error message).
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        raw_config = yaml.safe_load(f) or {}

    return AppConfig.model_validate(raw_config)


def validate_config_dict(config_dict: dict[str, Any]) -> AppConfig:
    """Validate a configuration dictionary.

    Args:
        config_dict: Configuration as a dictionary.

    Returns:
        Validated AppConfig instance.

    Raises:
        pydantic.ValidationError: If config is invalid.
    """
    return AppConfig.model_validate(config_dict)


__all__ = [
    "AppConfig",
    "DashboardConfig",
    "LoggingConfig",
    "StrictModel",
    "load_validated_config",
    "validate_config_dict",
]
