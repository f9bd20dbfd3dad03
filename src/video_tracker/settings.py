"""
Settings Management Module

Provides pydantic-based configuration management with:
- YAML configuration file loading
- Environment variable overrides (VIDEO_TRACKER_*)
- Multi-environment support (config.<env>.yaml overlays)
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class MetricsSettings(BaseModel):
    """Metrics section of the settings (``metrics:`` in YAML)."""

    model_config = ConfigDict(extra="allow")

    enabled: bool = False
    backend: str = "prometheus"


class TrackerSettings(BaseSettings):
    """
    Tracker settings with multi-environment support.

    Configuration hierarchy (lowest to highest precedence):
    1. settings/config.yaml (base)
    2. settings/config.{environment}.yaml (environment-specific)
    3. Environment variables (VIDEO_TRACKER_*)

    Examples:
        >>> settings = get_settings()
        >>> settings.default_heartbeat_ms
        30000

        Override from the environment:
        $ export VIDEO_TRACKER_DEFAULT_HEARTBEAT_MS=10000
    """

    model_config = SettingsConfigDict(
        env_prefix="VIDEO_TRACKER_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="allow",
    )

    environment: str = "development"
    log_level: str = "INFO"
    log_json: bool = False

    default_heartbeat_ms: int = Field(default=30000, gt=0)
    min_heartbeat_ms: int = Field(default=5000, gt=0)
    tracker_name: str | None = None
    tracker_version: str | None = None
    clean_null_attributes: bool = True

    metrics: dict[str, Any] = Field(default_factory=dict)

    def metrics_settings(self) -> MetricsSettings:
        """Validated view of the ``metrics`` section."""
        return MetricsSettings(**self.metrics)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # YAML values arrive as init kwargs; environment variables win over them
        return env_settings, init_settings, dotenv_settings, file_secret_settings

    @classmethod
    def load_from_yaml(cls, config_path: Path | None = None) -> "TrackerSettings":
        """
        Load settings from YAML configuration file.

        Args:
            config_path: Path to config file (default: ./settings/config.yaml)

        Returns:
            TrackerSettings instance
        """
        if config_path is None:
            config_path = Path.cwd() / "settings" / "config.yaml"

        if not config_path.exists():
            return cls()

        with open(config_path) as f:
            config_data = yaml.safe_load(f) or {}

        env = os.getenv(
            "VIDEO_TRACKER_ENVIRONMENT", config_data.get("environment", "development")
        )
        env_config_path = config_path.parent / f"config.{env}.yaml"

        if env_config_path.exists():
            with open(env_config_path) as f:
                env_config = yaml.safe_load(f) or {}
                config_data = cls._deep_merge(config_data, env_config)

        return cls(**config_data)

    @staticmethod
    def _deep_merge(base: dict, override: dict) -> dict:
        """Deep merge two dictionaries."""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = TrackerSettings._deep_merge(result[key], value)
            else:
                result[key] = value
        return result


@lru_cache
def get_settings(config_path: Path | None = None) -> TrackerSettings:
    """
    Get cached settings instance.

    Args:
        config_path: Optional path to config file

    Returns:
        TrackerSettings instance
    """
    return TrackerSettings.load_from_yaml(config_path)


def reload_settings() -> TrackerSettings:
    """Reload settings by clearing cache."""
    get_settings.cache_clear()
    return get_settings()


__all__ = ["TrackerSettings", "MetricsSettings", "get_settings", "reload_settings"]
