"""Configuration loading and validation for typed events."""

from __future__ import annotations

from copy import deepcopy
import logging
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ValidationError, field_validator

from .exceptions import ConfigValidationError

import tomllib  # stdlib since Python 3.11 (project requires >=3.11)

LOGGER = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "typed-events"
CONFIG_PATH = CONFIG_DIR / "config.toml"
CONFIG_ENV_VAR = "TYPED_EVENTS_CONFIG"

VALID_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


class RegistryConfig(BaseModel):
    """Defaults applied to registries created by the factory functions."""

    thread_safe: bool = True


class LoggingConfig(BaseModel):
    """Logging behavior and output destinations."""

    level: str = "WARNING"
    structured: bool = True
    log_to_file: bool = False
    log_file_path: str = "~/.local/state/typed-events/events.log"

    @field_validator("level", mode="before")
    @classmethod
    def _validate_level(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("Logging level must be a string.")
        normalized = value.strip().upper()
        if normalized not in VALID_LOG_LEVELS:
            raise ValueError(f"Unsupported log level {normalized!r}.")
        return normalized

    @field_validator("log_file_path", mode="before")
    @classmethod
    def _validate_log_file_path(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("log_file_path must be a string.")
        normalized = value.strip()
        if not normalized:
            raise ValueError("log_file_path must not be empty.")
        return normalized


class Config(BaseModel):
    """Root configuration model for all sections."""

    registry: RegistryConfig = RegistryConfig()
    logging: LoggingConfig = LoggingConfig()


DEFAULT_CONFIG: dict[str, dict[str, Any]] = Config().model_dump()

_active_config: dict[str, dict[str, Any]] = deepcopy(DEFAULT_CONFIG)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override values onto base values."""
    merged: dict[str, Any] = deepcopy(base)
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _safe_default_config() -> dict[str, dict[str, Any]]:
    """Return a deep copy of validated default config data."""
    return deepcopy(DEFAULT_CONFIG)


def _validate_config(raw: dict[str, Any]) -> dict[str, dict[str, Any]]:
    """Validate merged config and fallback to safe defaults when possible."""
    try:
        return Config.model_validate(raw).model_dump()
    except ValidationError as exc:
        LOGGER.warning("Configuration validation failed, using safe defaults: %s", exc)
        return _safe_default_config()
    except Exception as exc:  # noqa: BLE001 - unexpected model construction failure.
        raise ConfigValidationError(f"Unable to validate configuration: {exc}") from exc


def default_config_path() -> Path:
    """Return the config path, honouring ``TYPED_EVENTS_CONFIG`` when set."""
    override = os.environ.get(CONFIG_ENV_VAR, "").strip()
    if override:
        return Path(override).expanduser()
    return CONFIG_PATH


def load_config(config_path: Path | None = None) -> dict[str, dict[str, Any]]:
    """
    Load configuration from TOML, merge with defaults, and validate.

    A missing file is not an error; defaults are returned.
    """
    target_path = config_path or default_config_path()

    raw_data: dict[str, Any] = {}
    if target_path.exists():
        try:
            raw_data = tomllib.loads(target_path.read_text(encoding="utf-8"))
        except (OSError, tomllib.TOMLDecodeError) as exc:
            LOGGER.warning("Failed to parse config at %s: %s", target_path, exc)
            raw_data = {}

    return _validate_config(_deep_merge(DEFAULT_CONFIG, raw_data))


def apply_config(config: dict[str, Any]) -> dict[str, dict[str, Any]]:
    """Validate ``config``, make it the active defaults and configure logging.

    Returns the validated config. Only registries created afterwards pick up
    new registry defaults.
    """
    global _active_config

    from .logging_utils import configure_logging

    validated = _validate_config(_deep_merge(DEFAULT_CONFIG, config))
    _active_config = validated
    configure_logging(validated["logging"])
    LOGGER.info(
        "config.applied",
        extra={
            "event": "config.applied",
            "thread_safe": validated["registry"]["thread_safe"],
        },
    )
    return deepcopy(validated)


def current_config() -> dict[str, dict[str, Any]]:
    """Return a copy of the active configuration."""
    return deepcopy(_active_config)


def reset_config() -> None:
    """Restore the built-in defaults without touching logging handlers."""
    global _active_config
    _active_config = _safe_default_config()
