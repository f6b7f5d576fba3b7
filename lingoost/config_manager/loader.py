"""Configuration loading utilities."""
from __future__ import annotations

import json
import os
import threading
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError

from lingoost import logging_manager

from .constants import CONFIG_FILE_ENV, DEFAULT_CONFIG_PATH
from .settings import DubbingSettings, apply_settings_updates, load_environment_overrides

logger = logging_manager.get_logger()

_ACTIVE_SETTINGS: Optional[DubbingSettings] = None
_SETTINGS_LOCK = threading.Lock()


def _read_config_json(path: Optional[Path]) -> Dict[str, Any]:
    if path is None:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as handle:
            data = json.load(handle)
    except FileNotFoundError:
        return {}
    except json.JSONDecodeError as exc:
        logger.warning(
            "Failed to parse configuration file at %s: %s",
            path,
            exc,
            extra={"event": "config.file.invalid"},
        )
        return {}
    if not isinstance(data, dict):
        logger.warning(
            "Ignoring configuration file %s: top-level value is not an object",
            path,
            extra={"event": "config.file.invalid"},
        )
        return {}
    logger.debug("Loaded configuration from %s", path, extra={"event": "config.file.loaded"})
    return data


def _resolve_config_path(config_file: Optional[str]) -> Path:
    candidate = config_file or os.environ.get(CONFIG_FILE_ENV)
    if not candidate:
        return DEFAULT_CONFIG_PATH
    path = Path(candidate).expanduser()
    if not path.is_absolute():
        path = (Path.cwd() / path).resolve()
    return path


def load_settings(config_file: Optional[str] = None) -> DubbingSettings:
    """Build settings from defaults, an optional JSON file, and the environment."""

    global _ACTIVE_SETTINGS

    payload = _read_config_json(_resolve_config_path(config_file))
    try:
        settings = DubbingSettings.model_validate(payload)
    except ValidationError as exc:
        raise RuntimeError("Invalid configuration detected") from exc

    try:
        settings = apply_settings_updates(settings, load_environment_overrides())
    except ValidationError as exc:
        raise RuntimeError("Invalid environment configuration detected") from exc

    with _SETTINGS_LOCK:
        _ACTIVE_SETTINGS = settings
    return settings


def get_settings() -> DubbingSettings:
    """Return the cached settings, loading them on first use."""

    with _SETTINGS_LOCK:
        cached = _ACTIVE_SETTINGS
    if cached is not None:
        return cached
    return load_settings()


def reset_settings_cache() -> None:
    """Forget cached settings so the next lookup reloads them."""

    global _ACTIVE_SETTINGS
    with _SETTINGS_LOCK:
        _ACTIVE_SETTINGS = None


__all__ = ["get_settings", "load_settings", "reset_settings_cache"]
