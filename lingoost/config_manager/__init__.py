"""High-level configuration management for the dubbing services."""
from __future__ import annotations

from .constants import CONFIG_FILE_ENV, DEFAULT_CDN_URL, DEFAULT_CONFIG_PATH
from .loader import get_settings, load_settings, reset_settings_cache
from .settings import DubbingSettings, EnvironmentOverrides

__all__ = [
    "CONFIG_FILE_ENV",
    "DEFAULT_CDN_URL",
    "DEFAULT_CONFIG_PATH",
    "DubbingSettings",
    "EnvironmentOverrides",
    "get_settings",
    "load_settings",
    "reset_settings_cache",
]
