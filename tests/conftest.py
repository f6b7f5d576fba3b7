"""Shared fixtures for the Lingoost test-suite."""

from __future__ import annotations

import os
import tempfile
from typing import Iterator

import pytest

# Keep log files out of the working tree; must run before ``lingoost`` is imported.
os.environ.setdefault("LINGOOST_LOG_DIR", tempfile.mkdtemp(prefix="lingoost-logs-"))

from lingoost import config_manager as cfg  # noqa: E402
from lingoost.webapi.dependencies import reset_dependency_cache  # noqa: E402

_SETTINGS_ENV_VARS = (
    "LINGOOST_CONFIG_FILE",
    "LINGOOST_CDN_URL",
    "NEXT_PUBLIC_CDN_URL",
    "DUBBING_API_BASE_URL",
    "LINGOOST_DUBBING_API_BASE_URL",
    "DUBBING_API_KEY",
    "ELEVENLABS_API_KEY",
    "DUBBING_DUPLICATE_POLICY",
    "LINGOOST_JOB_STORE",
    "LINGOOST_START_POLLER",
    "LINGOOST_PLACEHOLDER_LANGUAGES",
    "LINGOOST_SESSION_IDLE_TTL_SECONDS",
    "DATABASE_URL",
    "LINGOOST_DATABASE_URL",
)


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch, tmp_path) -> Iterator[None]:
    """Run every test against default settings and fresh dependency singletons."""

    for name in _SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("LINGOOST_CONFIG_FILE", str(tmp_path / "missing-config.json"))
    cfg.reset_settings_cache()
    reset_dependency_cache()
    yield
    cfg.reset_settings_cache()
    reset_dependency_cache()
