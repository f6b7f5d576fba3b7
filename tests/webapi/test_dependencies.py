from __future__ import annotations

import pytest

from lingoost import config_manager as cfg
from lingoost.database import dispose_engine
from lingoost.services.dubbing import InMemoryDubJobStore, SqlAlchemyDubJobStore
from lingoost.services.playback import (
    InMemoryLanguagePreferenceStore,
    SqlAlchemyLanguagePreferenceStore,
)
from lingoost.webapi import dependencies as deps

pytestmark = pytest.mark.webapi


def test_memory_stores_by_default() -> None:
    assert isinstance(deps.get_dub_job_store(), InMemoryDubJobStore)
    assert isinstance(deps.get_preference_store(), InMemoryLanguagePreferenceStore)


def test_database_stores_when_configured(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LINGOOST_JOB_STORE", "database")
    monkeypatch.setenv("DATABASE_URL", "sqlite://")
    try:
        assert isinstance(deps.get_dub_job_store(), SqlAlchemyDubJobStore)
        assert isinstance(deps.get_preference_store(), SqlAlchemyLanguagePreferenceStore)
    finally:
        dispose_engine()


def test_singletons_are_shared_until_reset() -> None:
    orchestrator = deps.get_orchestrator()
    registry = deps.get_session_registry()

    assert deps.get_orchestrator() is orchestrator
    assert deps.get_job_poller() is deps.get_job_poller()
    assert registry.on_job_ready in orchestrator._listeners

    deps.reset_dependency_cache()

    assert deps.get_orchestrator() is not orchestrator


@pytest.mark.parametrize(
    ("header", "expected"),
    [(None, None), ("", None), ("   ", None), (" viewer-1 ", "viewer-1")],
)
def test_viewer_id_is_trimmed(header, expected) -> None:
    assert deps.get_viewer_id(header) == expected


def test_session_registry_uses_idle_ttl_setting(monkeypatch: pytest.MonkeyPatch) -> None:
    assert deps.get_session_registry()._idle_ttl == 1800.0

    monkeypatch.setenv("LINGOOST_SESSION_IDLE_TTL_SECONDS", "90")
    deps.reset_dependency_cache()
    cfg.reset_settings_cache()

    assert deps.get_session_registry()._idle_ttl == 90.0
