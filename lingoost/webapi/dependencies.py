"""Dependency wiring for the FastAPI application."""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from fastapi import Header

from .. import config_manager as cfg
from .. import logging_manager as log_mgr
from ..database.engine import configure_engine, get_session_factory
from ..services.catalog import JobStoreTrackSource, TrackCatalogBuilder
from ..services.dubbing import (
    DubbingOrchestrator,
    DubJobPoller,
    DubJobStore,
    HttpDubbingClient,
    InMemoryDubJobStore,
    RemoteDubbingClient,
    SqlAlchemyDubJobStore,
)
from ..services.playback import (
    EngineFactory,
    HttpEngineFactory,
    InMemoryLanguagePreferenceStore,
    LanguagePreferenceStore,
    PlaybackSessionRegistry,
    SqlAlchemyLanguagePreferenceStore,
)

logger = log_mgr.get_logger().getChild("webapi.dependencies")


def get_settings() -> cfg.DubbingSettings:
    """Return the active service settings."""

    return cfg.get_settings()


@lru_cache
def _configure_database() -> None:
    settings = get_settings()
    url = settings.database_url.get_secret_value() if settings.database_url else None
    configure_engine(url)
    logger.info("Configured database-backed stores", extra={"event": "webapi.database.configured"})


def _uses_database() -> bool:
    return get_settings().job_store == "database"


@lru_cache
def get_dub_job_store() -> DubJobStore:
    """Return the process-wide dubbing job store."""

    if _uses_database():
        _configure_database()
        return SqlAlchemyDubJobStore(get_session_factory())
    return InMemoryDubJobStore()


@lru_cache
def get_preference_store() -> LanguagePreferenceStore:
    """Return the process-wide language preference store."""

    if _uses_database():
        _configure_database()
        return SqlAlchemyLanguagePreferenceStore(get_session_factory())
    return InMemoryLanguagePreferenceStore()


@lru_cache
def get_remote_dubbing_client() -> RemoteDubbingClient:
    settings = get_settings()
    api_key = settings.dubbing_api_key.get_secret_value() if settings.dubbing_api_key else None
    return HttpDubbingClient(
        base_url=settings.dubbing_api_base_url,
        api_key=api_key,
        timeout_seconds=settings.dubbing_request_timeout_seconds,
    )


@lru_cache
def get_catalog_builder() -> TrackCatalogBuilder:
    settings = get_settings()
    return TrackCatalogBuilder(
        database_source=JobStoreTrackSource(get_dub_job_store()),
        cdn_base_url=settings.cdn_base_url,
        placeholder_languages=settings.placeholder_languages,
    )


@lru_cache
def get_engine_factory() -> EngineFactory:
    return HttpEngineFactory(timeout_seconds=get_settings().manifest_timeout_seconds)


@lru_cache
def get_session_registry() -> PlaybackSessionRegistry:
    """Return the process-wide :class:`PlaybackSessionRegistry`."""

    settings = get_settings()
    return PlaybackSessionRegistry(
        engine_factory=get_engine_factory(),
        catalog_builder=get_catalog_builder(),
        preferences=get_preference_store(),
        retry_ceiling=settings.manifest_retry_ceiling,
        cdn_base_url=settings.cdn_base_url,
        idle_ttl_seconds=settings.session_idle_ttl_seconds,
    )


@lru_cache
def get_orchestrator() -> DubbingOrchestrator:
    """Return the process-wide :class:`DubbingOrchestrator`.

    Sessions in the registry rebuild their catalogs whenever a job becomes ready.
    """

    orchestrator = DubbingOrchestrator(
        store=get_dub_job_store(),
        client=get_remote_dubbing_client(),
        settings=get_settings(),
    )
    orchestrator.add_ready_listener(get_session_registry().on_job_ready)
    return orchestrator


@lru_cache
def get_job_poller() -> DubJobPoller:
    return DubJobPoller(
        get_orchestrator(),
        interval_seconds=get_settings().dubbing_poll_interval_seconds,
    )


def get_viewer_id(
    x_viewer_id: Optional[str] = Header(default=None, alias="X-Viewer-Id"),
) -> Optional[str]:
    """Return the viewer identifier supplied by the upstream auth layer."""

    if x_viewer_id is None:
        return None
    return x_viewer_id.strip() or None


def reset_dependency_cache() -> None:
    """Drop cached singletons so the next request rebuilds them from settings."""

    for provider in (
        _configure_database,
        get_dub_job_store,
        get_preference_store,
        get_remote_dubbing_client,
        get_catalog_builder,
        get_engine_factory,
        get_session_registry,
        get_orchestrator,
        get_job_poller,
    ):
        provider.cache_clear()


__all__ = [
    "get_catalog_builder",
    "get_dub_job_store",
    "get_engine_factory",
    "get_job_poller",
    "get_orchestrator",
    "get_preference_store",
    "get_remote_dubbing_client",
    "get_session_registry",
    "get_settings",
    "get_viewer_id",
    "reset_dependency_cache",
]
