from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, List

import pytest

from lingoost.services.catalog import DatabaseTrackRecord, TrackCatalogBuilder
from lingoost.services.dubbing import DubJob, DubJobState
from lingoost.services.errors import SessionNotFound
from lingoost.services.playback import (
    EngineState,
    InMemoryLanguagePreferenceStore,
    PlatformCapabilities,
    PlaybackSessionRegistry,
)

NATIVE_ONLY = PlatformCapabilities(is_ios=True, native_hls=True, media_source_extensions=False)


class StaticTrackSource:
    def __init__(self) -> None:
        self.records: Dict[str, List[DatabaseTrackRecord]] = {}

    def list_tracks(self, section_id: str) -> List[DatabaseTrackRecord]:
        return list(self.records.get(section_id, []))


@pytest.fixture
def track_source() -> StaticTrackSource:
    return StaticTrackSource()


@pytest.fixture
def registry(engine_factory, track_source) -> PlaybackSessionRegistry:
    return PlaybackSessionRegistry(
        engine_factory=engine_factory,
        catalog_builder=TrackCatalogBuilder(
            database_source=track_source,
            cdn_base_url="https://cdn.test",
            placeholder_languages=(),
        ),
        preferences=InMemoryLanguagePreferenceStore(),
        cdn_base_url="https://cdn.test",
    )


def _ready_job(section_id: str) -> DubJob:
    now = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
    return DubJob(
        job_id="job-1",
        section_id=section_id,
        source_video_location="https://videos.test/a.mp4",
        target_language="ja",
        state=DubJobState.READY,
        created_at=now,
        completed_at=now,
    )


def test_open_session_builds_master_location(registry: PlaybackSessionRegistry, engine_factory) -> None:
    session = registry.open_session("section-1", capabilities=NATIVE_ONLY)

    assert session.engine_state == EngineState.READY
    assert session.manifest_location == (
        "https://cdn.test/assets/curriculumsection/section-1/master.m3u8"
    )
    assert engine_factory.engines[0].loads == [session.manifest_location]
    assert registry.get_session(session.session_id) is session


def test_job_ready_refreshes_only_matching_sections(
    registry: PlaybackSessionRegistry, track_source: StaticTrackSource
) -> None:
    first = registry.open_session("section-1", capabilities=NATIVE_ONLY)
    second = registry.open_session("section-1", capabilities=NATIVE_ONLY)
    other = registry.open_session("section-2", capabilities=NATIVE_ONLY)
    other_languages = list(other.available_languages)

    track_source.records["section-1"] = [DatabaseTrackRecord(language="ja", status="ready")]
    track_source.records["section-2"] = [DatabaseTrackRecord(language="ja", status="ready")]

    assert registry.on_job_ready(_ready_job("section-1")) == 2
    assert first.available_languages == ["origin", "ja"]
    assert second.available_languages == ["origin", "ja"]
    assert other.available_languages == other_languages


def test_close_session_removes_it(registry: PlaybackSessionRegistry) -> None:
    session = registry.open_session("section-1", capabilities=NATIVE_ONLY)

    registry.close_session(session.session_id)

    assert session.closed
    with pytest.raises(SessionNotFound):
        registry.get_session(session.session_id)
    with pytest.raises(SessionNotFound):
        registry.close_session(session.session_id)


def test_close_all_reports_count(registry: PlaybackSessionRegistry) -> None:
    sessions = [registry.open_session("section-1", capabilities=NATIVE_ONLY) for _ in range(3)]

    assert registry.close_all() == 3
    assert all(session.closed for session in sessions)
    assert registry.list_sessions() == []


class ManualClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def expiring_registry(engine_factory, track_source, clock) -> PlaybackSessionRegistry:
    return PlaybackSessionRegistry(
        engine_factory=engine_factory,
        catalog_builder=TrackCatalogBuilder(
            database_source=track_source,
            cdn_base_url="https://cdn.test",
            placeholder_languages=(),
        ),
        cdn_base_url="https://cdn.test",
        idle_ttl_seconds=60,
        clock=clock,
    )


def test_idle_sessions_are_closed_on_next_lookup(expiring_registry, clock, engine_factory) -> None:
    stale = expiring_registry.open_session("section-1", capabilities=NATIVE_ONLY)
    clock.now += 30
    fresh = expiring_registry.open_session("section-1", capabilities=NATIVE_ONLY)
    clock.now += 31

    with pytest.raises(SessionNotFound):
        expiring_registry.get_session(stale.session_id)

    assert stale.closed
    assert engine_factory.engines[0].detached
    assert expiring_registry.get_session(fresh.session_id) is fresh
    assert expiring_registry.list_sessions() == [fresh]


def test_activity_keeps_session_alive(expiring_registry, clock) -> None:
    session = expiring_registry.open_session("section-1", capabilities=NATIVE_ONLY)

    for _ in range(3):
        clock.now += 45
        expiring_registry.switch_language(session.session_id, "ja")

    assert not session.closed
    assert expiring_registry.evict_idle() == 0


def test_errored_sessions_expire_too(expiring_registry, clock) -> None:
    caps = PlatformCapabilities(native_hls=False, media_source_extensions=False)
    failed = expiring_registry.open_session("section-1", capabilities=caps)
    assert failed.engine_state == EngineState.ERROR

    clock.now += 61

    assert expiring_registry.evict_idle() == 1
    assert failed.closed
    assert expiring_registry.list_sessions() == []


def test_no_eviction_without_ttl(registry: PlaybackSessionRegistry) -> None:
    session = registry.open_session("section-1", capabilities=NATIVE_ONLY)

    assert registry.evict_idle() == 0
    assert registry.get_session(session.session_id) is session
