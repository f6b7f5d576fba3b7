from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

import pytest

from lingoost.services.catalog import (
    DatabaseTrackRecord,
    JobStoreTrackSource,
    SourceKind,
    StaticTrackSource,
    TrackCatalogBuilder,
)
from lingoost.services.dubbing import DubJob, DubJobState, InMemoryDubJobStore
from lingoost.services.playback import EngineTrack

CDN = "https://cdn.test"
SECTION = "section-1"
MASTER = f"{CDN}/assets/curriculumsection/{SECTION}/master.m3u8"

READY_RECORDS = [
    DatabaseTrackRecord(language="ja", status="READY"),
    DatabaseTrackRecord(language="en-US", status="completed", location="dubs/en.m3u8"),
]
ENGINE_TRACKS = [
    EngineTrack(index=0, language="und", label="Original", default=True),
    EngineTrack(index=1, language="fra", label="French", location=f"{CDN}/fr.m3u8"),
    EngineTrack(index=2, language=None, label="Korean"),
]


def _kinds(catalog) -> List[SourceKind]:
    return [track.source_kind for track in catalog]


@pytest.mark.parametrize("with_database", [True, False])
@pytest.mark.parametrize("with_engine", [True, False])
@pytest.mark.parametrize("placeholders", [("ja", "zh"), ()])
def test_source_priority_matrix(with_database: bool, with_engine: bool, placeholders) -> None:
    builder = TrackCatalogBuilder(cdn_base_url=CDN, placeholder_languages=placeholders)

    catalog = builder.build(
        SECTION,
        database_tracks=READY_RECORDS if with_database else [],
        engine_tracks=ENGINE_TRACKS if with_engine else [],
    )

    assert catalog[0].canonical_language == "origin"
    assert catalog[0].source_kind == SourceKind.ORIGIN
    assert catalog[0].playable_location == MASTER
    rest = set(_kinds(catalog[1:]))
    if with_database:
        assert rest == {SourceKind.DATABASE_DUB}
    elif with_engine:
        assert rest == {SourceKind.MANIFEST_DETECTED}
    elif placeholders:
        assert rest == {SourceKind.FALLBACK_PLACEHOLDER}
    else:
        assert catalog[1:] == []


def test_database_tracks_are_normalized_and_located() -> None:
    builder = TrackCatalogBuilder(cdn_base_url=CDN)

    catalog = builder.build(SECTION, database_tracks=READY_RECORDS)

    by_language = {track.canonical_language: track for track in catalog}
    assert list(by_language) == ["origin", "ja", "en"]
    assert by_language["ja"].playable_location == (
        f"{CDN}/assets/curriculumsection/{SECTION}/dubTracks/ja.m3u8"
    )
    assert by_language["en"].playable_location == f"{CDN}/dubs/en.m3u8"
    assert by_language["ja"].display_label == "일본어"


def test_unready_and_duplicate_database_records_are_skipped() -> None:
    builder = TrackCatalogBuilder(cdn_base_url=CDN)
    records = [
        DatabaseTrackRecord(language="ja", status="processing"),
        DatabaseTrackRecord(language="jpn", status="ready"),
        DatabaseTrackRecord(language="ja-JP", status="dubbed"),
        DatabaseTrackRecord(language="origin", status="ready"),
        DatabaseTrackRecord(language="", status="ready"),
    ]

    catalog = builder.build(SECTION, database_tracks=records)

    assert [track.canonical_language for track in catalog] == ["origin", "ja"]


def test_engine_tracks_skip_unknown_and_fall_back_to_master_location() -> None:
    builder = TrackCatalogBuilder(cdn_base_url=CDN, placeholder_languages=())

    catalog = builder.build(SECTION, engine_tracks=ENGINE_TRACKS)

    assert [track.canonical_language for track in catalog] == ["origin", "fr", "ko"]
    assert catalog[1].playable_location == f"{CDN}/fr.m3u8"
    assert catalog[2].playable_location == MASTER


def test_placeholders_are_not_playable() -> None:
    builder = TrackCatalogBuilder(cdn_base_url=CDN, placeholder_languages=("ja", "jpn", "en"))

    catalog = builder.build(SECTION)

    assert [track.canonical_language for track in catalog] == ["origin", "ja", "en"]
    assert not any(track.is_playable for track in catalog[1:])
    assert catalog[1].to_dict()["playable"] is False


def test_database_source_is_consulted_when_no_records_given() -> None:
    source = StaticTrackSource({SECTION: [DatabaseTrackRecord(language="de", status="ready")]})
    builder = TrackCatalogBuilder(database_source=source, cdn_base_url=CDN)

    assert [track.canonical_language for track in builder.build(SECTION)] == ["origin", "de"]
    assert [track.canonical_language for track in builder.build("other", engine_tracks=[])][1:] == [
        "ja",
        "zh",
        "en",
        "fr",
    ]


def _job(job_id: str, language: str, state: DubJobState, location: Optional[str] = None) -> DubJob:
    return DubJob(
        job_id=job_id,
        section_id=SECTION,
        source_video_location="https://videos.test/source.mp4",
        target_language=language,
        state=state,
        created_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
        result_track_location=location,
    )


def test_job_store_source_reports_only_ready_jobs() -> None:
    store = InMemoryDubJobStore()
    store.create(_job("a", "ja", DubJobState.READY, f"{CDN}/ja.m3u8"))
    store.create(_job("b", "en", DubJobState.PROCESSING))
    store.create(_job("c", "fr", DubJobState.FAILED))

    records = JobStoreTrackSource(store).list_tracks(SECTION)

    assert records == [DatabaseTrackRecord(language="ja", status="ready", location=f"{CDN}/ja.m3u8")]
