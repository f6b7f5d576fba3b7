from __future__ import annotations

from lingoost.services.playback import EngineTrack, UNRESOLVED, resolve
from lingoost.services.playback.resolver import (
    STRATEGY_CONTAINS,
    STRATEGY_EXACT,
    STRATEGY_ORIGIN_DEFAULT,
    STRATEGY_ORIGIN_FIRST,
)

TRACKS = [
    EngineTrack(index=0, language="ko", label="Korean", location="ko.m3u8"),
    EngineTrack(index=1, language="jpn", label="Japanese", default=True, location="ja.m3u8"),
    EngineTrack(index=2, language=None, label="Chinese (zh) dub", location="zh.m3u8"),
]


def test_exact_match_on_normalized_language() -> None:
    resolution = resolve("ja-JP", TRACKS)

    assert resolution.resolved
    assert resolution.index == 1
    assert resolution.location == "ja.m3u8"
    assert resolution.strategy == STRATEGY_EXACT


def test_exact_match_falls_back_to_label_when_language_missing() -> None:
    tracks = [EngineTrack(index=0, language=None, label="French")]

    assert resolve("fr", tracks).strategy == STRATEGY_EXACT


def test_contains_match_when_no_exact_match() -> None:
    resolution = resolve("zh", TRACKS)

    assert resolution.index == 2
    assert resolution.strategy == STRATEGY_CONTAINS


def test_exact_match_wins_over_earlier_contains_match() -> None:
    tracks = [
        EngineTrack(index=0, language="x-ko-legacy", label="legacy"),
        EngineTrack(index=1, language="kor", label="Korean"),
    ]

    assert resolve("ko", tracks).index == 1


def test_origin_prefers_default_track_then_first() -> None:
    assert resolve("origin", TRACKS).strategy == STRATEGY_ORIGIN_DEFAULT
    assert resolve("origin", TRACKS).index == 1

    no_default = [EngineTrack(index=0, language="ko"), EngineTrack(index=1, language="en")]
    resolution = resolve("ORIGINAL", no_default)
    assert resolution.index == 0
    assert resolution.strategy == STRATEGY_ORIGIN_FIRST


def test_unresolved_cases() -> None:
    assert resolve("de", TRACKS) == UNRESOLVED
    assert resolve("origin", []) == UNRESOLVED
    assert resolve(None, TRACKS) == UNRESOLVED
    assert resolve("", TRACKS) == UNRESOLVED


def test_contains_match_requires_a_whole_word_or_subtag() -> None:
    french = [EngineTrack(index=0, language="fr", label="French")]
    assert resolve("en", french) == UNRESOLVED

    tracks = [
        EngineTrack(index=0, language="fr", label="French"),
        EngineTrack(index=1, language="x-dub", label="Dubbed audio (English)"),
    ]
    resolution = resolve("en", tracks)
    assert resolution.index == 1
    assert resolution.strategy == STRATEGY_CONTAINS


def test_contains_match_on_region_subtag_of_language() -> None:
    tracks = [EngineTrack(index=0, language="x-pt-BR-dub", label="Dub")]

    assert resolve("pt", tracks).strategy == STRATEGY_CONTAINS
