"""Map a requested language onto one of the engine's reported tracks."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Sequence

from ...language import ORIGIN_LANGUAGE, UNKNOWN_LANGUAGE, normalize
from .engines import EngineTrack

STRATEGY_EXACT = "exact"
STRATEGY_CONTAINS = "contains"
STRATEGY_ORIGIN_DEFAULT = "origin_default"
STRATEGY_ORIGIN_FIRST = "origin_first"

_TOKEN_SPLIT = re.compile(r"[^0-9a-z]+")


@dataclass(frozen=True)
class TrackResolution:
    resolved: bool
    index: Optional[int] = None
    location: Optional[str] = None
    track: Optional[EngineTrack] = None
    strategy: Optional[str] = None


UNRESOLVED = TrackResolution(resolved=False)


def _mentions(track: EngineTrack, target: str) -> bool:
    text = f"{track.language or ''} {track.label or ''}".lower()
    return any(
        token and normalize(token) == target for token in _TOKEN_SPLIT.split(text)
    )


def _resolved(track: EngineTrack, strategy: str) -> TrackResolution:
    return TrackResolution(
        resolved=True,
        index=track.index,
        location=track.location,
        track=track,
        strategy=strategy,
    )


def resolve(requested_language: Optional[str], tracks: Sequence[EngineTrack]) -> TrackResolution:
    """Return the track to activate for ``requested_language``.

    Checks, in order, stopping at the first hit:

    1. normalized language (or label) equals the normalized request;
    2. a word or subtag of the raw language or label normalizes to the request
       (so "Chinese (zh) dub" matches zh while "French" does not match en);
    3. for the origin request, the default-flagged track, else the first track.

    Anything else is unresolved. Every caller relies on this ordering.
    """

    target = normalize(requested_language)

    if target != UNKNOWN_LANGUAGE:
        for track in tracks:
            if normalize(track.language or track.label) == target:
                return _resolved(track, STRATEGY_EXACT)

        for track in tracks:
            if _mentions(track, target):
                return _resolved(track, STRATEGY_CONTAINS)

    if target == ORIGIN_LANGUAGE and tracks:
        for track in tracks:
            if track.default:
                return _resolved(track, STRATEGY_ORIGIN_DEFAULT)
        return _resolved(tracks[0], STRATEGY_ORIGIN_FIRST)

    return UNRESOLVED


__all__ = [
    "STRATEGY_CONTAINS",
    "STRATEGY_EXACT",
    "STRATEGY_ORIGIN_DEFAULT",
    "STRATEGY_ORIGIN_FIRST",
    "TrackResolution",
    "UNRESOLVED",
    "resolve",
]
