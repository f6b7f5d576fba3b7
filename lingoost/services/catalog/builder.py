"""Merge the candidate language sources into one ordered track list."""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from ... import logging_manager as log_mgr
from ...config_manager.constants import DEFAULT_PLACEHOLDER_LANGUAGES
from ...language import ORIGIN_LANGUAGE, UNKNOWN_LANGUAGE, display_label, normalize
from .locations import absolutize_location, dub_track_location, master_manifest_location
from .sources import DatabaseTrackRecord, DatabaseTrackSource, DetectedTrack
from .tracks import SourceKind, TrackDescriptor

logger = log_mgr.get_logger().getChild("services.catalog.builder")

_SKIPPED_LANGUAGES = frozenset({ORIGIN_LANGUAGE, UNKNOWN_LANGUAGE})


class TrackCatalogBuilder:
    """Build the viewer-facing track list for a content section.

    The origin track always comes first. Ready database dub tracks follow; only
    when there are none do engine-detected tracks fill in, and only when both
    are empty is the placeholder list emitted. Each canonical language appears
    at most once.
    """

    def __init__(
        self,
        *,
        database_source: Optional[DatabaseTrackSource] = None,
        cdn_base_url: Optional[str] = None,
        placeholder_languages: Iterable[str] = DEFAULT_PLACEHOLDER_LANGUAGES,
    ) -> None:
        self._database_source = database_source
        self._cdn_base_url = cdn_base_url
        self._placeholder_languages = tuple(placeholder_languages)

    def build(
        self,
        section_id: str,
        *,
        engine_tracks: Optional[Sequence[DetectedTrack]] = None,
        database_tracks: Optional[Sequence[DatabaseTrackRecord]] = None,
    ) -> List[TrackDescriptor]:
        if database_tracks is None and self._database_source is not None:
            database_tracks = self._database_source.list_tracks(section_id)

        catalog = [
            TrackDescriptor(
                canonical_language=ORIGIN_LANGUAGE,
                display_label=display_label(ORIGIN_LANGUAGE),
                source_kind=SourceKind.ORIGIN,
                playable_location=master_manifest_location(section_id, self._cdn_base_url),
            )
        ]
        seen = {ORIGIN_LANGUAGE}

        for record in database_tracks or ():
            if not record.is_ready:
                continue
            language = normalize(record.language)
            if language in seen or language in _SKIPPED_LANGUAGES:
                continue
            location = (
                absolutize_location(record.location, self._cdn_base_url)
                if record.location
                else dub_track_location(section_id, language, self._cdn_base_url)
            )
            catalog.append(self._descriptor(language, SourceKind.DATABASE_DUB, location))
            seen.add(language)

        if len(catalog) == 1:
            for track in engine_tracks or ():
                language = normalize(track.language or track.label)
                if language in seen or language in _SKIPPED_LANGUAGES:
                    continue
                location = track.location or catalog[0].playable_location
                catalog.append(
                    self._descriptor(language, SourceKind.MANIFEST_DETECTED, location)
                )
                seen.add(language)

        if len(catalog) == 1:
            for token in self._placeholder_languages:
                language = normalize(token)
                if language in seen or language in _SKIPPED_LANGUAGES:
                    continue
                catalog.append(self._descriptor(language, SourceKind.FALLBACK_PLACEHOLDER, ""))
                seen.add(language)

        logger.debug(
            "Built track catalog",
            extra={
                "event": "catalog.built",
                "section_id": section_id,
                "languages": [track.canonical_language for track in catalog],
                "source": catalog[-1].source_kind.value,
            },
        )
        return catalog

    @staticmethod
    def _descriptor(language: str, kind: SourceKind, location: str) -> TrackDescriptor:
        return TrackDescriptor(
            canonical_language=language,
            display_label=display_label(language),
            source_kind=kind,
            playable_location=location,
        )


__all__ = ["TrackCatalogBuilder"]
