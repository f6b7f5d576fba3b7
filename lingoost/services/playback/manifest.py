"""Fetch and parse HLS master playlists."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple
from urllib.parse import urljoin

import requests

from ... import logging_manager as log_mgr
from ..errors import ManifestLoadFailed

logger = log_mgr.get_logger().getChild("services.playback.manifest")

_ATTRIBUTE_PATTERN = re.compile(r'([A-Z0-9-]+)=("[^"]*"|[^,]*)')
_MEDIA_TAG = "#EXT-X-MEDIA:"
_STREAM_TAG = "#EXT-X-STREAM-INF:"


@dataclass(frozen=True)
class AudioRendition:
    """One ``#EXT-X-MEDIA:TYPE=AUDIO`` entry of a master playlist."""

    group_id: Optional[str]
    language: Optional[str]
    name: Optional[str]
    default: bool = False
    autoselect: bool = False
    uri: Optional[str] = None


@dataclass(frozen=True)
class MasterManifest:
    location: str
    audio_renditions: Tuple[AudioRendition, ...] = ()
    variant_count: int = 0


def parse_attributes(payload: str) -> Dict[str, str]:
    attributes: Dict[str, str] = {}
    for key, raw in _ATTRIBUTE_PATTERN.findall(payload):
        value = raw.strip()
        if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
            value = value[1:-1]
        attributes[key] = value
    return attributes


def parse_master_manifest(text: str, location: str) -> MasterManifest:
    """Parse ``text`` as an HLS master playlist served from ``location``.

    Raises :class:`ManifestLoadFailed` (kind ``media``) when the payload is not
    an HLS playlist.
    """

    lines = [line.strip() for line in (text or "").splitlines()]
    lines = [line for line in lines if line]
    if not lines or not lines[0].startswith("#EXTM3U"):
        raise ManifestLoadFailed(
            f"Manifest at {location} is not an HLS playlist", kind="media"
        )

    renditions: List[AudioRendition] = []
    variants = 0
    for line in lines[1:]:
        if line.startswith(_STREAM_TAG):
            variants += 1
            continue
        if not line.startswith(_MEDIA_TAG):
            continue
        attributes = parse_attributes(line[len(_MEDIA_TAG):])
        if attributes.get("TYPE", "").upper() != "AUDIO":
            continue
        uri = attributes.get("URI")
        renditions.append(
            AudioRendition(
                group_id=attributes.get("GROUP-ID"),
                language=attributes.get("LANGUAGE"),
                name=attributes.get("NAME"),
                default=attributes.get("DEFAULT", "").upper() == "YES",
                autoselect=attributes.get("AUTOSELECT", "").upper() == "YES",
                uri=urljoin(location, uri) if uri else None,
            )
        )
    return MasterManifest(
        location=location,
        audio_renditions=tuple(renditions),
        variant_count=variants,
    )


class ManifestFetcher:
    """Bounded-timeout HTTP fetcher; closing it aborts use of its session."""

    def __init__(
        self,
        *,
        session: Optional[requests.Session] = None,
        timeout_seconds: float = 10.0,
    ) -> None:
        self._session = session or requests.Session()
        self._owns_session = session is None
        self._timeout = timeout_seconds
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def fetch(self, location: str) -> str:
        if self._closed:
            raise ManifestLoadFailed("Manifest fetcher is closed", kind="network")
        try:
            response = self._session.get(
                location,
                headers={"Accept": "application/vnd.apple.mpegurl, */*"},
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise ManifestLoadFailed(
                f"Manifest request to {location} failed: {exc}", kind="network"
            ) from exc
        if response.status_code >= 400:
            raise ManifestLoadFailed(
                f"Manifest request to {location} returned HTTP {response.status_code}",
                kind="network",
            )
        return response.text

    def load(self, location: str) -> MasterManifest:
        manifest = parse_master_manifest(self.fetch(location), location)
        logger.debug(
            "Loaded master manifest",
            extra={
                "event": "playback.manifest.loaded",
                "location": location,
                "audio_tracks": len(manifest.audio_renditions),
            },
        )
        return manifest

    def close(self) -> None:
        self._closed = True
        if self._owns_session:
            self._session.close()


__all__ = [
    "AudioRendition",
    "ManifestFetcher",
    "MasterManifest",
    "parse_attributes",
    "parse_master_manifest",
]
