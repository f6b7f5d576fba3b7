"""Section-keyed location rules for manifests and dubbed tracks."""

from __future__ import annotations

from typing import Optional

from ...config_manager.constants import DEFAULT_CDN_URL

SECTION_ASSET_PREFIX = "assets/curriculumsection"


def _base(cdn_base_url: Optional[str]) -> str:
    return (cdn_base_url or DEFAULT_CDN_URL).rstrip("/")


def section_asset_root(section_id: str, cdn_base_url: Optional[str] = None) -> str:
    return f"{_base(cdn_base_url)}/{SECTION_ASSET_PREFIX}/{section_id}"


def master_manifest_location(section_id: str, cdn_base_url: Optional[str] = None) -> str:
    """Return the HLS master playlist location for ``section_id``."""
    return f"{section_asset_root(section_id, cdn_base_url)}/master.m3u8"


def dub_track_location(
    section_id: str, language: str, cdn_base_url: Optional[str] = None
) -> str:
    """Return the dubbed audio sub-manifest location for one language."""
    return f"{section_asset_root(section_id, cdn_base_url)}/dubTracks/{language}.m3u8"


def absolutize_location(location: str, cdn_base_url: Optional[str] = None) -> str:
    """Resolve a stored location against the CDN base unless it is already absolute."""

    trimmed = location.strip()
    if trimmed.lower().startswith(("http://", "https://")):
        return trimmed
    return f"{_base(cdn_base_url)}/{trimmed.lstrip('/')}"


__all__ = [
    "SECTION_ASSET_PREFIX",
    "absolutize_location",
    "dub_track_location",
    "master_manifest_location",
    "section_asset_root",
]
