"""Playback engines and their audio-track views."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Protocol

from ... import logging_manager as log_mgr
from ..errors import EngineUnsupported, ManifestLoadFailed
from .capabilities import PlatformCapabilities
from .manifest import ManifestFetcher, MasterManifest

logger = log_mgr.get_logger().getChild("services.playback.engines")


class EngineKind(str, Enum):
    NATIVE = "native"
    FALLBACK = "fallback_engine"


@dataclass(frozen=True)
class EngineTrack:
    """Engine-neutral view of one reported audio track."""

    index: int
    language: Optional[str] = None
    label: Optional[str] = None
    default: bool = False
    location: Optional[str] = None


class PlaybackEngine(Protocol):
    kind: EngineKind

    def attach(self) -> None:
        ...

    def load(self, manifest_location: str) -> List[EngineTrack]:
        """Load the manifest and return the reported audio tracks.

        Raises :class:`ManifestLoadFailed` on network or parse errors.
        """
        ...

    def tracks(self) -> List[EngineTrack]:
        ...

    def select_track(self, track: EngineTrack) -> None:
        ...

    def recover(self, error: ManifestLoadFailed) -> str:
        """Prepare for another load attempt after ``error``; return the action taken."""
        ...

    def detach(self) -> None:
        ...


def select_engine_kind(capabilities: PlatformCapabilities) -> EngineKind:
    """Choose the engine for a session; the choice is made once per session."""

    if capabilities.prefers_native:
        return EngineKind.NATIVE
    if capabilities.supports_fallback:
        return EngineKind.FALLBACK
    if capabilities.native_hls:
        return EngineKind.NATIVE
    raise EngineUnsupported(
        "Neither native HLS nor a fallback HLS engine is available on this platform"
    )


class _ManifestEngine:
    kind: EngineKind

    def __init__(self, fetcher: ManifestFetcher) -> None:
        self._fetcher = fetcher
        self._attached = False
        self.manifest: Optional[MasterManifest] = None
        self.recovery_actions: List[str] = []

    @property
    def attached(self) -> bool:
        return self._attached

    def attach(self) -> None:
        self._attached = True

    def detach(self) -> None:
        self._attached = False
        self._fetcher.close()

    def _load_manifest(self, manifest_location: str) -> MasterManifest:
        if not self._attached:
            raise ManifestLoadFailed("Engine is not attached", kind="media")
        self.manifest = self._fetcher.load(manifest_location)
        return self.manifest


class NativeEngine(_ManifestEngine):
    """Platform decoder; exposes ``audio_tracks`` as ``language``/``label``/``enabled``."""

    kind = EngineKind.NATIVE

    def __init__(self, fetcher: ManifestFetcher) -> None:
        super().__init__(fetcher)
        self.audio_tracks: List[Dict[str, Any]] = []

    def load(self, manifest_location: str) -> List[EngineTrack]:
        manifest = self._load_manifest(manifest_location)
        self.audio_tracks = [
            {
                "language": rendition.language or "",
                "label": rendition.name or "",
                "enabled": rendition.default,
                "uri": rendition.uri,
            }
            for rendition in manifest.audio_renditions
        ]
        if self.audio_tracks and not any(t["enabled"] for t in self.audio_tracks):
            self.audio_tracks[0]["enabled"] = True
        return self.tracks()

    def tracks(self) -> List[EngineTrack]:
        return [
            EngineTrack(
                index=index,
                language=track.get("language") or None,
                label=track.get("label") or None,
                default=bool(track.get("enabled")),
                location=track.get("uri"),
            )
            for index, track in enumerate(self.audio_tracks)
        ]

    def select_track(self, track: EngineTrack) -> None:
        for index, entry in enumerate(self.audio_tracks):
            entry["enabled"] = index == track.index

    def recover(self, error: ManifestLoadFailed) -> str:
        action = "reload"
        self.recovery_actions.append(action)
        return action


class FallbackEngine(_ManifestEngine):
    """Software HLS engine; exposes ``audio_tracks`` as ``lang``/``name``/``default``/``url``."""

    kind = EngineKind.FALLBACK

    def __init__(self, fetcher: ManifestFetcher) -> None:
        super().__init__(fetcher)
        self.audio_tracks: List[Dict[str, Any]] = []
        self.current_audio_track = -1

    def load(self, manifest_location: str) -> List[EngineTrack]:
        manifest = self._load_manifest(manifest_location)
        self.audio_tracks = [
            {
                "lang": rendition.language or "",
                "name": rendition.name or "",
                "default": rendition.default,
                "url": rendition.uri,
            }
            for rendition in manifest.audio_renditions
        ]
        self.current_audio_track = next(
            (index for index, track in enumerate(self.audio_tracks) if track["default"]),
            0 if self.audio_tracks else -1,
        )
        return self.tracks()

    def tracks(self) -> List[EngineTrack]:
        return [
            EngineTrack(
                index=index,
                language=track.get("lang") or None,
                label=track.get("name") or None,
                default=bool(track.get("default")),
                location=track.get("url"),
            )
            for index, track in enumerate(self.audio_tracks)
        ]

    def select_track(self, track: EngineTrack) -> None:
        self.current_audio_track = track.index

    def recover(self, error: ManifestLoadFailed) -> str:
        # Network errors restart loading; media errors go through media recovery.
        action = "start_load" if error.kind == "network" else "recover_media_error"
        self.recovery_actions.append(action)
        logger.debug(
            "Fallback engine recovery",
            extra={"event": "playback.engine.recover", "action": action},
        )
        return action


EngineFactory = Callable[[EngineKind], PlaybackEngine]


class HttpEngineFactory:
    """Create engines that fetch manifests over HTTP with a bounded timeout."""

    def __init__(self, *, timeout_seconds: float = 10.0) -> None:
        self._timeout = timeout_seconds

    def __call__(self, kind: EngineKind) -> PlaybackEngine:
        fetcher = ManifestFetcher(timeout_seconds=self._timeout)
        if kind == EngineKind.NATIVE:
            return NativeEngine(fetcher)
        return FallbackEngine(fetcher)


__all__ = [
    "EngineFactory",
    "EngineKind",
    "EngineTrack",
    "FallbackEngine",
    "HttpEngineFactory",
    "NativeEngine",
    "PlaybackEngine",
    "select_engine_kind",
]
