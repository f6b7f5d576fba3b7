"""Live playback session state."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from ...language import ORIGIN_LANGUAGE
from ..catalog.tracks import TrackDescriptor
from ..errors import DubbingPlaybackError
from .capabilities import PlatformCapabilities
from .engines import EngineKind, PlaybackEngine


class EngineState(str, Enum):
    INITIALIZING = "initializing"
    ENGINE_SELECTING = "engine_selecting"
    MANIFEST_LOADING = "manifest_loading"
    READY = "ready"
    SWITCHING = "switching"
    ERROR = "error"


@dataclass
class PlaybackSession:
    """One viewer's playback state; mutated only by its controller."""

    session_id: str
    section_id: str
    capabilities: PlatformCapabilities
    manifest_location: str
    viewer_id: Optional[str] = None
    engine_kind: Optional[EngineKind] = None
    current_language: str = ORIGIN_LANGUAGE
    available_tracks: List[TrackDescriptor] = field(default_factory=list)
    engine_state: EngineState = EngineState.INITIALIZING
    retry_count: int = 0
    native_failures: int = 0
    switch_sequence: int = 0
    closed: bool = False
    failure: Optional[DubbingPlaybackError] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    engine: Optional[PlaybackEngine] = field(default=None, repr=False)
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    @property
    def available_languages(self) -> List[str]:
        return [track.canonical_language for track in self.available_tracks]

    def snapshot(self) -> Dict[str, Any]:
        with self.lock:
            return {
                "session_id": self.session_id,
                "section_id": self.section_id,
                "viewer_id": self.viewer_id,
                "engine_kind": self.engine_kind.value if self.engine_kind else None,
                "engine_state": self.engine_state.value,
                "current_language": self.current_language,
                "retry_count": self.retry_count,
                "manifest_location": self.manifest_location,
                "available_tracks": [track.to_dict() for track in self.available_tracks],
                "closed": self.closed,
                "error": self.failure.to_payload() if self.failure else None,
                "capabilities": self.capabilities.to_dict(),
            }


__all__ = ["EngineState", "PlaybackSession"]
