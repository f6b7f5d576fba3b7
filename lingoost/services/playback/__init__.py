"""Playback sessions: engine selection, manifest loading and track switching."""

from .capabilities import PlatformCapabilities
from .controller import PlaybackSessionController, SwitchOutcome
from .engines import (
    EngineFactory,
    EngineKind,
    EngineTrack,
    FallbackEngine,
    HttpEngineFactory,
    NativeEngine,
    PlaybackEngine,
    select_engine_kind,
)
from .manifest import (
    AudioRendition,
    ManifestFetcher,
    MasterManifest,
    parse_master_manifest,
)
from .preferences import (
    InMemoryLanguagePreferenceStore,
    LanguagePreferenceStore,
    SqlAlchemyLanguagePreferenceStore,
)
from .registry import PlaybackSessionRegistry
from .resolver import TrackResolution, UNRESOLVED, resolve
from .session import EngineState, PlaybackSession

__all__ = [
    "AudioRendition",
    "EngineFactory",
    "EngineKind",
    "EngineState",
    "EngineTrack",
    "FallbackEngine",
    "HttpEngineFactory",
    "InMemoryLanguagePreferenceStore",
    "LanguagePreferenceStore",
    "ManifestFetcher",
    "MasterManifest",
    "NativeEngine",
    "PlatformCapabilities",
    "PlaybackEngine",
    "PlaybackSession",
    "PlaybackSessionController",
    "PlaybackSessionRegistry",
    "SqlAlchemyLanguagePreferenceStore",
    "SwitchOutcome",
    "TrackResolution",
    "UNRESOLVED",
    "parse_master_manifest",
    "resolve",
    "select_engine_kind",
]
