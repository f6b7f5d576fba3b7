"""Pydantic request and response models for the web API."""

from .dubbing import (
    DubJobPayload,
    DubbingCallbackPayload,
    DubbingStatusResponse,
    DubbingSubmissionRequest,
    DubbingSubmissionResponse,
    LanguageOutcomePayload,
)
from .playback import (
    ErrorPayload,
    LanguageSwitchRequest,
    LanguageSwitchResponse,
    PlaybackSessionRequest,
    PlaybackSessionSnapshot,
    TrackCatalogResponse,
    TrackPayload,
)

__all__ = [
    "DubJobPayload",
    "DubbingCallbackPayload",
    "DubbingStatusResponse",
    "DubbingSubmissionRequest",
    "DubbingSubmissionResponse",
    "ErrorPayload",
    "LanguageOutcomePayload",
    "LanguageSwitchRequest",
    "LanguageSwitchResponse",
    "PlaybackSessionRequest",
    "PlaybackSessionSnapshot",
    "TrackCatalogResponse",
    "TrackPayload",
]
