"""Schemas for track catalogs and playback sessions."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, Field

from ...services.catalog import TrackDescriptor


class TrackPayload(BaseModel):
    language: str
    label: str
    source: str
    location: str = ""
    playable: bool = False

    @classmethod
    def from_descriptor(cls, descriptor: TrackDescriptor) -> "TrackPayload":
        return cls(**descriptor.to_dict())


class TrackCatalogResponse(BaseModel):
    section_id: str
    tracks: List[TrackPayload] = Field(default_factory=list)


class PlaybackSessionRequest(BaseModel):
    section_id: str = Field(
        min_length=1, validation_alias=AliasChoices("section_id", "sectionId")
    )
    user_agent: Optional[str] = None
    hints: Dict[str, Any] = Field(default_factory=dict)


class ErrorPayload(BaseModel):
    error: str
    detail: str


class PlaybackSessionSnapshot(BaseModel):
    session_id: str
    section_id: str
    viewer_id: Optional[str] = None
    engine_kind: Optional[str] = None
    engine_state: str
    current_language: str
    retry_count: int = 0
    manifest_location: str
    available_tracks: List[TrackPayload] = Field(default_factory=list)
    closed: bool = False
    error: Optional[ErrorPayload] = None
    capabilities: Dict[str, Any] = Field(default_factory=dict)


class LanguageSwitchRequest(BaseModel):
    language: str = Field(min_length=1)


class LanguageSwitchResponse(BaseModel):
    applied: bool
    language: str
    sequence: int
    strategy: Optional[str] = None
    session: PlaybackSessionSnapshot


__all__ = [
    "ErrorPayload",
    "LanguageSwitchRequest",
    "LanguageSwitchResponse",
    "PlaybackSessionRequest",
    "PlaybackSessionSnapshot",
    "TrackCatalogResponse",
    "TrackPayload",
]
