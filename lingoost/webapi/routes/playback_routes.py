"""API routes for track catalogs and playback sessions."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import JSONResponse

from ...services.catalog import TrackCatalogBuilder
from ...services.errors import DubbingPlaybackError
from ...services.playback import EngineState, PlaybackSessionRegistry
from ..dependencies import get_catalog_builder, get_session_registry, get_viewer_id
from ..schemas.playback import (
    LanguageSwitchRequest,
    LanguageSwitchResponse,
    PlaybackSessionRequest,
    PlaybackSessionSnapshot,
    TrackCatalogResponse,
    TrackPayload,
)

router = APIRouter(tags=["playback"])


def _error_response(error: DubbingPlaybackError, snapshot: Dict[str, Any]) -> JSONResponse:
    body = error.to_payload()
    body["session"] = snapshot
    return JSONResponse(status_code=error.http_status, content=body)


@router.get("/api/sections/{section_id}/tracks", response_model=TrackCatalogResponse)
def get_section_tracks(
    section_id: str,
    builder: TrackCatalogBuilder = Depends(get_catalog_builder),
) -> TrackCatalogResponse:
    tracks = builder.build(section_id)
    return TrackCatalogResponse(
        section_id=section_id,
        tracks=[TrackPayload.from_descriptor(track) for track in tracks],
    )


@router.post(
    "/api/playback/sessions",
    response_model=PlaybackSessionSnapshot,
    status_code=status.HTTP_201_CREATED,
)
def open_playback_session(
    payload: PlaybackSessionRequest,
    registry: PlaybackSessionRegistry = Depends(get_session_registry),
    viewer_id: Optional[str] = Depends(get_viewer_id),
):
    """Open a session and load its manifest; failures keep the session for inspection."""

    session = registry.open_session(
        payload.section_id,
        user_agent=payload.user_agent,
        hints=payload.hints,
        viewer_id=viewer_id,
    )
    snapshot = session.snapshot()
    if session.engine_state == EngineState.ERROR and session.failure is not None:
        return _error_response(session.failure, snapshot)
    return PlaybackSessionSnapshot.model_validate(snapshot)


@router.get("/api/playback/sessions/{session_id}", response_model=PlaybackSessionSnapshot)
def get_playback_session(
    session_id: str,
    registry: PlaybackSessionRegistry = Depends(get_session_registry),
) -> PlaybackSessionSnapshot:
    return PlaybackSessionSnapshot.model_validate(registry.get_session(session_id).snapshot())


@router.post(
    "/api/playback/sessions/{session_id}/language",
    response_model=LanguageSwitchResponse,
)
def request_language_switch(
    session_id: str,
    payload: LanguageSwitchRequest,
    registry: PlaybackSessionRegistry = Depends(get_session_registry),
):
    """Switch the session's audio language; an unresolvable language leaves it unchanged."""

    outcome = registry.switch_language(session_id, payload.language)
    if outcome.error is not None:
        return _error_response(outcome.error, outcome.session)
    return LanguageSwitchResponse(
        applied=outcome.applied,
        language=outcome.language,
        sequence=outcome.sequence,
        strategy=outcome.strategy,
        session=PlaybackSessionSnapshot.model_validate(outcome.session),
    )


@router.delete(
    "/api/playback/sessions/{session_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
def close_playback_session(
    session_id: str,
    registry: PlaybackSessionRegistry = Depends(get_session_registry),
) -> Response:
    registry.close_session(session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


__all__ = ["router"]
