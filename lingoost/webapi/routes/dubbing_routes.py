"""API routes for dubbing submission, status and remote callbacks."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from ... import logging_manager as log_mgr
from ...services.dubbing import CallbackUpdate, DubbingOrchestrator, map_remote_status
from ..dependencies import get_orchestrator
from ..schemas.dubbing import (
    DubJobPayload,
    DubbingCallbackPayload,
    DubbingStatusResponse,
    DubbingSubmissionRequest,
    DubbingSubmissionResponse,
)

logger = log_mgr.get_logger().getChild("webapi.dubbing_routes")

router = APIRouter(prefix="/api/dubbing", tags=["dubbing"])


@router.post(
    "/sections/{section_id}/jobs",
    response_model=DubbingSubmissionResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
def submit_dubbing(
    section_id: str,
    payload: DubbingSubmissionRequest,
    orchestrator: DubbingOrchestrator = Depends(get_orchestrator),
) -> DubbingSubmissionResponse:
    """Submit one dubbing job per language; outcomes are reported per language."""

    result = orchestrator.submit(section_id, payload.source_video_location, payload.languages)
    return DubbingSubmissionResponse.from_result(result)


@router.get("/sections/{section_id}/jobs", response_model=DubbingStatusResponse)
def get_job_status(
    section_id: str,
    orchestrator: DubbingOrchestrator = Depends(get_orchestrator),
) -> DubbingStatusResponse:
    jobs = orchestrator.get_job_status(section_id)
    return DubbingStatusResponse(
        section_id=section_id,
        jobs=[DubJobPayload.from_job(job) for job in jobs],
    )


@router.post("/callback", response_model=DubJobPayload)
def receive_callback(
    payload: DubbingCallbackPayload,
    orchestrator: DubbingOrchestrator = Depends(get_orchestrator),
) -> DubJobPayload:
    """Apply a status report pushed by the remote dubbing service."""

    state = map_remote_status(payload.status)
    if state is None:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Unknown dubbing status {payload.status!r}",
        )
    update = CallbackUpdate(
        state=state,
        result_location=payload.result_location,
        error=payload.error,
        remote_status=payload.status,
    )
    if payload.job_id:
        job = orchestrator.advance(payload.job_id, update)
    elif payload.remote_job_id:
        job = orchestrator.advance_remote(payload.remote_job_id, update)
    else:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Callback must identify the job by job_id or dubbing_id",
        )
    return DubJobPayload.from_job(job)


@router.post("/jobs/{job_id}/poll", response_model=DubJobPayload)
def poll_job(
    job_id: str,
    orchestrator: DubbingOrchestrator = Depends(get_orchestrator),
) -> DubJobPayload:
    """Force a single status poll for ``job_id``."""

    return DubJobPayload.from_job(orchestrator.poll_job(job_id))


__all__ = ["router"]
