"""Schemas for dubbing submission, status and callback endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

from ...services.dubbing import DubJob, LanguageSubmissionOutcome, SubmissionResult


class DubbingSubmissionRequest(BaseModel):
    source_video_location: str = Field(
        min_length=1,
        validation_alias=AliasChoices("source_video_location", "sourceVideoLocation"),
    )
    languages: List[str] = Field(min_length=1)

    @field_validator("source_video_location")
    @classmethod
    def _strip_location(cls, value: str) -> str:
        trimmed = value.strip()
        if not trimmed:
            raise ValueError("source_video_location must not be blank")
        return trimmed


class LanguageOutcomePayload(BaseModel):
    requested_language: str
    language: str
    status: str
    job_id: Optional[str] = None
    state: Optional[str] = None
    existing_job_id: Optional[str] = None
    error: Optional[str] = None
    reason: Optional[str] = None
    detail: Optional[str] = None

    @classmethod
    def from_outcome(cls, outcome: LanguageSubmissionOutcome) -> "LanguageOutcomePayload":
        return cls(
            requested_language=outcome.requested_language,
            language=outcome.language,
            status=outcome.status.value,
            job_id=outcome.job_id,
            state=outcome.state.value if outcome.state else None,
            existing_job_id=outcome.existing_job_id,
            error=outcome.error_code,
            reason=outcome.reason,
            detail=outcome.detail,
        )


class DubbingSubmissionResponse(BaseModel):
    section_id: str
    accepted: bool
    rejected_languages: List[str] = Field(default_factory=list)
    failed_languages: List[str] = Field(default_factory=list)
    outcomes: List[LanguageOutcomePayload] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: SubmissionResult) -> "DubbingSubmissionResponse":
        return cls(
            section_id=result.section_id,
            accepted=result.accepted,
            rejected_languages=result.rejected_languages,
            failed_languages=result.failed_languages,
            outcomes=[LanguageOutcomePayload.from_outcome(o) for o in result.outcomes],
        )


class DubJobPayload(BaseModel):
    job_id: str
    section_id: str
    language: str
    state: str
    remote_job_id: Optional[str] = None
    result_track_location: Optional[str] = None
    error: Optional[str] = None
    created_at: datetime
    submitted_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @classmethod
    def from_job(cls, job: DubJob) -> "DubJobPayload":
        return cls(
            job_id=job.job_id,
            section_id=job.section_id,
            language=job.target_language,
            state=job.state.value,
            remote_job_id=job.remote_job_id,
            result_track_location=job.result_track_location,
            error=job.last_error,
            created_at=job.created_at,
            submitted_at=job.submitted_at,
            completed_at=job.completed_at,
        )


class DubbingStatusResponse(BaseModel):
    section_id: str
    jobs: List[DubJobPayload] = Field(default_factory=list)


class DubbingCallbackPayload(BaseModel):
    """Webhook body sent by the remote dubbing service."""

    job_id: Optional[str] = None
    remote_job_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("remote_job_id", "dubbing_id", "dubbingId"),
    )
    status: str
    result_location: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("result_location", "resultLocation"),
    )
    error: Optional[str] = None


__all__ = [
    "DubJobPayload",
    "DubbingCallbackPayload",
    "DubbingStatusResponse",
    "DubbingSubmissionRequest",
    "DubbingSubmissionResponse",
    "LanguageOutcomePayload",
]
