"""Submission result types and job construction for dubbing requests."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional
from uuid import uuid4

from .job import DubJob, DubJobState


class SubmissionStatus(str, Enum):
    """Per-language result of a submission request."""

    ACCEPTED = "accepted"
    COALESCED = "coalesced"
    REJECTED = "rejected"
    FAILED = "failed"


@dataclass
class LanguageSubmissionOutcome:
    """Outcome for one requested language, reported individually."""

    requested_language: str
    language: str
    status: SubmissionStatus
    job_id: Optional[str] = None
    state: Optional[DubJobState] = None
    existing_job_id: Optional[str] = None
    error_code: Optional[str] = None
    reason: Optional[str] = None
    detail: Optional[str] = None


@dataclass
class SubmissionResult:
    section_id: str
    outcomes: List[LanguageSubmissionOutcome] = field(default_factory=list)

    @property
    def accepted(self) -> bool:
        """True when at least one language has a live job after the request."""
        return any(
            outcome.status in (SubmissionStatus.ACCEPTED, SubmissionStatus.COALESCED)
            for outcome in self.outcomes
        )

    @property
    def accepted_languages(self) -> List[str]:
        return [
            outcome.language
            for outcome in self.outcomes
            if outcome.status
            in (SubmissionStatus.ACCEPTED, SubmissionStatus.COALESCED)
        ]

    @property
    def rejected_languages(self) -> List[str]:
        return [
            outcome.requested_language
            for outcome in self.outcomes
            if outcome.status == SubmissionStatus.REJECTED
        ]

    @property
    def failed_languages(self) -> List[str]:
        return [
            outcome.requested_language
            for outcome in self.outcomes
            if outcome.status == SubmissionStatus.FAILED
        ]

    @property
    def job_ids(self) -> List[str]:
        return [outcome.job_id for outcome in self.outcomes if outcome.job_id]


def create_dub_job(
    *,
    section_id: str,
    source_video_location: str,
    target_language: str,
    now: datetime,
) -> DubJob:
    """Return a new :class:`DubJob` in the ``queued`` state."""

    return DubJob(
        job_id=str(uuid4()),
        section_id=section_id,
        source_video_location=source_video_location,
        target_language=target_language,
        state=DubJobState.QUEUED,
        created_at=now,
        updated_at=now,
    )


__all__ = [
    "LanguageSubmissionOutcome",
    "SubmissionResult",
    "SubmissionStatus",
    "create_dub_job",
]
