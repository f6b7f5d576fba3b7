"""In-memory representation of dubbing jobs."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


class DubJobState(str, Enum):
    """Enumeration of possible dubbing job states."""

    QUEUED = "queued"
    SUBMITTED = "submitted"
    PROCESSING = "processing"
    READY = "ready"
    FAILED = "failed"


TERMINAL_STATES = frozenset({DubJobState.READY, DubJobState.FAILED})
ACTIVE_STATES = frozenset(
    {DubJobState.QUEUED, DubJobState.SUBMITTED, DubJobState.PROCESSING}
)


@dataclass
class DubJob:
    """One (content section, target language) dubbing unit."""

    job_id: str
    section_id: str
    source_video_location: str
    target_language: str
    state: DubJobState
    created_at: datetime
    remote_job_id: Optional[str] = None
    result_track_location: Optional[str] = None
    last_error: Optional[str] = None
    submitted_at: Optional[datetime] = None
    processing_started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["state"] = self.state.value
        for key, value in list(payload.items()):
            if isinstance(value, datetime):
                payload[key] = value.isoformat()
        return payload


__all__ = ["ACTIVE_STATES", "DubJob", "DubJobState", "TERMINAL_STATES"]
