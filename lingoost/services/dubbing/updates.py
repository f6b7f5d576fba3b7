"""Tagged state updates fed to the orchestrator's single advancement path."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Union

from .job import DubJobState

# Remote status vocabulary -> job state.
REMOTE_STATUS_MAP: Dict[str, DubJobState] = {
    "queued": DubJobState.PROCESSING,
    "dubbing": DubJobState.PROCESSING,
    "processing": DubJobState.PROCESSING,
    "in_progress": DubJobState.PROCESSING,
    "dubbed": DubJobState.READY,
    "ready": DubJobState.READY,
    "completed": DubJobState.READY,
    "failed": DubJobState.FAILED,
    "error": DubJobState.FAILED,
}


def map_remote_status(status: Optional[str]) -> Optional[DubJobState]:
    """Translate a remote status string, returning ``None`` when it is unknown."""

    if not status:
        return None
    return REMOTE_STATUS_MAP.get(str(status).strip().lower())


@dataclass(frozen=True)
class CallbackUpdate:
    """State reported by the remote service through the webhook."""

    state: DubJobState
    result_location: Optional[str] = None
    error: Optional[str] = None
    remote_status: Optional[str] = None

    transport = "callback"


@dataclass(frozen=True)
class PollResult:
    """State observed by polling the remote status endpoint."""

    state: DubJobState
    result_location: Optional[str] = None
    error: Optional[str] = None
    remote_status: Optional[str] = None

    transport = "poll"


JobUpdate = Union[CallbackUpdate, PollResult]


__all__ = [
    "CallbackUpdate",
    "JobUpdate",
    "PollResult",
    "REMOTE_STATUS_MAP",
    "map_remote_status",
]
