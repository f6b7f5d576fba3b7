"""Typed failures raised by the dubbing and playback services."""

from __future__ import annotations

from typing import Any, Dict, Optional


class DubbingPlaybackError(Exception):
    """Base class carrying a stable machine-readable code and HTTP status."""

    code: str = "dubbing_playback_error"
    http_status: int = 500

    def __init__(self, message: str, *, code: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def to_payload(self) -> Dict[str, Any]:
        return {"error": self.code, "detail": self.message}


class SubmissionRejected(DubbingPlaybackError):
    """A submission for a (section, language) pair cannot be accepted."""

    code = "submission_rejected"
    http_status = 409

    def __init__(
        self,
        message: str,
        *,
        language: Optional[str] = None,
        reason: str = "duplicate",
        existing_job_id: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.language = language
        self.reason = reason
        self.existing_job_id = existing_job_id


class RemoteSubmissionFailed(DubbingPlaybackError):
    code = "remote_submission_failed"
    http_status = 502


class RemoteStatusUnavailable(DubbingPlaybackError):
    """A status poll could not reach the remote service or read its reply."""

    code = "remote_status_unavailable"
    http_status = 502


class JobTimedOut(DubbingPlaybackError):
    code = "job_timed_out"
    http_status = 504


class ManifestLoadFailed(DubbingPlaybackError):
    """Manifest could not be fetched or parsed; retryable up to the ceiling."""

    code = "manifest_load_failed"
    http_status = 503

    def __init__(self, message: str, *, kind: str = "network") -> None:
        super().__init__(message)
        self.kind = kind


class EngineUnsupported(DubbingPlaybackError):
    code = "engine_unsupported"
    http_status = 422


class TrackUnresolved(DubbingPlaybackError):
    """Requested language matches no track; the session stays as it was."""

    code = "track_unresolved"
    http_status = 422

    def __init__(self, message: str, *, language: Optional[str] = None) -> None:
        super().__init__(message)
        self.language = language


class JobNotFound(DubbingPlaybackError):
    code = "job_not_found"
    http_status = 404


class SessionNotFound(DubbingPlaybackError):
    code = "session_not_found"
    http_status = 404


class SwitchInProgress(DubbingPlaybackError):
    code = "switch_in_progress"
    http_status = 409


class SessionClosed(DubbingPlaybackError):
    code = "session_closed"
    http_status = 410


class InvalidJobTransition(DubbingPlaybackError, ValueError):
    """Raised when an advancement would leave the job state machine's path."""

    code = "invalid_job_transition"
    http_status = 409

    def __init__(
        self,
        job_id: str,
        message: str,
        *,
        current_state: Optional[str] = None,
        requested_state: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.job_id = job_id
        self.current_state = current_state
        self.requested_state = requested_state


__all__ = [
    "DubbingPlaybackError",
    "EngineUnsupported",
    "InvalidJobTransition",
    "JobNotFound",
    "JobTimedOut",
    "ManifestLoadFailed",
    "RemoteStatusUnavailable",
    "RemoteSubmissionFailed",
    "SessionClosed",
    "SessionNotFound",
    "SubmissionRejected",
    "SwitchInProgress",
    "TrackUnresolved",
]
