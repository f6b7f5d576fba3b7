"""Dubbing job orchestration: submission, advancement, polling and storage."""

from .job import ACTIVE_STATES, DubJob, DubJobState, TERMINAL_STATES
from .lifecycle import ALLOWED_TRANSITIONS, is_transition_allowed, validate_transition
from .locking import JobLockManager
from .orchestrator import DubbingOrchestrator, ReadyListener
from .poller import DubJobPoller
from .remote_client import HttpDubbingClient, RemoteDubbingClient, parse_status_payload
from .stores import DubJobStore, InMemoryDubJobStore, SqlAlchemyDubJobStore
from .submission import (
    LanguageSubmissionOutcome,
    SubmissionResult,
    SubmissionStatus,
    create_dub_job,
)
from .updates import CallbackUpdate, JobUpdate, PollResult, map_remote_status

__all__ = [
    "ACTIVE_STATES",
    "ALLOWED_TRANSITIONS",
    "CallbackUpdate",
    "DubJob",
    "DubJobPoller",
    "DubJobState",
    "DubJobStore",
    "DubbingOrchestrator",
    "HttpDubbingClient",
    "InMemoryDubJobStore",
    "JobLockManager",
    "JobUpdate",
    "LanguageSubmissionOutcome",
    "PollResult",
    "ReadyListener",
    "RemoteDubbingClient",
    "SqlAlchemyDubJobStore",
    "SubmissionResult",
    "SubmissionStatus",
    "TERMINAL_STATES",
    "create_dub_job",
    "is_transition_allowed",
    "map_remote_status",
    "parse_status_payload",
    "validate_transition",
]
