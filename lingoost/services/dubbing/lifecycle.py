"""Helpers for validating dubbing job lifecycle transitions."""

from __future__ import annotations

from typing import Dict, FrozenSet

from ..errors import InvalidJobTransition
from .job import DubJob, DubJobState, TERMINAL_STATES

# Submitted may jump straight to a terminal state when the remote service
# reports completion before any processing status was observed.
ALLOWED_TRANSITIONS: Dict[DubJobState, FrozenSet[DubJobState]] = {
    DubJobState.QUEUED: frozenset({DubJobState.SUBMITTED, DubJobState.FAILED}),
    DubJobState.SUBMITTED: frozenset(
        {DubJobState.PROCESSING, DubJobState.READY, DubJobState.FAILED}
    ),
    DubJobState.PROCESSING: frozenset({DubJobState.READY, DubJobState.FAILED}),
    DubJobState.READY: frozenset(),
    DubJobState.FAILED: frozenset(),
}


def is_transition_allowed(current: DubJobState, target: DubJobState) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def validate_transition(job: DubJob, target: DubJobState) -> None:
    """Raise :class:`InvalidJobTransition` unless ``job`` may move to ``target``."""

    if job.state in TERMINAL_STATES:
        raise InvalidJobTransition(
            job.job_id,
            f"Job {job.job_id} is already {job.state.value}; cannot move to {target.value}",
            current_state=job.state.value,
            requested_state=target.value,
        )
    if not is_transition_allowed(job.state, target):
        raise InvalidJobTransition(
            job.job_id,
            f"Cannot move job {job.job_id} from {job.state.value} to {target.value}",
            current_state=job.state.value,
            requested_state=target.value,
        )


__all__ = ["ALLOWED_TRANSITIONS", "is_transition_allowed", "validate_transition"]
