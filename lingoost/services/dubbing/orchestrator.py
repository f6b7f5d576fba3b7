"""Drive dubbing jobs from submission to a terminal state."""

from __future__ import annotations

import threading
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional

from ... import logging_manager as log_mgr
from ...config_manager import DubbingSettings
from ...language import is_supported_dubbing_language, normalize
from ..catalog.locations import absolutize_location, dub_track_location
from ..errors import (
    InvalidJobTransition,
    JobNotFound,
    JobTimedOut,
    RemoteStatusUnavailable,
    RemoteSubmissionFailed,
    SubmissionRejected,
)
from .job import DubJob, DubJobState
from .lifecycle import validate_transition
from .locking import JobLockManager, pair_lock_key
from .remote_client import RemoteDubbingClient
from .stores import DubJobStore
from .submission import (
    LanguageSubmissionOutcome,
    SubmissionResult,
    SubmissionStatus,
    create_dub_job,
)
from .updates import JobUpdate, PollResult

logger = log_mgr.get_logger().getChild("services.dubbing.orchestrator")

ReadyListener = Callable[[DubJob], None]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DubbingOrchestrator:
    """Accept dubbing requests and advance each job through its lifecycle.

    Every state change, whether it comes from submission, a webhook callback,
    a status poll or the processing-timeout sweep, is committed through a
    compare-and-swap on the job's current state while holding that job's lock.
    """

    def __init__(
        self,
        *,
        store: DubJobStore,
        client: RemoteDubbingClient,
        settings: Optional[DubbingSettings] = None,
        lock_manager: Optional[JobLockManager] = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        settings = settings or DubbingSettings()
        self._store = store
        self._client = client
        self._locks = lock_manager or JobLockManager()
        self._clock = clock
        self._duplicate_policy = settings.duplicate_submission_policy
        self._processing_timeout = timedelta(
            seconds=settings.dubbing_processing_timeout_seconds
        )
        self._cdn_base_url = settings.cdn_base_url
        self._listeners: List[ReadyListener] = []
        self._listeners_lock = threading.Lock()
        self._poll_attempts: Dict[str, int] = {}
        self._poll_attempts_lock = threading.Lock()

    @property
    def store(self) -> DubJobStore:
        return self._store

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------
    def add_ready_listener(self, listener: ReadyListener) -> None:
        with self._listeners_lock:
            if listener not in self._listeners:
                self._listeners.append(listener)

    def remove_ready_listener(self, listener: ReadyListener) -> None:
        with self._listeners_lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def _notify_ready(self, job: DubJob) -> None:
        with self._listeners_lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(job)
            except Exception:
                logger.exception(
                    "Ready listener failed",
                    extra={"event": "dubbing.listener.failed", "job_id": job.job_id},
                )

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------
    def submit(
        self,
        section_id: str,
        source_video_location: str,
        languages: Iterable[str],
    ) -> SubmissionResult:
        """Create one job per requested language and hand each to the remote service.

        Languages are handled independently; a rejection or remote failure for one
        language never prevents the others from being accepted.
        """

        result = SubmissionResult(section_id=section_id)
        seen: set[str] = set()
        with log_mgr.log_context(section_id=section_id):
            for requested in languages:
                outcome = self._submit_language(
                    section_id, source_video_location, requested, seen
                )
                result.outcomes.append(outcome)
            logger.info(
                "Dubbing submission processed",
                extra={
                    "event": "dubbing.submit.completed",
                    "accepted": result.accepted_languages,
                    "rejected": result.rejected_languages,
                    "failed": result.failed_languages,
                },
            )
        return result

    def _submit_language(
        self,
        section_id: str,
        source_video_location: str,
        requested: str,
        seen: set[str],
    ) -> LanguageSubmissionOutcome:
        language = normalize(requested)
        if not is_supported_dubbing_language(language):
            return self._rejected(
                requested,
                language,
                SubmissionRejected(
                    f"Language {requested!r} is not supported for dubbing",
                    language=language,
                    reason="unsupported_language",
                ),
            )
        if language in seen:
            return self._rejected(
                requested,
                language,
                SubmissionRejected(
                    f"Language {language} was requested more than once",
                    language=language,
                    reason="duplicate_in_request",
                ),
            )
        seen.add(language)

        with self._locks.job_lock(pair_lock_key(section_id, language)):
            existing = self._store.find_active(section_id, language)
            if existing is not None:
                if self._duplicate_policy == "coalesce":
                    logger.info(
                        "Coalesced dubbing request into active job",
                        extra={
                            "event": "dubbing.submit.coalesced",
                            "job_id": existing.job_id,
                            "state": existing.state.value,
                        },
                    )
                    return LanguageSubmissionOutcome(
                        requested_language=requested,
                        language=language,
                        status=SubmissionStatus.COALESCED,
                        job_id=existing.job_id,
                        state=existing.state,
                    )
                return self._rejected(
                    requested,
                    language,
                    SubmissionRejected(
                        f"A dubbing job for {language} is already {existing.state.value}",
                        language=language,
                        reason="duplicate",
                        existing_job_id=existing.job_id,
                    ),
                )
            try:
                job = self._store.create(
                    create_dub_job(
                        section_id=section_id,
                        source_video_location=source_video_location,
                        target_language=language,
                        now=self._clock(),
                    )
                )
            except SubmissionRejected as exc:
                return self._rejected(requested, language, exc)

        return self._send_to_remote(job, requested)

    def _rejected(
        self, requested: str, language: str, exc: SubmissionRejected
    ) -> LanguageSubmissionOutcome:
        logger.info(
            "Dubbing request rejected",
            extra={
                "event": "dubbing.submit.rejected",
                "language": language,
                "reason": exc.reason,
                "existing_job_id": exc.existing_job_id,
            },
        )
        return LanguageSubmissionOutcome(
            requested_language=requested,
            language=language,
            status=SubmissionStatus.REJECTED,
            existing_job_id=exc.existing_job_id,
            error_code=exc.code,
            reason=exc.reason,
            detail=exc.message,
        )

    def _send_to_remote(self, job: DubJob, requested: str) -> LanguageSubmissionOutcome:
        with log_mgr.log_context(job_id=job.job_id):
            try:
                remote_job_id = self._client.create_dubbing(
                    source_video_location=job.source_video_location,
                    target_language=job.target_language,
                    job_id=job.job_id,
                )
            except Exception as exc:
                error = (
                    exc
                    if isinstance(exc, RemoteSubmissionFailed)
                    else RemoteSubmissionFailed(f"Dubbing request failed: {exc}")
                )
                logger.warning(
                    "Remote dubbing submission failed",
                    extra={
                        "event": "dubbing.submit.remote_failed",
                        "attempt": 1,
                        "error": error.message,
                    },
                )
                failed = self._commit(
                    job.job_id,
                    DubJobState.FAILED,
                    last_error=error.message,
                    completed_at=self._clock(),
                )
                return LanguageSubmissionOutcome(
                    requested_language=requested,
                    language=job.target_language,
                    status=SubmissionStatus.FAILED,
                    job_id=job.job_id,
                    state=failed.state,
                    error_code=error.code,
                    detail=error.message,
                )

            submitted = self._commit(
                job.job_id,
                DubJobState.SUBMITTED,
                remote_job_id=remote_job_id,
                submitted_at=self._clock(),
            )
            logger.info(
                "Dubbing job submitted",
                extra={
                    "event": "dubbing.submit.accepted",
                    "remote_job_id": remote_job_id,
                    "state": submitted.state.value,
                },
            )
        return LanguageSubmissionOutcome(
            requested_language=requested,
            language=job.target_language,
            status=SubmissionStatus.ACCEPTED,
            job_id=job.job_id,
            state=submitted.state,
        )

    # ------------------------------------------------------------------
    # Advancement
    # ------------------------------------------------------------------
    def advance(self, job_id: str, update: JobUpdate) -> DubJob:
        """Apply a callback or poll update to ``job_id``.

        Re-applying the state the job is already in is a no-op. Any update that
        would move a terminal job, or move a job backwards, raises
        :class:`InvalidJobTransition`.
        """

        with log_mgr.log_context(job_id=job_id):
            target = update.state
            now = self._clock()
            with self._locks.job_lock(job_id):
                job = self._store.get(job_id)
                if job.state == target:
                    logger.debug(
                        "Ignoring repeated state update",
                        extra={
                            "event": "dubbing.advance.noop",
                            "state": target.value,
                            "transport": update.transport,
                        },
                    )
                    return job
                fields = self._fields_for_update(job, update, now)
                updated = self._commit(job_id, target, expected=job, **fields)
            logger.info(
                "Dubbing job advanced",
                extra={
                    "event": "dubbing.advance.applied",
                    "state": updated.state.value,
                    "previous_state": job.state.value,
                    "transport": update.transport,
                    "remote_status": update.remote_status,
                },
            )
        if updated.state == DubJobState.READY:
            self._notify_ready(updated)
        return updated

    def advance_remote(self, remote_job_id: str, update: JobUpdate) -> DubJob:
        """Apply ``update`` to the job known remotely as ``remote_job_id``."""

        job = self._store.find_by_remote_id(remote_job_id)
        if job is None:
            raise JobNotFound(f"No dubbing job for remote id {remote_job_id}")
        return self.advance(job.job_id, update)

    def _fields_for_update(
        self, job: DubJob, update: JobUpdate, now: datetime
    ) -> Dict[str, Any]:
        target = update.state
        fields: Dict[str, Any] = {}
        if target == DubJobState.PROCESSING:
            fields["processing_started_at"] = job.processing_started_at or now
        elif target == DubJobState.READY:
            if update.result_location:
                location = absolutize_location(update.result_location, self._cdn_base_url)
            else:
                location = dub_track_location(
                    job.section_id, job.target_language, self._cdn_base_url
                )
            fields["result_track_location"] = location
            fields["last_error"] = None
            fields["completed_at"] = now
        elif target == DubJobState.FAILED:
            fields["last_error"] = update.error or "Remote dubbing job failed"
            fields["result_track_location"] = None
            fields["completed_at"] = now
        return fields

    def _commit(
        self,
        job_id: str,
        target: DubJobState,
        *,
        expected: Optional[DubJob] = None,
        **fields: Any,
    ) -> DubJob:
        with self._locks.job_lock(job_id):
            current = expected or self._store.get(job_id)
            validate_transition(current, target)
            fields.setdefault("updated_at", self._clock())
            updated = self._store.transition(job_id, current.state, target, **fields)
            if updated is None:
                latest = self._store.get(job_id)
                if latest.state == target:
                    return latest
                raise InvalidJobTransition(
                    job_id,
                    f"Job {job_id} changed to {latest.state.value} before "
                    f"{target.value} could be applied",
                    current_state=latest.state.value,
                    requested_state=target.value,
                )
            return updated

    # ------------------------------------------------------------------
    # Polling and timeouts
    # ------------------------------------------------------------------
    def _next_poll_attempt(self, job_id: str) -> int:
        with self._poll_attempts_lock:
            attempt = self._poll_attempts.get(job_id, 0) + 1
            self._poll_attempts[job_id] = attempt
            return attempt

    def _forget_poll_attempts(self, job_id: str) -> None:
        with self._poll_attempts_lock:
            self._poll_attempts.pop(job_id, None)

    def poll_job(self, job_id: str) -> DubJob:
        """Query the remote service once for ``job_id`` and apply the result."""

        job = self._store.get(job_id)
        if job.is_terminal or not job.remote_job_id:
            return job
        expired = self._expire_if_stale(job, self._clock())
        if expired is not None:
            return expired

        attempt = self._next_poll_attempt(job_id)
        with log_mgr.log_context(job_id=job_id, attempt=attempt):
            try:
                result = self._client.fetch_status(
                    job.remote_job_id, target_language=job.target_language
                )
            except RemoteStatusUnavailable as exc:
                logger.warning(
                    "Dubbing status poll failed",
                    extra={"event": "dubbing.poll.failed", "error": exc.message},
                )
                return job
            try:
                job = self.advance(job_id, result)
            except InvalidJobTransition as exc:
                logger.info(
                    "Discarded stale poll result",
                    extra={
                        "event": "dubbing.poll.stale",
                        "state": exc.current_state,
                        "remote_status": result.remote_status,
                    },
                )
                job = self._store.get(job_id)
        if job.is_terminal:
            self._forget_poll_attempts(job_id)
        return job

    def poll_active(self) -> List[DubJob]:
        """Expire stale jobs, then poll every submitted or processing job."""

        self.expire_stale()
        polled: List[DubJob] = []
        for job in self._store.list_active():
            if not job.remote_job_id:
                continue
            polled.append(self.poll_job(job.job_id))
        return polled

    def expire_stale(self, now: Optional[datetime] = None) -> List[DubJob]:
        """Fail every active job that has exceeded the processing ceiling."""

        current = now or self._clock()
        expired: List[DubJob] = []
        for job in self._store.list_active():
            result = self._expire_if_stale(job, current)
            if result is not None:
                expired.append(result)
        return expired

    def _expire_if_stale(self, job: DubJob, now: datetime) -> Optional[DubJob]:
        started = job.processing_started_at or job.submitted_at or job.created_at
        if now - started <= self._processing_timeout:
            return None
        timeout = JobTimedOut(
            f"Dubbing job timed out after "
            f"{int(self._processing_timeout.total_seconds())}s in {job.state.value}"
        )
        with log_mgr.log_context(job_id=job.job_id):
            logger.warning(
                "Dubbing job exceeded processing ceiling",
                extra={"event": "dubbing.job.timed_out", "state": job.state.value},
            )
            try:
                failed = self.advance(
                    job.job_id,
                    PollResult(
                        state=DubJobState.FAILED,
                        error=timeout.message,
                        remote_status="timeout",
                    ),
                )
            except InvalidJobTransition:
                return None
        self._forget_poll_attempts(job.job_id)
        return failed

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def get_job(self, job_id: str) -> DubJob:
        return self._store.get(job_id)

    def get_job_status(self, section_id: str) -> List[DubJob]:
        """Return the most recent job per language for ``section_id``."""

        latest: Dict[str, DubJob] = {}
        for job in self._store.list_for_section(section_id):
            latest[job.target_language] = job
        return [latest[language] for language in sorted(latest)]


__all__ = ["DubbingOrchestrator", "ReadyListener"]
