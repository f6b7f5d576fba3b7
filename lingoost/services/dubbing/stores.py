"""Persistence backends for dubbing jobs."""

from __future__ import annotations

import dataclasses
import threading
from datetime import datetime, timezone
from typing import Any, ContextManager, Dict, List, Optional, Protocol

from sqlalchemy import and_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from ...database.engine import session_scope
from ...database.models.dub_job import DubJobModel
from ..errors import JobNotFound, SubmissionRejected
from .job import ACTIVE_STATES, DubJob, DubJobState

_MUTABLE_FIELDS = frozenset(
    {
        "remote_job_id",
        "result_track_location",
        "last_error",
        "submitted_at",
        "processing_started_at",
        "completed_at",
        "updated_at",
    }
)


def _check_fields(fields: Dict[str, Any]) -> None:
    unknown = set(fields) - _MUTABLE_FIELDS
    if unknown:
        raise ValueError(f"Unsupported job fields: {sorted(unknown)}")


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite drops tzinfo on the way back.
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _duplicate_error(job: DubJob, existing_job_id: Optional[str]) -> SubmissionRejected:
    return SubmissionRejected(
        f"A dubbing job for section {job.section_id} and language "
        f"{job.target_language} is already in progress",
        language=job.target_language,
        reason="duplicate",
        existing_job_id=existing_job_id,
    )


class DubJobStore(Protocol):
    """Persistence backend for dubbing jobs."""

    def create(self, job: DubJob) -> DubJob:
        """Persist ``job``; raise :class:`SubmissionRejected` if its pair is active."""
        ...

    def get(self, job_id: str) -> DubJob:
        ...

    def find_active(self, section_id: str, language: str) -> Optional[DubJob]:
        ...

    def find_by_remote_id(self, remote_job_id: str) -> Optional[DubJob]:
        ...

    def list_for_section(self, section_id: str) -> List[DubJob]:
        ...

    def list_active(self) -> List[DubJob]:
        ...

    def transition(
        self,
        job_id: str,
        expected_state: DubJobState,
        new_state: DubJobState,
        **fields: Any,
    ) -> Optional[DubJob]:
        """Move ``job_id`` to ``new_state`` only if it is still ``expected_state``."""
        ...


class InMemoryDubJobStore(DubJobStore):
    """Process-local store used by default and in tests."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._records: Dict[str, DubJob] = {}

    def create(self, job: DubJob) -> DubJob:
        with self._lock:
            existing = self._find_active_locked(job.section_id, job.target_language)
            if existing is not None:
                raise _duplicate_error(job, existing.job_id)
            self._records[job.job_id] = dataclasses.replace(job)
            return dataclasses.replace(job)

    def get(self, job_id: str) -> DubJob:
        with self._lock:
            try:
                return dataclasses.replace(self._records[job_id])
            except KeyError as exc:
                raise JobNotFound(f"Dubbing job {job_id} not found") from exc

    def _find_active_locked(self, section_id: str, language: str) -> Optional[DubJob]:
        for job in self._records.values():
            if (
                job.section_id == section_id
                and job.target_language == language
                and job.state in ACTIVE_STATES
            ):
                return job
        return None

    def find_active(self, section_id: str, language: str) -> Optional[DubJob]:
        with self._lock:
            job = self._find_active_locked(section_id, language)
            return dataclasses.replace(job) if job is not None else None

    def find_by_remote_id(self, remote_job_id: str) -> Optional[DubJob]:
        with self._lock:
            for job in self._records.values():
                if job.remote_job_id == remote_job_id:
                    return dataclasses.replace(job)
        return None

    def list_for_section(self, section_id: str) -> List[DubJob]:
        with self._lock:
            jobs = [
                dataclasses.replace(job)
                for job in self._records.values()
                if job.section_id == section_id
            ]
        return sorted(jobs, key=lambda job: job.created_at)

    def list_active(self) -> List[DubJob]:
        with self._lock:
            jobs = [
                dataclasses.replace(job)
                for job in self._records.values()
                if job.state in ACTIVE_STATES
            ]
        return sorted(jobs, key=lambda job: job.created_at)

    def transition(
        self,
        job_id: str,
        expected_state: DubJobState,
        new_state: DubJobState,
        **fields: Any,
    ) -> Optional[DubJob]:
        _check_fields(fields)
        with self._lock:
            job = self._records.get(job_id)
            if job is None:
                raise JobNotFound(f"Dubbing job {job_id} not found")
            if job.state != expected_state:
                return None
            updated = dataclasses.replace(job, state=new_state, **fields)
            self._records[job_id] = updated
            return dataclasses.replace(updated)


class SqlAlchemyDubJobStore(DubJobStore):
    """Database-backed store; transitions are ``UPDATE ... WHERE state = ?``."""

    def __init__(self, session_factory: Optional[sessionmaker[Session]] = None) -> None:
        self._session_factory = session_factory

    def _session(self) -> ContextManager[Session]:
        return session_scope(self._session_factory)

    def create(self, job: DubJob) -> DubJob:
        try:
            with self._session() as session:
                existing = self._select_active(session, job.section_id, job.target_language)
                if existing is not None:
                    raise _duplicate_error(job, existing.id)
                model = DubJobModel(
                    id=job.job_id,
                    section_id=job.section_id,
                    source_video_location=job.source_video_location,
                    target_language=job.target_language,
                    state=job.state.value,
                    remote_job_id=job.remote_job_id,
                    result_track_location=job.result_track_location,
                    last_error=job.last_error,
                    submitted_at=job.submitted_at,
                    processing_started_at=job.processing_started_at,
                    completed_at=job.completed_at,
                    created_at=job.created_at,
                    updated_at=job.updated_at or job.created_at,
                )
                session.add(model)
                session.flush()
                return self._model_to_job(model)
        except IntegrityError as exc:
            raise _duplicate_error(job, None) from exc

    def get(self, job_id: str) -> DubJob:
        with self._session() as session:
            model = session.get(DubJobModel, job_id)
            if model is None:
                raise JobNotFound(f"Dubbing job {job_id} not found")
            return self._model_to_job(model)

    @staticmethod
    def _select_active(
        session: Session, section_id: str, language: str
    ) -> Optional[DubJobModel]:
        return session.execute(
            select(DubJobModel).where(
                and_(
                    DubJobModel.section_id == section_id,
                    DubJobModel.target_language == language,
                    DubJobModel.state.in_([state.value for state in ACTIVE_STATES]),
                )
            )
        ).scalars().first()

    def find_active(self, section_id: str, language: str) -> Optional[DubJob]:
        with self._session() as session:
            model = self._select_active(session, section_id, language)
            return self._model_to_job(model) if model is not None else None

    def find_by_remote_id(self, remote_job_id: str) -> Optional[DubJob]:
        with self._session() as session:
            model = session.execute(
                select(DubJobModel).where(DubJobModel.remote_job_id == remote_job_id)
            ).scalars().first()
            return self._model_to_job(model) if model is not None else None

    def list_for_section(self, section_id: str) -> List[DubJob]:
        with self._session() as session:
            models = session.execute(
                select(DubJobModel)
                .where(DubJobModel.section_id == section_id)
                .order_by(DubJobModel.created_at)
            ).scalars().all()
            return [self._model_to_job(model) for model in models]

    def list_active(self) -> List[DubJob]:
        with self._session() as session:
            models = session.execute(
                select(DubJobModel)
                .where(DubJobModel.state.in_([state.value for state in ACTIVE_STATES]))
                .order_by(DubJobModel.created_at)
            ).scalars().all()
            return [self._model_to_job(model) for model in models]

    def transition(
        self,
        job_id: str,
        expected_state: DubJobState,
        new_state: DubJobState,
        **fields: Any,
    ) -> Optional[DubJob]:
        _check_fields(fields)
        with self._session() as session:
            result = session.execute(
                update(DubJobModel)
                .where(
                    and_(
                        DubJobModel.id == job_id,
                        DubJobModel.state == expected_state.value,
                    )
                )
                .values(state=new_state.value, **fields)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                if session.get(DubJobModel, job_id) is None:
                    raise JobNotFound(f"Dubbing job {job_id} not found")
                return None
            session.flush()
            model = session.get(DubJobModel, job_id, populate_existing=True)
            return self._model_to_job(model)

    @staticmethod
    def _model_to_job(model: DubJobModel) -> DubJob:
        return DubJob(
            job_id=model.id,
            section_id=model.section_id,
            source_video_location=model.source_video_location,
            target_language=model.target_language,
            state=DubJobState(model.state),
            created_at=_as_utc(model.created_at),
            remote_job_id=model.remote_job_id,
            result_track_location=model.result_track_location,
            last_error=model.last_error,
            submitted_at=_as_utc(model.submitted_at),
            processing_started_at=_as_utc(model.processing_started_at),
            completed_at=_as_utc(model.completed_at),
            updated_at=_as_utc(model.updated_at),
        )


__all__ = ["DubJobStore", "InMemoryDubJobStore", "SqlAlchemyDubJobStore"]
