"""Remembered per-viewer, per-section language preferences."""

from __future__ import annotations

import threading
from datetime import datetime, timezone
from typing import ContextManager, Dict, Optional, Protocol, Tuple

from sqlalchemy import and_, select
from sqlalchemy.orm import Session, sessionmaker

from ...database.engine import session_scope
from ...database.models.preference import LanguagePreferenceModel


class LanguagePreferenceStore(Protocol):
    def get(self, viewer_id: str, section_id: str) -> Optional[str]:
        ...

    def set(self, viewer_id: str, section_id: str, language: str) -> None:
        ...


class InMemoryLanguagePreferenceStore(LanguagePreferenceStore):
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: Dict[Tuple[str, str], str] = {}

    def get(self, viewer_id: str, section_id: str) -> Optional[str]:
        with self._lock:
            return self._records.get((viewer_id, section_id))

    def set(self, viewer_id: str, section_id: str, language: str) -> None:
        with self._lock:
            self._records[(viewer_id, section_id)] = language


class SqlAlchemyLanguagePreferenceStore(LanguagePreferenceStore):
    """Persist preferences in the ``language_preferences`` table."""

    def __init__(self, session_factory: Optional[sessionmaker[Session]] = None) -> None:
        self._session_factory = session_factory

    def _session(self) -> ContextManager[Session]:
        return session_scope(self._session_factory)

    @staticmethod
    def _select(session: Session, viewer_id: str, section_id: str) -> Optional[LanguagePreferenceModel]:
        return session.execute(
            select(LanguagePreferenceModel).where(
                and_(
                    LanguagePreferenceModel.viewer_id == viewer_id,
                    LanguagePreferenceModel.section_id == section_id,
                )
            )
        ).scalar_one_or_none()

    def get(self, viewer_id: str, section_id: str) -> Optional[str]:
        with self._session() as session:
            model = self._select(session, viewer_id, section_id)
            return model.language if model is not None else None

    def set(self, viewer_id: str, section_id: str, language: str) -> None:
        now = datetime.now(timezone.utc)
        with self._session() as session:
            model = self._select(session, viewer_id, section_id)
            if model is None:
                session.add(
                    LanguagePreferenceModel(
                        viewer_id=viewer_id,
                        section_id=section_id,
                        language=language,
                        updated_at=now,
                    )
                )
            else:
                model.language = language
                model.updated_at = now


__all__ = [
    "InMemoryLanguagePreferenceStore",
    "LanguagePreferenceStore",
    "SqlAlchemyLanguagePreferenceStore",
]
