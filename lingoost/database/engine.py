"""Process-wide SQLAlchemy engine and transactional session scopes."""

from __future__ import annotations

import os
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from lingoost.config_manager.constants import DEFAULT_DATABASE_URL

DATABASE_URL_ENV = "DATABASE_URL"

_SERVER_POOL_OPTIONS: Dict[str, Any] = {
    "pool_size": 10,
    "max_overflow": 5,
    "pool_pre_ping": True,
    "pool_recycle": 3600,
}

_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


def get_database_url() -> str:
    return os.environ.get(DATABASE_URL_ENV, DEFAULT_DATABASE_URL)


def _is_in_memory_sqlite(url: str) -> bool:
    return ":memory:" in url or url.rstrip("/") in {"sqlite:", "sqlite+pysqlite:"}


def build_engine(url: str) -> Engine:
    """Create an engine for ``url``.

    SQLite engines are shared across threads, and in-memory databases keep a
    single connection so every session sees the same tables.
    """
    if not url.startswith("sqlite"):
        return create_engine(url, echo=False, **_SERVER_POOL_OPTIONS)
    options: Dict[str, Any] = {"connect_args": {"check_same_thread": False}}
    if _is_in_memory_sqlite(url):
        options["poolclass"] = StaticPool
    return create_engine(url, echo=False, **options)


def configure_engine(url: Optional[str] = None) -> Engine:
    """Bind the process-wide engine to ``url`` (or ``DATABASE_URL``)."""
    global _engine
    dispose_engine()
    _engine = build_engine(url or get_database_url())
    return _engine


def get_engine() -> Engine:
    global _engine
    if _engine is None:
        _engine = build_engine(get_database_url())
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(bind=get_engine(), expire_on_commit=False)
    return _session_factory


@contextmanager
def session_scope(factory: Optional[sessionmaker[Session]] = None) -> Iterator[Session]:
    """Yield a session that commits on success and rolls back on error.

    ``factory`` defaults to the process-wide session factory.
    """
    session = (factory or get_session_factory())()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def dispose_engine() -> None:
    """Close pooled connections and forget the engine and session factory."""
    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None
