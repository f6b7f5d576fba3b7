"""SQLAlchemy database layer for the dubbing service.

Provides the shared engine, session factory, and declarative base
used by the database-backed job and preference stores.
"""

from .base import Base
from .engine import (
    build_engine,
    configure_engine,
    dispose_engine,
    get_engine,
    get_session_factory,
    session_scope,
)

__all__ = [
    "Base",
    "build_engine",
    "configure_engine",
    "dispose_engine",
    "get_engine",
    "get_session_factory",
    "session_scope",
]
