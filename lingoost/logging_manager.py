"""Structured JSON logging for the dubbing and playback services.

Every record emitted under the ``lingoost`` logger is rendered as one JSON
object per line. Identifiers bound with :func:`log_context` or
:func:`correlation_scope` (request ids, job ids, session ids) are attached to
each record produced while the binding is active, so a single job or playback
session can be followed across threads.
"""

from __future__ import annotations

import contextlib
import contextvars
import json
import logging
import os
import uuid
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Dict, Iterator, Optional

PACKAGE_ROOT = Path(__file__).resolve().parent.parent
LOG_DIR_ENV = "LINGOOST_LOG_DIR"
LOG_FILE_NAME = "lingoost.log"
DEFAULT_LOG_LEVEL = logging.INFO
MAX_LOG_BYTES = 5 * 1024 * 1024
LOG_BACKUPS = 5

_root_logger: Optional[logging.Logger] = None
_bound_fields: contextvars.ContextVar[Dict[str, object]] = contextvars.ContextVar(
    "lingoost_bound_fields", default={}
)

# Attributes every LogRecord carries; anything else arrived through ``extra``.
_RECORD_ATTRIBUTES = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}


def _log_directory() -> Path:
    configured = os.environ.get(LOG_DIR_ENV, "").strip()
    if configured:
        return Path(configured).expanduser()
    return PACKAGE_ROOT / "log"


class JSONLogFormatter(logging.Formatter):
    """Serialize a record, its bound identifiers and any ``extra`` values."""

    CONTEXT_FIELDS: tuple[str, ...] = (
        "correlation_id",
        "job_id",
        "session_id",
        "section_id",
        "event",
        "attempt",
        "state",
    )

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        document: Dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "pid": record.process,
            "thread": record.threadName,
        }
        document.update(
            (name, getattr(record, name))
            for name in self.CONTEXT_FIELDS
            if getattr(record, name, None) is not None
        )

        extra = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRIBUTES and key not in self.CONTEXT_FIELDS
        }
        if extra:
            document["extra"] = extra
        if record.exc_info:
            document["exception"] = self.formatException(record.exc_info)
        return json.dumps(document, ensure_ascii=False, default=str)


class LogContextFilter(logging.Filter):
    """Copy bound identifiers onto records that do not already set them."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        for key, value in _bound_fields.get().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


def setup_logging(log_level: int = DEFAULT_LOG_LEVEL) -> logging.Logger:
    """Attach the rotating file and stream handlers to the ``lingoost`` logger once."""
    global _root_logger

    if _root_logger is None:
        log_dir = _log_directory()
        log_dir.mkdir(parents=True, exist_ok=True)

        root = logging.getLogger("lingoost")
        root.propagate = False
        root.addFilter(LogContextFilter())
        formatter = JSONLogFormatter()
        for handler in (
            RotatingFileHandler(
                log_dir / LOG_FILE_NAME, maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUPS
            ),
            logging.StreamHandler(),
        ):
            handler.setFormatter(formatter)
            root.addHandler(handler)
        _root_logger = root

    configure_logging_level(log_level=log_level)
    return _root_logger


def get_logger() -> logging.Logger:
    """Return the ``lingoost`` logger, configuring handlers on first use."""
    if _root_logger is None:
        return setup_logging()
    return _root_logger


def configure_logging_level(debug_enabled: bool = False, log_level: Optional[int | str] = None) -> int:
    """Apply ``log_level`` (name or number), or DEBUG/INFO from ``debug_enabled``."""
    if log_level is None:
        level = logging.DEBUG if debug_enabled else DEFAULT_LOG_LEVEL
    elif isinstance(log_level, str):
        resolved = logging.getLevelName(log_level.strip().upper())
        level = resolved if isinstance(resolved, int) else DEFAULT_LOG_LEVEL
    else:
        level = log_level

    root = _root_logger or logging.getLogger("lingoost")
    root.setLevel(level)
    for handler in root.handlers:
        handler.setLevel(level)
    return level


def get_log_context() -> Dict[str, object]:
    """Return a copy of the identifiers bound to the current context."""

    return dict(_bound_fields.get())


def push_log_context(**values: object) -> contextvars.Token[Dict[str, object]]:
    """Bind the non-``None`` ``values``; pass the token to :func:`pop_log_context`."""

    merged = {**_bound_fields.get(), **{k: v for k, v in values.items() if v is not None}}
    return _bound_fields.set(merged)


def pop_log_context(token: contextvars.Token[Dict[str, object]]) -> None:
    _bound_fields.reset(token)


@contextlib.contextmanager
def log_context(**values: object) -> Iterator[None]:
    """Bind ``values`` for the duration of the ``with`` block."""

    token = push_log_context(**values)
    try:
        yield
    finally:
        pop_log_context(token)


@contextlib.contextmanager
def correlation_scope(correlation_id: Optional[str] = None) -> Iterator[str]:
    """Bind a correlation id (generated when missing) and yield it."""

    value = correlation_id or uuid.uuid4().hex
    with log_context(correlation_id=value):
        yield value


logger = get_logger()
