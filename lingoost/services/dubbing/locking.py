"""Keyed locks that serialize work on one dubbing job or one (section, language) pair."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Iterator


@dataclass
class _KeyedLock:
    lock: threading.RLock = field(default_factory=threading.RLock)
    holders: int = 0


class JobLockManager:
    """Hand out one re-entrant lock per key.

    A key's lock lives only while some thread holds or waits for it, so the
    table stays as small as the number of jobs currently being advanced.

        locks = JobLockManager()
        with locks.job_lock(job_id):
            ...  # callback and poll handling for this job never interleave
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._entries: Dict[str, _KeyedLock] = {}

    @contextmanager
    def job_lock(self, key: str) -> Iterator[None]:
        with self._guard:
            entry = self._entries.setdefault(key, _KeyedLock())
            entry.holders += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._guard:
                entry.holders -= 1
                if entry.holders == 0:
                    self._entries.pop(key, None)

    @property
    def active_lock_count(self) -> int:
        with self._guard:
            return len(self._entries)


def pair_lock_key(section_id: str, language: str) -> str:
    return f"pair:{section_id}:{language}"


__all__ = ["JobLockManager", "pair_lock_key"]
