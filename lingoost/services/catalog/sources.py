"""Candidate sources of available languages for a section."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, List, Optional, Protocol, Sequence

from ..dubbing.job import DubJobState

if TYPE_CHECKING:
    from ..dubbing.stores import DubJobStore

READY_TRACK_STATUSES = frozenset({"ready", "completed", "dubbed"})


@dataclass(frozen=True)
class DatabaseTrackRecord:
    """A stored dub track as the content database reports it."""

    language: str
    status: str
    location: Optional[str] = None

    @property
    def is_ready(self) -> bool:
        return (self.status or "").strip().lower() in READY_TRACK_STATUSES


class DetectedTrack(Protocol):
    """Shape of an engine-reported track as the catalog consumes it."""

    language: Optional[str]
    label: Optional[str]
    location: Optional[str]


class DatabaseTrackSource(Protocol):
    def list_tracks(self, section_id: str) -> Sequence[DatabaseTrackRecord]:
        ...


class JobStoreTrackSource:
    """Expose the latest dubbing job per language as database track records."""

    def __init__(self, store: "DubJobStore") -> None:
        self._store = store

    def list_tracks(self, section_id: str) -> List[DatabaseTrackRecord]:
        latest: Dict[str, DatabaseTrackRecord] = {}
        for job in self._store.list_for_section(section_id):
            if job.state != DubJobState.READY:
                continue
            latest[job.target_language] = DatabaseTrackRecord(
                language=job.target_language,
                status=job.state.value,
                location=job.result_track_location,
            )
        return list(latest.values())


class StaticTrackSource:
    """Fixed per-section records, used for seeding and in tests."""

    def __init__(self, records: Optional[Dict[str, Sequence[DatabaseTrackRecord]]] = None) -> None:
        self._records = {key: list(value) for key, value in (records or {}).items()}

    def list_tracks(self, section_id: str) -> List[DatabaseTrackRecord]:
        return list(self._records.get(section_id, []))


__all__ = [
    "DatabaseTrackRecord",
    "DatabaseTrackSource",
    "DetectedTrack",
    "JobStoreTrackSource",
    "READY_TRACK_STATUSES",
    "StaticTrackSource",
]
