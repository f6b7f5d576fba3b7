"""Test doubles for the dubbing orchestrator: a manual clock and a scripted remote client."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Union

from lingoost.services.dubbing import DubJobState, PollResult
from lingoost.services.errors import RemoteSubmissionFailed


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self) -> None:
        self.now = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class FakeDubbingClient:
    """Records create calls and serves canned status results."""

    def __init__(self) -> None:
        self.created: List[Dict[str, str]] = []
        self.polled: List[str] = []
        self.fail_languages: set[str] = set()
        self.statuses: Dict[str, Union[PollResult, Exception]] = {}
        self.closed = False

    def create_dubbing(self, *, source_video_location: str, target_language: str, job_id: str) -> str:
        if target_language in self.fail_languages:
            raise RemoteSubmissionFailed(f"remote refused {target_language}")
        remote_id = f"remote-{len(self.created) + 1}"
        self.created.append(
            {
                "remote_id": remote_id,
                "source": source_video_location,
                "language": target_language,
                "job_id": job_id,
            }
        )
        return remote_id

    def fetch_status(self, remote_job_id: str, *, target_language: str) -> PollResult:
        self.polled.append(remote_job_id)
        result: Optional[Union[PollResult, Exception]] = self.statuses.get(remote_job_id)
        if isinstance(result, Exception):
            raise result
        if result is None:
            return PollResult(state=DubJobState.PROCESSING, remote_status="dubbing")
        return result

    def close(self) -> None:
        self.closed = True
