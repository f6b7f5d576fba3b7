"""HTTP client for the remote dubbing service."""

from __future__ import annotations

from typing import Any, Dict, Optional, Protocol

import requests

from ... import logging_manager as log_mgr
from ..errors import RemoteStatusUnavailable, RemoteSubmissionFailed
from .job import DubJobState
from .updates import PollResult, map_remote_status

logger = log_mgr.get_logger().getChild("services.dubbing.remote_client")


class RemoteDubbingClient(Protocol):
    """Opaque remote dubbing service: create a job, then report its state."""

    def create_dubbing(
        self,
        *,
        source_video_location: str,
        target_language: str,
        job_id: str,
    ) -> str:
        """Submit a dubbing request and return the remote job handle."""
        ...

    def fetch_status(self, remote_job_id: str, *, target_language: str) -> PollResult:
        ...

    def close(self) -> None:
        ...


class HttpDubbingClient:
    """ElevenLabs-style dubbing API client built on :mod:`requests`.

    ``POST /v1/dubbing`` accepts ``source_url`` and ``target_lang`` and returns a
    ``dubbing_id``; ``GET /v1/dubbing/{dubbing_id}`` reports ``status``.
    """

    def __init__(
        self,
        *,
        base_url: str,
        api_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout_seconds: float = 10.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._session = session or requests.Session()
        self._owns_session = session is None
        self._timeout = timeout_seconds

    @property
    def is_available(self) -> bool:
        return bool(self._api_key)

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._api_key:
            headers["xi-api-key"] = self._api_key
        return headers

    def create_dubbing(
        self,
        *,
        source_video_location: str,
        target_language: str,
        job_id: str,
    ) -> str:
        if not self.is_available:
            raise RemoteSubmissionFailed("Dubbing API key is not configured")
        try:
            response = self._session.post(
                f"{self._base_url}/v1/dubbing",
                data={
                    "source_url": source_video_location,
                    "target_lang": target_language,
                    "name": job_id,
                },
                headers=self._headers(),
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise RemoteSubmissionFailed(f"Dubbing request failed: {exc}") from exc

        if response.status_code >= 400:
            raise RemoteSubmissionFailed(
                f"Dubbing service rejected the request "
                f"(HTTP {response.status_code}): {_response_detail(response)}"
            )
        payload = _json_or_none(response)
        remote_id = payload.get("dubbing_id") if payload else None
        if not remote_id:
            raise RemoteSubmissionFailed("Dubbing service response is missing dubbing_id")
        logger.debug(
            "Dubbing request accepted",
            extra={
                "event": "dubbing.remote.accepted",
                "job_id": job_id,
                "remote_job_id": remote_id,
            },
        )
        return str(remote_id)

    def fetch_status(self, remote_job_id: str, *, target_language: str) -> PollResult:
        try:
            response = self._session.get(
                f"{self._base_url}/v1/dubbing/{remote_job_id}",
                headers=self._headers(),
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise RemoteStatusUnavailable(f"Status request failed: {exc}") from exc

        if response.status_code >= 400:
            raise RemoteStatusUnavailable(
                f"Status request returned HTTP {response.status_code}: "
                f"{_response_detail(response)}"
            )
        payload = _json_or_none(response)
        if payload is None:
            raise RemoteStatusUnavailable("Status response is not a JSON object")
        return parse_status_payload(payload, target_language=target_language)

    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> "HttpDubbingClient":
        return self

    def __exit__(self, *args) -> None:
        self.close()


def parse_status_payload(payload: Dict[str, Any], *, target_language: str) -> PollResult:
    """Build a :class:`PollResult` from a remote status document."""

    remote_status = payload.get("status")
    state = map_remote_status(remote_status)
    if state is None:
        raise RemoteStatusUnavailable(f"Unknown remote status {remote_status!r}")

    if state == DubJobState.READY:
        # Some responses list the finished languages; an absent target means the
        # requested language is still being produced.
        languages = payload.get("target_languages")
        if isinstance(languages, list) and languages and target_language not in languages:
            state = DubJobState.PROCESSING

    error = payload.get("error")
    if state == DubJobState.FAILED and not error:
        error = f"Remote dubbing job reported status {remote_status!r}"
    result_location = payload.get("result_location") or payload.get("resultLocation")
    return PollResult(
        state=state,
        result_location=str(result_location) if result_location else None,
        error=str(error) if error and state == DubJobState.FAILED else None,
        remote_status=str(remote_status),
    )


def _json_or_none(response: requests.Response) -> Optional[Dict[str, Any]]:
    try:
        payload = response.json()
    except ValueError:
        return None
    return payload if isinstance(payload, dict) else None


def _response_detail(response: requests.Response) -> str:
    payload = _json_or_none(response)
    if payload:
        detail = payload.get("detail") or payload.get("error") or payload.get("message")
        if detail:
            return str(detail)
    return (response.text or "").strip()[:200]


__all__ = [
    "HttpDubbingClient",
    "RemoteDubbingClient",
    "parse_status_payload",
]
