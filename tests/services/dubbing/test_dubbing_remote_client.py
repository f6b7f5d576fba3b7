from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import requests

from lingoost.services.dubbing import DubJobState, HttpDubbingClient, parse_status_payload
from lingoost.services.errors import RemoteStatusUnavailable, RemoteSubmissionFailed


def _response(status_code: int = 200, payload=None, text: str = "") -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    if payload is None:
        response.json.side_effect = ValueError("no json")
    else:
        response.json.return_value = payload
    return response


def _client(session: MagicMock, api_key: str | None = "key-123") -> HttpDubbingClient:
    return HttpDubbingClient(
        base_url="https://dubbing.test/",
        api_key=api_key,
        session=session,
        timeout_seconds=3.0,
    )


def test_create_dubbing_posts_request_and_returns_remote_id() -> None:
    session = MagicMock()
    session.post.return_value = _response(payload={"dubbing_id": "dub-9"})

    remote_id = _client(session).create_dubbing(
        source_video_location="https://videos.test/a.mp4",
        target_language="ja",
        job_id="job-1",
    )

    assert remote_id == "dub-9"
    args, kwargs = session.post.call_args
    assert args[0] == "https://dubbing.test/v1/dubbing"
    assert kwargs["data"] == {
        "source_url": "https://videos.test/a.mp4",
        "target_lang": "ja",
        "name": "job-1",
    }
    assert kwargs["headers"]["xi-api-key"] == "key-123"
    assert kwargs["timeout"] == 3.0


@pytest.mark.parametrize(
    "response",
    [
        _response(status_code=400, payload={"detail": "bad language"}),
        _response(status_code=500, text="upstream exploded"),
        _response(payload={"unexpected": True}),
    ],
)
def test_create_dubbing_failures_raise(response) -> None:
    session = MagicMock()
    session.post.return_value = response

    with pytest.raises(RemoteSubmissionFailed):
        _client(session).create_dubbing(
            source_video_location="https://videos.test/a.mp4",
            target_language="ja",
            job_id="job-1",
        )


def test_create_dubbing_requires_api_key_and_wraps_transport_errors() -> None:
    session = MagicMock()
    with pytest.raises(RemoteSubmissionFailed, match="API key"):
        _client(session, api_key=None).create_dubbing(
            source_video_location="s", target_language="ja", job_id="j"
        )
    session.post.assert_not_called()

    session.post.side_effect = requests.ConnectionError("refused")
    with pytest.raises(RemoteSubmissionFailed, match="refused"):
        _client(session).create_dubbing(source_video_location="s", target_language="ja", job_id="j")


def test_fetch_status_maps_remote_vocabulary() -> None:
    session = MagicMock()
    session.get.return_value = _response(
        payload={"status": "dubbed", "target_languages": ["ja"], "result_location": "dubs/ja.m3u8"}
    )

    result = _client(session).fetch_status("dub-9", target_language="ja")

    assert result.state == DubJobState.READY
    assert result.result_location == "dubs/ja.m3u8"
    assert result.remote_status == "dubbed"
    assert session.get.call_args[0][0] == "https://dubbing.test/v1/dubbing/dub-9"


def test_fetch_status_errors_raise_status_unavailable() -> None:
    session = MagicMock()
    session.get.side_effect = requests.Timeout("slow")
    with pytest.raises(RemoteStatusUnavailable):
        _client(session).fetch_status("dub-9", target_language="ja")

    session.get.side_effect = None
    session.get.return_value = _response(status_code=404, payload={"detail": "not found"})
    with pytest.raises(RemoteStatusUnavailable, match="404"):
        _client(session).fetch_status("dub-9", target_language="ja")


def test_parse_status_payload_edge_cases() -> None:
    pending = parse_status_payload(
        {"status": "dubbed", "target_languages": ["ko"]}, target_language="ja"
    )
    failed = parse_status_payload({"status": "failed"}, target_language="ja")
    processing = parse_status_payload({"status": "dubbing", "error": "ignored"}, target_language="ja")

    assert pending.state == DubJobState.PROCESSING
    assert failed.state == DubJobState.FAILED
    assert "failed" in failed.error
    assert processing.error is None
    with pytest.raises(RemoteStatusUnavailable):
        parse_status_payload({"status": "mystery"}, target_language="ja")


def test_client_only_closes_sessions_it_owns() -> None:
    session = MagicMock()
    with _client(session):
        pass
    session.close.assert_not_called()
