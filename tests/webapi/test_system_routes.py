from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from lingoost.webapi.application import REQUEST_ID_HEADER, _parse_cors_origins, create_app

pytestmark = pytest.mark.webapi


def test_health_reports_ok() -> None:
    with TestClient(create_app()) as client:
        response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_request_id_is_echoed_or_generated() -> None:
    with TestClient(create_app()) as client:
        echoed = client.get("/health", headers={REQUEST_ID_HEADER: "req-123"})
        generated = client.get("/health")

    assert echoed.headers[REQUEST_ID_HEADER] == "req-123"
    assert len(generated.headers[REQUEST_ID_HEADER]) == 32


def test_service_errors_carry_request_id() -> None:
    with TestClient(create_app()) as client:
        response = client.get(
            "/api/playback/sessions/missing", headers={REQUEST_ID_HEADER: "req-404"}
        )

    assert response.status_code == 404
    assert response.json()["error"] == "session_not_found"
    assert response.headers[REQUEST_ID_HEADER] == "req-404"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (None, (["http://localhost", "http://127.0.0.1", "http://localhost:3000", "http://127.0.0.1:3000"], True)),
        ("", ([], False)),
        ("https://a.test, https://b.test", (["https://a.test", "https://b.test"], True)),
        ("https://a.test *", (["*"], False)),
    ],
)
def test_cors_origins_parsing(raw, expected) -> None:
    assert _parse_cors_origins(raw) == expected
