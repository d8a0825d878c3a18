"""Tests for request context propagation."""

from fastapi.testclient import TestClient

from src.core.context import (
    clear_context,
    get_context,
    set_request_id,
    set_trace_id,
    set_user_id,
)
from src.core.middleware import RequestContextMiddleware


def test_context_drops_empty_values() -> None:
    clear_context()
    set_request_id("req-1")

    assert get_context() == {"request_id": "req-1"}


def test_context_carries_user_and_trace() -> None:
    set_request_id("req-2")
    set_user_id("user-9")
    set_trace_id("trace-3")

    assert get_context() == {
        "request_id": "req-2",
        "user_id": "user-9",
        "trace_id": "trace-3",
    }
    clear_context()
    assert get_context() == {}


def test_request_id_is_echoed(client: TestClient) -> None:
    response = client.get("/health/live", headers={"X-Request-ID": "abc-123"})

    assert response.headers["X-Request-ID"] == "abc-123"


def test_request_id_in_error_envelope(client: TestClient) -> None:
    response = client.get("/v1/access/my", headers={"X-Request-ID": "abc-456"})

    assert response.status_code == 401
    assert response.json()["request_id"] == "abc-456"


def test_traceparent_parsing() -> None:
    header = "00-4bf92f3577b34da6a3ce929d0e0e4736-00f067aa0ba902b7-01"

    assert (
        RequestContextMiddleware._extract_traceparent(header)
        == "4bf92f3577b34da6a3ce929d0e0e4736"
    )
    assert RequestContextMiddleware._extract_traceparent(None) is None
