"""Tests for the request context middleware.

Every response gets an X-Request-ID header (generated or echoed) and every
request produces one summary log line.
"""

from __future__ import annotations

import logging
import uuid

import pytest
from fastapi.testclient import TestClient

from app.middleware.request_context import _access_level, install_request_id_filter


def test_request_id_generated_when_not_provided(client: TestClient) -> None:
    resp = client.get("/health")
    req_id = resp.headers.get("x-request-id")
    assert req_id is not None
    uuid.UUID(req_id)  # raises ValueError if invalid


def test_request_id_echoed_when_provided(client: TestClient) -> None:
    custom_id = "my-custom-request-id-123"
    resp = client.get("/health", headers={"X-Request-ID": custom_id})
    assert resp.headers.get("x-request-id") == custom_id


def test_request_id_present_on_error_responses(client: TestClient) -> None:
    resp = client.get("/api/users/404")
    assert resp.status_code == 404
    assert resp.headers.get("x-request-id") is not None


def test_summary_line_logged_per_request(
    client: TestClient, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.INFO, logger="app.middleware.request_context"):
        client.get("/api/users", headers={"X-Request-ID": "trace-me"})

    records = [r for r in caplog.records if r.name == "app.middleware.request_context"]
    assert len(records) == 1
    assert "GET /api/users -> 200" in records[0].getMessage()
    assert records[0].request_id == "trace-me"  # type: ignore[attr-defined]


def test_server_errors_are_logged_at_error_level() -> None:
    assert _access_level(500) == logging.ERROR
    assert _access_level(503) == logging.ERROR
    assert _access_level(404) == logging.INFO
    assert _access_level(201) == logging.INFO


def test_filter_keeps_an_explicit_request_id() -> None:
    target = logging.getLogger("tests.request_id_filter")
    install_request_id_filter(target)
    install_request_id_filter(target)
    assert len(target.filters) == 1

    record = logging.LogRecord("x", logging.INFO, __file__, 1, "m", None, None)
    record.request_id = "explicit"  # type: ignore[attr-defined]
    target.filters[0].filter(record)
    assert record.request_id == "explicit"  # type: ignore[attr-defined]

    bare = logging.LogRecord("x", logging.INFO, __file__, 1, "m", None, None)
    target.filters[0].filter(bare)
    assert bare.request_id == "-"  # type: ignore[attr-defined]
