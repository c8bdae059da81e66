"""Tests for middleware."""

import logging
from http import HTTPStatus
from unittest.mock import MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from todo_api.constants import REQUEST_ID_HEADER, RETRY_AFTER_HEADER
from todo_api.middleware import (
    RateLimitMiddleware,
    RequestIDMiddleware,
    SecurityHeadersMiddleware,
)
from todo_api.rate_limit import MemoryBucketStore, RedisBucketStore


def test_request_id_middleware(client: TestClient) -> None:
    """Test that X-Request-ID header is added to responses."""
    response = client.get("/health/live")
    assert response.status_code == HTTPStatus.OK
    assert REQUEST_ID_HEADER in response.headers
    assert len(response.headers[REQUEST_ID_HEADER]) > 0


def test_request_id_is_unique(client: TestClient) -> None:
    """Test that each request gets a unique request ID."""
    response1 = client.get("/health/live")
    response2 = client.get("/health/live")

    assert response1.headers[REQUEST_ID_HEADER] != response2.headers[REQUEST_ID_HEADER]


def test_request_id_in_error_body(client: TestClient) -> None:
    """Test error envelopes carry the same request id as the header."""
    response = client.get("/tasks")
    assert response.status_code == HTTPStatus.UNAUTHORIZED
    assert response.json()["request_id"] == response.headers[REQUEST_ID_HEADER]


def test_security_headers(client: TestClient) -> None:
    """Test security headers are set on every response."""
    response = client.get("/health/live")
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"
    assert response.headers["Referrer-Policy"] == "strict-origin-when-cross-origin"
    assert response.headers["X-XSS-Protection"] == "1; mode=block"
    assert "Strict-Transport-Security" not in response.headers


def test_security_headers_hsts() -> None:
    """Test HSTS is only sent when enabled."""
    app = FastAPI()
    app.add_middleware(SecurityHeadersMiddleware, hsts=True, hsts_max_age=60)

    @app.get("/")
    def index() -> dict[str, str]:
        return {}

    response = TestClient(app).get("/")
    assert response.headers["Strict-Transport-Security"] == (
        "max-age=60; includeSubDomains"
    )


def test_cors_preflight(client: TestClient) -> None:
    """Test CORS preflight requests are answered."""
    response = client.options(
        "/tasks",
        headers={
            "Origin": "https://app.example.org",
            "Access-Control-Request-Method": "GET",
        },
    )
    assert response.status_code == HTTPStatus.OK
    assert response.headers["access-control-allow-origin"] == "*"


def test_request_logging(client: TestClient, caplog: pytest.LogCaptureFixture) -> None:
    """Test requests are logged with method, path and status."""
    with caplog.at_level(logging.INFO, logger="todo_api.middleware"):
        client.get("/health/live")

    records = [r for r in caplog.records if r.name == "todo_api.middleware"]
    assert records
    assert records[-1].http_method == "GET"
    assert records[-1].http_path == "/health/live"
    assert records[-1].http_status == HTTPStatus.OK


@pytest.fixture
def limited_app() -> FastAPI:
    """App with a 2 request burst and a negligible refill rate."""
    app = FastAPI()
    app.add_middleware(RateLimitMiddleware, capacity=2, refill_rate=0.01)
    app.add_middleware(RequestIDMiddleware)
    app.state.rate_limit_store = MemoryBucketStore()

    @app.get("/ping")
    def ping() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/health/live")
    def live() -> dict[str, str]:
        return {"status": "healthy"}

    return app


def test_rate_limit_rejects_after_burst(limited_app: FastAPI) -> None:
    """Test the third request within the burst window is rejected with 429."""
    client = TestClient(limited_app)

    assert client.get("/ping").status_code == HTTPStatus.OK
    assert client.get("/ping").status_code == HTTPStatus.OK

    response = client.get("/ping")
    assert response.status_code == HTTPStatus.TOO_MANY_REQUESTS
    assert int(response.headers[RETRY_AFTER_HEADER]) >= 1
    data = response.json()
    assert data["error"] == "Too many requests"
    assert data["code"] == "TOO_MANY_REQUESTS"
    assert data["request_id"] == response.headers[REQUEST_ID_HEADER]


def test_rate_limit_exempts_health(limited_app: FastAPI) -> None:
    """Test probes are never throttled."""
    client = TestClient(limited_app)
    for _ in range(5):
        assert client.get("/health/live").status_code == HTTPStatus.OK


def test_rate_limit_without_store_passes_through(limited_app: FastAPI) -> None:
    """Test requests pass when no bucket store is configured."""
    limited_app.state.rate_limit_store = None
    client = TestClient(limited_app)
    for _ in range(5):
        assert client.get("/ping").status_code == HTTPStatus.OK


def test_rate_limit_contended_redis_lock_admits(limited_app: FastAPI) -> None:
    """Test a redis lock that cannot be taken in time does not fail the request."""
    redis_client = MagicMock()
    redis_client.get.return_value = None
    redis_client.lock.return_value.acquire.return_value = False
    limited_app.state.rate_limit_store = RedisBucketStore(redis_client)
    client = TestClient(limited_app)

    response = client.get("/ping")

    assert response.status_code == HTTPStatus.OK
    redis_client.setex.assert_called_once()
