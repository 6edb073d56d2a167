"""Tests for CORS, security headers, and rate limiting middleware."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from starlette.requests import Request

from voting_portal.api.middleware import (
    RateLimitMiddleware,
    SecurityHeadersMiddleware,
    SlidingWindow,
    get_client_ip,
    is_vote_submission,
)


def _create_test_app() -> FastAPI:
    """Create a minimal FastAPI app for middleware testing."""
    app = FastAPI()

    @app.get("/test")
    async def test_route() -> dict:
        return {"ok": True}

    @app.get("/api/v1/health")
    async def health() -> dict:
        return {"status": "healthy"}

    @app.post("/api/v1/elections/{election_id}/votes")
    async def vote(election_id: str) -> dict:
        return {"accepted": True}

    return app


def _request(
    headers: dict[str, str],
    client: tuple[str, int] | None = ("10.0.0.1", 1234),
    method: str = "GET",
    path: str = "/",
) -> Request:
    scope = {
        "type": "http",
        "method": method,
        "path": path,
        "headers": [(k.lower().encode(), v.encode()) for k, v in headers.items()],
        "client": client,
    }
    return Request(scope)


class TestSecurityHeadersMiddleware:
    """Tests for SecurityHeadersMiddleware."""

    @pytest.fixture
    def client(self) -> TestClient:
        app = _create_test_app()
        app.add_middleware(SecurityHeadersMiddleware)
        return TestClient(app)

    def test_security_headers_present(self, client: TestClient) -> None:
        response = client.get("/test")
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
        assert response.headers["Referrer-Policy"] == "no-referrer"
        assert "max-age=31536000" in response.headers["Strict-Transport-Security"]

    def test_responses_not_cacheable(self, client: TestClient) -> None:
        response = client.get("/test")
        assert response.headers["Cache-Control"] == "no-store"


class TestRateLimitMiddleware:
    """Tests for RateLimitMiddleware."""

    @pytest.fixture
    def client(self) -> TestClient:
        app = _create_test_app()
        app.add_middleware(RateLimitMiddleware, requests_per_minute=3)
        return TestClient(app)

    def test_request_over_limit_returns_429(self, client: TestClient) -> None:
        for _ in range(3):
            assert client.get("/test").status_code == 200

        response = client.get("/test")
        assert response.status_code == 429
        assert response.json()["code"] == "rate_limited"

    def test_health_is_exempt(self, client: TestClient) -> None:
        for _ in range(5):
            assert client.get("/api/v1/health").status_code == 200

    def test_vote_submissions_have_own_budget(self) -> None:
        app = _create_test_app()
        app.add_middleware(RateLimitMiddleware, requests_per_minute=10, votes_per_minute=2)
        client = TestClient(app)

        assert client.post("/api/v1/elections/e1/votes").status_code == 200
        assert client.post("/api/v1/elections/e2/votes").status_code == 200
        assert client.post("/api/v1/elections/e3/votes").status_code == 429
        assert client.get("/test").status_code == 200


class TestSlidingWindow:
    """Tests for the per-key sliding window."""

    def test_limit_per_key(self) -> None:
        window = SlidingWindow(limit=2)
        assert window.allow("a", 0.0)
        assert window.allow("a", 1.0)
        assert not window.allow("a", 2.0)
        assert window.allow("b", 2.0)

    def test_old_hits_expire(self) -> None:
        window = SlidingWindow(limit=1, window_seconds=60.0)
        assert window.allow("a", 0.0)
        assert not window.allow("a", 59.0)
        assert window.allow("a", 60.0)


class TestIsVoteSubmission:
    """Tests for vote path detection."""

    @pytest.mark.parametrize(
        ("method", "path", "expected"),
        [
            ("POST", "/api/v1/elections/abc/votes", True),
            ("GET", "/api/v1/elections/abc/votes", False),
            ("POST", "/api/v1/elections/abc/candidates", False),
            ("POST", "/api/v1/elections", False),
        ],
    )
    def test_detection(self, method: str, path: str, expected: bool) -> None:
        assert is_vote_submission(_request({}, method=method, path=path)) is expected


class TestGetClientIp:
    """Tests for client IP resolution."""

    def test_forwarded_for_uses_leftmost(self) -> None:
        request = _request({"X-Forwarded-For": "203.0.113.5, 10.0.0.2"})
        assert get_client_ip(request) == "203.0.113.5"

    def test_header_priority(self) -> None:
        request = _request({"X-Real-IP": "198.51.100.7", "CF-Connecting-IP": "192.0.2.9"})
        assert get_client_ip(request) == "192.0.2.9"

    def test_falls_back_to_peer(self) -> None:
        assert get_client_ip(_request({})) == "10.0.0.1"

    def test_no_trusted_headers(self) -> None:
        request = _request({"X-Forwarded-For": "203.0.113.5"})
        assert get_client_ip(request, trusted_headers=[]) == "10.0.0.1"

    def test_unknown_without_client(self) -> None:
        assert get_client_ip(_request({}, client=None)) == "unknown"
