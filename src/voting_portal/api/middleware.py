"""CORS, rate limiting, and security headers middleware.

Ballot submissions get their own, tighter per-client budget on top of the
general request limit so a flood of vote attempts cannot starve reads.
"""

import re
import time
from collections import defaultdict, deque
from typing import Any

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from voting_portal.core.config import Settings

_DEFAULT_TRUSTED_HEADERS = ["CF-Connecting-IP", "X-Forwarded-For", "X-Real-IP"]
_EXEMPT_SUFFIXES = ("/health", "/info")
_VOTE_PATH = re.compile(r"/elections/[^/]+/votes/?$")

_SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
}

_RATE_LIMITED_BODY = '{"detail":"Rate limit exceeded","code":"rate_limited"}'


def get_client_ip(request: Request, trusted_headers: list[str] | None = None) -> str:
    """Resolve the caller's address from proxy headers or the peer.

    Headers are checked in priority order; for X-Forwarded-For the leftmost
    entry is the client. Returns "unknown" when nothing identifies the peer.
    """
    for header in _DEFAULT_TRUSTED_HEADERS if trusted_headers is None else trusted_headers:
        value = request.headers.get(header, "").strip()
        if not value:
            continue
        if header.lower() == "x-forwarded-for":
            return value.split(",")[0].strip()
        return value

    return request.client.host if request.client else "unknown"


def is_vote_submission(request: Request) -> bool:
    """True for ``POST /elections/{id}/votes``."""
    return request.method == "POST" and _VOTE_PATH.search(request.url.path) is not None


def setup_cors(app: FastAPI, settings: Settings) -> None:
    """Allow only the configured origins, with bearer auth headers."""
    kwargs: dict[str, Any] = {
        "allow_credentials": True,
        "allow_methods": ["GET", "POST", "PATCH", "DELETE"],
        "allow_headers": ["Authorization", "Content-Type"],
        "allow_origins": settings.cors_origin_list,
    }
    app.add_middleware(CORSMiddleware, **kwargs)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to every response.

    Ballot receipts and tallies are per-user and time-sensitive, so responses
    are also marked non-cacheable unless a handler set its own Cache-Control.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)
        response.headers.update(_SECURITY_HEADERS)
        response.headers.setdefault("Cache-Control", "no-store")
        return response


class SlidingWindow:
    """Per-key request timestamps over a trailing window."""

    def __init__(self, limit: int, window_seconds: float = 60.0) -> None:
        self.limit = limit
        self.window_seconds = window_seconds
        self._hits: dict[str, deque[float]] = defaultdict(deque)

    def allow(self, key: str, now: float) -> bool:
        """Record a hit for ``key`` unless it is already at the limit."""
        hits = self._hits[key]
        while hits and hits[0] <= now - self.window_seconds:
            hits.popleft()
        if len(hits) >= self.limit:
            return False
        hits.append(now)
        return True


class RateLimitMiddleware(BaseHTTPMiddleware):
    """In-memory per-IP rate limiting over a sliding 60-second window.

    Health and info checks are exempt. Vote submissions also count against
    ``votes_per_minute`` when it is set.
    """

    def __init__(
        self,
        app: ASGIApp,
        requests_per_minute: int = 60,
        votes_per_minute: int | None = None,
        trusted_proxy_headers: list[str] | None = None,
    ) -> None:
        super().__init__(app)
        self.trusted_proxy_headers = trusted_proxy_headers
        self._requests = SlidingWindow(requests_per_minute)
        self._votes = SlidingWindow(votes_per_minute) if votes_per_minute else None

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path.endswith(_EXEMPT_SUFFIXES):
            return await call_next(request)

        client_ip = get_client_ip(request, self.trusted_proxy_headers)
        now = time.monotonic()
        if not self._requests.allow(client_ip, now):
            return Response(content=_RATE_LIMITED_BODY, status_code=429, media_type="application/json")
        if self._votes is not None and is_vote_submission(request) and not self._votes.allow(client_ip, now):
            return Response(content=_RATE_LIMITED_BODY, status_code=429, media_type="application/json")
        return await call_next(request)
