"""Versioned route tree and the HTTP middleware stack."""

from fastapi import APIRouter, FastAPI

from voting_portal.api.middleware import RateLimitMiddleware, SecurityHeadersMiddleware, setup_cors
from voting_portal.core.config import Settings


def create_router(settings: Settings) -> APIRouter:
    """Mount health, election, voting and voter routes under ``api_v1_prefix``."""
    from voting_portal.api.v1.elections import elections_router
    from voting_portal.api.v1.health import health_router
    from voting_portal.api.v1.voters import voters_router
    from voting_portal.api.v1.voting import voting_router

    root_router = APIRouter(prefix=settings.api_v1_prefix)
    for router in (health_router, elections_router, voting_router, voters_router):
        root_router.include_router(router)
    return root_router


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Install CORS, security headers and per-client rate limits.

    Starlette runs the last-added middleware first, so rate limiting sees a
    request before anything else does.
    """
    setup_cors(app, settings)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        RateLimitMiddleware,
        requests_per_minute=settings.rate_limit_per_minute,
        votes_per_minute=settings.vote_rate_limit_per_minute,
        trusted_proxy_headers=settings.trusted_proxy_header_list,
    )
