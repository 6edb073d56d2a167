"""Fixtures for API integration tests: app wired to the test database and bearer headers."""

from collections.abc import AsyncGenerator

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from voting_portal.api.errors import register_exception_handlers
from voting_portal.api.v1.elections import elections_router
from voting_portal.api.v1.health import health_router
from voting_portal.api.v1.voters import voters_router
from voting_portal.api.v1.voting import voting_router
from voting_portal.core.config import Settings, get_settings
from voting_portal.core.dependencies import get_async_session
from voting_portal.core.security import create_access_token
from voting_portal.models.user import User


@pytest.fixture
def app(async_session: AsyncSession, settings: Settings) -> FastAPI:
    """Minimal app with the v1 routers and the test session injected."""
    app = FastAPI()
    register_exception_handlers(app)
    for router in (health_router, elections_router, voting_router, voters_router):
        app.include_router(router, prefix="/api/v1")

    async def _session() -> AsyncGenerator[AsyncSession]:
        yield async_session

    app.dependency_overrides[get_async_session] = _session
    app.dependency_overrides[get_settings] = lambda: settings
    return app


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def admin_headers(admin_user: User, admin_token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {admin_token}"}


@pytest.fixture
def voter_headers(voter_user: User, voter_token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {voter_token}"}


@pytest.fixture
def other_voter_headers(other_voter_user: User, settings: Settings) -> dict[str, str]:
    token = create_access_token(
        subject=other_voter_user.username,
        role="voter",
        secret_key=settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
        voter_id=other_voter_user.voter_id,
    )
    return {"Authorization": f"Bearer {token}"}
