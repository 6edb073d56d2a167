"""Shared test fixtures for async database, sessions, accounts, elections, and auth tokens."""

import uuid
from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from voting_portal.core.config import Settings
from voting_portal.core.database import enable_sqlite_foreign_keys
from voting_portal.core.security import create_access_token
from voting_portal.models.base import Base
from voting_portal.models.election import Election
from voting_portal.models.user import User, UserRole
from voting_portal.schemas.election import CandidateSpec, ElectionCreateRequest
from voting_portal.schemas.voter import VoterIdentity
from voting_portal.services import election_service

ElectionFactory = Callable[..., Awaitable[Election]]


@pytest.fixture
def settings() -> Settings:
    """Test application settings."""
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        jwt_secret_key="test-secret-key-not-for-production",
        jwt_algorithm="HS256",
        jwt_access_token_expire_minutes=30,
    )


@pytest.fixture
async def async_engine(settings: Settings) -> AsyncGenerator[AsyncEngine]:
    """Create an in-memory async SQLite engine with foreign keys enforced."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    enable_sqlite_foreign_keys(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def async_session(async_engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Create a per-test async session."""
    session_factory = async_sessionmaker(async_engine, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest.fixture
async def admin_user(async_session: AsyncSession) -> User:
    """An administrator account (no voter ID)."""
    user = User(
        id=uuid.uuid4(),
        username="testadmin",
        email="admin@test.com",
        full_name="Test Admin",
        role=UserRole.ADMIN,
    )
    async_session.add(user)
    await async_session.commit()
    await async_session.refresh(user)
    return user


async def _make_voter(session: AsyncSession, username: str, voter_id: str) -> User:
    user = User(
        id=uuid.uuid4(),
        username=username,
        email=f"{username}@test.com",
        role=UserRole.VOTER,
        voter_id=voter_id,
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


@pytest.fixture
async def voter_user(async_session: AsyncSession) -> User:
    """A voter account with voter ID VOT100001."""
    return await _make_voter(async_session, "alice", "VOT100001")


@pytest.fixture
async def other_voter_user(async_session: AsyncSession) -> User:
    """A second voter account with voter ID VOT100002."""
    return await _make_voter(async_session, "bob", "VOT100002")


@pytest.fixture
def voter(voter_user: User) -> VoterIdentity:
    """Voting identity of ``voter_user``."""
    return VoterIdentity(user_id=voter_user.id, voter_id=voter_user.voter_id)


@pytest.fixture
def other_voter(other_voter_user: User) -> VoterIdentity:
    """Voting identity of ``other_voter_user``."""
    return VoterIdentity(user_id=other_voter_user.id, voter_id=other_voter_user.voter_id)


def election_request(
    *,
    title: str = "Board Election",
    description: str = "Annual board election",
    start: datetime | None = None,
    end: datetime | None = None,
    candidates: tuple[str, ...] = ("Alice Smith", "Bob Jones"),
    voter_ids: tuple[str, ...] = (),
) -> ElectionCreateRequest:
    """Build an election request whose window spans now by default."""
    now = datetime.now(UTC)
    return ElectionCreateRequest(
        title=title,
        description=description,
        start_date=start or now - timedelta(days=1),
        end_date=end or now + timedelta(days=1),
        candidates=[CandidateSpec(name=name) for name in candidates],
        voter_ids=list(voter_ids),
    )


@pytest.fixture
def election_factory(async_session: AsyncSession, admin_user: User) -> ElectionFactory:
    """Create elections through the registry service."""

    async def _create(**kwargs: object) -> Election:
        return await election_service.create_election(
            async_session,
            election_request(**kwargs),  # type: ignore[arg-type]
            created_by=admin_user.id,
        )

    return _create


@pytest.fixture
async def active_election(election_factory: ElectionFactory, voter_user: User, other_voter_user: User) -> Election:
    """An active election with two candidates and both test voters on the roster."""
    return await election_factory(voter_ids=(voter_user.voter_id, other_voter_user.voter_id))


@pytest.fixture
def admin_token(settings: Settings) -> str:
    """Generate a JWT access token for the admin user."""
    return create_access_token(
        subject="testadmin",
        role="admin",
        secret_key=settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )


@pytest.fixture
def voter_token(settings: Settings) -> str:
    """Generate a JWT access token for the first voter."""
    return create_access_token(
        subject="alice",
        role="voter",
        secret_key=settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
        voter_id="VOT100001",
    )
