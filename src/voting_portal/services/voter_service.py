"""Voter account service.

Registers voters with generated voter identifiers, creates admin accounts,
and builds voter-facing views: open elections still awaiting the voter's
ballot, and the voter's ballot history.
"""

import secrets
import uuid
from datetime import UTC, datetime

from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from voting_portal.core.errors import ValidationError, VoterIdGenerationError
from voting_portal.models.ballot import Ballot
from voting_portal.models.candidate import Candidate
from voting_portal.models.election import Election, ElectionStatus, EligibleVoter
from voting_portal.models.user import User, UserRole
from voting_portal.schemas.voter import BallotHistoryItem, VoterIdentity, VoterRegisterRequest


def _random_voter_id(prefix: str) -> str:
    """Return ``prefix`` followed by six random digits (never a leading zero)."""
    return f"{prefix}{100000 + secrets.randbelow(900000)}"


async def generate_voter_id(session: AsyncSession, prefix: str = "VOT", max_attempts: int = 5) -> str:
    """Find an unused voter identifier.

    Args:
        session: Async database session.
        prefix: Identifier prefix.
        max_attempts: Candidates to try before giving up.

    Returns:
        An identifier not assigned to any user.

    Raises:
        VoterIdGenerationError: If every attempt collided.
    """
    for _ in range(max_attempts):
        candidate = _random_voter_id(prefix)
        existing = await session.execute(select(User.id).where(User.voter_id == candidate))
        if existing.first() is None:
            return candidate
    msg = "Failed to generate a unique voter ID."
    raise VoterIdGenerationError(msg)


async def _ensure_unique_account(session: AsyncSession, username: str, email: str) -> None:
    # Emails are stored lower-cased.
    existing = await session.execute(select(User.id).where((User.username == username) | (User.email == email)))
    if existing.first() is not None:
        msg = "Username or email already exists."
        raise ValidationError(msg)


async def _commit_account(session: AsyncSession, user: User) -> None:
    """Insert ``user``; a unique-key race with another registration becomes a ValidationError."""
    session.add(user)
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        msg = "Username, email or voter ID already exists."
        raise ValidationError(msg) from exc


async def register_voter(
    session: AsyncSession,
    request: VoterRegisterRequest,
    *,
    voter_id_prefix: str = "VOT",
    max_attempts: int = 5,
) -> User:
    """Create a voter account with a freshly generated voter identifier.

    Raises:
        ValidationError: If the username or email is taken.
        VoterIdGenerationError: If no unused voter id could be generated.
    """
    email = str(request.email).lower()
    await _ensure_unique_account(session, request.username, email)
    voter_id = await generate_voter_id(session, voter_id_prefix, max_attempts)
    user = User(
        username=request.username,
        email=email,
        full_name=request.full_name,
        role=UserRole.VOTER,
        voter_id=voter_id,
    )
    await _commit_account(session, user)
    await session.refresh(user)
    logger.info(f"Registered voter {user.username} with voter ID {voter_id}")
    return user


async def create_admin(session: AsyncSession, username: str, email: str, full_name: str | None = None) -> User:
    """Create an administrator account (no voter identifier).

    Raises:
        ValidationError: If the username or email is taken.
    """
    email = email.lower()
    await _ensure_unique_account(session, username, email)
    user = User(username=username, email=email, full_name=full_name, role=UserRole.ADMIN)
    await _commit_account(session, user)
    await session.refresh(user)
    logger.info(f"Created admin {username}")
    return user


async def get_user_by_username(session: AsyncSession, username: str) -> User | None:
    """Get a user by username."""
    result = await session.execute(select(User).where(User.username == username))
    return result.scalar_one_or_none()


async def get_user_by_voter_id(session: AsyncSession, voter_id: str) -> User | None:
    """Get a user by voter identifier (trimmed exact match)."""
    result = await session.execute(select(User).where(User.voter_id == voter_id.strip()))
    return result.scalar_one_or_none()


async def list_voters(session: AsyncSession, page: int = 1, page_size: int = 20) -> tuple[list[User], int]:
    """List voter accounts with pagination.

    Returns:
        Tuple of (voters, total count).
    """
    base_filter = User.role == UserRole.VOTER
    total = (await session.execute(select(func.count(User.id)).where(base_filter))).scalar_one()
    offset = (page - 1) * page_size
    result = await session.execute(
        select(User).where(base_filter).order_by(User.created_at, User.username).offset(offset).limit(page_size)
    )
    return list(result.scalars().all()), total


def identity_for(user: User) -> VoterIdentity:
    """Build the voting-engine identity of a voter account.

    Raises:
        ValidationError: If the account has no voter identifier.
    """
    if not user.voter_id:
        msg = "This account has no voter ID and cannot vote."
        raise ValidationError(msg)
    return VoterIdentity(user_id=user.id, voter_id=user.voter_id)


async def open_elections_for(
    session: AsyncSession,
    voter: VoterIdentity,
    *,
    now: datetime | None = None,
) -> list[Election]:
    """Elections the voter can vote in right now.

    Active, inside their window, with the voter on the roster, and no ballot
    from the voter yet.
    """
    now = now or datetime.now(UTC)
    on_roster = select(EligibleVoter.id).where(
        EligibleVoter.election_id == Election.id,
        EligibleVoter.voter_id == voter.voter_id,
    )
    already_voted = select(Ballot.id).where(
        Ballot.election_id == Election.id,
        Ballot.voter_user_id == voter.user_id,
    )
    result = await session.execute(
        select(Election)
        .where(
            Election.status == ElectionStatus.ACTIVE,
            Election.start_date <= now,
            Election.end_date >= now,
            on_roster.exists(),
            ~already_voted.exists(),
        )
        .order_by(Election.end_date)
    )
    return list(result.scalars().all())


async def ballot_history(session: AsyncSession, voter_user_id: uuid.UUID) -> list[BallotHistoryItem]:
    """A voter's ballots with election and candidate names, most recent first."""
    result = await session.execute(
        select(Ballot, Election, Candidate)
        .join(Election, Ballot.election_id == Election.id)
        .join(Candidate, Ballot.candidate_id == Candidate.id)
        .where(Ballot.voter_user_id == voter_user_id)
        .order_by(Ballot.cast_at.desc())
    )
    return [
        BallotHistoryItem(
            election_id=election.id,
            election_title=election.title,
            election_status=election.status,
            candidate_id=candidate.id,
            candidate_name=candidate.name,
            cast_at=ballot.cast_at,
        )
        for ballot, election, candidate in result.all()
    ]
