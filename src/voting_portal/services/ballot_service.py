"""Ballot store service.

The ballot table is the single source of truth for who voted in which
election, for whom, and when. One ballot per (election, voter) is enforced
by the ``uq_ballot_election_voter`` unique constraint, so the check and the
insert are atomic regardless of what callers checked beforehand.
"""

import uuid
from datetime import UTC, datetime

from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from voting_portal.core.errors import IntegrityConflictError
from voting_portal.models.ballot import Ballot

# Fragments identifying a one-vote-per-voter violation in driver messages
# (PostgreSQL reports the constraint name, SQLite the column list).
_DUPLICATE_VOTE_MARKERS = (
    "uq_ballot_election_voter",
    "ballots.election_id, ballots.voter_user_id",
    "voter_participations_pkey",
    "voter_participations.user_id, voter_participations.election_id",
)


def is_duplicate_vote_violation(exc: IntegrityError) -> bool:
    """Tell whether an IntegrityError came from the one-vote-per-voter rules."""
    message = str(exc.orig) if exc.orig is not None else str(exc)
    return any(marker in message for marker in _DUPLICATE_VOTE_MARKERS)


async def cast_ballot(
    session: AsyncSession,
    election_id: uuid.UUID,
    voter_user_id: uuid.UUID,
    candidate_id: uuid.UUID,
    *,
    cast_at: datetime | None = None,
) -> Ballot:
    """Insert a ballot and flush it within the caller's transaction.

    The flush makes the database evaluate the uniqueness constraint now, so
    a lost race is detected before any other write of the vote happens.

    Args:
        session: Async database session.
        election_id: The election UUID.
        voter_user_id: The voter's internal user UUID.
        candidate_id: The chosen candidate UUID.
        cast_at: Cast timestamp (defaults to current UTC).

    Returns:
        The flushed Ballot.

    Raises:
        IntegrityConflictError: If a ballot for (election, voter) already exists.
    """
    ballot = Ballot(
        id=uuid.uuid4(),
        election_id=election_id,
        voter_user_id=voter_user_id,
        candidate_id=candidate_id,
        cast_at=cast_at or datetime.now(UTC),
    )
    session.add(ballot)
    try:
        await session.flush()
    except IntegrityError as exc:
        await session.rollback()
        if not is_duplicate_vote_violation(exc):
            raise
        logger.warning(f"Ballot conflict for voter {voter_user_id} in election {election_id}")
        msg = "A ballot has already been recorded for you in this election."
        raise IntegrityConflictError(msg) from exc
    return ballot


async def has_voted(session: AsyncSession, election_id: uuid.UUID, voter_user_id: uuid.UUID) -> bool:
    """Authoritative check for an existing ballot."""
    result = await session.execute(
        select(Ballot.id).where(Ballot.election_id == election_id, Ballot.voter_user_id == voter_user_id).limit(1)
    )
    return result.first() is not None


async def count_by_candidate(session: AsyncSession, election_id: uuid.UUID, candidate_id: uuid.UUID) -> int:
    """Count ballots cast for one candidate in one election."""
    result = await session.execute(
        select(func.count(Ballot.id)).where(Ballot.election_id == election_id, Ballot.candidate_id == candidate_id)
    )
    return result.scalar_one()


async def count_by_election(session: AsyncSession, election_id: uuid.UUID) -> int:
    """Count all ballots cast in an election."""
    result = await session.execute(select(func.count(Ballot.id)).where(Ballot.election_id == election_id))
    return result.scalar_one()


async def counts_for_election(session: AsyncSession, election_id: uuid.UUID) -> dict[uuid.UUID, int]:
    """Count ballots per candidate in a single grouped query.

    Returns:
        Mapping of candidate ID to ballot count (candidates with no ballots
        are absent).
    """
    result = await session.execute(
        select(Ballot.candidate_id, func.count(Ballot.id))
        .where(Ballot.election_id == election_id)
        .group_by(Ballot.candidate_id)
    )
    return {candidate_id: count for candidate_id, count in result.all()}


async def list_for_voter(session: AsyncSession, voter_user_id: uuid.UUID) -> list[Ballot]:
    """Return a voter's ballots, most recent first."""
    result = await session.execute(
        select(Ballot).where(Ballot.voter_user_id == voter_user_id).order_by(Ballot.cast_at.desc())
    )
    return list(result.scalars().all())
