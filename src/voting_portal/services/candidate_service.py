"""Candidate ledger service.

Candidate counters are a denormalized cache of the ballot table: they are
bumped inside the vote transaction and can be rebuilt from ballots at any
time with :func:`reconcile_vote_counts`.
"""

import uuid

from loguru import logger
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from voting_portal.models.candidate import Candidate
from voting_portal.services import ballot_service


async def get_candidate(session: AsyncSession, candidate_id: uuid.UUID) -> Candidate | None:
    """Get a candidate by ID.

    Args:
        session: Async database session.
        candidate_id: The candidate UUID.

    Returns:
        Candidate instance or None if not found.
    """
    result = await session.execute(select(Candidate).where(Candidate.id == candidate_id))
    return result.scalar_one_or_none()


async def list_for_election(session: AsyncSession, election_id: uuid.UUID) -> list[Candidate]:
    """List an election's candidates in display order."""
    result = await session.execute(
        select(Candidate).where(Candidate.election_id == election_id).order_by(Candidate.position)
    )
    return list(result.scalars().all())


async def increment_vote(session: AsyncSession, candidate_id: uuid.UUID) -> None:
    """Add one to a candidate's cached counter.

    Issued as ``vote_count = vote_count + 1`` so concurrent increments never
    overwrite each other. Does not commit; the caller owns the transaction.
    """
    await session.execute(
        update(Candidate)
        .where(Candidate.id == candidate_id)
        .values(vote_count=Candidate.vote_count + 1)
        .execution_options(synchronize_session=False)
    )


async def reconcile_vote_counts(session: AsyncSession, election_id: uuid.UUID) -> int:
    """Overwrite cached counters with counts from the ballot table.

    Args:
        session: Async database session.
        election_id: The election whose counters to rebuild.

    Returns:
        Number of candidates whose counter was corrected.
    """
    counts = await ballot_service.counts_for_election(session, election_id)
    result = await session.execute(
        select(Candidate)
        .where(Candidate.election_id == election_id)
        .order_by(Candidate.position)
        .execution_options(populate_existing=True)
    )
    corrected = 0
    for candidate in result.scalars().all():
        actual = counts.get(candidate.id, 0)
        if candidate.vote_count != actual:
            logger.warning(
                f"Candidate {candidate.id} counter drifted: cached={candidate.vote_count} ballots={actual}"
            )
            candidate.vote_count = actual
            corrected += 1
    await session.commit()
    if corrected:
        logger.info(f"Reconciled {corrected} candidate counter(s) for election {election_id}")
    return corrected
