"""Tally reader service.

Official results are always recomputed from the ballot table; the cached
candidate counters are never consulted here.
"""

import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from voting_portal.models.election import Election, ElectionStatus
from voting_portal.models.user import User
from voting_portal.schemas.results import CandidateTally, ElectionResults
from voting_portal.services import ballot_service, election_service


def results_visible_to(election: Election, user: User) -> bool:
    """Admins always see results; voters only once the election is completed."""
    return user.is_admin or election.status == ElectionStatus.COMPLETED


async def results_for(session: AsyncSession, election_id: uuid.UUID) -> ElectionResults:
    """Build the result view of an election.

    Args:
        session: Async database session.
        election_id: The election UUID.

    Returns:
        Per-candidate counts in display order, total ballots, and the number
        of distinct voter ids on the roster.

    Raises:
        NotFoundError: If the election does not exist.
    """
    election = await election_service.require_election(session, election_id)
    counts = await ballot_service.counts_for_election(session, election_id)
    total_votes = await ballot_service.count_by_election(session, election_id)
    eligible = await election_service.count_eligible_voters(session, election_id)

    return ElectionResults(
        election_id=election.id,
        title=election.title,
        status=election.status,
        candidates=[
            CandidateTally(id=candidate.id, name=candidate.name, vote_count=counts.get(candidate.id, 0))
            for candidate in election.candidates
        ],
        total_votes=total_votes,
        eligible_voter_count=eligible,
    )
