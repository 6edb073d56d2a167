"""Voting engine: the cast-vote state machine.

A vote passes five advisory gates (election exists, election active, voter
eligible, no previous ballot, candidate on this ballot) and is then committed
as one transaction: ballot insert first, then the candidate counter and the
voter's participation marker. The gates may race with concurrent requests;
the ballot table's unique constraint decides the winner at commit time.
Nothing here retries: a second attempt for the same voter always fails.
"""

import uuid
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from voting_portal.core.errors import (
    DuplicateVoteError,
    ElectionNotActiveError,
    IntegrityConflictError,
    InvalidCandidateError,
    NotEligibleError,
    NotFoundError,
    VotingError,
)
from voting_portal.core.logging import audit_logger
from voting_portal.models.ballot import Ballot, VoterParticipation
from voting_portal.models.election import Election, ElectionStatus
from voting_portal.schemas.vote import VoteReceipt, VoteResult
from voting_portal.schemas.voter import VoterIdentity
from voting_portal.services import ballot_service, candidate_service, election_service


async def _participation_recorded(session: AsyncSession, election_id: uuid.UUID, user_id: uuid.UUID) -> bool:
    """Fast-path duplicate check against the voter's voted-elections cache."""
    result = await session.execute(
        select(VoterParticipation.user_id).where(
            VoterParticipation.user_id == user_id,
            VoterParticipation.election_id == election_id,
        )
    )
    return result.first() is not None


def ensure_accepting_ballots(election: Election, now: datetime) -> None:
    """Raise unless the election is ACTIVE and ``now`` is inside its window.

    A stored ACTIVE status whose window has passed is still rejected.

    Raises:
        ElectionNotActiveError: If ballots cannot be accepted.
    """
    if election.status != ElectionStatus.ACTIVE:
        msg = f"This election is not active (status: {election.status})."
        raise ElectionNotActiveError(msg)
    if not election_service.is_within_window(election, now):
        msg = "This election is outside its voting window."
        raise ElectionNotActiveError(msg)


async def cast_vote(
    session: AsyncSession,
    election_id: uuid.UUID,
    candidate_id: uuid.UUID,
    voter: VoterIdentity,
    *,
    now: datetime | None = None,
) -> Ballot:
    """Cast one voter's ballot in an election.

    Args:
        session: Async database session (its transaction is committed here).
        election_id: Target election UUID.
        candidate_id: Chosen candidate UUID.
        voter: Authenticated caller identity.
        now: Reference time for the window check (defaults to current UTC).

    Returns:
        The committed Ballot.

    Raises:
        NotFoundError: Unknown election.
        ElectionNotActiveError: Election not active or outside its window.
        NotEligibleError: Voter id not on the roster.
        DuplicateVoteError: A ballot already exists for this voter.
        InvalidCandidateError: Candidate not part of this election.
        IntegrityConflictError: A concurrent ballot for this voter won the race.
    """
    now = now or datetime.now(UTC)

    election = await election_service.get_election(session, election_id)
    if election is None:
        msg = "Election not found."
        raise NotFoundError(msg)

    ensure_accepting_ballots(election, now)

    if not await election_service.is_voter_eligible(session, election_id, voter.voter_id):
        msg = "You are not eligible to vote in this election."
        raise NotEligibleError(msg)

    if await _participation_recorded(session, election_id, voter.user_id) or await ballot_service.has_voted(
        session, election_id, voter.user_id
    ):
        msg = "You have already voted in this election."
        raise DuplicateVoteError(msg)

    if not any(candidate.id == candidate_id for candidate in election.candidates):
        msg = "Invalid candidate for this election."
        raise InvalidCandidateError(msg)

    ballot = await ballot_service.cast_ballot(session, election_id, voter.user_id, candidate_id, cast_at=now)
    try:
        await candidate_service.increment_vote(session, candidate_id)
        session.add(VoterParticipation(user_id=voter.user_id, election_id=election_id, voted_at=now))
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        if not ballot_service.is_duplicate_vote_violation(exc):
            raise
        msg = "A ballot has already been recorded for you in this election."
        raise IntegrityConflictError(msg) from exc
    except Exception:
        await session.rollback()
        raise

    audit = audit_logger(
        "ballot_accepted", ballot_id=str(ballot.id), election_id=str(election_id), voter_id=voter.voter_id
    )
    audit.info(f"Ballot {ballot.id} accepted: voter {voter.voter_id} in election {election_id}")
    return ballot


async def submit_vote(
    session: AsyncSession,
    election_id: uuid.UUID,
    candidate_id: uuid.UUID,
    voter: VoterIdentity,
    *,
    now: datetime | None = None,
) -> VoteResult:
    """Cast a vote and report the outcome as a typed result.

    Business-rule rejections become ``accepted=False`` with their reason
    code; infrastructure errors propagate unchanged.
    """
    try:
        ballot = await cast_vote(session, election_id, candidate_id, voter, now=now)
    except VotingError as exc:
        audit_logger("vote_rejected", reason=exc.code, election_id=str(election_id), voter_id=voter.voter_id).info(
            f"Vote rejected ({exc.code}): voter {voter.voter_id} in election {election_id}"
        )
        return VoteResult(accepted=False, reason=exc.code, message=exc.message)
    return VoteResult(accepted=True, receipt=VoteReceipt.model_validate(ballot))
