"""Election registry service.

Owns elections, their ordered candidate list, and their eligibility roster.
Status is classified from the voting window once, at creation; afterwards it
changes only through explicit admin transitions.
"""

import uuid
from datetime import UTC, datetime

from loguru import logger
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from voting_portal.core.errors import (
    CandidateHasBallotsError,
    ElectionHasBallotsError,
    NotFoundError,
    ValidationError,
)
from voting_portal.models.ballot import Ballot
from voting_portal.models.candidate import Candidate
from voting_portal.models.election import Election, ElectionStatus, EligibleVoter
from voting_portal.models.user import User
from voting_portal.schemas.election import CandidateSpec, ElectionCreateRequest, as_utc


def classify_status(now: datetime, start: datetime, end: datetime) -> ElectionStatus:
    """Suggest an initial status for a voting window.

    Args:
        now: Reference time.
        start: Window start (inclusive).
        end: Window end (inclusive).

    Returns:
        ACTIVE inside the window, COMPLETED after it, UPCOMING before it.
    """
    now, start, end = as_utc(now), as_utc(start), as_utc(end)
    if start <= now <= end:
        return ElectionStatus.ACTIVE
    if now > end:
        return ElectionStatus.COMPLETED
    return ElectionStatus.UPCOMING


def is_within_window(election: Election, now: datetime) -> bool:
    """Check whether ``now`` falls inside the election's voting window."""
    return as_utc(election.start_date) <= as_utc(now) <= as_utc(election.end_date)


def _check_candidate_names(specs: list[CandidateSpec]) -> None:
    seen: set[str] = set()
    for spec in specs:
        if not spec.name:
            msg = "Candidate name is required."
            raise ValidationError(msg)
        if spec.name in seen:
            msg = f"Candidate name '{spec.name}' appears more than once."
            raise ValidationError(msg)
        seen.add(spec.name)


async def _resolve_voter_ids(session: AsyncSession, voter_ids: list[str]) -> list[str]:
    """Deduplicate roster ids and verify every one belongs to a registered voter.

    Raises:
        ValidationError: If any id is blank or unknown.
    """
    unique_ids = list(dict.fromkeys(voter_ids))
    if any(not voter_id for voter_id in unique_ids):
        msg = "Voter identifiers must not be blank."
        raise ValidationError(msg)
    if not unique_ids:
        return []

    result = await session.execute(select(User.voter_id).where(User.voter_id.in_(unique_ids)))
    known = set(result.scalars().all())
    unknown = [voter_id for voter_id in unique_ids if voter_id not in known]
    if unknown:
        msg = f"Unknown voter identifiers: {', '.join(sorted(unknown))}"
        raise ValidationError(msg)
    return unique_ids


async def create_election(
    session: AsyncSession,
    request: ElectionCreateRequest,
    created_by: uuid.UUID | None,
    *,
    now: datetime | None = None,
) -> Election:
    """Create an election with its candidates and eligibility roster.

    Election, candidates, and roster entries are written in one transaction.

    Args:
        session: Async database session.
        request: Election creation request.
        created_by: The creating admin's user ID.
        now: Reference time for the initial status (defaults to current UTC).

    Returns:
        The created Election with candidates loaded.

    Raises:
        ValidationError: On blank fields, an inverted window, duplicate
            candidate names, blank candidate names, or unknown voter
            identifiers.
    """
    title = request.title.strip()
    description = request.description.strip()
    if not title or not description:
        msg = "Title and description are required."
        raise ValidationError(msg)
    if not request.candidates:
        msg = "At least one candidate is required."
        raise ValidationError(msg)
    start, end = as_utc(request.start_date), as_utc(request.end_date)
    if end <= start:
        msg = "End date must be after start date."
        raise ValidationError(msg)
    _check_candidate_names(request.candidates)
    voter_ids = await _resolve_voter_ids(session, request.voter_ids)

    now = now or datetime.now(UTC)
    election = Election(
        id=uuid.uuid4(),
        title=title,
        description=description,
        start_date=start,
        end_date=end,
        status=classify_status(now, start, end),
        created_by=created_by,
    )
    election.candidates = [
        Candidate(id=uuid.uuid4(), name=spec.name, description=spec.description, position=index)
        for index, spec in enumerate(request.candidates)
    ]
    session.add(election)
    session.add_all(
        EligibleVoter(election_id=election.id, voter_id=voter_id, added_at=now, added_by=created_by)
        for voter_id in voter_ids
    )
    try:
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    await session.refresh(election)

    logger.info(
        f"Created election {election.id} '{election.title}' "
        f"(status={election.status}, candidates={len(election.candidates)}, roster={len(voter_ids)})"
    )
    return election


async def get_election(session: AsyncSession, election_id: uuid.UUID) -> Election | None:
    """Get an election by ID with its candidates loaded.

    Args:
        session: Async database session.
        election_id: The election UUID.

    Returns:
        Election instance or None if not found.
    """
    result = await session.execute(select(Election).where(Election.id == election_id))
    return result.scalar_one_or_none()


async def require_election(session: AsyncSession, election_id: uuid.UUID) -> Election:
    """Get an election by ID or raise NotFoundError."""
    election = await get_election(session, election_id)
    if election is None:
        msg = "Election not found."
        raise NotFoundError(msg)
    return election


async def list_elections(
    session: AsyncSession,
    *,
    status: ElectionStatus | None = None,
    page: int = 1,
    page_size: int = 20,
) -> tuple[list[Election], int]:
    """List elections, newest window first.

    Args:
        session: Async database session.
        status: Optional status filter.
        page: Page number (1-based).
        page_size: Items per page.

    Returns:
        Tuple of (elections, total count).
    """
    query = select(Election)
    count_query = select(func.count(Election.id))
    if status is not None:
        query = query.where(Election.status == status)
        count_query = count_query.where(Election.status == status)

    total = (await session.execute(count_query)).scalar_one()
    offset = (page - 1) * page_size
    query = query.order_by(Election.start_date.desc()).offset(offset).limit(page_size)
    result = await session.execute(query)
    return list(result.scalars().all()), total


async def set_status(session: AsyncSession, election_id: uuid.UUID, new_status: ElectionStatus) -> Election:
    """Explicitly set an election's status (admin override, no date checks).

    Raises:
        NotFoundError: If the election does not exist.
    """
    election = await require_election(session, election_id)
    previous = election.status
    election.status = ElectionStatus(new_status)
    await session.commit()
    await session.refresh(election)
    logger.info(f"Election {election_id} status {previous} -> {election.status}")
    return election


async def delete_election(session: AsyncSession, election_id: uuid.UUID) -> None:
    """Delete an election with its candidates and roster.

    Raises:
        NotFoundError: If the election does not exist.
        ElectionHasBallotsError: If any ballot has been cast in it.
    """
    election = await require_election(session, election_id)
    ballots = (
        await session.execute(select(func.count(Ballot.id)).where(Ballot.election_id == election_id))
    ).scalar_one()
    if ballots:
        msg = f"Election has {ballots} recorded ballot(s) and cannot be deleted."
        raise ElectionHasBallotsError(msg)

    await session.execute(delete(EligibleVoter).where(EligibleVoter.election_id == election_id))
    await session.delete(election)
    await session.commit()
    logger.info(f"Deleted election {election_id}")


# ---------------------------------------------------------------------------
# Eligibility roster
# ---------------------------------------------------------------------------


async def list_eligible_voters(session: AsyncSession, election_id: uuid.UUID) -> list[EligibleVoter]:
    """Return the roster entries of an election in the order they were added."""
    await require_election(session, election_id)
    result = await session.execute(
        select(EligibleVoter).where(EligibleVoter.election_id == election_id).order_by(EligibleVoter.added_at)
    )
    return list(result.scalars().all())


async def count_eligible_voters(session: AsyncSession, election_id: uuid.UUID) -> int:
    """Count distinct voter ids on an election's roster."""
    result = await session.execute(
        select(func.count(func.distinct(EligibleVoter.voter_id))).where(EligibleVoter.election_id == election_id)
    )
    return result.scalar_one()


async def is_voter_eligible(session: AsyncSession, election_id: uuid.UUID, voter_id: str) -> bool:
    """Check roster membership by exact voter id match (after trimming).

    Duplicate roster entries are harmless: membership means "present at
    least once".
    """
    voter_id = voter_id.strip()
    if not voter_id:
        return False
    result = await session.execute(
        select(EligibleVoter.id)
        .where(EligibleVoter.election_id == election_id, EligibleVoter.voter_id == voter_id)
        .limit(1)
    )
    return result.first() is not None


async def add_eligible_voter(
    session: AsyncSession,
    election_id: uuid.UUID,
    voter_id: str,
    added_by: uuid.UUID | None,
) -> bool:
    """Add a voter id to an election's roster.

    Returns:
        False (no-op) if the id is already present, True if it was added.

    Raises:
        NotFoundError: If the election does not exist.
        ValidationError: If the voter id is blank.
    """
    voter_id = voter_id.strip()
    if not voter_id:
        msg = "Voter identifier must not be blank."
        raise ValidationError(msg)
    await require_election(session, election_id)
    if await is_voter_eligible(session, election_id, voter_id):
        return False

    session.add(
        EligibleVoter(
            election_id=election_id,
            voter_id=voter_id,
            added_at=datetime.now(UTC),
            added_by=added_by,
        )
    )
    await session.commit()
    logger.info(f"Added voter {voter_id} to roster of election {election_id}")
    return True


async def remove_eligible_voter(session: AsyncSession, election_id: uuid.UUID, voter_id: str) -> bool:
    """Remove a voter id from an election's roster.

    Returns:
        False if the id was not on the roster, True if it was removed.

    Raises:
        NotFoundError: If the election does not exist.
    """
    voter_id = voter_id.strip()
    await require_election(session, election_id)
    result = await session.execute(
        delete(EligibleVoter).where(EligibleVoter.election_id == election_id, EligibleVoter.voter_id == voter_id)
    )
    await session.commit()
    removed = (result.rowcount or 0) > 0
    if removed:
        logger.info(f"Removed voter {voter_id} from roster of election {election_id}")
    return removed


# ---------------------------------------------------------------------------
# Candidates
# ---------------------------------------------------------------------------


async def add_candidate(session: AsyncSession, election_id: uuid.UUID, spec: CandidateSpec) -> Candidate:
    """Append a candidate to the end of an election's ballot.

    Raises:
        NotFoundError: If the election does not exist.
        ValidationError: If the name is blank or already used in this election.
    """
    name = spec.name.strip()
    if not name:
        msg = "Candidate name is required."
        raise ValidationError(msg)
    election = await require_election(session, election_id)
    if any(candidate.name == name for candidate in election.candidates):
        msg = f"Candidate '{name}' already exists in this election."
        raise ValidationError(msg)

    next_position = max((candidate.position for candidate in election.candidates), default=-1) + 1
    candidate = Candidate(
        id=uuid.uuid4(),
        election_id=election_id,
        name=name,
        description=spec.description,
        position=next_position,
    )
    election.candidates.append(candidate)
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        msg = f"Candidate '{name}' already exists in this election."
        raise ValidationError(msg) from exc
    logger.info(f"Added candidate {candidate.id} '{name}' to election {election_id}")
    return candidate


async def remove_candidate(session: AsyncSession, election_id: uuid.UUID, candidate_id: uuid.UUID) -> None:
    """Remove a candidate that has no ballots.

    Raises:
        NotFoundError: If the election or candidate does not exist.
        CandidateHasBallotsError: If any ballot references the candidate.
    """
    election = await require_election(session, election_id)
    candidate = next((c for c in election.candidates if c.id == candidate_id), None)
    if candidate is None:
        msg = "Candidate not found in this election."
        raise NotFoundError(msg)

    ballots = (
        await session.execute(select(func.count(Ballot.id)).where(Ballot.candidate_id == candidate_id))
    ).scalar_one()
    if ballots:
        msg = f"Candidate '{candidate.name}' has {ballots} recorded ballot(s) and cannot be removed."
        raise CandidateHasBallotsError(msg)

    election.candidates.remove(candidate)
    await session.commit()
    logger.info(f"Removed candidate {candidate_id} from election {election_id}")
