"""Election registry API endpoints.

GET /elections — list elections
POST /elections — create election with candidates and roster (admin)
GET /elections/{id} — election detail with its ballot
DELETE /elections/{id} — delete an election without ballots (admin)
PATCH /elections/{id}/status — explicit status transition (admin)
GET /elections/{id}/voters — eligibility roster (admin)
POST /elections/{id}/voters — add voter id to roster (admin)
DELETE /elections/{id}/voters/{voter_id} — remove voter id from roster (admin)
POST /elections/{id}/candidates — add candidate (admin)
DELETE /elections/{id}/candidates/{candidate_id} — remove candidate without ballots (admin)
"""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from voting_portal.core.dependencies import get_async_session, get_current_user, require_role
from voting_portal.core.errors import NotFoundError
from voting_portal.models.election import ElectionStatus
from voting_portal.models.user import User, UserRole
from voting_portal.schemas.common import PaginationMeta
from voting_portal.schemas.election import (
    CandidateResponse,
    CandidateSpec,
    ElectionCreateRequest,
    ElectionDetailResponse,
    ElectionStatusUpdateRequest,
    EligibleVoterRequest,
    EligibleVoterResponse,
    PaginatedElectionListResponse,
    RosterChangeResponse,
)
from voting_portal.services import election_service

elections_router = APIRouter(prefix="/elections", tags=["elections"])


@elections_router.get("", response_model=PaginatedElectionListResponse)
async def list_elections(
    session: Annotated[AsyncSession, Depends(get_async_session)],
    _current_user: Annotated[User, Depends(get_current_user)],
    status: ElectionStatus | None = Query(default=None, description="Filter by status"),
    page: int = Query(default=1, ge=1, description="Page number"),
    page_size: int = Query(default=20, ge=1, le=100, description="Results per page"),
) -> PaginatedElectionListResponse:
    """List elections with an optional status filter."""
    items, total = await election_service.list_elections(session, status=status, page=page, page_size=page_size)
    return PaginatedElectionListResponse(
        items=items,
        pagination=PaginationMeta.for_page(total, page, page_size),
    )


@elections_router.post("", response_model=ElectionDetailResponse, status_code=201)
async def create_election(
    request: ElectionCreateRequest,
    session: Annotated[AsyncSession, Depends(get_async_session)],
    current_user: Annotated[User, Depends(require_role(UserRole.ADMIN))],
) -> ElectionDetailResponse:
    """Create an election with its candidates and voter roster. Admin-only."""
    election = await election_service.create_election(session, request, created_by=current_user.id)
    return ElectionDetailResponse.model_validate(election)


@elections_router.get("/{election_id}", response_model=ElectionDetailResponse)
async def get_election(
    election_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(get_async_session)],
    _current_user: Annotated[User, Depends(get_current_user)],
) -> ElectionDetailResponse:
    """Get election detail, including candidates in display order."""
    election = await election_service.get_election(session, election_id)
    if election is None:
        msg = "Election not found."
        raise NotFoundError(msg)
    return ElectionDetailResponse.model_validate(election)


@elections_router.delete("/{election_id}", status_code=204)
async def delete_election(
    election_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(get_async_session)],
    _current_user: Annotated[User, Depends(require_role(UserRole.ADMIN))],
) -> Response:
    """Delete an election that has no ballots. Admin-only."""
    await election_service.delete_election(session, election_id)
    return Response(status_code=204)


@elections_router.patch("/{election_id}/status", response_model=ElectionDetailResponse)
async def update_status(
    election_id: uuid.UUID,
    request: ElectionStatusUpdateRequest,
    session: Annotated[AsyncSession, Depends(get_async_session)],
    _current_user: Annotated[User, Depends(require_role(UserRole.ADMIN))],
) -> ElectionDetailResponse:
    """Set an election's status explicitly. Admin-only; dates are not checked."""
    election = await election_service.set_status(session, election_id, request.status)
    return ElectionDetailResponse.model_validate(election)


# --- Eligibility roster ---


@elections_router.get("/{election_id}/voters", response_model=list[EligibleVoterResponse])
async def list_roster(
    election_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(get_async_session)],
    _current_user: Annotated[User, Depends(require_role(UserRole.ADMIN))],
) -> list[EligibleVoterResponse]:
    """List the election's eligibility roster. Admin-only."""
    entries = await election_service.list_eligible_voters(session, election_id)
    return [EligibleVoterResponse.model_validate(entry) for entry in entries]


@elections_router.post("/{election_id}/voters", response_model=RosterChangeResponse)
async def add_roster_entry(
    election_id: uuid.UUID,
    request: EligibleVoterRequest,
    session: Annotated[AsyncSession, Depends(get_async_session)],
    current_user: Annotated[User, Depends(require_role(UserRole.ADMIN))],
) -> RosterChangeResponse:
    """Add a voter id to the roster (no-op if present). Admin-only."""
    changed = await election_service.add_eligible_voter(session, election_id, request.voter_id, current_user.id)
    return RosterChangeResponse(election_id=election_id, voter_id=request.voter_id, changed=changed)


@elections_router.delete("/{election_id}/voters/{voter_id}", response_model=RosterChangeResponse)
async def remove_roster_entry(
    election_id: uuid.UUID,
    voter_id: str,
    session: Annotated[AsyncSession, Depends(get_async_session)],
    _current_user: Annotated[User, Depends(require_role(UserRole.ADMIN))],
) -> RosterChangeResponse:
    """Remove a voter id from the roster. Admin-only."""
    changed = await election_service.remove_eligible_voter(session, election_id, voter_id)
    return RosterChangeResponse(election_id=election_id, voter_id=voter_id.strip(), changed=changed)


# --- Candidates ---


@elections_router.post("/{election_id}/candidates", response_model=CandidateResponse, status_code=201)
async def add_candidate(
    election_id: uuid.UUID,
    request: CandidateSpec,
    session: Annotated[AsyncSession, Depends(get_async_session)],
    _current_user: Annotated[User, Depends(require_role(UserRole.ADMIN))],
) -> CandidateResponse:
    """Append a candidate to the ballot. Admin-only."""
    candidate = await election_service.add_candidate(session, election_id, request)
    return CandidateResponse.model_validate(candidate)


@elections_router.delete("/{election_id}/candidates/{candidate_id}", status_code=204)
async def remove_candidate(
    election_id: uuid.UUID,
    candidate_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(get_async_session)],
    _current_user: Annotated[User, Depends(require_role(UserRole.ADMIN))],
) -> Response:
    """Remove a candidate that has no ballots. Admin-only."""
    await election_service.remove_candidate(session, election_id, candidate_id)
    return Response(status_code=204)
