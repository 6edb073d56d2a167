"""Voter API endpoints.

GET /voters — list voter accounts (admin)
POST /voters — register a voter with a generated voter ID (admin)
GET /voters/me — caller's account
GET /voters/me/elections — open elections awaiting the caller's ballot
GET /voters/me/ballots — caller's voting history
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from voting_portal.core.config import Settings, get_settings
from voting_portal.core.dependencies import get_async_session, get_current_user, get_current_voter, require_role
from voting_portal.models.user import User, UserRole
from voting_portal.schemas.common import PaginationMeta, PaginationParams
from voting_portal.schemas.election import ElectionSummary
from voting_portal.schemas.voter import BallotHistoryItem, VoterIdentity, VoterRegisterRequest, VoterResponse
from voting_portal.services import voter_service

voters_router = APIRouter(prefix="/voters", tags=["voters"])


@voters_router.get("", response_model=dict)
async def list_voters(
    _current_user: Annotated[User, Depends(require_role(UserRole.ADMIN))],
    session: Annotated[AsyncSession, Depends(get_async_session)],
    pagination: Annotated[PaginationParams, Depends()],
) -> dict:
    """List voter accounts. Admin-only."""
    voters, total = await voter_service.list_voters(session, pagination.page, pagination.page_size)
    return {
        "items": [VoterResponse.model_validate(v) for v in voters],
        "pagination": PaginationMeta.for_page(total, pagination.page, pagination.page_size),
    }


@voters_router.post("", response_model=VoterResponse, status_code=201)
async def register_voter(
    request: VoterRegisterRequest,
    _current_user: Annotated[User, Depends(require_role(UserRole.ADMIN))],
    session: Annotated[AsyncSession, Depends(get_async_session)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> User:
    """Register a voter and assign a voter ID. Admin-only."""
    return await voter_service.register_voter(
        session,
        request,
        voter_id_prefix=settings.voter_id_prefix,
        max_attempts=settings.voter_id_max_attempts,
    )


@voters_router.get("/me", response_model=VoterResponse)
async def get_me(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Get the caller's account, including their voter ID."""
    return current_user


@voters_router.get("/me/elections", response_model=list[ElectionSummary])
async def my_open_elections(
    voter: Annotated[VoterIdentity, Depends(get_current_voter)],
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> list[ElectionSummary]:
    """Active elections the caller is eligible for and has not voted in yet."""
    elections = await voter_service.open_elections_for(session, voter)
    return [ElectionSummary.model_validate(e) for e in elections]


@voters_router.get("/me/ballots", response_model=list[BallotHistoryItem])
async def my_ballots(
    voter: Annotated[VoterIdentity, Depends(get_current_voter)],
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> list[BallotHistoryItem]:
    """The caller's voting history, most recent first."""
    return await voter_service.ballot_history(session, voter.user_id)
