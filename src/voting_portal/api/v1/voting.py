"""Vote casting and results API endpoints.

POST /elections/{id}/votes — cast the caller's ballot (voter)
GET /elections/{id}/results — tally recomputed from ballots
"""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from voting_portal.core.dependencies import get_async_session, get_current_user, get_current_voter
from voting_portal.core.errors import status_for_code
from voting_portal.models.user import User
from voting_portal.schemas.common import ErrorResponse
from voting_portal.schemas.results import ElectionResults
from voting_portal.schemas.vote import VoteRequest, VoteResult
from voting_portal.schemas.voter import VoterIdentity
from voting_portal.services import election_service, tally_service, voting_service

voting_router = APIRouter(prefix="/elections", tags=["voting"])


@voting_router.post(
    "/{election_id}/votes",
    response_model=VoteResult,
    status_code=201,
    responses={
        403: {"model": VoteResult, "description": "Voter not on the roster"},
        404: {"model": VoteResult, "description": "Election not found"},
        409: {"model": VoteResult, "description": "Election not active or ballot already cast"},
        422: {"model": VoteResult, "description": "Candidate not part of this election"},
    },
)
async def cast_vote(
    election_id: uuid.UUID,
    request: VoteRequest,
    session: Annotated[AsyncSession, Depends(get_async_session)],
    voter: Annotated[VoterIdentity, Depends(get_current_voter)],
) -> VoteResult | JSONResponse:
    """Cast the caller's single ballot in an election.

    Rejections are returned as a VoteResult with ``accepted=false`` and a
    reason code; they are never retried server-side.
    """
    result = await voting_service.submit_vote(session, election_id, request.candidate_id, voter)
    if result.accepted:
        return result
    return JSONResponse(
        status_code=status_for_code(result.reason or ""),
        content=result.model_dump(mode="json"),
    )


@voting_router.get(
    "/{election_id}/results",
    response_model=ElectionResults,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def get_results(
    election_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(get_async_session)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> ElectionResults:
    """Get per-candidate counts. Voters see results only for completed elections."""
    election = await election_service.require_election(session, election_id)
    if not tally_service.results_visible_to(election, current_user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Results are only available for completed elections",
        )
    return await tally_service.results_for(session, election_id)
