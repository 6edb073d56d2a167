"""Voter Pydantic v2 schemas.

Covers voter registration, the identity handed to the voting engine, and
voter-facing dashboard and history views.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from voting_portal.models.election import ElectionStatus


class VoterIdentity(BaseModel):
    """Authenticated caller as seen by the vote-integrity core."""

    user_id: UUID
    voter_id: str

    model_config = {"frozen": True}


class VoterRegisterRequest(BaseModel):
    """Request to register a voter account."""

    username: str = Field(min_length=3, max_length=100)
    email: EmailStr
    full_name: str | None = Field(default=None, max_length=200)


class VoterResponse(BaseModel):
    """Voter account information."""

    id: UUID
    username: str
    email: str
    full_name: str | None = None
    role: str
    voter_id: str | None = None
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class BallotHistoryItem(BaseModel):
    """One entry of a voter's voting history."""

    election_id: UUID
    election_title: str
    election_status: ElectionStatus
    candidate_id: UUID
    candidate_name: str
    cast_at: datetime
