"""Election registry Pydantic v2 schemas.

Request and response models for election creation, status administration,
candidate management, and the eligibility roster.
"""

from datetime import UTC, datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from voting_portal.models.election import ElectionStatus
from voting_portal.schemas.common import PaginationMeta


def as_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime.

    Naive values are taken to be UTC already; SQLite hands them back that way.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class CandidateSpec(BaseModel):
    """A candidate to create alongside (or add to) an election."""

    name: str = Field(min_length=1, max_length=200)
    description: str = Field(default="", max_length=5000)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return v.strip()


class ElectionCreateRequest(BaseModel):
    """Request to create an election with its candidates and voter roster."""

    title: str = Field(min_length=1, max_length=300)
    description: str = Field(min_length=1)
    start_date: datetime
    end_date: datetime
    candidates: list[CandidateSpec] = Field(min_length=1, description="Candidates in display order")
    voter_ids: list[str] = Field(default_factory=list, description="Voter identifiers on the roster")

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_timezone(cls, v: datetime) -> datetime:
        return as_utc(v)

    @field_validator("voter_ids")
    @classmethod
    def strip_voter_ids(cls, v: list[str]) -> list[str]:
        return [voter_id.strip() for voter_id in v]


class ElectionStatusUpdateRequest(BaseModel):
    """Admin override of an election's status."""

    status: ElectionStatus


class CandidateResponse(BaseModel):
    """Candidate as shown on a ballot."""

    id: UUID
    name: str
    description: str
    position: int

    model_config = {"from_attributes": True}


class ElectionSummary(BaseModel):
    """Compact election representation for list endpoints."""

    id: UUID
    title: str
    status: ElectionStatus
    start_date: datetime
    end_date: datetime

    model_config = {"from_attributes": True}

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_timezone(cls, v: datetime) -> datetime:
        return as_utc(v)


class ElectionDetailResponse(ElectionSummary):
    """Full election detail including its ballot."""

    description: str
    created_by: UUID | None = None
    candidates: list[CandidateResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class PaginatedElectionListResponse(BaseModel):
    """Paginated list of elections."""

    items: list[ElectionSummary]
    pagination: PaginationMeta


class EligibleVoterRequest(BaseModel):
    """Roster entry to add."""

    voter_id: str = Field(min_length=1, max_length=32)

    @field_validator("voter_id")
    @classmethod
    def strip_voter_id(cls, v: str) -> str:
        return v.strip()


class EligibleVoterResponse(BaseModel):
    """Roster entry as stored."""

    voter_id: str
    added_at: datetime
    added_by: UUID | None = None

    model_config = {"from_attributes": True}


class RosterChangeResponse(BaseModel):
    """Outcome of a roster add/remove (``changed`` is False for a no-op)."""

    election_id: UUID
    voter_id: str
    changed: bool
