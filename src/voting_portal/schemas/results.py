"""Tally result Pydantic v2 schemas."""

from uuid import UUID

from pydantic import BaseModel, Field

from voting_portal.models.election import ElectionStatus


class CandidateTally(BaseModel):
    """Vote count for one candidate, recomputed from stored ballots."""

    id: UUID
    name: str
    vote_count: int = Field(ge=0)


class ElectionResults(BaseModel):
    """Official result view of one election."""

    election_id: UUID
    title: str
    status: ElectionStatus
    candidates: list[CandidateTally]
    total_votes: int = Field(ge=0)
    eligible_voter_count: int = Field(ge=0)
