"""Vote casting Pydantic v2 schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class VoteRequest(BaseModel):
    """A voter's choice in one election."""

    candidate_id: UUID


class VoteReceipt(BaseModel):
    """Confirmation of an accepted ballot."""

    ballot_id: UUID = Field(validation_alias="id")
    election_id: UUID
    candidate_id: UUID
    cast_at: datetime

    model_config = {"from_attributes": True, "populate_by_name": True}


class VoteResult(BaseModel):
    """Typed outcome of a vote submission.

    Exactly one of ``receipt`` (accepted) or ``reason`` (rejected) is set.
    """

    accepted: bool
    receipt: VoteReceipt | None = None
    reason: str | None = Field(default=None, description="Machine-readable rejection code")
    message: str | None = Field(default=None, description="User-facing rejection message")
