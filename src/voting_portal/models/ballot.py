"""Ballot store ORM models.

Ballot is the immutable, authoritative record of one voter's choice in one
election. VoterParticipation is the denormalized "voted elections" set kept
per voter as a fast-path cache.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from voting_portal.models.base import Base, UUIDMixin


class Ballot(Base, UUIDMixin):
    """Write-once ballot. No updates or deletes in normal operation."""

    __tablename__ = "ballots"

    election_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("elections.id", ondelete="RESTRICT"),
        nullable=False,
    )
    voter_user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
    )
    candidate_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("candidates.id", ondelete="RESTRICT"),
        nullable=False,
    )
    cast_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        UniqueConstraint("election_id", "voter_user_id", name="uq_ballot_election_voter"),
        Index("idx_ballots_election_candidate", "election_id", "candidate_id"),
        Index("idx_ballots_voter_user_id", "voter_user_id"),
    )


class VoterParticipation(Base):
    """Marks that a voter has completed a ballot in an election."""

    __tablename__ = "voter_participations"

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    election_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("elections.id", ondelete="CASCADE"),
        primary_key=True,
    )
    voted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
