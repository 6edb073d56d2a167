"""Election registry ORM models.

Provides Election and its owned eligibility roster (EligibleVoter). Candidates
live in ``voting_portal.models.candidate`` and are ordered by ``position``.
"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, String, Text, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from voting_portal.models.base import Base, TimestampMixin, UUIDMixin


class ElectionStatus(enum.StrEnum):
    """Administered election lifecycle state."""

    UPCOMING = "upcoming"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Election(Base, UUIDMixin, TimestampMixin):
    """A time-boxed ballot contest with a fixed candidate list and voter roster.

    Attributes:
        title: Display title.
        description: Free-form description shown to voters.
        start_date: Beginning of the voting window (inclusive, UTC).
        end_date: End of the voting window (inclusive, UTC).
        status: Administered state; see ElectionStatus.
        created_by: Admin user who created the election.
    """

    __tablename__ = "elections"

    title: Mapped[str] = mapped_column(String(300), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=ElectionStatus.UPCOMING,
        server_default="upcoming",
    )
    created_by: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    # Relationships
    candidates: Mapped[list["Candidate"]] = relationship(  # noqa: F821
        back_populates="election",
        order_by="Candidate.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    eligible_voters: Mapped[list["EligibleVoter"]] = relationship(
        back_populates="election",
        order_by="EligibleVoter.added_at",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="raise",
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('upcoming', 'active', 'completed', 'cancelled')",
            name="ck_election_status",
        ),
        CheckConstraint("end_date > start_date", name="ck_election_window"),
        Index("idx_elections_status", "status"),
        Index("idx_elections_start_date", "start_date"),
    )


class EligibleVoter(Base, UUIDMixin):
    """One entry of an election's eligibility roster."""

    __tablename__ = "election_eligible_voters"

    election_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("elections.id", ondelete="CASCADE"),
        nullable=False,
    )
    voter_id: Mapped[str] = mapped_column(String(32), nullable=False)
    added_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    added_by: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    # Relationships
    election: Mapped["Election"] = relationship(back_populates="eligible_voters")

    __table_args__ = (Index("idx_eligible_voters_election_voter", "election_id", "voter_id"),)
