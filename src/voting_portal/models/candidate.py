"""Candidate ORM model with its denormalized vote counter."""

import uuid

from sqlalchemy import ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from voting_portal.models.base import Base, TimestampMixin, UUIDMixin


class Candidate(Base, UUIDMixin, TimestampMixin):
    """A choice on one election's ballot.

    ``vote_count`` is a cache of the ballot table and is never used for
    official results.
    """

    __tablename__ = "candidates"

    election_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("elections.id", ondelete="CASCADE"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="", server_default="")
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    vote_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")

    # Relationships
    election: Mapped["Election"] = relationship(back_populates="candidates")  # noqa: F821

    __table_args__ = (
        UniqueConstraint("election_id", "name", name="uq_candidate_election_name"),
        Index("idx_candidates_election_position", "election_id", "position"),
    )
