"""Unit tests for vote casting schemas."""

import uuid
from datetime import UTC, datetime

from voting_portal.models.ballot import Ballot
from voting_portal.schemas.vote import VoteReceipt, VoteResult


class TestVoteReceipt:
    """Tests for VoteReceipt."""

    def test_built_from_ballot(self) -> None:
        ballot = Ballot(
            id=uuid.uuid4(),
            election_id=uuid.uuid4(),
            voter_user_id=uuid.uuid4(),
            candidate_id=uuid.uuid4(),
            cast_at=datetime(2026, 4, 1, 12, 0, tzinfo=UTC),
        )

        receipt = VoteReceipt.model_validate(ballot)

        assert receipt.ballot_id == ballot.id
        assert receipt.candidate_id == ballot.candidate_id
        assert "voter_user_id" not in receipt.model_dump()
        assert "ballot_id" in receipt.model_dump()


class TestVoteResult:
    """Tests for VoteResult."""

    def test_rejection_serializes_reason(self) -> None:
        result = VoteResult(
            accepted=False, reason="duplicate_vote", message="You have already voted in this election."
        )
        assert result.model_dump(mode="json") == {
            "accepted": False,
            "receipt": None,
            "reason": "duplicate_vote",
            "message": "You have already voted in this election.",
        }
