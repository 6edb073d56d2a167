"""Unit tests for the candidate ledger service."""

import uuid

import pytest
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from voting_portal.models.candidate import Candidate
from voting_portal.models.election import Election
from voting_portal.schemas.voter import VoterIdentity
from voting_portal.services import candidate_service, voting_service


async def _cached_count(session: AsyncSession, candidate_id: uuid.UUID) -> int:
    return (await session.execute(select(Candidate.vote_count).where(Candidate.id == candidate_id))).scalar_one()


class TestLookups:
    """Tests for candidate queries."""

    @pytest.mark.asyncio
    async def test_list_for_election_in_display_order(
        self, async_session: AsyncSession, active_election: Election
    ) -> None:
        candidates = await candidate_service.list_for_election(async_session, active_election.id)
        assert [c.name for c in candidates] == ["Alice Smith", "Bob Jones"]

    @pytest.mark.asyncio
    async def test_get_candidate(self, async_session: AsyncSession, active_election: Election) -> None:
        bob = active_election.candidates[1]
        assert (await candidate_service.get_candidate(async_session, bob.id)) is bob
        assert await candidate_service.get_candidate(async_session, uuid.uuid4()) is None


class TestIncrementVote:
    """Tests for the atomic counter increment."""

    @pytest.mark.asyncio
    async def test_increment_is_relative(self, async_session: AsyncSession, active_election: Election) -> None:
        alice = active_election.candidates[0]

        await candidate_service.increment_vote(async_session, alice.id)
        await candidate_service.increment_vote(async_session, alice.id)
        await async_session.commit()

        assert await _cached_count(async_session, alice.id) == 2


class TestReconcileVoteCounts:
    """Tests for rebuilding cached counters from ballots."""

    @pytest.mark.asyncio
    async def test_repairs_drifted_counters(
        self, async_session: AsyncSession, active_election: Election, voter: VoterIdentity
    ) -> None:
        alice, bob = active_election.candidates
        await voting_service.cast_vote(async_session, active_election.id, alice.id, voter)
        # Simulate a partial write: a counter bumped without a ballot behind it.
        await async_session.execute(update(Candidate).where(Candidate.id == bob.id).values(vote_count=5))
        await async_session.commit()

        corrected = await candidate_service.reconcile_vote_counts(async_session, active_election.id)

        assert corrected == 1
        assert await _cached_count(async_session, alice.id) == 1
        assert await _cached_count(async_session, bob.id) == 0

    @pytest.mark.asyncio
    async def test_consistent_counters_untouched(
        self, async_session: AsyncSession, active_election: Election, voter: VoterIdentity
    ) -> None:
        alice = active_election.candidates[0]
        await voting_service.cast_vote(async_session, active_election.id, alice.id, voter)

        assert await candidate_service.reconcile_vote_counts(async_session, active_election.id) == 0
