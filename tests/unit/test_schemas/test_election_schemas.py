"""Unit tests for election registry schemas."""

from datetime import UTC, datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from voting_portal.schemas.election import (
    CandidateSpec,
    ElectionCreateRequest,
    ElectionSummary,
    EligibleVoterRequest,
    as_utc,
)


def _payload(**overrides: object) -> dict[str, object]:
    data: dict[str, object] = {
        "title": "Board Election",
        "description": "Annual board election",
        "start_date": "2026-04-01T09:00:00+02:00",
        "end_date": "2026-04-02T09:00:00Z",
        "candidates": [{"name": " Alice Smith "}],
    }
    data.update(overrides)
    return data


class TestAsUtc:
    def test_naive_value_is_tagged_utc(self) -> None:
        assert as_utc(datetime(2026, 4, 1, 9, 0)) == datetime(2026, 4, 1, 9, 0, tzinfo=UTC)

    def test_offset_value_is_converted(self) -> None:
        converted = as_utc(datetime(2026, 4, 1, 9, 0, tzinfo=timezone(timedelta(hours=-5))))
        assert converted.tzinfo is UTC
        assert converted.hour == 14


class TestElectionCreateRequest:
    """Tests for ElectionCreateRequest."""

    def test_dates_normalized_to_utc(self) -> None:
        request = ElectionCreateRequest.model_validate(_payload())
        assert request.start_date == datetime(2026, 4, 1, 7, 0, tzinfo=UTC)
        assert request.start_date.utcoffset() == timedelta(0)

    def test_naive_dates_treated_as_utc(self) -> None:
        request = ElectionCreateRequest.model_validate(_payload(start_date="2026-04-01T09:00:00"))
        assert request.start_date == datetime(2026, 4, 1, 9, 0, tzinfo=UTC)

    def test_candidate_names_stripped(self) -> None:
        request = ElectionCreateRequest.model_validate(_payload())
        assert request.candidates == [CandidateSpec(name="Alice Smith", description="")]

    def test_voter_ids_stripped(self) -> None:
        request = ElectionCreateRequest.model_validate(_payload(voter_ids=[" VOT100001 "]))
        assert request.voter_ids == ["VOT100001"]

    def test_requires_a_candidate(self) -> None:
        with pytest.raises(ValidationError):
            ElectionCreateRequest.model_validate(_payload(candidates=[]))

    def test_requires_title(self) -> None:
        with pytest.raises(ValidationError):
            ElectionCreateRequest.model_validate(_payload(title=""))


class TestResponses:
    """Tests for response normalization."""

    def test_summary_attaches_utc_to_naive_storage_values(self) -> None:
        summary = ElectionSummary(
            id="6f1c7c32-7f1e-4a40-9d43-4b0e8a1b5f00",
            title="Board Election",
            status="active",
            start_date=datetime(2026, 4, 1, 9, 0),
            end_date=datetime(2026, 4, 2, 9, 0, tzinfo=timezone(timedelta(hours=1))),
        )
        assert summary.start_date.tzinfo == UTC
        assert summary.end_date == datetime(2026, 4, 2, 8, 0, tzinfo=UTC)

    def test_roster_entry_stripped(self) -> None:
        assert EligibleVoterRequest(voter_id=" VOT100001 ").voter_id == "VOT100001"
