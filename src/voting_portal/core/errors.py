"""Business-rule error taxonomy for the vote-integrity core.

Every rejection carries a stable machine-readable ``code`` and the HTTP
status the web layer should answer with. Messages are safe to show to end
users; storage details never go into them.
"""


class VotingError(Exception):
    """Base class for all business-rule failures raised by the services."""

    code: str = "voting_error"
    status_code: int = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(VotingError):
    """Malformed or missing input."""

    code = "validation_error"
    status_code = 422


class NotFoundError(VotingError):
    """An election, candidate or voter id does not resolve."""

    code = "not_found"
    status_code = 404


class ElectionNotActiveError(VotingError):
    """The election is not accepting ballots right now."""

    code = "election_not_active"
    status_code = 409


class NotEligibleError(VotingError):
    """The voter is not on the election's eligibility roster."""

    code = "not_eligible"
    status_code = 403


class DuplicateVoteError(VotingError):
    """A ballot already exists for this voter in this election."""

    code = "duplicate_vote"
    status_code = 409


class IntegrityConflictError(DuplicateVoteError):
    """The storage-level uniqueness check rejected a ballot the pre-checks allowed.

    Raised when two submissions for the same voter race and this one lost.
    """

    code = "integrity_conflict"


class InvalidCandidateError(VotingError):
    """The candidate is not part of the target election."""

    code = "invalid_candidate"
    status_code = 422


class CandidateHasBallotsError(VotingError):
    """A candidate cannot be removed once ballots reference it."""

    code = "candidate_has_ballots"
    status_code = 409


class ElectionHasBallotsError(VotingError):
    """An election cannot be deleted once ballots reference it."""

    code = "election_has_ballots"
    status_code = 409


class VoterIdGenerationError(VotingError):
    """No unused voter identifier could be generated."""

    code = "voter_id_generation_failed"
    status_code = 503


def _all_error_types(base: type[VotingError] = VotingError) -> list[type[VotingError]]:
    types = [base]
    for subclass in base.__subclasses__():
        types.extend(_all_error_types(subclass))
    return types


def status_for_code(code: str) -> int:
    """Map a rejection code back to its HTTP status (400 for unknown codes)."""
    for error_type in _all_error_types():
        if error_type.code == code:
            return error_type.status_code
    return VotingError.status_code
