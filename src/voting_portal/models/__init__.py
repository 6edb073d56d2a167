"""ORM models. Importing this package registers every table on ``Base.metadata``."""

from voting_portal.models.ballot import Ballot, VoterParticipation
from voting_portal.models.candidate import Candidate
from voting_portal.models.election import Election, ElectionStatus, EligibleVoter
from voting_portal.models.user import User, UserRole

__all__ = [
    "Ballot",
    "Candidate",
    "Election",
    "ElectionStatus",
    "EligibleVoter",
    "User",
    "UserRole",
    "VoterParticipation",
]
