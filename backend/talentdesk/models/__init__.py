from .candidate import Candidate, VALID_STATUSES
from .counter import SequenceCounter

__all__ = [
    "Candidate", "VALID_STATUSES",
    "SequenceCounter",
]
