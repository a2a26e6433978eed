"""Repository layer for data persistence.

Repositories encapsulate data access and give the service layer a small,
store-agnostic interface.
"""

from stampede.repositories.failure_repo import FailureRecordRepository
from stampede.repositories.participant_repo import (
    ParticipantConflictError,
    ParticipantRepository,
)

__all__ = [
    "FailureRecordRepository",
    "ParticipantConflictError",
    "ParticipantRepository",
]
