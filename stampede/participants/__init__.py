"""Participant management for operators."""

from stampede.participants.service import (
    NoUpdateDataError,
    ParticipantCreate,
    ParticipantExistsError,
    ParticipantNotFoundError,
    ParticipantService,
    ParticipantUpdate,
)

__all__ = [
    "NoUpdateDataError",
    "ParticipantCreate",
    "ParticipantExistsError",
    "ParticipantNotFoundError",
    "ParticipantService",
    "ParticipantUpdate",
]
