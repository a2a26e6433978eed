"""Canonical data models for the registration backend.

This module exports all domain models used throughout the application:
- StoredEntity: Base class with store id and creation timestamp
- Participant: Registered attendee and its scanner-facing snapshot
- FailureRecord: Dead-lettered webhook submission
"""

from stampede.models.base import StoredEntity, utc_now
from stampede.models.failure_record import (
    ExtractedFields,
    FailureRecord,
    FailureRecordUpdate,
    FailureStatus,
)
from stampede.models.participant import (
    Participant,
    ParticipantSnapshot,
    ParticipantStats,
    ParticipantStatus,
)

__all__ = [
    # Base
    "StoredEntity",
    "utc_now",
    # Participant
    "Participant",
    "ParticipantSnapshot",
    "ParticipantStats",
    "ParticipantStatus",
    # Dead letter
    "ExtractedFields",
    "FailureRecord",
    "FailureRecordUpdate",
    "FailureStatus",
]
