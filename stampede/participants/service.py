"""Operator-facing participant management."""

import structlog
from pydantic import BaseModel, Field, field_validator
from pydantic.networks import validate_email

from stampede.models import Participant, ParticipantStats, ParticipantStatus
from stampede.repositories import ParticipantConflictError, ParticipantRepository

logger = structlog.get_logger()


class ParticipantNotFoundError(Exception):
    """Raised when an operator action targets an unknown participant."""


class ParticipantExistsError(Exception):
    """Raised when manual entry repeats an existing (name, email) pair."""


class NoUpdateDataError(ValueError):
    """Raised when an edit carries no fields."""


class ParticipantCreate(BaseModel):
    """Manual registration entered by an operator."""

    name: str = Field(min_length=1, description="Full name")
    email: str = Field(description="Email address")
    phone: str | None = None
    transaction_id: str | None = None
    screenshot: str | None = None
    status: ParticipantStatus = ParticipantStatus.REGISTERED

    model_config = {"str_strip_whitespace": True}

    @field_validator("email")
    @classmethod
    def email_valid(cls, v: str) -> str:
        validate_email(v)
        return v


class ParticipantUpdate(BaseModel):
    """Partial operator edit. Omitted or null fields are left unchanged."""

    name: str | None = Field(default=None, min_length=1, max_length=200)
    email: str | None = None
    phone: str | None = None
    transaction_id: str | None = None
    screenshot: str | None = None
    status: ParticipantStatus | None = None
    attended: bool | None = None

    model_config = {"str_strip_whitespace": True}

    @field_validator("email")
    @classmethod
    def email_valid(cls, v: str | None) -> str | None:
        if v is not None:
            validate_email(v)
        return v

    def changes(self) -> dict:
        """Fields that were given a value."""
        return {k: v for k, v in self.model_dump().items() if v is not None}


class ParticipantService:
    """Manual entry and edits, removal and dashboard counters."""

    def __init__(self, participant_repo: ParticipantRepository):
        self._participants = participant_repo

    async def create_manual(self, data: ParticipantCreate) -> Participant:
        """Register a participant by hand.

        Raises:
            ParticipantExistsError: If (name, email) is already registered
        """
        created = await self._participants.create_if_absent(
            Participant(
                name=data.name,
                email=data.email,
                phone=data.phone or None,
                transaction_id=data.transaction_id or None,
                screenshot=data.screenshot or None,
                status=data.status,
            )
        )
        if created is None:
            raise ParticipantExistsError(
                "Participant already exists with this name and email"
            )
        logger.info("participant added manually", email=created.email)
        return created

    async def list_participants(self) -> list[Participant]:
        return await self._participants.list_all()

    async def update(self, participant_id: int, data: ParticipantUpdate) -> Participant:
        """Edit participant details by id.

        Raises:
            NoUpdateDataError: If no field was given
            ParticipantNotFoundError: If the id is unknown
            ParticipantExistsError: If the edit collides with another participant
        """
        changes = data.changes()
        if not changes:
            raise NoUpdateDataError("No data provided for update")
        try:
            updated = await self._participants.update(participant_id, changes)
        except ParticipantConflictError as e:
            raise ParticipantExistsError(
                "Participant already exists with this name and email"
            ) from e
        if updated is None:
            raise ParticipantNotFoundError(f"No participant with id {participant_id}")
        logger.info(
            "participant updated",
            participant_id=participant_id,
            fields=sorted(changes),
        )
        return updated

    async def delete(self, participant_id: int) -> None:
        """Remove a participant.

        Raises:
            ParticipantNotFoundError: If the id is unknown
        """
        if not await self._participants.delete(participant_id):
            raise ParticipantNotFoundError(f"No participant with id {participant_id}")
        logger.info("participant removed", participant_id=participant_id)

    async def stats(self) -> ParticipantStats:
        return await self._participants.stats()
