"""Participant model for registered event attendees."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, field_validator

from stampede.models.base import StoredEntity


class ParticipantStatus(str, Enum):
    """Payment verification state of a registration."""

    REGISTERED = "registered"
    VERIFIED = "verified"

    def toggled(self) -> "ParticipantStatus":
        """Return the opposite status."""
        if self is ParticipantStatus.REGISTERED:
            return ParticipantStatus.VERIFIED
        return ParticipantStatus.REGISTERED


class Participant(StoredEntity):
    """A person registered for the event.

    Participants arrive from:
    - The registration form webhook
    - Manual operator entry
    - Spreadsheet bulk import
    - Promotion of a repaired failure record

    The pair (name, email) is the natural identity.
    """

    name: str = Field(min_length=1, max_length=200, description="Display name")
    email: str = Field(min_length=1, description="Submitter email (dedup key)")
    phone: str | None = Field(default=None, description="Contact number")
    transaction_id: str | None = Field(
        default=None,
        description="Payment transaction reference",
    )
    screenshot: str | None = Field(
        default=None,
        description="URL of the payment proof",
    )
    status: ParticipantStatus = Field(
        default=ParticipantStatus.REGISTERED,
        description="Payment verification state",
    )
    attended: bool = Field(default=False, description="Checked in at the gate")
    ticket_sent: bool = Field(default=False, description="Ticket delivered")
    ticket_sent_at: datetime | None = Field(default=None)

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        """Ensure name is not just whitespace."""
        if not v.strip():
            msg = "Name cannot be empty or whitespace"
            raise ValueError(msg)
        return v.strip()

    def snapshot(self) -> "ParticipantSnapshot":
        """Displayable subset shown to the scanning client."""
        return ParticipantSnapshot(
            name=self.name,
            email=self.email,
            status=self.status,
            screenshot=self.screenshot,
            attended=self.attended,
        )


class ParticipantSnapshot(BaseModel):
    """What a gate scanner is allowed to see about a participant."""

    name: str
    email: str
    status: ParticipantStatus
    screenshot: str | None = None
    attended: bool


class ParticipantStats(BaseModel):
    """Aggregate counters for the operator dashboard."""

    total: int = 0
    registered: int = 0
    verified: int = 0
    attended: int = 0
    not_attended: int = 0
    tickets_sent: int = 0
    attendance_rate: int = Field(default=0, description="Percent, rounded")
    ticket_sent_rate: int = Field(default=0, description="Percent, rounded")
