"""Dead-letter record for webhook submissions that could not be ingested."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, model_validator

from stampede.models.base import StoredEntity


class FailureStatus(str, Enum):
    """Lifecycle of a failure record."""

    PENDING = "pending"
    RESOLVED = "resolved"
    IGNORED = "ignored"


class ExtractedFields(BaseModel):
    """Fields pulled best-effort out of a payload that failed validation."""

    name: str | None = None
    email: str | None = None
    phone: str | None = None
    transaction_id: str | None = None
    screenshot: str | None = None


class FailureRecord(StoredEntity):
    """A captured webhook payload awaiting operator repair.

    ``raw_data`` is the verbatim JSON of the inbound body. ``resolved_at`` is
    set exactly when ``status`` is resolved.
    """

    raw_data: str = Field(description="Inbound payload, JSON encoded")
    error_message: str = Field(description="Why ingestion failed")
    error_details: str | None = Field(
        default=None,
        description="JSON list of field-level validation issues",
    )
    status: FailureStatus = Field(default=FailureStatus.PENDING)
    extracted_name: str | None = None
    extracted_email: str | None = None
    extracted_phone: str | None = None
    extracted_transaction_id: str | None = None
    extracted_screenshot: str | None = None
    notes: str | None = None
    resolved_at: datetime | None = None
    capture_key: str | None = Field(
        default=None,
        description="Idempotency key of the write that stored this record",
    )

    @model_validator(mode="after")
    def resolved_at_matches_status(self) -> "FailureRecord":
        """Keep resolved_at in step with status."""
        is_resolved = self.status == FailureStatus.RESOLVED
        if is_resolved != (self.resolved_at is not None):
            msg = "resolved_at must be set exactly when status is resolved"
            raise ValueError(msg)
        return self

    @property
    def is_promotable(self) -> bool:
        """True when enough was extracted to create a participant."""
        return bool(self.extracted_name and self.extracted_email)


class FailureRecordUpdate(BaseModel):
    """Partial operator edit of a failure record."""

    extracted_name: str | None = None
    extracted_email: str | None = None
    extracted_phone: str | None = None
    extracted_transaction_id: str | None = None
    extracted_screenshot: str | None = None
    notes: str | None = None
    status: FailureStatus | None = None
