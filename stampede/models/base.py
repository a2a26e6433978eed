"""Base entity class for stored domain models."""

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


class StoredEntity(BaseModel):
    """Base class for rows persisted in the registration store.

    Provides:
    - Store-assigned integer ID
    - Creation timestamp
    - Standard serialization config
    """

    model_config = ConfigDict(
        str_strip_whitespace=True,
        validate_default=True,
        from_attributes=True,
    )

    id: int | None = Field(default=None, description="Store-assigned identifier")
    created_at: datetime = Field(
        default_factory=utc_now,
        description="When the row was created",
    )
