"""Schemas for registration form submissions.

The form tool posts field values keyed by their question titles, so the
response model is declared with aliases that match those titles exactly.
"""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.networks import validate_email


def _check_email(value: str) -> str:
    # Validate only; keep the submitter's spelling for dedup
    validate_email(value)
    return value


class FormResponses(BaseModel):
    """Answers keyed by question title."""

    model_config = ConfigDict(
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="allow",
    )

    full_name: str = Field(alias="Full Name", min_length=1)
    college_email: str = Field(alias="College Email ID")
    course_branch: str | None = Field(default=None, alias="Course + Branch")
    year_of_study: str | None = Field(default=None, alias="Year of Study")
    whatsapp_number: str | None = Field(default=None, alias="Whatsapp Number")
    whatsapp_number_alt: str | None = Field(default=None, alias="WhatsApp Number")
    respondent_type: str | None = Field(default=None, alias="You are?")
    roll_number: str | None = Field(default=None, alias="University Roll No.")
    upi_id: str | None = Field(default=None, alias="UPI ID")
    screenshot: str | list[str] | None = Field(
        default=None,
        alias="Screenshot of transaction",
    )

    @field_validator("college_email")
    @classmethod
    def college_email_valid(cls, v: str) -> str:
        return _check_email(v)


class FormSubmission(BaseModel):
    """Envelope posted by the form webhook."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    form_id: str | None = Field(default=None, alias="formId")
    response_id: str | None = Field(default=None, alias="responseId")
    timestamp: str | None = None
    responder_email: str = Field(alias="responderEmail")
    responses: FormResponses

    @field_validator("responder_email")
    @classmethod
    def responder_email_valid(cls, v: str) -> str:
        return _check_email(v)


class NormalizedSubmission(BaseModel):
    """A submission reduced to participant fields."""

    name: str = Field(description="Title-cased full name")
    email: str = Field(description="Submitter email, the identity key")
    form_email: str = Field(description="Email typed into the form")
    phone: str | None = None
    transaction_id: str = ""
    screenshot: str | None = None
    response_id: str | None = None


class FieldIssue(BaseModel):
    """One field-level validation problem."""

    loc: list[str | int] = Field(description="Path to the offending field")
    message: str
    type: str


class ValidSubmission(BaseModel):
    """Validation succeeded."""

    kind: Literal["ok"] = "ok"
    submission: NormalizedSubmission


class InvalidSubmission(BaseModel):
    """Validation failed; nothing was normalized."""

    kind: Literal["error"] = "error"
    message: str
    issues: list[FieldIssue] = Field(default_factory=list)


SubmissionCheck = Annotated[
    ValidSubmission | InvalidSubmission,
    Field(discriminator="kind"),
]
