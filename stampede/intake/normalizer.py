"""Validation, normalization and best-effort extraction of form payloads.

``validate_submission`` returns a tagged result instead of raising, so the
pipeline can route shape errors to the dead-letter store. ``extract_fields``
never raises: it is called on payloads already known to be broken.
"""

from collections.abc import Callable, Mapping
from typing import Any

from pydantic import ValidationError

from stampede.config import settings
from stampede.intake.schemas import (
    FieldIssue,
    FormSubmission,
    InvalidSubmission,
    NormalizedSubmission,
    ValidSubmission,
)
from stampede.models import ExtractedFields

INVALID_FORMAT_MESSAGE = "Invalid data format"

# Question titles, in the order they are tried
PHONE_FIELDS = ("Whatsapp Number", "WhatsApp Number")
TRANSACTION_FIELD = "UPI ID"
SCREENSHOT_FIELD = "Screenshot of transaction"
NAME_FIELD = "Full Name"
FORM_EMAIL_FIELD = "College Email ID"


def title_case(value: str) -> str:
    """Lowercase, then capitalize the first letter of each word."""
    words = value.strip().lower().split()
    return " ".join(word[:1].upper() + word[1:] for word in words)


def _text(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def first_present(
    responses: Mapping[str, Any],
    fields: tuple[str, ...],
) -> str | None:
    """Return the first non-empty string among the given fields."""
    for field in fields:
        found = _text(responses.get(field))
        if found is not None:
            return found
    return None


def resolve_screenshot(
    value: Any,
    url_template: str | None = None,
) -> str | None:
    """Turn a screenshot answer into a viewable URL.

    File-upload questions deliver a list of file ids; the first one is turned
    into a viewer URL. Plain strings are taken as URLs already.
    """
    if isinstance(value, list):
        file_id = _text(value[0]) if value else None
        if file_id is None:
            return None
        template = url_template or settings.drive_view_url_template
        return template.format(file_id=file_id)
    return _text(value)


def _issues(error: ValidationError) -> list[FieldIssue]:
    return [
        FieldIssue(
            loc=list(item["loc"]),
            message=item["msg"],
            type=item["type"],
        )
        for item in error.errors()
    ]


def validate_submission(payload: Any) -> ValidSubmission | InvalidSubmission:
    """Validate and normalize a raw webhook body.

    Args:
        payload: Decoded JSON body of any shape

    Returns:
        ValidSubmission with normalized fields, or InvalidSubmission listing
        field-level issues
    """
    try:
        form = FormSubmission.model_validate(payload)
    except ValidationError as e:
        return InvalidSubmission(message=INVALID_FORMAT_MESSAGE, issues=_issues(e))

    answers = form.responses.model_dump(by_alias=True)
    normalized = NormalizedSubmission(
        name=title_case(form.responses.full_name),
        email=form.responder_email,
        form_email=form.responses.college_email,
        phone=first_present(answers, PHONE_FIELDS),
        transaction_id=form.responses.upi_id or "",
        screenshot=resolve_screenshot(form.responses.screenshot),
        response_id=form.response_id,
    )
    if not normalized.name:
        issue = FieldIssue(
            loc=["responses", NAME_FIELD],
            message="Name is empty after normalization",
            type="value_error",
        )
        return InvalidSubmission(message=INVALID_FORMAT_MESSAGE, issues=[issue])
    return ValidSubmission(submission=normalized)


def _safely(getter: Callable[[], str | None]) -> str | None:
    try:
        return getter()
    except Exception:
        return None


def extract_fields(payload: Any) -> ExtractedFields:
    """Pull whatever participant fields can be read from a broken payload."""
    if not isinstance(payload, Mapping):
        return ExtractedFields()
    responses = payload.get("responses")
    if not isinstance(responses, Mapping):
        responses = {}

    raw_name = _text(responses.get(NAME_FIELD))
    return ExtractedFields(
        name=title_case(raw_name) if raw_name else None,
        email=_text(responses.get(FORM_EMAIL_FIELD))
        or _text(payload.get("responderEmail")),
        phone=first_present(responses, PHONE_FIELDS),
        transaction_id=_text(responses.get(TRANSACTION_FIELD)),
        screenshot=_safely(lambda: resolve_screenshot(responses.get(SCREENSHOT_FIELD))),
    )
