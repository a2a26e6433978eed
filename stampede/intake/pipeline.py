"""Webhook ingestion: authorize, validate, dedup, insert or dead-letter.

Anything that goes wrong after a payload has been received ends up as a
FailureRecord. The only error that escapes ``ingest`` is a failure to write
that record, since at that point the payload would otherwise be lost.
"""

import asyncio
import hmac
import json
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any

import structlog
from libsql_client import LibsqlError
from pydantic import BaseModel, Field
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from stampede.intake.normalizer import extract_fields, validate_submission
from stampede.intake.schemas import FieldIssue, InvalidSubmission
from stampede.models import FailureRecord, Participant, ParticipantStatus
from stampede.repositories import FailureRecordRepository, ParticipantRepository

logger = structlog.get_logger()

# libSQL error codes for a store that is momentarily unavailable
TRANSIENT_STORE_CODES = frozenset({"SQLITE_BUSY", "SQLITE_LOCKED"})

PROCESSING_ERROR_MESSAGE = "Submission could not be processed"
CANCELLED_MESSAGE = "Request cancelled during processing"


def is_transient_store_error(exc: BaseException) -> bool:
    """True for store failures worth another attempt."""
    if isinstance(exc, (ConnectionError, TimeoutError)):
        return True
    return isinstance(exc, LibsqlError) and exc.code in TRANSIENT_STORE_CODES


class DeadLetterWriteError(Exception):
    """Raised when a failed submission could not be recorded."""


class IngestOutcome(str, Enum):
    """What happened to a webhook submission."""

    CREATED = "created"
    DUPLICATE = "duplicate"
    REJECTED = "rejected"
    CAPTURED = "captured"


class IngestResult(BaseModel):
    """Outcome of one webhook call."""

    outcome: IngestOutcome
    participant: Participant | None = Field(
        default=None,
        description="Created or matching participant",
    )
    failure_id: int | None = Field(
        default=None,
        description="Id of the dead-letter record when captured",
    )
    error: str | None = Field(
        default=None,
        description="Coarse error shown to the sender",
    )

    @property
    def accepted(self) -> bool:
        return self.outcome != IngestOutcome.REJECTED

    @property
    def message(self) -> str:
        return {
            IngestOutcome.CREATED: "Participant added successfully",
            IngestOutcome.DUPLICATE: "User already exists",
            IngestOutcome.REJECTED: "Unauthorized",
            IngestOutcome.CAPTURED: "Submission recorded for manual review",
        }[self.outcome]


def _raw_json(payload: Any) -> str:
    return json.dumps(payload, default=str, ensure_ascii=False)


@dataclass
class _Submission:
    """One webhook body and the dead-letter write started for it, if any."""

    payload: Any
    capture: "asyncio.Future[IngestResult] | None" = None


class WebhookIngestionPipeline:
    """Turns form webhook calls into participants or failure records."""

    def __init__(
        self,
        participant_repo: ParticipantRepository,
        failure_repo: FailureRecordRepository,
        webhook_secret: str | None = None,
        retry_attempts: int = 3,
    ):
        """Initialize pipeline.

        Args:
            participant_repo: Store for registered participants
            failure_repo: Dead-letter store
            webhook_secret: Bearer token required when set
            retry_attempts: Attempts for each dead-letter write
        """
        self._participants = participant_repo
        self._failures = failure_repo
        self._secret = webhook_secret
        self._retry_attempts = retry_attempts

    def authorize(self, authorization: str | None) -> bool:
        """Check the Authorization header against the configured token."""
        if not self._secret:
            return True
        if not authorization:
            return False
        return hmac.compare_digest(
            authorization.encode(),
            f"Bearer {self._secret}".encode(),
        )

    async def ingest(
        self,
        payload: Any,
        authorization: str | None = None,
    ) -> IngestResult:
        """Process one webhook body.

        Args:
            payload: Decoded JSON body, any shape
            authorization: Raw Authorization header, if any

        Returns:
            IngestResult describing the outcome

        Raises:
            DeadLetterWriteError: If a failure could not be recorded
        """
        if not self.authorize(authorization):
            logger.warning("webhook rejected", reason="invalid credentials")
            return IngestResult(outcome=IngestOutcome.REJECTED)

        submission = _Submission(payload)
        try:
            return await self._process(submission)
        except asyncio.CancelledError:
            # Reuses a capture already in flight instead of starting another
            try:
                await self._capture_once(submission, CANCELLED_MESSAGE)
            except DeadLetterWriteError:
                logger.error("cancelled submission lost", reason="dead letter failed")
            raise
        except DeadLetterWriteError:
            raise
        except Exception as e:
            logger.error(
                "webhook processing failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            return await self._capture_once(submission, str(e) or type(e).__name__)

    async def _process(self, submission: _Submission) -> IngestResult:
        check = validate_submission(submission.payload)
        if isinstance(check, InvalidSubmission):
            logger.info("webhook payload invalid", issues=len(check.issues))
            return await self._capture_once(submission, check.message, check.issues)

        normalized = check.submission
        existing = await self._participants.get(normalized.name, normalized.email)
        if existing is not None:
            logger.info("webhook duplicate skipped", email=normalized.email)
            return IngestResult(outcome=IngestOutcome.DUPLICATE, participant=existing)

        created = await self._participants.create_if_absent(
            Participant(
                name=normalized.name,
                email=normalized.email,
                phone=normalized.phone,
                transaction_id=normalized.transaction_id,
                screenshot=normalized.screenshot,
                status=ParticipantStatus.REGISTERED,
            )
        )
        if created is None:
            # Lost a race with a concurrent twin
            logger.info("webhook duplicate skipped", email=normalized.email)
            return IngestResult(outcome=IngestOutcome.DUPLICATE)

        logger.info(
            "participant registered",
            name=created.name,
            email=created.email,
            participant_id=created.id,
        )
        return IngestResult(outcome=IngestOutcome.CREATED, participant=created)

    async def _capture_once(
        self,
        submission: _Submission,
        error_message: str,
        issues: list[FieldIssue] | None = None,
    ) -> IngestResult:
        """Write the submission's failure record, at most once per submission.

        The write runs as its own task so a cancelled request does not
        interrupt it halfway.
        """
        if submission.capture is None:
            submission.capture = asyncio.ensure_future(
                self._capture(submission.payload, error_message, issues)
            )
        return await asyncio.shield(submission.capture)

    async def _capture(
        self,
        payload: Any,
        error_message: str,
        issues: list[FieldIssue] | None = None,
    ) -> IngestResult:
        extracted = extract_fields(payload)
        record = FailureRecord(
            raw_data=_raw_json(payload),
            error_message=error_message,
            error_details=(
                json.dumps([issue.model_dump() for issue in issues]) if issues else None
            ),
            extracted_name=extracted.name,
            extracted_email=extracted.email,
            extracted_phone=extracted.phone,
            extracted_transaction_id=extracted.transaction_id,
            extracted_screenshot=extracted.screenshot,
            capture_key=uuid.uuid4().hex,
        )

        # The capture key makes a retry after a timed-out insert a no-op
        @retry(
            stop=stop_after_attempt(self._retry_attempts),
            wait=wait_exponential(multiplier=0.1, min=0.1, max=2),
            retry=retry_if_exception(is_transient_store_error),
            before_sleep=before_sleep_log(logger, log_level=20),  # INFO level
            reraise=True,
        )
        async def write() -> FailureRecord:
            return await self._failures.insert(record)

        try:
            stored = await write()
        except Exception as e:
            logger.error("dead letter write failed", error=str(e))
            raise DeadLetterWriteError(str(e)) from e

        logger.info(
            "webhook payload captured",
            failure_id=stored.id,
            extracted_email=stored.extracted_email,
        )
        coarse = error_message if issues else PROCESSING_ERROR_MESSAGE
        return IngestResult(
            outcome=IngestOutcome.CAPTURED,
            failure_id=stored.id,
            error=coarse,
        )
