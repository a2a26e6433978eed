"""Operator repair and promotion of dead-lettered submissions."""

import structlog

from stampede.models import (
    FailureRecord,
    FailureRecordUpdate,
    FailureStatus,
    Participant,
    ParticipantStatus,
)
from stampede.repositories import FailureRecordRepository, ParticipantRepository

logger = structlog.get_logger()


class RecoveryError(Exception):
    """Base error for dead-letter operations."""


class FailureRecordNotFoundError(RecoveryError):
    """No failure record with the given id."""


class AlreadyResolvedError(RecoveryError):
    """The record has already been promoted."""


class InsufficientDataError(RecoveryError):
    """Extracted name or email is missing."""


class DeadLetterService:
    """List, edit, delete and resolve failure records.

    Resolving goes through the same dedup-respecting insert as the webhook,
    so resolving a record whose participant already exists only flips the
    record's status.
    """

    def __init__(
        self,
        failure_repo: FailureRecordRepository,
        participant_repo: ParticipantRepository,
    ):
        self._failures = failure_repo
        self._participants = participant_repo

    async def list_records(
        self,
        status: FailureStatus | None = None,
    ) -> list[FailureRecord]:
        """Records newest first, optionally filtered by status."""
        return await self._failures.list_records(status)

    async def get_record(self, record_id: int) -> FailureRecord:
        record = await self._failures.get(record_id)
        if record is None:
            raise FailureRecordNotFoundError(f"Failure record {record_id} not found")
        return record

    async def update_record(
        self,
        record_id: int,
        changes: FailureRecordUpdate,
    ) -> FailureRecord:
        """Apply an operator edit.

        Raises:
            FailureRecordNotFoundError: If the id is unknown
        """
        updated = await self._failures.update(record_id, changes)
        if updated is None:
            raise FailureRecordNotFoundError(f"Failure record {record_id} not found")
        logger.info(
            "failure record updated",
            failure_id=record_id,
            fields=sorted(changes.model_dump(exclude_unset=True)),
        )
        return updated

    async def delete_record(self, record_id: int) -> None:
        """Delete a record.

        Raises:
            FailureRecordNotFoundError: If the id is unknown
        """
        if not await self._failures.delete(record_id):
            raise FailureRecordNotFoundError(f"Failure record {record_id} not found")
        logger.info("failure record deleted", failure_id=record_id)

    async def resolve(self, record_id: int) -> FailureRecord:
        """Promote a repaired record into a participant.

        The record's status only changes after the participant insert has
        succeeded.

        Returns:
            The resolved record

        Raises:
            FailureRecordNotFoundError: If the id is unknown
            AlreadyResolvedError: If the record was resolved before
            InsufficientDataError: If extracted name or email is empty
        """
        record = await self.get_record(record_id)
        if record.status == FailureStatus.RESOLVED:
            raise AlreadyResolvedError(f"Failure record {record_id} already resolved")
        if not record.is_promotable:
            raise InsufficientDataError("Insufficient data to create user")

        created = await self._participants.create_if_absent(
            Participant(
                name=record.extracted_name,
                email=record.extracted_email,
                phone=record.extracted_phone or None,
                transaction_id=record.extracted_transaction_id or None,
                screenshot=record.extracted_screenshot or None,
                status=ParticipantStatus.REGISTERED,
            )
        )

        if not await self._failures.mark_resolved(record_id):
            # Deleted or resolved by someone else since we read it
            current = await self._failures.get(record_id)
            if current is None:
                raise FailureRecordNotFoundError(f"Failure record {record_id} not found")
            raise AlreadyResolvedError(f"Failure record {record_id} already resolved")

        logger.info(
            "failure record resolved",
            failure_id=record_id,
            email=record.extracted_email,
            participant_created=created is not None,
        )
        return await self.get_record(record_id)
