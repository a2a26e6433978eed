"""Repository for dead-lettered webhook submissions."""

import logging
from datetime import datetime
from typing import Any

from stampede.db.client import DatabaseClient
from stampede.models import (
    FailureRecord,
    FailureRecordUpdate,
    FailureStatus,
    utc_now,
)

logger = logging.getLogger(__name__)

_COLUMNS = """
    id, raw_data, error_message, error_details, status,
    extracted_name, extracted_email, extracted_phone,
    extracted_transaction_id, extracted_screenshot,
    notes, created_at, resolved_at, capture_key
"""


def _parse_ts(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def _row_to_record(row: Any) -> FailureRecord:
    return FailureRecord(
        id=row[0],
        raw_data=row[1],
        error_message=row[2],
        error_details=row[3],
        status=FailureStatus(row[4]),
        extracted_name=row[5],
        extracted_email=row[6],
        extracted_phone=row[7],
        extracted_transaction_id=row[8],
        extracted_screenshot=row[9],
        notes=row[10],
        created_at=_parse_ts(row[11]),
        resolved_at=_parse_ts(row[12]),
        capture_key=row[13],
    )


class FailureRecordRepository:
    """Stores payloads that failed ingestion so an operator can repair them."""

    def __init__(self, db_client: DatabaseClient):
        self._db = db_client

    async def initialize(self) -> None:
        """Create failure_records table and indexes if not exists."""
        await self._db.execute_batch(
            [
                """
            CREATE TABLE IF NOT EXISTS failure_records (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                raw_data TEXT NOT NULL,
                error_message TEXT NOT NULL,
                error_details TEXT,
                status TEXT NOT NULL DEFAULT 'pending',
                extracted_name TEXT,
                extracted_email TEXT,
                extracted_phone TEXT,
                extracted_transaction_id TEXT,
                extracted_screenshot TEXT,
                notes TEXT,
                created_at TEXT NOT NULL,
                resolved_at TEXT,
                capture_key TEXT
            )
            """,
                """
            CREATE INDEX IF NOT EXISTS idx_failure_records_status
            ON failure_records(status)
            """,
                """
            CREATE INDEX IF NOT EXISTS idx_failure_records_created
            ON failure_records(created_at)
            """,
                """
            CREATE UNIQUE INDEX IF NOT EXISTS idx_failure_records_capture_key
            ON failure_records(capture_key)
            """,
            ]
        )

    async def insert(self, record: FailureRecord) -> FailureRecord:
        """Persist a new failure record.

        Inserting a record whose ``capture_key`` is already stored is a
        no-op that returns the stored row.

        Returns:
            The record with its store-assigned id
        """
        result = await self._db.execute(
            """
            INSERT INTO failure_records
                (raw_data, error_message, error_details, status,
                 extracted_name, extracted_email, extracted_phone,
                 extracted_transaction_id, extracted_screenshot,
                 notes, created_at, resolved_at, capture_key)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(capture_key) DO NOTHING
            """,
            [
                record.raw_data,
                record.error_message,
                record.error_details,
                record.status.value,
                record.extracted_name,
                record.extracted_email,
                record.extracted_phone,
                record.extracted_transaction_id,
                record.extracted_screenshot,
                record.notes,
                record.created_at.isoformat(),
                record.resolved_at.isoformat() if record.resolved_at else None,
                record.capture_key,
            ],
        )
        if result.rows_affected == 0 and record.capture_key is not None:
            existing = await self.get_by_capture_key(record.capture_key)
            if existing is not None:
                logger.info(f"Failure record already stored: {existing.id}")
                return existing

        logger.info(f"Failure record stored: {result.last_insert_rowid}")
        return record.model_copy(update={"id": result.last_insert_rowid})

    async def get_by_capture_key(self, capture_key: str) -> FailureRecord | None:
        """Fetch the record written under an idempotency key."""
        result = await self._db.execute(
            f"SELECT {_COLUMNS} FROM failure_records WHERE capture_key = ?",
            [capture_key],
        )
        if result.rows:
            return _row_to_record(result.rows[0])
        return None

    async def get(self, record_id: int) -> FailureRecord | None:
        """Fetch a record by id."""
        result = await self._db.execute(
            f"SELECT {_COLUMNS} FROM failure_records WHERE id = ?",
            [record_id],
        )
        if result.rows:
            return _row_to_record(result.rows[0])
        return None

    async def list_records(self, status: FailureStatus | None = None) -> list[FailureRecord]:
        """List records newest first, optionally filtered by status."""
        if status is None:
            result = await self._db.execute(
                f"SELECT {_COLUMNS} FROM failure_records "
                "ORDER BY created_at DESC, id DESC"
            )
        else:
            result = await self._db.execute(
                f"SELECT {_COLUMNS} FROM failure_records WHERE status = ? "
                "ORDER BY created_at DESC, id DESC",
                [status.value],
            )
        return [_row_to_record(row) for row in result.rows]

    async def update(
        self,
        record_id: int,
        changes: FailureRecordUpdate,
    ) -> FailureRecord | None:
        """Apply a partial edit.

        Moving to resolved stamps resolved_at; moving to any other status
        clears it.

        Returns:
            The updated record, or None if not found
        """
        fields = changes.model_dump(exclude_unset=True)
        if not fields:
            return await self.get(record_id)

        assignments: list[str] = []
        params: list[Any] = []
        for column, value in fields.items():
            if column == "status":
                continue
            assignments.append(f"{column} = ?")
            params.append(value)

        status = fields.get("status")
        if status is not None:
            assignments.append("status = ?")
            params.append(FailureStatus(status).value)
            assignments.append("resolved_at = ?")
            params.append(
                utc_now().isoformat() if status == FailureStatus.RESOLVED else None
            )

        if not assignments:
            return await self.get(record_id)

        params.append(record_id)
        result = await self._db.execute(
            f"UPDATE failure_records SET {', '.join(assignments)} WHERE id = ?",
            params,
        )
        if result.rows_affected == 0:
            return None
        return await self.get(record_id)

    async def mark_resolved(self, record_id: int) -> bool:
        """Set status to resolved and stamp resolved_at."""
        result = await self._db.execute(
            """
            UPDATE failure_records SET status = ?, resolved_at = ?
            WHERE id = ? AND status != ?
            """,
            [
                FailureStatus.RESOLVED.value,
                utc_now().isoformat(),
                record_id,
                FailureStatus.RESOLVED.value,
            ],
        )
        return result.rows_affected > 0

    async def delete(self, record_id: int) -> bool:
        """Delete a record.

        Returns:
            True if a row was deleted, False if not found
        """
        result = await self._db.execute(
            "DELETE FROM failure_records WHERE id = ?",
            [record_id],
        )
        return result.rows_affected > 0
