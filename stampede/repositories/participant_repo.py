"""Repository for registered participants.

The (name, email) pair is UNIQUE in the table, so the store itself is the
final word on duplicates. Creation never overwrites an existing row.
"""

import logging
from datetime import datetime
from typing import Any

from libsql_client import LibsqlError

from stampede.db.client import DatabaseClient
from stampede.models import Participant, ParticipantStats, ParticipantStatus

logger = logging.getLogger(__name__)

# Columns an operator may edit in place
EDITABLE_COLUMNS = (
    "name",
    "email",
    "phone",
    "transaction_id",
    "screenshot",
    "status",
    "attended",
)


class ParticipantConflictError(Exception):
    """Raised when an edit would collide with another (name, email) pair."""


_COLUMNS = """
    id, name, email, phone, transaction_id, screenshot, status,
    attended, ticket_sent, ticket_sent_at, created_at
"""


def _parse_ts(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def _row_to_participant(row: Any) -> Participant:
    return Participant(
        id=row[0],
        name=row[1],
        email=row[2],
        phone=row[3],
        transaction_id=row[4],
        screenshot=row[5],
        status=ParticipantStatus(row[6]),
        attended=bool(row[7]),
        ticket_sent=bool(row[8]),
        ticket_sent_at=_parse_ts(row[9]),
        created_at=_parse_ts(row[10]),
    )


def _percent(part: int, whole: int) -> int:
    return round(part / whole * 100) if whole else 0


class ParticipantRepository:
    """Repository for registered participants.

    Uses Turso/libSQL (via DatabaseClient) for persistence.
    """

    def __init__(self, db_client: DatabaseClient):
        """Initialize repository with database client.

        Args:
            db_client: DatabaseClient instance for database operations
        """
        self._db = db_client

    async def initialize(self) -> None:
        """Create participants table if not exists."""
        await self._db.execute_batch(
            [
                """
            CREATE TABLE IF NOT EXISTS participants (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                email TEXT NOT NULL,
                phone TEXT,
                transaction_id TEXT,
                screenshot TEXT,
                status TEXT NOT NULL DEFAULT 'registered',
                attended INTEGER NOT NULL DEFAULT 0,
                ticket_sent INTEGER NOT NULL DEFAULT 0,
                ticket_sent_at TEXT,
                created_at TEXT NOT NULL,
                UNIQUE(name, email)
            )
            """,
                """
            CREATE INDEX IF NOT EXISTS idx_participants_created
            ON participants(created_at)
            """,
            ]
        )

    async def get(self, name: str, email: str) -> Participant | None:
        """Look up a participant by natural identity."""
        result = await self._db.execute(
            f"SELECT {_COLUMNS} FROM participants WHERE name = ? AND email = ?",
            [name, email],
        )
        if result.rows:
            return _row_to_participant(result.rows[0])
        return None

    async def get_by_id(self, participant_id: int) -> Participant | None:
        """Look up a participant by store id."""
        result = await self._db.execute(
            f"SELECT {_COLUMNS} FROM participants WHERE id = ?",
            [participant_id],
        )
        if result.rows:
            return _row_to_participant(result.rows[0])
        return None

    async def exists(self, name: str, email: str) -> bool:
        """Check whether (name, email) is already registered."""
        result = await self._db.execute(
            "SELECT 1 FROM participants WHERE name = ? AND email = ?",
            [name, email],
        )
        return len(result.rows) > 0

    async def create_if_absent(self, participant: Participant) -> Participant | None:
        """Insert a participant unless (name, email) is already present.

        Args:
            participant: Participant to insert (id is ignored)

        Returns:
            The stored participant with its id, or None if the pair existed
        """
        result = await self._db.execute(
            """
            INSERT INTO participants
                (name, email, phone, transaction_id, screenshot, status,
                 attended, ticket_sent, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(name, email) DO NOTHING
            """,
            [
                participant.name,
                participant.email,
                participant.phone,
                participant.transaction_id,
                participant.screenshot,
                participant.status.value,
                int(participant.attended),
                int(participant.ticket_sent),
                participant.created_at.isoformat(),
            ],
        )
        if result.rows_affected == 0:
            logger.debug(f"Participant already present: {participant.email}")
            return None
        logger.info(f"Participant created: {participant.name} <{participant.email}>")
        return participant.model_copy(update={"id": result.last_insert_rowid})

    async def list_all(self) -> list[Participant]:
        """All participants, newest first."""
        result = await self._db.execute(
            f"SELECT {_COLUMNS} FROM participants ORDER BY created_at DESC, id DESC"
        )
        return [_row_to_participant(row) for row in result.rows]

    async def set_status(
        self,
        name: str,
        email: str,
        status: ParticipantStatus,
    ) -> bool:
        """Set payment status.

        Returns:
            True if a row was updated, False if not found
        """
        result = await self._db.execute(
            "UPDATE participants SET status = ? WHERE name = ? AND email = ?",
            [status.value, name, email],
        )
        return result.rows_affected > 0

    async def update(
        self,
        participant_id: int,
        changes: dict[str, Any],
    ) -> Participant | None:
        """Apply a partial edit by id.

        Args:
            participant_id: Row to edit
            changes: Column values keyed by name from EDITABLE_COLUMNS

        Returns:
            The updated participant, or None if not found

        Raises:
            ParticipantConflictError: If the new (name, email) already exists
        """
        unknown = set(changes) - set(EDITABLE_COLUMNS)
        if unknown:
            msg = f"Not editable: {', '.join(sorted(unknown))}"
            raise ValueError(msg)

        assignments: list[str] = []
        params: list[Any] = []
        for column in EDITABLE_COLUMNS:
            if column not in changes:
                continue
            value = changes[column]
            if isinstance(value, ParticipantStatus):
                value = value.value
            elif isinstance(value, bool):
                value = int(value)
            assignments.append(f"{column} = ?")
            params.append(value)

        if not assignments:
            return await self.get_by_id(participant_id)

        params.append(participant_id)
        try:
            result = await self._db.execute(
                f"UPDATE participants SET {', '.join(assignments)} WHERE id = ?",
                params,
            )
        except LibsqlError as e:
            if e.code.startswith("SQLITE_CONSTRAINT"):
                raise ParticipantConflictError(str(e)) from e
            raise
        if result.rows_affected == 0:
            return None
        logger.info(f"Participant {participant_id} updated: {sorted(changes)}")
        return await self.get_by_id(participant_id)

    async def mark_attended(self, name: str, email: str) -> bool:
        """Flip attended from false to true.

        Conditional on the current value, so exactly one of several concurrent
        callers sees True.

        Returns:
            True if this call marked the participant, False otherwise
        """
        result = await self._db.execute(
            """
            UPDATE participants SET attended = 1
            WHERE name = ? AND email = ? AND attended = 0
            """,
            [name, email],
        )
        return result.rows_affected > 0

    async def set_attendance(self, participant_id: int, attended: bool) -> bool:
        """Operator override of the attendance flag."""
        result = await self._db.execute(
            "UPDATE participants SET attended = ? WHERE id = ?",
            [int(attended), participant_id],
        )
        return result.rows_affected > 0

    async def delete(self, participant_id: int) -> bool:
        """Delete a participant.

        Returns:
            True if a row was deleted, False if not found
        """
        result = await self._db.execute(
            "DELETE FROM participants WHERE id = ?",
            [participant_id],
        )
        return result.rows_affected > 0

    async def stats(self) -> ParticipantStats:
        """Dashboard counters over all participants."""
        result = await self._db.execute(
            """
            SELECT
                COUNT(*),
                COALESCE(SUM(CASE WHEN status = 'registered' THEN 1 ELSE 0 END), 0),
                COALESCE(SUM(CASE WHEN status = 'verified' THEN 1 ELSE 0 END), 0),
                COALESCE(SUM(attended), 0),
                COALESCE(SUM(ticket_sent), 0)
            FROM participants
            """
        )
        total, registered, verified, attended, sent = result.rows[0]
        return ParticipantStats(
            total=total,
            registered=registered,
            verified=verified,
            attended=attended,
            not_attended=total - attended,
            tickets_sent=sent,
            attendance_rate=_percent(attended, total),
            ticket_sent_rate=_percent(sent, total),
        )
