"""Gate check-in: verify a ticket signature and mark attendance once."""

from enum import Enum

import structlog
from pydantic import BaseModel, Field

from stampede.models import ParticipantSnapshot
from stampede.participants import ParticipantNotFoundError
from stampede.repositories import ParticipantRepository
from stampede.tokens import TicketPayload, TokenCodec, TokenFormatError

logger = structlog.get_logger()


class VerificationOutcome(str, Enum):
    """Result classes of a ticket scan."""

    INVALID_SIGNATURE = "invalid_signature"
    UNREGISTERED = "unregistered"
    ALREADY_ATTENDED = "already_attended"
    MARKED = "marked"


_MESSAGES = {
    VerificationOutcome.INVALID_SIGNATURE: "Invalid QR code - hash verification failed",
    VerificationOutcome.UNREGISTERED: "Attendee not registered in the system",
    VerificationOutcome.ALREADY_ATTENDED: "Attendance already marked for this attendee",
    VerificationOutcome.MARKED: "Attendance marked successfully",
}


class VerificationResult(BaseModel):
    """What the scanning client is told about a ticket."""

    outcome: VerificationOutcome
    message: str = Field(description="Human-readable status for the scanner")
    participant: ParticipantSnapshot | None = None

    @classmethod
    def of(
        cls,
        outcome: VerificationOutcome,
        participant: ParticipantSnapshot | None = None,
    ) -> "VerificationResult":
        return cls(outcome=outcome, message=_MESSAGES[outcome], participant=participant)

    @property
    def verified(self) -> bool:
        """Ticket signature matched, whether or not the holder is registered."""
        return self.outcome != VerificationOutcome.INVALID_SIGNATURE


class AttendanceService:
    """Verifies tickets and records check-ins.

    Marking is a conditional update in the store, so two scanners scanning
    the same ticket at once produce one ``marked`` and one
    ``already_attended``.
    """

    def __init__(self, codec: TokenCodec, participant_repo: ParticipantRepository):
        self._codec = codec
        self._participants = participant_repo

    async def verify_and_mark(
        self,
        name: str,
        email: str,
        signature: str,
    ) -> VerificationResult:
        """Verify a ticket and mark the holder as attended.

        Args:
            name: Name carried in the ticket
            email: Email carried in the ticket
            signature: Signature carried in the ticket

        Returns:
            VerificationResult; never raises for bad tickets
        """
        if not self._codec.verify(name, email, signature):
            logger.warning("ticket signature mismatch", email=email)
            return VerificationResult.of(VerificationOutcome.INVALID_SIGNATURE)

        participant = await self._participants.get(name, email)
        if participant is None:
            logger.warning("ticket holder not registered", email=email)
            return VerificationResult.of(VerificationOutcome.UNREGISTERED)

        if participant.attended:
            return VerificationResult.of(
                VerificationOutcome.ALREADY_ATTENDED, participant.snapshot()
            )

        if not await self._participants.mark_attended(name, email):
            # Another scan got there first
            current = await self._participants.get(name, email)
            snapshot = (current or participant).snapshot()
            return VerificationResult.of(VerificationOutcome.ALREADY_ATTENDED, snapshot)

        logger.info("attendance marked", name=name, email=email)
        snapshot = participant.snapshot().model_copy(update={"attended": True})
        return VerificationResult.of(VerificationOutcome.MARKED, snapshot)

    async def verify_payload(self, raw: str) -> VerificationResult:
        """Verify the raw JSON text read from a QR code."""
        try:
            ticket = TicketPayload.from_json(raw)
        except TokenFormatError as e:
            logger.warning("unreadable ticket payload", error=str(e))
            return VerificationResult.of(VerificationOutcome.INVALID_SIGNATURE)
        return await self.verify_and_mark(ticket.name, ticket.email, ticket.signature)

    async def toggle_verified_status(self, name: str, email: str) -> ParticipantSnapshot:
        """Flip payment status between registered and verified.

        Raises:
            ParticipantNotFoundError: If (name, email) is not registered
        """
        participant = await self._participants.get(name, email)
        if participant is None:
            raise ParticipantNotFoundError(f"No participant {name} <{email}>")

        new_status = participant.status.toggled()
        await self._participants.set_status(name, email, new_status)
        logger.info("participant status changed", email=email, status=new_status.value)
        return participant.snapshot().model_copy(update={"status": new_status})

    async def set_attendance(self, participant_id: int, attended: bool) -> None:
        """Operator override of the attendance flag.

        Raises:
            ParticipantNotFoundError: If the id is unknown
        """
        if not await self._participants.set_attendance(participant_id, attended):
            raise ParticipantNotFoundError(f"No participant with id {participant_id}")
        logger.info(
            "attendance overridden",
            participant_id=participant_id,
            attended=attended,
        )
