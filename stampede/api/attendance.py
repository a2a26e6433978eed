"""Attendance check-in endpoints used by gate scanners and operators."""

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, ConfigDict, Field

from stampede.attendance import (
    AttendanceService,
    VerificationOutcome,
    VerificationResult,
)
from stampede.models import ParticipantSnapshot, ParticipantStatus
from stampede.participants import ParticipantNotFoundError

router = APIRouter(prefix="/attendance", tags=["attendance"])


class VerifyRequest(BaseModel):
    """Decoded ticket fields."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(description="Name printed in the ticket")
    email: str = Field(description="Email printed in the ticket")
    signature: str = Field(alias="hash", description="Ticket signature")


class ScanRequest(BaseModel):
    """Raw text read from a QR code."""

    qr_data: str = Field(description="JSON payload as scanned")


class VerificationResponse(BaseModel):
    """Scan result shown on the gate device."""

    outcome: VerificationOutcome
    verified: bool = Field(description="Ticket signature matched")
    success: bool = Field(description="Attendance was marked by this scan")
    message: str
    participant: ParticipantSnapshot | None = None

    @classmethod
    def from_result(cls, result: VerificationResult) -> "VerificationResponse":
        return cls(
            outcome=result.outcome,
            verified=result.verified,
            success=result.outcome == VerificationOutcome.MARKED,
            message=result.message,
            participant=result.participant,
        )


class StatusToggleRequest(BaseModel):
    """Participant whose payment status should flip."""

    name: str
    email: str


class StatusToggleResponse(BaseModel):
    """Status after the toggle."""

    name: str
    email: str
    status: ParticipantStatus


class AttendanceOverride(BaseModel):
    """Operator-set attendance value."""

    attended: bool


class AttendanceOverrideResponse(BaseModel):
    id: int
    attended: bool


def get_attendance_service(request: Request) -> AttendanceService:
    """Dependency to get AttendanceService from app state."""
    return request.app.state.attendance_service


@router.post("/verify", response_model=VerificationResponse)
async def verify_ticket(
    body: VerifyRequest,
    service: AttendanceService = Depends(get_attendance_service),
) -> VerificationResponse:
    """Verify ticket fields and mark attendance."""
    result = await service.verify_and_mark(body.name, body.email, body.signature)
    return VerificationResponse.from_result(result)


@router.post("/scan", response_model=VerificationResponse)
async def scan_ticket(
    body: ScanRequest,
    service: AttendanceService = Depends(get_attendance_service),
) -> VerificationResponse:
    """Verify the raw QR payload and mark attendance."""
    result = await service.verify_payload(body.qr_data)
    return VerificationResponse.from_result(result)


@router.post("/status", response_model=StatusToggleResponse)
async def toggle_status(
    body: StatusToggleRequest,
    service: AttendanceService = Depends(get_attendance_service),
) -> StatusToggleResponse:
    """Flip a participant between registered and verified."""
    try:
        snapshot = await service.toggle_verified_status(body.name, body.email)
    except ParticipantNotFoundError as e:
        raise HTTPException(status_code=404, detail="Participant not found") from e
    return StatusToggleResponse(
        name=snapshot.name,
        email=snapshot.email,
        status=snapshot.status,
    )


@router.patch("/{participant_id}", response_model=AttendanceOverrideResponse)
async def override_attendance(
    participant_id: int,
    body: AttendanceOverride,
    service: AttendanceService = Depends(get_attendance_service),
) -> AttendanceOverrideResponse:
    """Set or clear attendance by hand."""
    try:
        await service.set_attendance(participant_id, body.attended)
    except ParticipantNotFoundError as e:
        raise HTTPException(status_code=404, detail="Participant not found") from e
    return AttendanceOverrideResponse(id=participant_id, attended=body.attended)
