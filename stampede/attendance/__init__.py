"""Attendance verification for gate check-in."""

from stampede.attendance.service import (
    AttendanceService,
    VerificationOutcome,
    VerificationResult,
)

__all__ = [
    "AttendanceService",
    "VerificationOutcome",
    "VerificationResult",
]
