"""Dead-letter recovery for webhook submissions that failed ingestion."""

from stampede.recovery.service import (
    AlreadyResolvedError,
    DeadLetterService,
    FailureRecordNotFoundError,
    InsufficientDataError,
    RecoveryError,
)

__all__ = [
    "AlreadyResolvedError",
    "DeadLetterService",
    "FailureRecordNotFoundError",
    "InsufficientDataError",
    "RecoveryError",
]
