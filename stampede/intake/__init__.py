"""Form webhook intake.

This module provides:
- Typed validation of form submissions with a tagged ok/error result
- Normalization (title-cased names, phone fallbacks, screenshot URLs)
- Best-effort field extraction from broken payloads
- WebhookIngestionPipeline: dedup-aware insert with dead-letter capture
"""

from stampede.intake.normalizer import (
    extract_fields,
    resolve_screenshot,
    title_case,
    validate_submission,
)
from stampede.intake.pipeline import (
    DeadLetterWriteError,
    IngestOutcome,
    IngestResult,
    WebhookIngestionPipeline,
)
from stampede.intake.schemas import (
    FieldIssue,
    InvalidSubmission,
    NormalizedSubmission,
    ValidSubmission,
)

__all__ = [
    "DeadLetterWriteError",
    "FieldIssue",
    "IngestOutcome",
    "IngestResult",
    "InvalidSubmission",
    "NormalizedSubmission",
    "ValidSubmission",
    "WebhookIngestionPipeline",
    "extract_fields",
    "resolve_screenshot",
    "title_case",
    "validate_submission",
]
