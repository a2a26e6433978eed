"""Health check endpoints for monitoring and orchestration.

Readiness covers what the gate and the webhook need: a store that answers
queries and a readable dead-letter queue, whose pending backlog is reported
so an operator can spot registrations waiting for repair.
"""

from datetime import UTC, datetime

from fastapi import APIRouter, Request
from libsql_client import LibsqlError
from pydantic import BaseModel

from stampede.config import settings
from stampede.models import FailureStatus

router = APIRouter(prefix="/health", tags=["health"])


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str
    service: str
    timestamp: datetime
    version: str
    environment: str


class LivenessResponse(BaseModel):
    """Response model for liveness check."""

    status: str


class ReadinessResponse(BaseModel):
    """Response model for readiness check."""

    status: str
    checks: dict[str, str]
    pending_failures: int | None = None


@router.get("/", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Basic health check endpoint."""
    return HealthResponse(
        status="healthy",
        service=settings.app_name,
        timestamp=datetime.now(UTC),
        version=settings.app_version,
        environment=settings.app_env,
    )


@router.get("/live", response_model=LivenessResponse)
async def liveness() -> LivenessResponse:
    """Liveness check - process is up."""
    return LivenessResponse(status="alive")


@router.get("/ready", response_model=ReadinessResponse)
async def readiness(request: Request) -> ReadinessResponse:
    """Readiness check - registrations and check-ins can be served.

    Checks:
    - Registration store answers queries
    - Dead-letter queue can be read (pending count is reported)
    """
    checks: dict[str, str] = {"api": "ok"}
    pending: int | None = None

    db = getattr(request.app.state, "db", None)
    if db is None:
        checks["database"] = "not_configured"
    else:
        checks["database"] = "ok" if await db.is_healthy() else "failed"

    failure_repo = getattr(request.app.state, "failure_repo", None)
    if failure_repo is None:
        checks["dead_letter_queue"] = "not_configured"
    elif checks["database"] != "ok":
        checks["dead_letter_queue"] = "unavailable"
    else:
        try:
            pending = len(await failure_repo.list_records(FailureStatus.PENDING))
            checks["dead_letter_queue"] = "ok"
        except (LibsqlError, TimeoutError):
            checks["dead_letter_queue"] = "failed"

    status = "ready" if all(v == "ok" for v in checks.values()) else "not_ready"
    return ReadinessResponse(status=status, checks=checks, pending_failures=pending)
