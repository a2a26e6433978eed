"""FastAPI application entry point."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from stampede.api.router import api_router
from stampede.attendance import AttendanceService
from stampede.config import DEFAULT_TICKET_SECRET, Settings, settings
from stampede.db.client import DatabaseClient
from stampede.imports import BatchImportEngine
from stampede.intake import WebhookIngestionPipeline
from stampede.participants import ParticipantService
from stampede.recovery import DeadLetterService
from stampede.repositories import FailureRecordRepository, ParticipantRepository
from stampede.tokens import TokenCodec

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def startup_warnings(cfg: Settings) -> list[str]:
    """Insecure defaults that should not reach a live event."""
    warnings = []
    if not cfg.webhook_secret_token:
        warnings.append("WEBHOOK_SECRET_TOKEN not set; webhook accepts any caller")
    if cfg.ticket_secret == DEFAULT_TICKET_SECRET:
        warnings.append("TICKET_SECRET is the built-in default; tickets can be forged")
    return warnings


async def init_services(
    app: FastAPI,
    db: DatabaseClient,
    codec: TokenCodec | None = None,
) -> None:
    """Create repositories and services and register them in app state."""
    participant_repo = ParticipantRepository(db)
    await participant_repo.initialize()
    failure_repo = FailureRecordRepository(db)
    await failure_repo.initialize()
    app.state.participant_repo = participant_repo
    app.state.failure_repo = failure_repo
    logger.info("Repositories initialized")

    codec = codec or TokenCodec(settings.ticket_secret)
    app.state.token_codec = codec
    app.state.ingestion_pipeline = WebhookIngestionPipeline(
        participant_repo=participant_repo,
        failure_repo=failure_repo,
        webhook_secret=settings.webhook_secret_token,
        retry_attempts=settings.dead_letter_retry_attempts,
    )
    app.state.attendance_service = AttendanceService(codec, participant_repo)
    app.state.dead_letter_service = DeadLetterService(failure_repo, participant_repo)
    app.state.import_engine = BatchImportEngine(participant_repo)
    app.state.participant_service = ParticipantService(participant_repo)
    logger.info("Services initialized")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan management.

    Startup:
    - Open the database
    - Create tables
    - Wire services into app state

    Shutdown:
    - Close database connection
    """
    logger.info(f"Starting {settings.app_name}...")

    db = DatabaseClient()
    await db.connect()
    app.state.db = db
    logger.info(f"Database connected: {db.url}")

    await init_services(app, db)
    for warning in startup_warnings(settings):
        logger.warning(warning)

    yield

    logger.info(f"Shutting down {settings.app_name}...")
    await db.close()


app = FastAPI(
    title=settings.app_name,
    description="Event registration, ticketing and gate check-in",
    version=settings.app_version,
    lifespan=lifespan,
)

app.include_router(api_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "stampede.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
