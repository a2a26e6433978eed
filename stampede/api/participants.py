"""Participant management and CSV import endpoints."""

from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException, Request, UploadFile
from pydantic import BaseModel, Field

from stampede.imports import BatchImportEngine, ImportParseError, RowError
from stampede.models import Participant, ParticipantStats
from stampede.participants import (
    NoUpdateDataError,
    ParticipantCreate,
    ParticipantExistsError,
    ParticipantNotFoundError,
    ParticipantService,
    ParticipantUpdate,
)

# Constants
ALLOWED_EXTENSIONS = {".csv"}
MAX_FILE_SIZE_BYTES = 5 * 1024 * 1024  # 5 MB

router = APIRouter(prefix="/participants", tags=["participants"])


class ImportResponse(BaseModel):
    """Summary of a CSV upload."""

    success: bool = True
    message: str
    added_count: int
    skipped_count: int
    error_count: int
    errors: list[RowError] = Field(default_factory=list)


def get_participant_service(request: Request) -> ParticipantService:
    """Dependency to get ParticipantService from app state."""
    return request.app.state.participant_service


def get_import_engine(request: Request) -> BatchImportEngine:
    """Dependency to get BatchImportEngine from app state."""
    return request.app.state.import_engine


async def read_csv_upload(file: UploadFile) -> str:
    """Validate and decode an uploaded CSV file.

    Raises:
        HTTPException: 400 for a missing, empty or non-CSV file, 413 when
            the file is too large
    """
    if not file.filename:
        raise HTTPException(status_code=400, detail="Filename is required")

    ext = Path(file.filename).suffix.lower()
    if ext not in ALLOWED_EXTENSIONS:
        raise HTTPException(status_code=400, detail="Please upload a CSV file")

    content_bytes = await file.read()
    if not content_bytes:
        raise HTTPException(status_code=400, detail="File is empty")

    if len(content_bytes) > MAX_FILE_SIZE_BYTES:
        max_mb = MAX_FILE_SIZE_BYTES // (1024 * 1024)
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum size: {max_mb} MB",
        )

    try:
        return content_bytes.decode("utf-8-sig")
    except UnicodeDecodeError:
        # Spreadsheet exports from older tools
        return content_bytes.decode("latin-1")


@router.get("", response_model=list[Participant])
async def list_participants(
    service: ParticipantService = Depends(get_participant_service),
) -> list[Participant]:
    """All participants, newest first."""
    return await service.list_participants()


@router.get("/stats", response_model=ParticipantStats)
async def participant_stats(
    service: ParticipantService = Depends(get_participant_service),
) -> ParticipantStats:
    """Dashboard counters."""
    return await service.stats()


@router.post("", response_model=Participant, status_code=201)
async def create_participant(
    body: ParticipantCreate,
    service: ParticipantService = Depends(get_participant_service),
) -> Participant:
    """Register a participant by hand."""
    try:
        return await service.create_manual(body)
    except ParticipantExistsError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e


@router.patch("/{participant_id}", response_model=Participant)
async def update_participant(
    participant_id: int,
    body: ParticipantUpdate,
    service: ParticipantService = Depends(get_participant_service),
) -> Participant:
    """Edit participant details, status or attendance."""
    try:
        return await service.update(participant_id, body)
    except NoUpdateDataError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except ParticipantNotFoundError as e:
        raise HTTPException(status_code=404, detail="Participant not found") from e
    except ParticipantExistsError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e


@router.delete("/{participant_id}", status_code=204)
async def delete_participant(
    participant_id: int,
    service: ParticipantService = Depends(get_participant_service),
) -> None:
    """Remove a participant."""
    try:
        await service.delete(participant_id)
    except ParticipantNotFoundError as e:
        raise HTTPException(status_code=404, detail="Participant not found") from e


@router.post("/import", response_model=ImportResponse)
async def import_participants(
    file: UploadFile,
    engine: BatchImportEngine = Depends(get_import_engine),
) -> ImportResponse:
    """Bulk-register participants from a CSV export."""
    text = await read_csv_upload(file)
    try:
        report = await engine.import_csv(text)
    except ImportParseError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    return ImportResponse(
        message=report.message,
        added_count=report.added_count,
        skipped_count=report.skipped_count,
        error_count=report.error_count,
        errors=report.errors,
    )
