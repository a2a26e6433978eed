"""Dead-letter review endpoints for operators."""

from fastapi import APIRouter, Depends, HTTPException, Request

from stampede.models import FailureRecord, FailureRecordUpdate, FailureStatus
from stampede.recovery import (
    AlreadyResolvedError,
    DeadLetterService,
    FailureRecordNotFoundError,
    InsufficientDataError,
)

router = APIRouter(prefix="/failed-webhooks", tags=["failed-webhooks"])


def get_dead_letter_service(request: Request) -> DeadLetterService:
    """Dependency to get DeadLetterService from app state."""
    return request.app.state.dead_letter_service


@router.get("", response_model=list[FailureRecord])
async def list_failed_webhooks(
    status: FailureStatus | None = None,
    service: DeadLetterService = Depends(get_dead_letter_service),
) -> list[FailureRecord]:
    """Failure records, newest first."""
    return await service.list_records(status)


@router.patch("/{record_id}", response_model=FailureRecord)
async def update_failed_webhook(
    record_id: int,
    body: FailureRecordUpdate,
    service: DeadLetterService = Depends(get_dead_letter_service),
) -> FailureRecord:
    """Edit extracted fields, notes or status."""
    try:
        return await service.update_record(record_id, body)
    except FailureRecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e


@router.delete("/{record_id}", status_code=204)
async def delete_failed_webhook(
    record_id: int,
    service: DeadLetterService = Depends(get_dead_letter_service),
) -> None:
    try:
        await service.delete_record(record_id)
    except FailureRecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e


@router.post("/{record_id}/resolve", response_model=FailureRecord)
async def resolve_failed_webhook(
    record_id: int,
    service: DeadLetterService = Depends(get_dead_letter_service),
) -> FailureRecord:
    """Create the participant from extracted fields and close the record."""
    try:
        return await service.resolve(record_id)
    except FailureRecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except (AlreadyResolvedError, InsufficientDataError) as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
