"""Form webhook endpoint."""

from fastapi import APIRouter, Depends, Header, HTTPException, Request
from pydantic import BaseModel, Field

from stampede.intake import (
    DeadLetterWriteError,
    IngestOutcome,
    IngestResult,
    WebhookIngestionPipeline,
)

router = APIRouter(prefix="/webhook", tags=["webhook"])


class ParticipantRef(BaseModel):
    """Identity of the participant a submission maps to."""

    name: str
    email: str


class WebhookResponse(BaseModel):
    """Acknowledgement sent back to the form tool."""

    success: bool = Field(description="Submission was accepted")
    outcome: IngestOutcome
    message: str
    participant: ParticipantRef | None = None
    failure_id: int | None = Field(
        default=None,
        description="Dead-letter id when the payload was captured",
    )
    error: str | None = None

    @classmethod
    def from_result(cls, result: IngestResult) -> "WebhookResponse":
        participant = None
        if result.participant is not None:
            participant = ParticipantRef(
                name=result.participant.name,
                email=result.participant.email,
            )
        return cls(
            success=result.accepted,
            outcome=result.outcome,
            message=result.message,
            participant=participant,
            failure_id=result.failure_id,
            error=result.error,
        )


def get_ingestion_pipeline(request: Request) -> WebhookIngestionPipeline:
    """Dependency to get WebhookIngestionPipeline from app state."""
    return request.app.state.ingestion_pipeline


@router.post("/form", response_model=WebhookResponse)
async def receive_form_submission(
    request: Request,
    authorization: str | None = Header(default=None),
    pipeline: WebhookIngestionPipeline = Depends(get_ingestion_pipeline),
) -> WebhookResponse:
    """Register a participant from a form submission.

    Malformed payloads are still acknowledged with success once they have
    been stored for manual review.
    """
    try:
        payload = await request.json()
    except ValueError:
        # Keep undecodable bodies as text so they can still be dead-lettered
        payload = (await request.body()).decode("utf-8", errors="replace")

    try:
        result = await pipeline.ingest(payload, authorization)
    except DeadLetterWriteError as e:
        raise HTTPException(status_code=500, detail="Internal server error") from e

    if result.outcome == IngestOutcome.REJECTED:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return WebhookResponse.from_result(result)
