"""Ticket issuing endpoints (signed payload and QR image)."""

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import Response

from stampede.config import settings
from stampede.tokens import TicketPayload, TokenCodec, render_qr_png

router = APIRouter(prefix="/tickets", tags=["tickets"])


def get_token_codec(request: Request) -> TokenCodec:
    """Dependency to get TokenCodec from app state."""
    return request.app.state.token_codec


def _require_identity(name: str | None, email: str | None) -> tuple[str, str]:
    if not name or not email:
        raise HTTPException(status_code=400, detail="Missing name or email parameter")
    return name, email


@router.get("/payload", response_model=TicketPayload)
async def ticket_payload(
    name: str | None = None,
    email: str | None = None,
    codec: TokenCodec = Depends(get_token_codec),
) -> TicketPayload:
    """Signed ticket payload as JSON."""
    name, email = _require_identity(name, email)
    return codec.issue(name, email)


@router.get(
    "/qr",
    response_class=Response,
    responses={200: {"content": {"image/png": {}}}},
)
async def ticket_qr(
    name: str | None = None,
    email: str | None = None,
    codec: TokenCodec = Depends(get_token_codec),
) -> Response:
    """Signed ticket rendered as a PNG QR code."""
    name, email = _require_identity(name, email)
    png = render_qr_png(
        codec.issue(name, email),
        box_size=settings.qr_box_size,
        border=settings.qr_border,
    )
    return Response(content=png, media_type="image/png")
