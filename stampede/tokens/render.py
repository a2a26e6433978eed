"""QR rendering of ticket payloads."""

import io

import qrcode
import structlog

from stampede.tokens.codec import TicketPayload

logger = structlog.get_logger()


def render_qr_png(payload: TicketPayload, box_size: int = 10, border: int = 2) -> bytes:
    """Render a ticket payload as a PNG QR code.

    Args:
        payload: Signed ticket payload to embed
        box_size: Pixels per QR module
        border: Quiet-zone width in modules

    Returns:
        PNG image bytes
    """
    qr = qrcode.QRCode(
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=box_size,
        border=border,
    )
    qr.add_data(payload.to_json())
    qr.make(fit=True)
    image = qr.make_image(fill_color="black", back_color="white")

    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    data = buffer.getvalue()
    logger.debug("ticket qr rendered", email=payload.email, size=len(data))
    return data
