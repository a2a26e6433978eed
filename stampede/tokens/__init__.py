"""Ticket tokens: keyed-hash signing, payload parsing and QR rendering."""

from stampede.tokens.codec import TicketPayload, TokenCodec, TokenFormatError
from stampede.tokens.render import render_qr_png

__all__ = [
    "TicketPayload",
    "TokenCodec",
    "TokenFormatError",
    "render_qr_png",
]
