"""Signed ticket tokens for gate check-in.

A ticket binds a participant's (name, email) to the event secret:

    signature = sha256_hex(utf8(name + "|" + email + "|" + secret))

Inputs are hashed exactly as given. Callers that want trimming or case
folding must do it before calling in, otherwise tickets already handed out
stop verifying.
"""

import hashlib
import hmac
import json
from datetime import UTC, datetime

from pydantic import BaseModel, Field, ValidationError


class TokenFormatError(ValueError):
    """Raised when a scanned payload is not a ticket."""


class TicketPayload(BaseModel):
    """Portable payload embedded in the QR code.

    Wire keys are ``name``, ``email``, ``hash`` and ``timestamp`` (epoch
    milliseconds).
    """

    name: str = Field(description="Participant name as registered")
    email: str = Field(description="Participant email as registered")
    signature: str = Field(alias="hash", description="Hex SHA-256 signature")
    issued_at: int = Field(alias="timestamp", description="Epoch milliseconds")

    model_config = {"populate_by_name": True}

    def to_json(self) -> str:
        """Serialize with wire keys."""
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_json(cls, raw: str | bytes) -> "TicketPayload":
        """Parse a scanned payload.

        Raises:
            TokenFormatError: If the text is not a ticket payload
        """
        try:
            data = json.loads(raw)
        except (TypeError, ValueError) as e:
            raise TokenFormatError(f"Payload is not JSON: {e}") from e
        if not isinstance(data, dict):
            raise TokenFormatError("Payload must be a JSON object")
        # Older tickets may omit the issue time
        data.setdefault("timestamp", 0)
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise TokenFormatError(f"Payload is missing ticket fields: {e}") from e


class TokenCodec:
    """Signs and verifies ticket tokens with an injected secret."""

    def __init__(self, secret: str):
        if not secret:
            msg = "Ticket secret must not be empty"
            raise ValueError(msg)
        self._secret = secret

    def sign(self, name: str, email: str) -> str:
        """Return the hex signature for (name, email)."""
        message = f"{name}|{email}|{self._secret}".encode()
        return hashlib.sha256(message).hexdigest()

    def verify(self, name: str, email: str, signature: str) -> bool:
        """Check a signature in constant time. Never raises."""
        if not all(isinstance(v, str) for v in (name, email, signature)):
            return False
        expected = self.sign(name, email)
        try:
            return hmac.compare_digest(expected, signature)
        except TypeError:
            # Non-ASCII signature text cannot match a hex digest
            return False

    def issue(
        self,
        name: str,
        email: str,
        issued_at: datetime | None = None,
    ) -> TicketPayload:
        """Build a signed payload for a participant."""
        moment = issued_at or datetime.now(UTC)
        return TicketPayload(
            name=name,
            email=email,
            signature=self.sign(name, email),
            issued_at=int(moment.timestamp() * 1000),
        )
