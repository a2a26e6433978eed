"""Tests for startup configuration warnings."""

from stampede.config import DEFAULT_TICKET_SECRET, Settings
from stampede.main import startup_warnings


def test_default_ticket_secret_is_flagged():
    cfg = Settings(
        _env_file=None,
        ticket_secret=DEFAULT_TICKET_SECRET,
        webhook_secret_token="hook-token",
    )

    warnings = startup_warnings(cfg)

    assert len(warnings) == 1
    assert "TICKET_SECRET" in warnings[0]


def test_missing_webhook_token_is_flagged():
    cfg = Settings(_env_file=None, ticket_secret="s3cret", webhook_secret_token=None)

    assert startup_warnings(cfg) == [
        "WEBHOOK_SECRET_TOKEN not set; webhook accepts any caller"
    ]


def test_configured_secrets_are_quiet():
    cfg = Settings(
        _env_file=None, ticket_secret="s3cret", webhook_secret_token="hook-token"
    )

    assert startup_warnings(cfg) == []
