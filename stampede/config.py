"""Application configuration using pydantic-settings pattern."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings

DEFAULT_TICKET_SECRET = "change-me"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "Stampede Registration"
    app_version: str = "0.1.0"
    app_env: str = Field(default="development")
    log_level: str = Field(default="INFO")

    # Database (Turso/libSQL)
    turso_database_url: str | None = Field(default=None)
    turso_auth_token: str | None = Field(default=None)
    db_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Upper bound on a single store call",
    )

    # Tickets
    ticket_secret: str = Field(
        default=DEFAULT_TICKET_SECRET,
        description="Shared secret mixed into every ticket signature",
    )
    qr_box_size: int = Field(default=10, ge=1)
    qr_border: int = Field(default=2, ge=0)

    # Webhook intake
    webhook_secret_token: str | None = Field(
        default=None,
        description="Bearer token required on webhook calls when set",
    )
    drive_view_url_template: str = Field(
        default="https://drive.google.com/file/d/{file_id}/view",
        description="Viewer URL built from an uploaded file id",
    )
    dead_letter_retry_attempts: int = Field(default=3, ge=1)

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
