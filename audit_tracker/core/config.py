"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Required fields (SECRET_KEY, and DATABASE_URL for the
postgres backend) are validated at load time.
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DATABASE_BACKENDS = ("memory", "postgres")
NOTIFICATION_SINKS = ("log", "memory")


class Settings(BaseSettings):
    """Application settings loaded from environment and .env."""

    # App
    app_name: str = "audit-tracker"
    app_version: str = "1.0.0"
    debug: bool = False

    # Database: "memory" (process-local repositories) or "postgres" (SQLAlchemy + Alembic)
    database_backend: str = "memory"
    database_url: str = ""
    database_echo: bool = False
    # Optional pool/driver overrides (None = use defaults in database.py)
    db_pool_size: int | None = None
    db_max_overflow: int | None = None
    db_command_timeout: int | None = None

    # Security
    secret_key: SecretStr = SecretStr("")
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 480  # 8 hours

    # CORS
    allowed_origins: str = "http://localhost:3000,http://localhost:8080"

    # Request / middleware
    request_id_header: str = "X-Request-ID"

    # Memory backend: seed one admin at startup when bootstrap_admin_id is set
    bootstrap_admin_id: str = ""
    bootstrap_admin_email: str = "admin@localhost"

    # Status-change notifications: "log" or "memory" (dev/tests only; keeps the
    # last 1000 events in process)
    notification_sink: str = "log"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_required(self) -> "Settings":
        """Validate required env and backend selection."""
        if self.database_backend not in DATABASE_BACKENDS:
            raise ValueError(
                f"database_backend must be one of {DATABASE_BACKENDS}, got: {self.database_backend!r}"
            )
        if self.database_backend == "postgres" and not self.database_url:
            raise ValueError(
                "DATABASE_URL is required when database_backend is 'postgres'. "
                "Set in environment or .env file."
            )
        if self.notification_sink not in NOTIFICATION_SINKS:
            raise ValueError(
                f"notification_sink must be one of {NOTIFICATION_SINKS}, got: {self.notification_sink!r}"
            )
        if not self.secret_key.get_secret_value():
            raise ValueError(
                "SECRET_KEY is required. Generate with: openssl rand -hex 32."
            )
        return self

    @property
    def cors_origins(self) -> list[str]:
        """Allowed CORS origins as a list."""
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
