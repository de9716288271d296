"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache) — single instance per process
    - Session lifetime is fixed per deployment; no sliding renewal knob exists

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all non-secret settings: works out-of-the-box with docker-compose
"""

from datetime import timedelta
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def asyncpg_url(url: str) -> str:
    """Rewrite postgresql:// URLs (as hosting platforms hand them out) for asyncpg."""
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Session store database
    database_url: str = (
        "postgresql+asyncpg://cms:cms@db:5432/cms"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v):
        return asyncpg_url(v) if isinstance(v, str) else v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Backing data service (PostgREST over HTTPS)
    data_service_url: str = "http://localhost:54321"
    data_service_key: str = "service-key-placeholder"
    data_service_timeout_seconds: float = 30.0

    # Retry policy for data service calls
    retry_max_attempts: int = Field(3, ge=1)
    retry_base_delay_ms: int = Field(100, ge=0)
    retry_jitter_ms: int = Field(100, ge=0)

    # Administrator session
    admin_session_cookie: str = "admin_session"
    admin_session_lifetime_hours: float = Field(24.0, gt=0)
    admin_session_cookie_secure: bool = False

    # Credentials
    password_hash_cost: int = Field(12, ge=4, le=31)

    # API
    cors_origins: list[str] = ["http://localhost:3000"]

    # Read cache
    cache_max_entries: int = Field(1024, ge=1)

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @property
    def admin_session_lifetime(self) -> timedelta:
        return timedelta(hours=self.admin_session_lifetime_hours)


@lru_cache
def get_settings() -> Settings:
    return Settings()
