"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache) — single instance per process
    - notification_dedup_window_days >= 1, conflict_retry_attempts >= 0

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support (ADR: developer UX)
    - Defaults provided for all non-secret settings: works out-of-the-box with docker-compose
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://bookswap:bookswap@db:5432/bookswap"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosted Postgres provides postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Negotiation engine
    notification_dedup_window_days: int = Field(4, ge=1)
    conflict_retry_attempts: int = Field(1, ge=0)

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
