"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (the JWT default is for local dev only)
    - jwt_secret is at least 32 bytes (HS256 key length)
    - get_settings() is cached (lru_cache) — single instance per process

Design Decisions:
    - Defaults provided for all non-secret settings: works out-of-the-box with docker-compose
    - token_ttl_days is fixed per process; issued tokens are never refreshed
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

MIN_JWT_SECRET_BYTES = 32


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://goodjob:goodjob@db:5432/goodjob"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting platforms hand out postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10
    # Create tables on startup instead of running Alembic (local/dev only)
    database_create_all: bool = False

    # Auth
    jwt_secret: str = "dev-change-this-secret-before-deploying"
    jwt_algorithm: str = "HS256"
    token_ttl_days: int = 7

    @field_validator("jwt_secret")
    @classmethod
    def check_secret_length(cls, v: str) -> str:
        """HMAC keys shorter than the SHA-256 digest (32 bytes) are rejected."""
        if len(v.encode("utf-8")) < MIN_JWT_SECRET_BYTES:
            raise ValueError(
                f"jwt_secret must be at least {MIN_JWT_SECRET_BYTES} bytes",
            )
        return v

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
