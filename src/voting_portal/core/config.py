"""Portal settings, read from the process environment (and ``.env``) by Pydantic Settings.

Only ``DATABASE_URL`` and ``JWT_SECRET_KEY`` are required; every other knob
has a default suited to a single-node deployment.
"""

import re

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_SCHEMA_NAME = re.compile(r"^[a-z_][a-z0-9_]{0,62}$")


def _split_csv(raw: str) -> list[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


class Settings(BaseSettings):
    """Runtime configuration for the API server, CLI and migrations."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Storage
    database_url: str = Field(
        description="Async SQLAlchemy URL holding elections and ballots (postgresql+asyncpg or sqlite+aiosqlite)",
    )
    database_schema: str | None = Field(
        default=None,
        description="PostgreSQL schema the tables live in, for side-by-side deployments",
    )
    database_busy_timeout: float = Field(
        default=5.0,
        gt=0,
        description="Seconds a SQLite writer waits for a concurrent ballot commit before giving up",
    )

    @field_validator("database_schema")
    @classmethod
    def validate_database_schema(cls, v: str | None) -> str | None:
        if v is not None and not _SCHEMA_NAME.match(v):
            msg = f"database_schema must match {_SCHEMA_NAME.pattern}"
            raise ValueError(msg)
        return v

    # Bearer tokens
    jwt_secret_key: str = Field(min_length=32, description="HMAC key that voter and admin tokens are signed with")
    jwt_algorithm: str = Field(default="HS256", description="Token signing algorithm")
    jwt_access_token_expire_minutes: int = Field(
        default=30,
        gt=0,
        description="Lifetime of tokens minted by `voting-portal user token`",
    )

    # Voter identifiers
    voter_id_prefix: str = Field(
        default="VOT",
        min_length=1,
        max_length=10,
        description="Letters placed before the six generated digits of a voter id",
    )
    voter_id_max_attempts: int = Field(
        default=5,
        gt=0,
        description="Random voter ids tried before registration reports the id space as exhausted",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Minimum loguru level")
    log_dir: str | None = Field(
        default=None,
        description="When set, also write daily-rotated log files here",
    )

    # HTTP surface
    environment: str = Field(default="production", description="Deployment name reported by /info")
    api_v1_prefix: str = Field(default="/api/v1", description="Mount point of the versioned routes")
    cors_origins: str = Field(
        default="",
        description="Comma-separated browser origins allowed to call the API; empty disables CORS",
    )
    rate_limit_per_minute: int = Field(
        default=200,
        gt=0,
        description="Requests per minute allowed from one client address",
    )
    vote_rate_limit_per_minute: int = Field(
        default=10,
        gt=0,
        description="Ballot submissions per minute allowed from one client address",
    )
    trusted_proxy_headers: str = Field(
        default="CF-Connecting-IP,X-Forwarded-For,X-Real-IP",
        description="Comma-separated headers consulted, in order, for the client address behind a proxy",
    )

    @property
    def cors_origin_list(self) -> list[str]:
        return _split_csv(self.cors_origins)

    @property
    def trusted_proxy_header_list(self) -> list[str]:
        return _split_csv(self.trusted_proxy_headers)


def get_settings() -> Settings:
    """Load settings from the environment."""
    return Settings()  # type: ignore[call-arg]
