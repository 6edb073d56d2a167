"""Unit tests for environment-driven settings."""

import pytest
from pydantic import ValidationError

from voting_portal.core.config import Settings

_SECRET = "test-secret-key-that-is-at-least-32-characters-long"


def _load() -> Settings:
    return Settings(_env_file=None)  # type: ignore[call-arg]


@pytest.fixture(autouse=True)
def required_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///./voting.db")
    monkeypatch.setenv("JWT_SECRET_KEY", _SECRET)


class TestSettings:
    def test_required_values_read_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DATABASE_URL", "postgresql+asyncpg://portal:pw@db/voting")
        settings = _load()
        assert settings.database_url == "postgresql+asyncpg://portal:pw@db/voting"
        assert settings.jwt_secret_key == _SECRET

    def test_missing_database_url(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("DATABASE_URL")
        with pytest.raises(ValidationError, match="database_url"):
            _load()

    def test_defaults(self) -> None:
        settings = _load()
        assert settings.jwt_algorithm == "HS256"
        assert settings.jwt_access_token_expire_minutes == 30
        assert settings.database_busy_timeout == 5.0
        assert settings.database_schema is None
        assert settings.voter_id_prefix == "VOT"
        assert settings.voter_id_max_attempts == 5
        assert settings.log_level == "INFO"
        assert settings.log_dir is None
        assert settings.cors_origin_list == []
        assert settings.api_v1_prefix == "/api/v1"
        assert settings.rate_limit_per_minute == 200
        assert settings.vote_rate_limit_per_minute == 10

    def test_cors_origin_list(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CORS_ORIGINS", "http://localhost:3000, https://vote.example.org")
        assert _load().cors_origin_list == ["http://localhost:3000", "https://vote.example.org"]

    def test_trusted_proxy_header_list_skips_blanks(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TRUSTED_PROXY_HEADERS", " X-Real-IP ,,")
        assert _load().trusted_proxy_header_list == ["X-Real-IP"]

    def test_short_secret_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("JWT_SECRET_KEY", "too-short")
        with pytest.raises(ValidationError, match="at least 32 characters"):
            _load()

    def test_voter_id_prefix_length(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("VOTER_ID_PREFIX", "")
        with pytest.raises(ValidationError):
            _load()

    @pytest.mark.parametrize(
        "env_name",
        [
            "JWT_ACCESS_TOKEN_EXPIRE_MINUTES",
            "RATE_LIMIT_PER_MINUTE",
            "VOTE_RATE_LIMIT_PER_MINUTE",
            "VOTER_ID_MAX_ATTEMPTS",
            "DATABASE_BUSY_TIMEOUT",
        ],
    )
    def test_limits_must_be_positive(self, monkeypatch: pytest.MonkeyPatch, env_name: str) -> None:
        monkeypatch.setenv(env_name, "0")
        with pytest.raises(ValidationError):
            _load()

    def test_database_schema_accepted(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DATABASE_SCHEMA", "pr_42")
        assert _load().database_schema == "pr_42"

    @pytest.mark.parametrize("schema", ["Public", "1abc", "drop table;"])
    def test_database_schema_rejects_unsafe_names(self, monkeypatch: pytest.MonkeyPatch, schema: str) -> None:
        monkeypatch.setenv("DATABASE_SCHEMA", schema)
        with pytest.raises(ValidationError, match="database_schema must match"):
            _load()
