"""Tests for Settings validation and dialect detection."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from app.config import Settings


class TestDialect:
    def test_default_is_sqlite(self):
        s = Settings(_env_file=None)
        assert s.is_sqlite
        assert s.sync_db_url() == "sqlite:///./gymportal.db"

    def test_postgres_url_detected(self):
        s = Settings(_env_file=None, GYM_DB_URL="postgresql+asyncpg://u:p@db:5432/gym")
        assert s.is_postgres
        assert s.sync_db_url() == "postgresql://u:p@db:5432/gym"

    def test_postgres_url_composed_from_parts(self):
        s = Settings(
            _env_file=None,
            GYM_DB_DIALECT="postgres",
            GYM_DB_HOST="pg",
            GYM_DB_USER="gym",
            GYM_DB_PASSWORD="pw",
            GYM_DB_NAME="portal",
        )
        assert s.GYM_DB_URL == "postgresql+asyncpg://gym:pw@pg:5432/portal"
        assert s.is_postgres


class TestAuthSettings:
    def test_defaults(self):
        s = Settings(_env_file=None)
        assert s.AUTH_TOKEN_TTL_SECONDS == 7 * 24 * 60 * 60
        assert s.OAUTH_STATE_TTL_SECONDS == 600

    @pytest.mark.parametrize("secret", ["", "   "])
    def test_empty_secret_rejected(self, secret):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, AUTH_SECRET_KEY=secret)

    @pytest.mark.parametrize("ttl", [0, -1])
    def test_non_positive_ttl_rejected(self, ttl):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, AUTH_TOKEN_TTL_SECONDS=ttl)

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("AUTH_TOKEN_TTL_SECONDS", "3600")
        monkeypatch.setenv("LLM_MODEL", "gpt-4o")
        s = Settings(_env_file=None)
        assert s.AUTH_TOKEN_TTL_SECONDS == 3600
        assert s.LLM_MODEL == "gpt-4o"
