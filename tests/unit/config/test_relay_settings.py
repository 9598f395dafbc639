"""Tests for environment settings"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from formrelay.config.errors import MissingKeyError
from formrelay.config.settings import Settings, get_settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("CRM_API_TOKEN", raising=False)
        monkeypatch.delenv("LOG_LEVEL", raising=False)

        settings = Settings(_env_file=None)

        assert settings.crm_api_url == "https://api.monday.com/v2"
        assert settings.crm_timeout_seconds == 30.0
        assert settings.log_level == "INFO"
        assert settings.debug_mode is False

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("CRM_API_TOKEN", "secret")
        monkeypatch.setenv("debug_mode", "true")
        monkeypatch.setenv("LOG_LEVEL", "trace")

        settings = Settings(_env_file=None)

        assert settings.require_crm_token() == "secret"
        assert settings.debug_mode is True
        assert settings.log_level == "TRACE"

    def test_missing_token_fails_fast(self, monkeypatch):
        monkeypatch.delenv("CRM_API_TOKEN", raising=False)

        with pytest.raises(MissingKeyError):
            Settings(_env_file=None).require_crm_token()

    @pytest.mark.parametrize("field,value", [("log_level", "LOUD"), ("crm_timeout_seconds", 0)])
    def test_invalid_values(self, field, value):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, **{field: value})

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()
