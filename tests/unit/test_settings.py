"""Tests for Settings and env-file selection."""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from conduit_testkit.config.settings import Settings, environment_files, get_settings


class TestSettings:
    """Tests for Settings configuration."""

    def test_settings_loads_from_env(self) -> None:
        """
        Given: Environment variables set
        When: Settings is instantiated
        Then: Values are loaded from environment
        """
        env = {
            "API_URL": "https://api.conduit.test/",
            "EMAIL": "jake@jake.jake",
            "PASSWORD": "jakejake",
            "USER_NAME": "jake",
        }
        with patch.dict(os.environ, env, clear=True):
            settings = Settings(_env_file=None)  # type: ignore[call-arg]

        assert settings.api_url == "https://api.conduit.test/"
        assert settings.email == "jake@jake.jake"
        assert settings.password is not None
        assert settings.password.get_secret_value() == "jakejake"
        assert settings.user_name == "jake"
        assert settings.has_credentials

    def test_settings_defaults(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)  # type: ignore[call-arg]

        assert settings.environment == "dev"
        assert settings.debug is False
        assert settings.log_level == "INFO"
        assert settings.api_url is None
        assert settings.access_token is None
        assert settings.request_timeout == 30.0
        assert settings.max_retries == 3
        assert not settings.has_credentials

    def test_secrets_are_masked(self) -> None:
        settings = Settings(_env_file=None, password="hunter22")  # type: ignore[call-arg, arg-type]

        assert "hunter22" not in repr(settings)

    def test_url_gets_trailing_slash(self) -> None:
        settings = Settings(_env_file=None, api_url="http://localhost:3000/api/")  # type: ignore[call-arg]
        no_slash = Settings(_env_file=None, app_url="http://localhost:4200")  # type: ignore[call-arg]

        assert settings.api_url == "http://localhost:3000/api/"
        assert no_slash.app_url == "http://localhost:4200/"

    def test_empty_url_is_none(self) -> None:
        settings = Settings(_env_file=None, api_url="")  # type: ignore[call-arg]

        assert settings.api_url is None

    def test_url_requires_http_scheme(self) -> None:
        with pytest.raises(ValidationError):
            Settings(_env_file=None, api_url="ftp://conduit.test")  # type: ignore[call-arg]

    @pytest.mark.parametrize("retries", [0, 11])
    def test_max_retries_bounds(self, retries) -> None:
        with pytest.raises(ValidationError):
            Settings(_env_file=None, max_retries=retries)  # type: ignore[call-arg]

    def test_email_without_password_has_no_credentials(self) -> None:
        settings = Settings(_env_file=None, email="jake@jake.jake", password=None)  # type: ignore[call-arg]

        assert not settings.has_credentials


class TestEnvironmentFiles:
    """Tests for env file layering."""

    def test_explicit_environment(self) -> None:
        assert environment_files("local") == (".env", "env/.env.local")

    def test_environment_from_env_var(self) -> None:
        with patch.dict(os.environ, {"ENVIRONMENT": "staging"}):
            assert environment_files() == (".env", "env/.env.staging")

    def test_defaults_to_dev(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            assert environment_files() == (".env", "env/.env.dev")

    def test_env_file_values_are_loaded(self, tmp_path) -> None:
        base = tmp_path / ".env"
        base.write_text("API_URL=https://base.test\nEMAIL=base@test.com\n")
        override = tmp_path / ".env.local"
        override.write_text("API_URL=https://local.test\n")

        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=(base, override))  # type: ignore[call-arg]

        assert settings.api_url == "https://local.test/"
        assert settings.email == "base@test.com"


class TestGetSettings:
    """Tests for the cached settings accessor."""

    def test_get_settings_is_cached(self) -> None:
        get_settings.cache_clear()
        try:
            assert get_settings() is get_settings()
        finally:
            get_settings.cache_clear()


class TestConfigureLogging:
    """Tests for configure_logging."""

    @pytest.mark.parametrize("debug", [True, False])
    def test_quiets_httpx_below_warning(self, debug) -> None:
        import logging

        from conduit_testkit.config.logging import configure_logging

        configure_logging(Settings(_env_file=None, debug=debug, log_level="DEBUG"))  # type: ignore[call-arg]

        assert logging.getLogger("httpx").level == logging.WARNING

    def test_keeps_higher_level_for_httpx(self) -> None:
        import logging

        from conduit_testkit.config.logging import configure_logging

        configure_logging(Settings(_env_file=None, log_level="ERROR"))  # type: ignore[call-arg]

        assert logging.getLogger("httpx").level == logging.ERROR


class TestLogLevel:
    """Log level names are accepted in any case."""

    def test_lowercase_level_from_env(self) -> None:
        with patch.dict(os.environ, {"LOG_LEVEL": "debug"}, clear=True):
            settings = Settings(_env_file=None)  # type: ignore[call-arg]

        assert settings.log_level == "DEBUG"

    def test_mixed_case_level_argument(self) -> None:
        settings = Settings(_env_file=None, log_level=" Warning ")  # type: ignore[call-arg]

        assert settings.log_level == "WARNING"

    def test_unknown_level_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Settings(_env_file=None, log_level="verbose")  # type: ignore[call-arg]
