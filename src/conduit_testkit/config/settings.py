"""Testkit settings using pydantic-settings."""

import os
from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """conduit-testkit configuration from environment variables.

    Values are read once and passed explicitly to providers; nothing in the
    testkit reads ``os.environ`` after this point.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra env vars
    )

    # Environment
    environment: str = Field(default="dev", description="Target environment (dev, local, ...)")
    debug: bool = Field(default=False, description="Pretty console logs instead of JSON")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Minimum log level"
    )

    # Application under test
    app_url: str | None = Field(default=None, description="Conduit web app URL")
    api_url: str | None = Field(default=None, description="Conduit API base URL")

    # Test user
    email: str | None = Field(default=None, description="Test user email")
    password: SecretStr | None = Field(default=None, description="Test user password")
    user_name: str | None = Field(default=None, description="Test user display name")
    access_token: SecretStr | None = Field(
        default=None, description="Pre-issued API token; skips login when set"
    )

    # HTTP
    request_timeout: float = Field(default=30.0, gt=0, description="Request timeout in seconds")
    max_retries: int = Field(default=3, ge=1, le=10, description="Attempts on transport errors")

    @field_validator("log_level", mode="before")
    @classmethod
    def normalise_log_level(cls, v: object) -> object:
        """Accept level names in any case (LOG_LEVEL=debug)."""
        return v.strip().upper() if isinstance(v, str) else v

    @field_validator("app_url", "api_url")
    @classmethod
    def validate_url(cls, v: str | None) -> str | None:
        """Validate URL format and normalise the trailing slash."""
        if v is None or v == "":
            return None
        if not v.startswith(("http://", "https://")):
            raise ValueError("URL must start with http:// or https://")
        return v if v.endswith("/") else f"{v}/"

    @property
    def has_credentials(self) -> bool:
        return bool(self.email and self.password)


def environment_files(environment: str | None = None) -> tuple[str, ...]:
    """Env files to load, lowest priority first.

    ``env/.env.<environment>`` is layered over the plain ``.env``.
    """
    environment = environment or os.environ.get("ENVIRONMENT", "dev")
    return (".env", f"env/.env.{environment}")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings(_env_file=environment_files())  # type: ignore[call-arg]
