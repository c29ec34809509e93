"""Harness settings using pydantic-settings."""

import os
from functools import lru_cache
from typing import Any, Literal

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from playwise.core.exceptions import ConfigurationError

_MISSING = object()


def env_files_for(env: str) -> tuple[str, ...]:
    """Return the env files to load for a target environment.

    Later files take priority; missing files are skipped by pydantic-settings.
    """
    return (".env", f"environment/.env.{env}")


class Settings(BaseSettings):
    """Playwise configuration from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PLAYWISE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra env vars
    )

    # Environment
    env: str = Field(default="test", description="Target environment identifier")
    debug: bool = Field(default=False, description="Pretty console logs instead of JSON")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Minimum log level"
    )

    # Targets
    base_url: str = Field(default="http://localhost:3000", description="UI base URL")
    api_base_url: str = Field(default="http://localhost:3000/api", description="API base URL")

    # Browser
    browser_type: Literal["chromium", "firefox", "webkit"] = Field(
        default="chromium", description="Playwright browser engine"
    )
    headless: bool = Field(default=True, description="Launch browser headless")
    slow_mo_ms: int = Field(default=0, ge=0, description="Delay between browser operations")
    viewport_width: int = Field(default=1920, ge=1)
    viewport_height: int = Field(default=1080, ge=1)
    ignore_https_errors: bool = Field(default=True)

    # Timeouts (in milliseconds)
    default_timeout_ms: int = Field(default=30_000, ge=1, description="Element wait timeout")
    navigation_timeout_ms: int = Field(default=60_000, ge=1, description="Navigation timeout")
    poll_interval_ms: int = Field(default=250, ge=1, description="Polling interval for waits")

    # Credentials
    username: str = Field(default="", description="Login user for UI flows")
    password: SecretStr = Field(default=SecretStr(""), description="Login password")

    @field_validator("base_url", "api_base_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate URL format."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("URL must start with http:// or https://")
        return v.rstrip("/")

    def lookup(self, key: str, default: Any = _MISSING) -> Any:
        """Look up a named configuration value.

        Settings fields win; anything else falls back to the process
        environment so suites can read ad-hoc values (e.g. VALID_USERNAME).

        Raises:
            ConfigurationError: If the key is unknown and no default is given.
        """
        name = key.lower()
        if name in type(self).model_fields:
            value = getattr(self, name)
            return value.get_secret_value() if isinstance(value, SecretStr) else value

        value = os.environ.get(key)
        if value is not None:
            return value
        if default is _MISSING:
            raise ConfigurationError(f"Missing configuration value: {key}")
        return default


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance for the environment named by PLAYWISE_ENV."""
    env = os.environ.get("PLAYWISE_ENV", "test")
    return Settings(_env_file=env_files_for(env))  # type: ignore[call-arg]
