"""Application settings loaded from environment variables and .env.

Hey future me - every knob of the client lives here, split by concern the same
way the sections are used: ApiSettings for the HTTP side, StorageSettings for
where the tokens go, ObservabilitySettings for logging output. Each section has
its own env prefix, so POUPADIN_API_BASE_URL overrides ApiSettings.base_url.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_API_BASE_URL = "https://api.poupadin.space/api"
DEFAULT_CREDENTIALS_PATH = Path.home() / ".poupadin" / "credentials.json"
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ApiSettings(BaseSettings):
    """Remote API connection settings."""

    model_config = SettingsConfigDict(
        env_prefix="POUPADIN_API_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    base_url: str = Field(
        default=DEFAULT_API_BASE_URL,
        description="Base URL every endpoint path is appended to",
    )
    timeout: float = Field(default=30.0, gt=0, description="Request timeout in seconds")
    max_connections: int = Field(default=20, ge=1, description="Max concurrent connections")
    max_keepalive: int = Field(default=10, ge=0, description="Max idle keep-alive connections")

    # Trailing slash would turn "/auth/login" into "//auth/login" once joined.
    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URL without trailing slash."""
        return v.rstrip("/")


class StorageSettings(BaseSettings):
    """Credential store settings."""

    model_config = SettingsConfigDict(
        env_prefix="POUPADIN_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    backend: Literal["file", "memory"] = Field(
        default="file", description="Where access/refresh tokens are persisted"
    )
    credentials_path: Path = Field(
        default=DEFAULT_CREDENTIALS_PATH,
        description="JSON document holding the credentials (file backend only)",
    )


class ObservabilitySettings(BaseSettings):
    """Logging output settings."""

    model_config = SettingsConfigDict(
        env_prefix="POUPADIN_OBSERVABILITY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_json_format: bool = Field(
        default=False, description="Emit JSON log lines instead of text"
    )


class Settings(BaseSettings):
    """Top-level settings composed from the per-concern sections."""

    model_config = SettingsConfigDict(
        env_prefix="POUPADIN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = Field(default="poupadin", description="Name used in log output")
    log_level: str = Field(default="INFO", description="Root log level")

    api: ApiSettings = Field(default_factory=ApiSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Accept only the standard logging level names."""
        level = v.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Unknown log level: {v}")
        return level


# Yo, settings are read once per process. Tests that need different values should
# build Settings(...) directly instead of poking env vars after the first call.
@lru_cache
def get_settings() -> Settings:
    """Get the cached application settings."""
    return Settings()
