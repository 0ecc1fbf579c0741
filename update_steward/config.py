"""Process settings using pydantic-settings.

These are the settings of the running service, not of a repository (see
:mod:`update_steward.repo_config` for those). Every field can be set via an
environment variable of the same name (case-insensitive).
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Top-level service settings."""

    # Maven Central search endpoint used by the version resolver adapter
    MAVEN_CENTRAL_BASE_URL: str = "https://search.maven.org/solrsearch/select"
    MAVEN_CENTRAL_MAX_VERSIONS: int = Field(default=200, ge=1, le=500)

    # HTTP behavior
    HTTP_TIMEOUT_SECONDS: int = Field(default=10, ge=1)
    HTTP_MAX_RETRIES: int = Field(default=2, ge=0)
    HTTP_CONCURRENCY: int = Field(default=10, ge=1)

    # Resolver cache
    CACHE_ENABLED: bool = True
    CACHE_TTL_SECONDS_VERSIONS: int = Field(default=3600, ge=0)
    CACHE_MAX_ENTRIES: int = Field(default=2048, ge=1)

    # Logging
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    LOG_JSON: bool = False

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=False)

    @field_validator("MAVEN_CENTRAL_BASE_URL")
    @classmethod
    def _https_only(cls, v: str) -> str:
        if not v.lower().startswith("https://"):
            raise ValueError("MAVEN_CENTRAL_BASE_URL must be HTTPS")
        return v


__all__ = ["Settings"]
