"""Environment configuration and validation.

Planner settings are loaded from environment variables (optionally via a local `.env` file) and
validated once at startup.
"""

from __future__ import annotations

from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class QuerySettings(BaseSettings):
    """Pagination defaults and bounds applied by the query planner."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    default_limit: int = Field(default=20, alias="QUERY_DEFAULT_LIMIT")
    max_limit: int | None = Field(default=None, alias="QUERY_MAX_LIMIT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    @field_validator("default_limit")
    @classmethod
    def validate_default_limit(cls, value: int) -> int:
        """Validate that the default page size is positive."""

        if value <= 0:
            raise ValueError("QUERY_DEFAULT_LIMIT must be a positive integer")
        return value

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        return value.upper()

    @model_validator(mode="after")
    def validate_limits(self) -> QuerySettings:
        """Validate that an optional maximum page size admits the default one."""

        if self.max_limit is not None and self.max_limit < self.default_limit:
            raise ValueError("QUERY_MAX_LIMIT must be >= QUERY_DEFAULT_LIMIT")
        return self


def load_settings() -> QuerySettings:
    """Load and validate settings from environment variables.

    Raises:
        RuntimeError: If the environment configuration is invalid.
    """

    try:
        return QuerySettings()
    except ValidationError as exc:
        raise RuntimeError(f"Invalid environment configuration: {exc}") from exc


def default_settings() -> QuerySettings:
    """Built-in defaults, ignoring the environment and any `.env` file."""

    return QuerySettings.model_construct(default_limit=20, max_limit=None, log_level="INFO")
