"""Logging settings for entrypoints that configure output (the CLI)."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LoggingSettings(BaseSettings):
    """Where and how log records are written.

    Environment variables use LOG_ prefix.
    Example: LOG_LEVEL=WARNING, LOG_PAGINATION_LEVEL=DEBUG, LOG_JSON=false
    """

    service_name: str = Field(
        default="keyset-paging",
        description="Value of the static `service` field on JSON lines",
    )
    level: LogLevel = Field(default="INFO", description="Root logger level")
    pagination_level: LogLevel | None = Field(
        default=None,
        description="Level for `keyset_paging` loggers; DEBUG shows every query",
    )
    json_logs: bool = Field(
        default=True,
        alias="json",
        description="JSON Lines output instead of plain text",
    )
    capture_warnings: bool = Field(
        default=True,
        description="Route `warnings` through logging",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    def to_logging_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for ``configure_logging``."""
        return self.model_dump(
            include={"service_name", "pagination_level", "json_logs", "capture_warnings"}
        ) | {"log_level": self.level}
