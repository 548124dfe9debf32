"""Pagination settings.

Centralized defaults for page sizes and cursor signing, so every
paginator in a process applies the same limits.

Environment variables use PAGINATION_ prefix.
Example: PAGINATION_MAX_PAGE_SIZE=200, PAGINATION_CURSOR_SECRET=s3cret
"""

from __future__ import annotations

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class PaginationSettings(BaseSettings):
    """Pagination configuration settings.

    Attributes:
        max_page_size: Largest ``first``/``last`` a caller may request.
        default_page_size: Page size when neither ``first`` nor ``last``
            is given. None leaves such requests unbounded.
        cursor_secret: When set, cursors are HMAC-signed and verified.
        log_queries: Log every source query at DEBUG when no observer is given.

    Example:
        settings = PaginationSettings(max_page_size=50)
        paginator = KeysetPaginator(settings)
    """

    max_page_size: int = Field(
        default=100,
        ge=1,
        le=10000,
        description="Maximum allowed page size (hard limit)",
    )
    default_page_size: int | None = Field(
        default=None,
        ge=0,
        le=10000,
        description="Page size when no count is requested (None = unbounded)",
    )
    cursor_secret: SecretStr | None = Field(
        default=None,
        description="HMAC secret for cursor signing",
    )
    log_queries: bool = Field(
        default=False,
        description="Log source queries at DEBUG",
    )

    model_config = SettingsConfigDict(
        env_prefix="PAGINATION_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
    )

    @model_validator(mode="after")
    def _default_within_max(self) -> PaginationSettings:
        if self.default_page_size is not None and self.default_page_size > self.max_page_size:
            raise ValueError("default_page_size must not exceed max_page_size")
        return self
