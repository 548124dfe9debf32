"""Cached settings loaders.

Settings are read from the environment once per process. Tests that
change environment variables call ``clear_all_caches()``.
"""

from __future__ import annotations

from functools import lru_cache

from .logs import LoggingSettings
from .pagination import PaginationSettings


@lru_cache(maxsize=1)
def get_logging_settings() -> LoggingSettings:
    """Get cached logging settings.

    Returns:
        Validated and frozen LoggingSettings instance.
    """
    return LoggingSettings()


@lru_cache(maxsize=1)
def get_pagination_settings() -> PaginationSettings:
    """Get cached pagination settings.

    Returns:
        Validated and frozen PaginationSettings instance.
    """
    return PaginationSettings()


def clear_all_caches() -> None:
    """Drop cached settings so the next loader call re-reads the environment."""
    get_logging_settings.cache_clear()
    get_pagination_settings.cache_clear()
