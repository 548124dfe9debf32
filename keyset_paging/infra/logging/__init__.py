"""Logging infrastructure.

Basic usage:
    import logging

    logger = logging.getLogger(__name__)
    logger.info("Paginating", extra={"first": 10})

    # Lazy evaluation for expensive messages
    from keyset_paging.infra.logging import get_lazy_logger

    lazy_logger = get_lazy_logger(__name__)
    lazy_logger.debug(lambda: f"Query: {query.describe()}")  # Only runs if DEBUG enabled
"""

from keyset_paging.infra.logging.config import configure_logging, setup_logging
from keyset_paging.infra.logging.formatters import JSONFormatter
from keyset_paging.infra.logging.lazy import (
    LazyLoggerAdapter,
    get_lazy_logger,
)

__all__ = [
    "JSONFormatter",
    "LazyLoggerAdapter",
    "configure_logging",
    "get_lazy_logger",
    "setup_logging",
]
