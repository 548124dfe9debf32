"""Lazy evaluation support for logging.

Query descriptions and page summaries are only worth building when DEBUG
is enabled. The adapter here accepts callables in place of messages and
format arguments and only invokes them once the level check passes.
"""

from __future__ import annotations

import logging
from typing import Any


class LazyLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that evaluates callable messages and arguments lazily.

    Bound context (``extra``) is merged into every record, so a paginator
    can bind ``component="paginator"`` once and have it on every line.

    Example:
        ```python
        logger = LazyLoggerAdapter(logging.getLogger(__name__))
        logger.debug(lambda: f"Fetched {len(rows)} rows for {query.describe()}")
        ```
    """

    def process(self, msg: Any, kwargs: Any) -> tuple[Any, Any]:
        if self.extra:
            kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs

    def log(self, level: int, msg: Any, *args: Any, **kwargs: Any) -> None:
        if not self.isEnabledFor(level):
            return

        if callable(msg):
            msg = msg()
        if args:
            args = tuple(arg() if callable(arg) else arg for arg in args)

        super().log(level, msg, *args, **kwargs)


def get_lazy_logger(name: str, **context: Any) -> LazyLoggerAdapter:
    """Get logger with lazy evaluation support.

    Args:
        name: Logger name (usually __name__).
        **context: Optional context bound to every record.

    Returns:
        Logger adapter with lazy evaluation support.

    Example:
        ```python
        logger = get_lazy_logger(__name__, component="batch")
        logger.debug(lambda: f"{len(pages)} pages built")
        ```
    """
    return LazyLoggerAdapter(logging.getLogger(name), context or {})
