"""Logging configuration setup.

Installs a single stderr handler on the root logger with either the
JSON Lines formatter or a plain text format. Library modules only ever
call ``logging.getLogger``; configuring output is left to entrypoints
(the CLI, or the host application).
"""

from __future__ import annotations

import logging
import logging.config
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from keyset_paging.core.settings.logs import LoggingSettings

logger = logging.getLogger(__name__)
_LOGGING_INITIALIZED = False

TEXT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def _formatter_config(json_logs: bool, service_name: str | None) -> dict[str, Any]:
    if not json_logs:
        return {"format": TEXT_FORMAT}
    return {
        "()": "keyset_paging.infra.logging.formatters.JSONFormatter",
        "static": {"service": service_name} if service_name else {},
    }


def configure_logging(
    log_level: str = "INFO",
    json_logs: bool = True,
    service_name: str | None = None,
    capture_warnings: bool = True,
    pagination_level: str | None = None,
    **kwargs: Any,
) -> None:
    """Configure root logging with dictConfig.

    Args:
        log_level: Root logger level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_logs: Emit JSON Lines instead of plain text.
        service_name: Static ``service`` field on JSON records.
        capture_warnings: Forward Python warnings to logging.
        pagination_level: Separate level for the ``keyset_paging`` loggers.
        **kwargs: Ignored extra settings (logged at DEBUG).

    Example:
        configure_logging(log_level="WARNING", pagination_level="DEBUG", json_logs=False)
    """
    logging.captureWarnings(capture_warnings)

    loggers: dict[str, Any] = {}
    if pagination_level is not None:
        loggers["keyset_paging"] = {"level": pagination_level}

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"default": _formatter_config(json_logs, service_name)},
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                    "stream": "ext://sys.stderr",
                },
            },
            "loggers": loggers,
            "root": {"level": log_level, "handlers": ["console"]},
        }
    )

    if kwargs:
        logger.debug("Unused logging kwargs supplied: %s", ", ".join(sorted(kwargs)))


def setup_logging(
    log_settings: LoggingSettings | None = None,
    *,
    force: bool = False,
    **configure_kwargs: Any,
) -> None:
    """Ensure logging is configured once across entrypoints.

    Args:
        log_settings: Optional settings; loaded via get_logging_settings() if omitted.
        force: Reconfigure even if already initialized.
        **configure_kwargs: Explicit overrides for configure_logging().
    """
    global _LOGGING_INITIALIZED

    if _LOGGING_INITIALIZED and not force:
        return

    if log_settings is None:
        from keyset_paging.core.settings import get_logging_settings

        log_settings = get_logging_settings()

    configure_logging(**{**log_settings.to_logging_kwargs(), **configure_kwargs})
    _LOGGING_INITIALIZED = True
