"""JSON Lines formatter with OpenTelemetry trace correlation."""
from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import Any

from opentelemetry import trace

# Attributes every LogRecord carries; anything else arrived through ``extra``
_STANDARD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.NOTSET, "", 0, "", (), None))
) | {"message", "asctime", "taskName"}


def _one_line(text: str) -> str:
    return text.replace("\n", "\\n")


def _trace_fields() -> dict[str, str]:
    """Trace and span ids of the active span, if any."""
    context = trace.get_current_span().get_span_context()
    if not context.is_valid:
        return {}
    return {
        "trace_id": format(context.trace_id, "032x"),
        "span_id": format(context.span_id, "016x"),
    }


class JSONFormatter(logging.Formatter):
    """Render each record as one JSON object per line.

    ``extra`` fields passed by the paginators (``operation``,
    ``query_kind``, ...) are copied to the top level. Values that JSON
    cannot represent are rendered with ``str()``.

    Example output:
        {"level": "WARNING", "logger": "keyset_paging.core.pagination.observers", "message": "Query observer failed", "timestamp": "2025-01-01T00:00:00.123Z", "operation": "pagination.observe", "query_kind": "exists"}
    """

    def __init__(self, static: dict[str, Any] | None = None) -> None:
        """Create the formatter.

        Args:
            static: Fields added to every line, e.g. ``{"service": "catalog"}``.
        """
        super().__init__()
        self.static = static or {}

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=UTC)
        data: dict[str, Any] = {
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "timestamp": created.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            **_trace_fields(),
            **self.static,
        }

        if record.exc_info:
            data["exception"] = _one_line(self.formatException(record.exc_info))
        if record.stack_info:
            data["stack_trace"] = _one_line(record.stack_info)

        extras = {
            key: value
            for key, value in vars(record).items()
            if key not in _STANDARD_ATTRS and key not in data
        }
        data.update(extras)

        return json.dumps(data, ensure_ascii=False, default=str)
