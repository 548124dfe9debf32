"""Query observation hooks.

Paginators describe every source access to an optional observer before
issuing it. Observers may record or log; they cannot change the query or
its result, and an observer that raises never fails the page.

Example:
    recorder = QueryRecorder()
    page = await paginate(source, sort, args, observer=recorder)
    print(len(recorder.queries))  # fetches + probes issued
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from keyset_paging.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from keyset_paging.core.pagination.query import FetchQuery, QueryKind

QueryObserver = Callable[["FetchQuery"], None]

logger = logging.getLogger(__name__)


def notify(observer: QueryObserver | None, query: FetchQuery) -> None:
    """Hand ``query`` to ``observer``, logging and discarding observer errors."""
    if observer is None:
        return
    try:
        observer(query)
    except Exception:
        logger.warning(
            "Query observer failed",
            exc_info=True,
            extra={"operation": "pagination.observe", "query_kind": query.kind.value},
        )


class QueryRecorder:
    """Observer that keeps every query it sees, in order."""

    def __init__(self) -> None:
        self.queries: list[FetchQuery] = []

    def __call__(self, query: FetchQuery) -> None:
        self.queries.append(query)

    def of_kind(self, kind: QueryKind) -> list[FetchQuery]:
        return [q for q in self.queries if q.kind == kind]

    def clear(self) -> None:
        self.queries.clear()


class LoggingQueryObserver:
    """Observer that logs each query at DEBUG.

    The description is only built when DEBUG is enabled for the logger.
    """

    def __init__(self, name: str = "keyset_paging.queries") -> None:
        self._lazy = get_lazy_logger(name)

    def __call__(self, query: FetchQuery) -> None:
        self._lazy.debug(lambda: f"pagination.query: {query.describe()}")


__all__ = [
    "LoggingQueryObserver",
    "QueryObserver",
    "QueryRecorder",
    "notify",
]
