"""Page sources: the fetch capability paginators run against.

A page source answers :class:`FetchQuery` descriptions. It must return
rows in exactly the requested order and honor the limit (per group when
the query is grouped). Sources never retry and never swallow errors;
whatever the backend raises reaches the paginator's caller.

Two sources are provided:

- ``SequenceSource``: an in-memory iterable, ordered with the sort
  specification's comparator
- ``SqlAlchemySource``: an async SQLAlchemy ``Select``, extended with seek
  conditions, ORDER BY / LIMIT, a ROW_NUMBER window for grouped fetches,
  EXISTS probes and COUNT
"""

from __future__ import annotations

from collections.abc import Iterable
from functools import cmp_to_key
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from sqlalchemy import func, select
from sqlalchemy.orm import aliased

from keyset_paging.core.pagination.filters import SeekFilter, resolve_column
from keyset_paging.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from sqlalchemy import Select
    from sqlalchemy.ext.asyncio import AsyncSession

    from keyset_paging.core.pagination.query import FetchQuery

_ROW_NUMBER = "_page_row"


@runtime_checkable
class PageSource[T](Protocol):
    """Fetch capability consumed by the paginators."""

    async def fetch(self, query: FetchQuery) -> list[T]:
        """Rows inside the query bounds, in ``query.sort`` order, up to ``query.limit``.

        When ``query.group_by`` is set the limit applies to each group.
        """
        ...

    async def exists(self, query: FetchQuery) -> bool:
        """Whether at least one row lies inside the query bounds."""
        ...

    async def count(self, query: FetchQuery) -> int:
        """Number of rows inside the query bounds."""
        ...


class SequenceSource[T]:
    """Page source over an in-memory iterable.

    Usage:
        source = SequenceSource(brands)
        page = await paginate(source, sort, PagingArguments(first=10))
    """

    def __init__(self, items: Iterable[T]) -> None:
        self._items: tuple[T, ...] = tuple(items)

    def __len__(self) -> int:
        return len(self._items)

    def _select(self, query: FetchQuery) -> list[T]:
        sort = query.sort
        keyed = [(sort.key_of(item), item) for item in self._items]
        keyed = [pair for pair in keyed if query.contains(pair[0])]
        keyed.sort(key=cmp_to_key(lambda a, b: sort.compare(a[0], b[0])))
        return [item for _, item in keyed]

    async def fetch(self, query: FetchQuery) -> list[T]:
        rows = self._select(query)
        if query.limit is None:
            return rows
        if query.group_by is None:
            return rows[: query.limit]

        taken: dict[Any, int] = {}
        limited: list[T] = []
        for row in rows:
            group = query.group_by.key_of(row)
            seen = taken.get(group, 0)
            if seen < query.limit:
                taken[group] = seen + 1
                limited.append(row)
        return limited

    async def exists(self, query: FetchQuery) -> bool:
        sort = query.sort
        return any(query.contains(sort.key_of(item)) for item in self._items)

    async def count(self, query: FetchQuery) -> int:
        sort = query.sort
        return sum(1 for item in self._items if query.contains(sort.key_of(item)))


class SqlAlchemySource[T]:
    """Page source over an async SQLAlchemy select.

    The statement carries the caller's filtering (WHERE, joins); ordering
    and limits are owned by the source and any ORDER BY on the statement
    is replaced.

    Usage:
        stmt = select(Product).where(Product.brand_id.in_(brand_ids))
        source = SqlAlchemySource(session, stmt)
        pages = await paginate_batch(source, Product.brand_id, sort, args)

    Statements selecting a single mapped entity return entity instances;
    any other statement returns ``Row`` objects, whose attribute access
    works with the default sort-field selectors.
    """

    def __init__(self, session: AsyncSession, statement: Select[Any]) -> None:
        self._session = session
        self._statement = statement
        self._entity = self._single_entity(statement)
        self._lazy = get_lazy_logger(__name__)

    @staticmethod
    def _single_entity(statement: Select[Any]) -> Any:
        descriptions = statement.column_descriptions
        if len(descriptions) != 1:
            return None
        description = descriptions[0]
        entity = description.get("entity")
        if entity is not None and description.get("expr") is entity:
            return entity
        return None

    async def _rows(self, statement: Select[Any]) -> list[Any]:
        result = await self._session.execute(statement)
        if self._entity is not None:
            return list(result.scalars().all())
        return list(result.all())

    async def fetch(self, query: FetchQuery) -> list[T]:
        if query.group_by is not None and query.limit is not None:
            return await self._fetch_grouped(query)

        statement = SeekFilter(query.sort, lower=query.lower, upper=query.upper).apply(
            self._statement
        )
        if query.limit is not None:
            statement = statement.limit(query.limit)

        rows = await self._rows(statement)
        self._lazy.debug(lambda: f"db.page_fetch: {query.describe()} -> {len(rows)} rows")
        return rows

    async def _fetch_grouped(self, query: FetchQuery) -> list[T]:
        """One statement returning at most ``limit`` rows per group.

        ROW_NUMBER() OVER (PARTITION BY group ORDER BY sort) numbers the
        rows of each group inside the bounds; the outer select keeps the
        first ``limit`` of each and restores the traversal order.
        """
        assert query.group_by is not None and query.limit is not None
        seek = SeekFilter(query.sort, lower=query.lower, upper=query.upper)
        columns = seek.columns(self._statement)
        group_column = query.group_by.column
        if group_column is None:
            group_column = resolve_column(
                _GroupField(query.group_by.name), self._statement
            )

        row_number = (
            func.row_number()
            .over(partition_by=group_column, order_by=seek.order_by_clauses(columns))
            .label(_ROW_NUMBER)
        )
        inner = seek.apply_where(self._statement).order_by(None).add_columns(row_number)
        subquery = inner.subquery()

        if self._entity is not None:
            target = aliased(self._entity, subquery)
            outer_columns = [getattr(target, f.name) for f in query.sort]
            statement = select(target)
        else:
            outer_columns = [subquery.c[f.name] for f in query.sort]
            statement = select(*[c for c in subquery.c if c.key != _ROW_NUMBER])

        statement = statement.where(subquery.c[_ROW_NUMBER] <= query.limit).order_by(
            *SeekFilter(query.sort).order_by_clauses(outer_columns)
        )

        rows = await self._rows(statement)
        self._lazy.debug(lambda: f"db.page_fetch: {query.describe()} -> {len(rows)} rows")
        return rows

    async def exists(self, query: FetchQuery) -> bool:
        inner = SeekFilter(query.sort, lower=query.lower, upper=query.upper).apply_where(
            self._statement
        )
        result = await self._session.execute(select(inner.order_by(None).exists()))
        return bool(result.scalar())

    async def count(self, query: FetchQuery) -> int:
        inner = SeekFilter(query.sort, lower=query.lower, upper=query.upper).apply_where(
            self._statement
        )
        count_stmt = select(func.count()).select_from(inner.order_by(None).subquery())
        result = await self._session.execute(count_stmt)
        return result.scalar_one()


class _GroupField:
    """Name-only stand-in so group columns resolve like sort fields."""

    __slots__ = ("name", "column")

    def __init__(self, name: str) -> None:
        self.name = name
        self.column = None


__all__ = [
    "PageSource",
    "SequenceSource",
    "SqlAlchemySource",
]
