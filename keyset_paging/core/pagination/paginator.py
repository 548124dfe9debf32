"""Keyset paginator.

Cuts one page out of an ordered source given relay-style paging
arguments. The algorithm:

1. Validate counts and decode the ``after``/``before`` cursors against
   the sort (any failure is a single ``InvalidPagingArguments``)
2. Pick the traversal: forward when ``first`` is set or no count is set,
   backward when only ``last`` is set
3. Fetch ``count + 1`` rows strictly inside ``(after, before)`` in
   traversal order; the extra row tells whether more rows follow
4. Trim, restore ascending order for backward pages
5. Probe the cursor sides with EXISTS queries for the remaining flags

Example:
    sort = SortSpecification.of(Brand.name, Brand.id)
    page = await paginate(
        SqlAlchemySource(session, select(Brand)),
        sort,
        PagingArguments(first=10, after=cursor),
    )
    for brand in page:
        ...
    next_cursor = page.end_cursor if page.has_next_page else None
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from keyset_paging.core.pagination.cursor import CursorCodec
from keyset_paging.core.pagination.exceptions import (
    CursorArityMismatch,
    InvalidCursorFormat,
    InvalidPagingArguments,
)
from keyset_paging.core.pagination.observers import LoggingQueryObserver, notify
from keyset_paging.core.pagination.page import Page
from keyset_paging.core.pagination.query import FetchQuery, KeyBound, QueryKind
from keyset_paging.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from keyset_paging.core.pagination.arguments import PagingArguments
    from keyset_paging.core.pagination.observers import QueryObserver
    from keyset_paging.core.pagination.query import GroupSelector
    from keyset_paging.core.pagination.sorting import SortSpecification
    from keyset_paging.core.pagination.sources import PageSource
    from keyset_paging.core.settings import PaginationSettings


@dataclass(frozen=True, slots=True)
class PagingPlan:
    """Validated arguments with decoded cursors, ready to window rows.

    Attributes:
        sort: Sort the page is cut from (ascending output order)
        after: Decoded ``after`` key
        before: Decoded ``before`` key
        first: Forward count (may come from the default page size)
        last: Backward count, or trailing trim when ``first`` is also set
        backward: Whether ``last`` drives the traversal
    """

    sort: SortSpecification
    after: tuple[Any, ...] | None
    before: tuple[Any, ...] | None
    first: int | None
    last: int | None
    backward: bool

    @property
    def traversal(self) -> SortSpecification:
        return self.sort.reversed() if self.backward else self.sort

    @property
    def count(self) -> int | None:
        return self.last if self.backward else self.first

    def fetch_query(self, group_by: GroupSelector | None = None) -> FetchQuery:
        """Over-fetching query for the driving count inside the cursor range."""
        start, end = (self.before, self.after) if self.backward else (self.after, self.before)
        return FetchQuery(
            kind=QueryKind.FETCH,
            sort=self.traversal,
            lower=KeyBound(start) if start is not None else None,
            upper=KeyBound(end) if end is not None else None,
            limit=self.count + 1 if self.count is not None else None,
            group_by=group_by,
        )

    def window(self, rows: list[Any]) -> tuple[tuple[Any, ...], bool, bool]:
        """Trim fetched rows into ascending page items.

        Returns:
            ``(items, has_next_page, has_previous_page)`` as far as the
            over-fetch alone can tell
        """
        count = self.count
        more = count is not None and len(rows) > count
        if more:
            rows = rows[:count]

        if self.backward:
            rows = rows[::-1]
            has_next, has_previous = False, more
        else:
            has_next, has_previous = more, False

        # first and last together: slice with first, keep the tail
        if not self.backward and self.last is not None and self.last < len(rows):
            rows = rows[len(rows) - self.last :]
            has_previous = True

        return tuple(rows), has_next, has_previous


class KeysetPaginator:
    """Compute a single page from a page source.

    Instances only hold configuration, so one paginator can serve
    concurrent calls.

    Attributes:
        settings: Page size limits and cursor secret
        codec: Cursor codec (signed when the settings carry a secret)
        observer: Receives every query before it is issued
    """

    def __init__(
        self,
        settings: PaginationSettings | None = None,
        *,
        codec: CursorCodec | None = None,
        observer: QueryObserver | None = None,
    ) -> None:
        if settings is None:
            from keyset_paging.core.settings import get_pagination_settings

            settings = get_pagination_settings()

        self.settings = settings
        if codec is None:
            secret = settings.cursor_secret
            codec = CursorCodec(secret.get_secret_value() if secret else None)
        self.codec = codec
        if observer is None and settings.log_queries:
            observer = LoggingQueryObserver()
        self.observer = observer
        self._lazy = get_lazy_logger(__name__)

    def _decode(self, cursor: str | None, argument: str, sort: SortSpecification) -> tuple[Any, ...] | None:
        if cursor is None:
            return None
        try:
            key = self.codec.decode(cursor, len(sort))
        except (InvalidCursorFormat, CursorArityMismatch) as exc:
            raise InvalidPagingArguments(
                f"{argument} is not a valid cursor for this sort: {exc.message}",
                argument=argument,
                cursor=cursor,
            ) from exc

        for sort_field, value in zip(sort, key, strict=True):
            if not sort_field.accepts(value):
                raise InvalidPagingArguments(
                    f"{argument} is not a valid cursor for this sort: "
                    f"{sort_field.name} cannot hold {type(value).__name__}",
                    argument=argument,
                    cursor=cursor,
                )
        return key

    def plan(self, sort: SortSpecification, args: PagingArguments) -> PagingPlan:
        """Validate ``args`` and decode its cursors.

        Raises:
            InvalidPagingArguments: Negative or oversized count, bad cursor
        """
        max_page_size = self.settings.max_page_size
        for argument in ("first", "last"):
            value = getattr(args, argument)
            if value is None:
                continue
            if value < 0:
                raise InvalidPagingArguments(
                    f"{argument} must not be negative", argument=argument
                )
            if value > max_page_size:
                raise InvalidPagingArguments(
                    f"{argument} must not exceed {max_page_size}", argument=argument
                )

        after = self._decode(args.after, "after", sort)
        before = self._decode(args.before, "before", sort)

        first = args.first
        if first is None and args.last is None:
            first = self.settings.default_page_size

        return PagingPlan(
            sort=sort,
            after=after,
            before=before,
            first=first,
            last=args.last,
            backward=args.is_backward,
        )

    async def _exists(self, source: PageSource[Any], query: FetchQuery) -> bool:
        notify(self.observer, query)
        return await source.exists(query)

    async def paginate[T](
        self,
        source: PageSource[T],
        sort: SortSpecification,
        args: PagingArguments,
    ) -> Page[T]:
        """Compute the page selected by ``args``.

        Args:
            source: Fetch capability over the filtered data set
            sort: Total order ending in a unique field
            args: Relay-style paging arguments

        Returns:
            Page with items in ascending sort order

        Raises:
            InvalidPagingArguments: Invalid counts or cursors
        """
        plan = self.plan(sort, args)

        query = plan.fetch_query()
        notify(self.observer, query)
        rows = await source.fetch(query)
        items, has_next, has_previous = plan.window(rows)

        if plan.after is not None and not has_previous:
            has_previous = await self._exists(
                source,
                FetchQuery(QueryKind.EXISTS, sort, upper=KeyBound(plan.after, inclusive=True)),
            )
        if plan.before is not None and not has_next:
            has_next = await self._exists(
                source,
                FetchQuery(QueryKind.EXISTS, sort, lower=KeyBound(plan.before, inclusive=True)),
            )

        total_count = None
        if args.include_total_count:
            count_query = FetchQuery(QueryKind.COUNT, sort)
            notify(self.observer, count_query)
            total_count = await source.count(count_query)

        page: Page[T] = Page(
            items=items,
            has_next_page=has_next,
            has_previous_page=has_previous,
            sort=sort,
            codec=self.codec,
            total_count=total_count,
        )
        self._lazy.debug(
            lambda: f"pagination.page: {len(items)} items "
            f"(backward={plan.backward}, has_next={has_next}, has_previous={has_previous})"
        )
        return page


async def paginate[T](
    source: PageSource[T],
    sort: SortSpecification,
    args: PagingArguments,
    *,
    settings: PaginationSettings | None = None,
    codec: CursorCodec | None = None,
    observer: QueryObserver | None = None,
) -> Page[T]:
    """Compute one page with a throwaway :class:`KeysetPaginator`."""
    paginator = KeysetPaginator(settings, codec=codec, observer=observer)
    return await paginator.paginate(source, sort, args)


__all__ = ["KeysetPaginator", "PagingPlan", "paginate"]
