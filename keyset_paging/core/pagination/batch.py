"""Batch paginator: one page per group from a single fetch.

Paginating the children of many parents one parent at a time issues one
query per parent. The batch paginator instead asks the source for a
single grouped fetch (at most ``count + 1`` rows per group, in traversal
order), partitions the stream by the group key and windows each
partition with the same rules as :class:`KeysetPaginator`.

Arguments are shared by every group, so they are validated and their
cursors decoded once, before any group is touched.

The flag on the non-driving side cannot be probed per group without
extra queries; it is set whenever the matching cursor was supplied.

Example:
    pages = await paginate_batch(
        SqlAlchemySource(session, select(Product).where(Product.brand_id.in_(ids))),
        Product.brand_id,
        SortSpecification.of(Product.name, Product.id),
        PagingArguments(first=2),
    )
    pages[brand_id].items  # first two products of that brand
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from keyset_paging.core.pagination.observers import notify
from keyset_paging.core.pagination.page import Page
from keyset_paging.core.pagination.paginator import KeysetPaginator
from keyset_paging.core.pagination.query import GroupSelector
from keyset_paging.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from keyset_paging.core.pagination.arguments import PagingArguments
    from keyset_paging.core.pagination.cursor import CursorCodec
    from keyset_paging.core.pagination.observers import QueryObserver
    from keyset_paging.core.pagination.page import BatchPage
    from keyset_paging.core.pagination.sorting import SortSpecification
    from keyset_paging.core.pagination.sources import PageSource
    from keyset_paging.core.settings import PaginationSettings


class BatchPaginator:
    """Compute one page per group key with one source fetch.

    Attributes:
        paginator: Keyset paginator supplying validation, codec and observer
    """

    def __init__(
        self,
        settings: PaginationSettings | None = None,
        *,
        codec: CursorCodec | None = None,
        observer: QueryObserver | None = None,
        paginator: KeysetPaginator | None = None,
    ) -> None:
        self.paginator = paginator or KeysetPaginator(settings, codec=codec, observer=observer)
        self._lazy = get_lazy_logger(__name__)

    async def paginate_batch[K, T](
        self,
        source: PageSource[T],
        group_selector: Any,
        sort: SortSpecification,
        args: PagingArguments,
    ) -> BatchPage[K, T]:
        """Compute a page for every group present in ``source``.

        Args:
            source: Fetch capability over the rows of all requested groups
            group_selector: Callable, attribute name, column or GroupSelector
            sort: Total order within each group
            args: Paging arguments shared by all groups

        Returns:
            Mapping of group key to page, in first-seen group order; groups
            with no rows are absent

        Raises:
            InvalidPagingArguments: Invalid counts or cursors (raised once)
        """
        plan = self.paginator.plan(sort, args)
        selector = GroupSelector.of(group_selector)

        query = plan.fetch_query(group_by=selector)
        notify(self.paginator.observer, query)
        rows = await source.fetch(query)

        partitions: dict[K, list[T]] = {}
        for row in rows:
            partitions.setdefault(selector.key_of(row), []).append(row)

        pages: BatchPage[K, T] = {}
        for key, group_rows in partitions.items():
            items, has_next, has_previous = plan.window(group_rows)
            pages[key] = Page(
                items=items,
                has_next_page=has_next or plan.before is not None,
                has_previous_page=has_previous or plan.after is not None,
                sort=sort,
                codec=self.paginator.codec,
            )

        self._lazy.debug(
            lambda: f"pagination.batch: {len(rows)} rows -> {len(pages)} pages by {selector.name}"
        )
        return pages


async def paginate_batch[K, T](
    source: PageSource[T],
    group_selector: Any,
    sort: SortSpecification,
    args: PagingArguments,
    *,
    settings: PaginationSettings | None = None,
    codec: CursorCodec | None = None,
    observer: QueryObserver | None = None,
) -> BatchPage[K, T]:
    """Compute grouped pages with a throwaway :class:`BatchPaginator`."""
    paginator = BatchPaginator(settings, codec=codec, observer=observer)
    return await paginator.paginate_batch(source, group_selector, sort, args)


__all__ = ["BatchPaginator", "paginate_batch"]
