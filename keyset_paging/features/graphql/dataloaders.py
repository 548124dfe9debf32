"""DataLoader for paginating children of many parents in one query.

A resolver for ``brand.products(first: 2)`` runs once per brand. Each
call asks the loader for its brand's page; the DataLoader collects the
brand ids of one tick and the batch function paginates all of them with
a single grouped fetch.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable
from typing import TYPE_CHECKING, Any

from strawberry.dataloader import DataLoader

from keyset_paging.core.pagination.batch import BatchPaginator
from keyset_paging.core.pagination.page import Page

if TYPE_CHECKING:
    from keyset_paging.core.pagination.arguments import PagingArguments
    from keyset_paging.core.pagination.sorting import SortSpecification
    from keyset_paging.core.pagination.sources import PageSource


class PagedDataLoader[K: Hashable, T]:
    """DataLoader mapping a parent key to the page of its children.

    Paging arguments are fixed per loader: every parent in a batch gets the
    same ``first``/``after``/... window. Create one loader per distinct set
    of arguments, per request.

    Usage:
        loader = PagedDataLoader(
            lambda brand_ids: SqlAlchemySource(
                session,
                select(Product).where(Product.brand_id.in_(brand_ids)),
            ),
            group_selector=Product.brand_id,
            sort=SortSpecification.of(Product.name, Product.id),
            args=PagingArguments(first=2),
        )
        page = await loader.load(brand.id)  # batched with the other brands
    """

    def __init__(
        self,
        source_factory: Callable[[list[K]], PageSource[T]],
        *,
        group_selector: Any,
        sort: SortSpecification,
        args: PagingArguments,
        paginator: BatchPaginator | None = None,
    ) -> None:
        """Initialize the loader.

        Args:
            source_factory: Builds one source covering all given parent keys
            group_selector: Reads the parent key from a child row
            sort: Order of children within each parent
            args: Paging arguments shared by every parent
            paginator: Batch paginator to use (default settings otherwise)
        """
        self._source_factory = source_factory
        self._group_selector = group_selector
        self._sort = sort
        self._args = args
        self._paginator = paginator or BatchPaginator()
        self._loader: DataLoader[K, Page[T]] = DataLoader(load_fn=self._batch_load_pages)

    async def _batch_load_pages(self, keys: list[K]) -> list[Page[T]]:
        """Paginate every requested parent with one source fetch.

        Parents without rows in the window get an empty page whose flags
        follow the same cursor rule as the other pages of the batch.
        """
        if not keys:
            return []

        pages = await self._paginator.paginate_batch(
            self._source_factory(list(keys)),
            self._group_selector,
            self._sort,
            self._args,
        )
        codec = self._paginator.paginator.codec
        empty: Page[T] = Page.empty(
            self._sort,
            codec,
            has_next_page=self._args.before is not None,
            has_previous_page=self._args.after is not None,
        )
        return [pages[key] if key in pages else empty for key in keys]

    async def load(self, key: K) -> Page[T]:
        return await self._loader.load(key)

    async def load_many(self, keys: list[K]) -> list[Page[T]]:
        return await self._loader.load_many(keys)


__all__ = ["PagedDataLoader"]
