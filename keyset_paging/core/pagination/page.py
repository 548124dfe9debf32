"""Page result of a keyset pagination call."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from keyset_paging.core.pagination.cursor import CursorCodec
    from keyset_paging.core.pagination.schemas import Connection, CursorPage
    from keyset_paging.core.pagination.sorting import SortSpecification


@dataclass(frozen=True)
class Page[T]:
    """One window of an ordered source.

    Items are always in ascending order of the sort specification, even
    when the page was fetched backward. The page borrows the caller's
    entities; it never copies them.

    Attributes:
        items: Window contents in sort order
        has_next_page: Rows exist after the window
        has_previous_page: Rows exist before the window
        sort: Sort specification the page was cut from
        codec: Codec used for :meth:`create_cursor`
        total_count: Row count of the whole source, when requested
    """

    items: tuple[T, ...]
    has_next_page: bool
    has_previous_page: bool
    sort: SortSpecification = field(repr=False, compare=False)
    codec: CursorCodec = field(repr=False, compare=False)
    total_count: int | None = None

    @classmethod
    def empty(
        cls,
        sort: SortSpecification,
        codec: CursorCodec,
        *,
        has_next_page: bool = False,
        has_previous_page: bool = False,
    ) -> Page[T]:
        return cls(
            items=(),
            has_next_page=has_next_page,
            has_previous_page=has_previous_page,
            sort=sort,
            codec=codec,
        )

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[T]:
        return iter(self.items)

    @property
    def first(self) -> T | None:
        return self.items[0] if self.items else None

    @property
    def last(self) -> T | None:
        return self.items[-1] if self.items else None

    def create_cursor(self, item: T) -> str:
        """Encode the cursor of ``item`` under this page's sort."""
        return self.codec.encode(self.sort.key_of(item))

    @property
    def start_cursor(self) -> str | None:
        return self.create_cursor(self.items[0]) if self.items else None

    @property
    def end_cursor(self) -> str | None:
        return self.create_cursor(self.items[-1]) if self.items else None

    def to_connection(self) -> Connection[Any]:
        """Convert to a relay-style connection with one edge per item."""
        from keyset_paging.core.pagination.schemas import Connection, PageInfo

        edges = [{"node": item, "cursor": self.create_cursor(item)} for item in self.items]
        return Connection(
            edges=edges,
            page_info=PageInfo(
                has_previous_page=self.has_previous_page,
                has_next_page=self.has_next_page,
                start_cursor=edges[0]["cursor"] if edges else None,
                end_cursor=edges[-1]["cursor"] if edges else None,
                total_count=self.total_count,
            ),
        )

    def to_cursor_page(self) -> CursorPage[Any]:
        """Convert to the simple REST-style page."""
        return self.to_connection().to_cursor_page()


type BatchPage[K, T] = dict[K, Page[T]]


__all__ = ["BatchPage", "Page"]
