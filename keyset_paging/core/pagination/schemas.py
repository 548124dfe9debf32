"""Response schemas for cursor-based pagination.

Two shapes are provided for handing a :class:`Page` to clients:

1. Connection (relay style): edges with per-item cursors plus PageInfo
2. CursorPage (REST style): items, next/prev cursor and a has_more flag

Both are built from the same page via ``Page.to_connection()`` and
``Page.to_cursor_page()``.
"""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class PageInfo(BaseModel):
    """Navigation metadata of a connection.

    Attributes:
        has_previous_page: Whether there are items before the current page
        has_next_page: Whether there are items after the current page
        start_cursor: Cursor of the first item in this page
        end_cursor: Cursor of the last item in this page
        total_count: Total number of items (only when requested)
    """

    has_previous_page: bool = Field(description="Whether previous items exist")
    has_next_page: bool = Field(description="Whether more items exist")
    start_cursor: str | None = Field(default=None, description="Cursor of the first item")
    end_cursor: str | None = Field(default=None, description="Cursor of the last item")
    total_count: int | None = Field(default=None, description="Total count (optional)")


class Edge(BaseModel, Generic[T]):
    """An item together with its own cursor."""

    node: T = Field(description="The data item")
    cursor: str = Field(description="Cursor for this item")


class Connection(BaseModel, Generic[T]):
    """Relay-style connection.

    Client navigation:
        # First page
        first=10

        # Next page (end_cursor of the previous response)
        first=10, after=<end_cursor>

        # Previous page (start_cursor of the current response)
        last=10, before=<start_cursor>
    """

    edges: list[Edge[T]] = Field(default_factory=list, description="Items with cursors")
    page_info: PageInfo = Field(description="Pagination metadata")

    @property
    def nodes(self) -> list[T]:
        return [edge.node for edge in self.edges]

    def to_cursor_page(self) -> CursorPage[T]:
        """Convert to simple REST-style pagination."""
        return CursorPage(
            items=self.nodes,
            next_cursor=self.page_info.end_cursor if self.page_info.has_next_page else None,
            prev_cursor=self.page_info.start_cursor if self.page_info.has_previous_page else None,
            has_more=self.page_info.has_next_page,
            total_count=self.page_info.total_count,
        )


class CursorPage(BaseModel, Generic[T]):
    """REST-style cursor page.

    Attributes:
        items: List of data items
        next_cursor: Cursor for the next page (None if no more)
        prev_cursor: Cursor for the previous page (None if at start)
        has_more: Whether more items exist after this page
        total_count: Total count (optional)
    """

    items: list[T] = Field(default_factory=list, description="List of items")
    next_cursor: str | None = Field(default=None, description="Cursor to fetch next page")
    prev_cursor: str | None = Field(default=None, description="Cursor to fetch previous page")
    has_more: bool = Field(default=False, description="Whether more items exist")
    total_count: int | None = Field(default=None, description="Total count (optional)")


__all__ = [
    "Connection",
    "CursorPage",
    "Edge",
    "PageInfo",
]
