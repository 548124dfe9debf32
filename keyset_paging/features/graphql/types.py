"""Strawberry types for relay-style cursor pagination."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import strawberry

from keyset_paging.core.pagination.arguments import PagingArguments

if TYPE_CHECKING:
    from keyset_paging.core.pagination.page import Page


@strawberry.input(description="Input for cursor-based pagination")
class PagingInput:
    """Relay cursor connection arguments."""

    first: int | None = strawberry.field(
        default=None,
        description="Number of items to return from the start",
    )
    after: str | None = strawberry.field(
        default=None,
        description="Cursor to start pagination from (exclusive)",
    )
    last: int | None = strawberry.field(
        default=None,
        description="Number of items to return from the end",
    )
    before: str | None = strawberry.field(
        default=None,
        description="Cursor to end pagination at (exclusive)",
    )

    def to_arguments(self, *, include_total_count: bool = False) -> PagingArguments:
        return PagingArguments(
            first=self.first,
            after=self.after,
            last=self.last,
            before=self.before,
            include_total_count=include_total_count,
        )


@strawberry.type(description="Relay PageInfo for cursor-based pagination")
class PageInfoType:
    """Mirrors keyset_paging.core.pagination.schemas.PageInfo."""

    has_previous_page: bool = strawberry.field(description="Whether previous items exist")
    has_next_page: bool = strawberry.field(description="Whether more items exist")
    start_cursor: str | None = strawberry.field(
        default=None,
        description="Cursor of the first item",
    )
    end_cursor: str | None = strawberry.field(
        default=None,
        description="Cursor of the last item",
    )
    total_count: int | None = strawberry.field(
        default=None,
        description="Total count (optional, can be expensive)",
    )

    @classmethod
    def from_page(cls, page: Page[Any]) -> PageInfoType:
        return cls(
            has_previous_page=page.has_previous_page,
            has_next_page=page.has_next_page,
            start_cursor=page.start_cursor,
            end_cursor=page.end_cursor,
            total_count=page.total_count,
        )


__all__ = ["PageInfoType", "PagingInput"]
