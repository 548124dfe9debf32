"""Paging arguments following the relay cursor connection convention."""

from __future__ import annotations

from pydantic import BaseModel, Field


class PagingArguments(BaseModel):
    """Client-supplied paging request.

    ``first``/``after`` page forward, ``last``/``before`` page backward.
    Both cursors may be combined with either count to slice a range and
    then trim it. Range checks (negative counts, maximum page size) are
    applied by the paginator so they surface as ``InvalidPagingArguments``.

    Attributes:
        first: Number of items to take from the start of the range
        after: Cursor the range starts after (exclusive)
        last: Number of items to take from the end of the range
        before: Cursor the range ends before (exclusive)
        include_total_count: Also count the whole source
    """

    first: int | None = Field(default=None, description="Items from the start")
    after: str | None = Field(default=None, description="Exclusive start cursor")
    last: int | None = Field(default=None, description="Items from the end")
    before: str | None = Field(default=None, description="Exclusive end cursor")
    include_total_count: bool = Field(
        default=False,
        description="Count all rows of the source",
    )

    model_config = {"frozen": True}

    @property
    def is_backward(self) -> bool:
        """Whether ``last`` drives the traversal."""
        return self.last is not None and self.first is None

    def with_cursor(self, *, after: str | None = None, before: str | None = None) -> PagingArguments:
        """Copy with different cursors, keeping counts."""
        return self.model_copy(update={"after": after, "before": before})


__all__ = ["PagingArguments"]
