"""Logical fetch queries handed to page sources and observers.

A ``FetchQuery`` describes what a paginator wants from its source without
saying how to get it: the traversal order, the key bounds in that order,
a row limit and, for batched paging, the group the limit applies to.
Sources translate it (SQL, in-memory filtering); observers record it.
"""

from __future__ import annotations

import operator
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from sqlalchemy.orm import QueryableAttribute
from sqlalchemy.sql import ColumnElement

from keyset_paging.core.pagination.sorting import SortSpecification


class QueryKind(StrEnum):
    """What a query asks the source for."""

    FETCH = "fetch"
    EXISTS = "exists"
    COUNT = "count"


@dataclass(frozen=True, slots=True)
class KeyBound:
    """One side of a key range, expressed in the query's traversal order.

    Attributes:
        key: Sort-key tuple the bound sits on
        inclusive: Whether rows equal to ``key`` are inside the range
    """

    key: tuple[Any, ...]
    inclusive: bool = False


@dataclass(frozen=True, slots=True)
class GroupSelector:
    """Partitioning key for batched paging.

    Attributes:
        name: Label used in logs and query descriptions
        selector: ``item -> group key``, pure and total
        column: Optional SQLAlchemy column for SQL sources
    """

    name: str
    selector: Callable[[Any], Any] = field(compare=False)
    column: Any = field(default=None, compare=False)

    @classmethod
    def of(cls, target: Any) -> GroupSelector:
        """Normalize a selector, attribute name or mapped column.

        Example:
            GroupSelector.of(Product.brand_id)
            GroupSelector.of("brand_id")
            GroupSelector.of(lambda p: p.brand_id)
        """
        if isinstance(target, GroupSelector):
            return target
        if isinstance(target, (QueryableAttribute, ColumnElement)):
            return cls(name=target.key, selector=operator.attrgetter(target.key), column=target)
        if isinstance(target, str):
            return cls(name=target, selector=operator.attrgetter(target))
        if callable(target):
            return cls(name=getattr(target, "__name__", "group"), selector=target)
        raise TypeError(f"unsupported group selector {target!r}")

    def key_of(self, item: Any) -> Any:
        return self.selector(item)


@dataclass(frozen=True, slots=True)
class FetchQuery:
    """Logical description of one source access.

    Bounds are in the order of ``sort``: a row is inside the range when it
    sorts after ``lower`` and before ``upper``. Backward traversal passes
    the reversed sort, so its "after" is the value-wise "before".

    Attributes:
        kind: fetch, exists or count
        sort: Traversal order the rows must come back in
        lower: Range start, or None for the start of the source
        upper: Range end, or None for the end of the source
        limit: Maximum rows, per group when ``group_by`` is set
        group_by: Partition for batched paging
    """

    kind: QueryKind
    sort: SortSpecification
    lower: KeyBound | None = None
    upper: KeyBound | None = None
    limit: int | None = None
    group_by: GroupSelector | None = None

    def contains(self, key: tuple[Any, ...]) -> bool:
        """Whether a key tuple falls inside this query's bounds."""
        if self.lower is not None:
            result = self.sort.compare(key, self.lower.key)
            if result < 0 or (result == 0 and not self.lower.inclusive):
                return False
        if self.upper is not None:
            result = self.sort.compare(key, self.upper.key)
            if result > 0 or (result == 0 and not self.upper.inclusive):
                return False
        return True

    def describe(self) -> str:
        """Compact one-line description for logs."""
        parts = [self.kind.value, repr(self.sort)]
        if self.lower is not None:
            parts.append(f"{'>=' if self.lower.inclusive else '>'}{self.lower.key!r}")
        if self.upper is not None:
            parts.append(f"{'<=' if self.upper.inclusive else '<'}{self.upper.key!r}")
        if self.limit is not None:
            parts.append(f"limit={self.limit}")
        if self.group_by is not None:
            parts.append(f"per {self.group_by.name}")
        return " ".join(parts)


__all__ = [
    "FetchQuery",
    "GroupSelector",
    "KeyBound",
    "QueryKind",
]
