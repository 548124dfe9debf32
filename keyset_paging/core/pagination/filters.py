"""Seek (keyset) conditions for SQLAlchemy queries.

The SeekFilter implements the seek method for keyset pagination:
- Instead of OFFSET, WHERE conditions seek directly past a key tuple
- Rows stay stable even when data changes between pages
- Indexes on the sort columns serve both the filter and the ORDER BY

How it works:
    For ORDER BY created_at DESC, id ASC with a lower bound at (t1, id1):
    WHERE (created_at < t1) OR (created_at = t1 AND id > id1)

Nulls sort first in ascending direction and last in descending
direction, matching the in-memory comparator, so ``IS NULL`` /
``IS NOT NULL`` terms replace comparisons against a null key value.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import and_, false, or_, true

from keyset_paging.core.pagination.exceptions import InvalidSortSpecification
from keyset_paging.core.pagination.sorting import SortDirection

if TYPE_CHECKING:
    from sqlalchemy import Select
    from sqlalchemy.sql import ColumnElement

    from keyset_paging.core.pagination.query import KeyBound
    from keyset_paging.core.pagination.sorting import SortField, SortSpecification


def resolve_column(sort_field: SortField, statement: Select[Any]) -> Any:
    """Find the column a sort field refers to.

    Uses the field's explicit column when set, otherwise looks the name up
    on the selected entity and then on the selected columns.
    """
    if sort_field.column is not None:
        return sort_field.column

    for description in statement.column_descriptions:
        entity = description.get("entity")
        if entity is not None and hasattr(entity, sort_field.name):
            return getattr(entity, sort_field.name)

    try:
        return statement.selected_columns[sort_field.name]
    except KeyError:
        raise InvalidSortSpecification(
            f"sort field {sort_field.name!r} is not a column of the statement",
        ) from None


def _after(column: Any, direction: SortDirection, value: Any) -> ColumnElement[bool]:
    """Rows strictly after ``value`` on one column, in traversal order."""
    if direction is SortDirection.ASC:
        if value is None:
            return column.is_not(None)
        return column > value
    if value is None:
        return false()
    return or_(column < value, column.is_(None))


def _before(column: Any, direction: SortDirection, value: Any) -> ColumnElement[bool]:
    """Rows strictly before ``value`` on one column, in traversal order."""
    if direction is SortDirection.ASC:
        if value is None:
            return false()
        return or_(column < value, column.is_(None))
    if value is None:
        return column.is_not(None)
    return column > value


def _equal(column: Any, value: Any) -> ColumnElement[bool]:
    return column.is_(None) if value is None else column == value


class SeekFilter:
    """Apply keyset bounds and ordering to a SQLAlchemy select.

    Example:
        stmt = select(Product).where(Product.brand_id == 1)
        stmt = SeekFilter(sort, lower=KeyBound(("Product 1-3", 42))).apply(stmt)
        # -> WHERE ... AND (name > :n OR (name = :n AND id > :id))
        #    ORDER BY name ASC NULLS FIRST, id ASC NULLS FIRST

    Attributes:
        sort: Traversal order (already reversed for backward pages)
        lower: Range start in traversal order
        upper: Range end in traversal order
    """

    def __init__(
        self,
        sort: SortSpecification,
        *,
        lower: KeyBound | None = None,
        upper: KeyBound | None = None,
    ) -> None:
        self.sort = sort
        self.lower = lower
        self.upper = upper

    def columns(self, statement: Select[Any]) -> list[Any]:
        return [resolve_column(f, statement) for f in self.sort]

    def order_by_clauses(self, columns: list[Any]) -> list[Any]:
        """ORDER BY terms for the traversal order, null placement included."""
        clauses = []
        for sort_field, column in zip(self.sort, columns, strict=True):
            if sort_field.direction is SortDirection.DESC:
                clauses.append(column.desc().nulls_last())
            else:
                clauses.append(column.asc().nulls_first())
        return clauses

    def bound_condition(
        self,
        columns: list[Any],
        bound: KeyBound,
        *,
        upper: bool,
    ) -> ColumnElement[bool]:
        """Compound seek condition for one bound.

        For columns (a, b, c) with key (v1, v2, v3):
            (a op v1) OR
            (a = v1 AND b op v2) OR
            (a = v1 AND b = v2 AND c op v3)
            [OR (a = v1 AND b = v2 AND c = v3) when inclusive]
        """
        compare = _before if upper else _after
        or_conditions = []
        eq_conditions: list[ColumnElement[bool]] = []

        for sort_field, column, value in zip(self.sort, columns, bound.key, strict=True):
            or_conditions.append(and_(*eq_conditions, compare(column, sort_field.direction, value)))
            eq_conditions.append(_equal(column, value))

        if bound.inclusive:
            or_conditions.append(and_(*eq_conditions))

        return or_(*or_conditions) if or_conditions else true()

    def where_clause(self, columns: list[Any]) -> ColumnElement[bool] | None:
        conditions = []
        if self.lower is not None:
            conditions.append(self.bound_condition(columns, self.lower, upper=False))
        if self.upper is not None:
            conditions.append(self.bound_condition(columns, self.upper, upper=True))
        if not conditions:
            return None
        return and_(*conditions)

    def apply_where(self, statement: Select[Any]) -> Select[Any]:
        """Add only the seek conditions (existence probes, counts)."""
        clause = self.where_clause(self.columns(statement))
        return statement if clause is None else statement.where(clause)

    def apply(self, statement: Select[Any]) -> Select[Any]:
        """Add seek conditions and ORDER BY.

        Any ORDER BY already on the statement is replaced, since the page
        must come back in exactly the traversal order.
        """
        columns = self.columns(statement)
        clause = self.where_clause(columns)
        if clause is not None:
            statement = statement.where(clause)
        return statement.order_by(None).order_by(*self.order_by_clauses(columns))


__all__ = ["SeekFilter", "resolve_column"]
