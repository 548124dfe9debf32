"""Sort specifications for keyset pagination.

A sort specification is the total order a page is cut from. It is used
three ways:

1. To fetch rows (ORDER BY / in-memory sort)
2. To build cursors (the key tuple of an item)
3. To seek past a cursor (lexicographic comparison honoring directions)

The trailing field must be unique per entity so that rows sharing the
leading values still have a stable position. Without it, consecutive
pages could skip or repeat rows.

Null ordering:
    ``None`` sorts before every value in ascending direction, and so
    after every value in descending direction. The SQL seek filter emits
    ``NULLS FIRST`` / ``NULLS LAST`` to match.

Example:
    sort = SortSpecification.of(
        SortField("name"),
        SortField("id", unique=True),
    )

    # Or straight from mapped columns (primary keys are detected as unique)
    sort = SortSpecification.of(Brand.name, Brand.id)
    sort = SortSpecification.of((Brand.created_at, "desc"), Brand.id)
"""

from __future__ import annotations

import operator
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import Any

from sqlalchemy.orm import QueryableAttribute
from sqlalchemy.sql import ColumnElement

from keyset_paging.core.pagination.exceptions import InvalidSortSpecification


class SortDirection(StrEnum):
    """Direction of a single sort field."""

    ASC = "asc"
    DESC = "desc"

    def flipped(self) -> SortDirection:
        return SortDirection.DESC if self is SortDirection.ASC else SortDirection.ASC


def _is_column(value: Any) -> bool:
    return isinstance(value, (QueryableAttribute, ColumnElement))


def _column_is_unique(column: Any) -> bool:
    """Primary key or unique constraint on a mapped column."""
    expression = getattr(column, "expression", column)
    return bool(
        getattr(expression, "primary_key", False) or getattr(expression, "unique", False)
    )


def _column_python_type(column: Any) -> type | None:
    """Python type of a mapped column, when the column type declares one."""
    try:
        return column.type.python_type
    except (AttributeError, NotImplementedError):
        return None


def compare_values(left: Any, right: Any) -> int:
    """Three-way compare two field values in ascending order, nulls first."""
    if left is None or right is None:
        if left is None and right is None:
            return 0
        return -1 if left is None else 1
    if left < right:
        return -1
    if left > right:
        return 1
    return 0


@dataclass(frozen=True, slots=True)
class SortField:
    """One ``(field, direction)`` entry of a sort specification.

    Attributes:
        name: Field name, also the attribute read when no selector is given
        direction: Ascending or descending
        selector: Accessor reading the field value from an item
        column: Optional SQLAlchemy column expression for SQL sources
        unique: Whether the field is unique per entity
        value_type: Type (or tuple of types) non-null values must have;
            cursors carrying other types are rejected. None skips the check.
    """

    name: str
    direction: SortDirection = SortDirection.ASC
    selector: Callable[[Any], Any] | None = field(default=None, compare=False)
    column: Any = field(default=None, compare=False)
    unique: bool = False
    value_type: type | tuple[type, ...] | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if not self.name:
            raise InvalidSortSpecification("sort field name must not be empty")
        # Resolve accessor and direction once, not per row
        object.__setattr__(self, "direction", SortDirection(str(self.direction).lower()))
        if self.selector is None:
            object.__setattr__(self, "selector", operator.attrgetter(self.name))

    @classmethod
    def of_column(
        cls,
        column: Any,
        direction: SortDirection | str = SortDirection.ASC,
        *,
        unique: bool | None = None,
    ) -> SortField:
        """Build a sort field from a mapped attribute or column.

        Args:
            column: SQLAlchemy attribute (``User.created_at``) or column
            direction: "asc" or "desc"
            unique: Override uniqueness; detected from primary key /
                unique constraint when omitted

        Example:
            SortField.of_column(User.created_at, "desc")
        """
        return cls(
            name=column.key,
            direction=SortDirection(str(direction).lower()),
            column=column,
            unique=_column_is_unique(column) if unique is None else unique,
            value_type=_column_python_type(column),
        )

    def accepts(self, value: Any) -> bool:
        """Whether a cursor value fits this field (None always does)."""
        return value is None or self.value_type is None or isinstance(value, self.value_type)

    def value_of(self, item: Any) -> Any:
        return self.selector(item)  # type: ignore[misc]

    def compare(self, left: Any, right: Any) -> int:
        result = compare_values(left, right)
        return -result if self.direction is SortDirection.DESC else result

    def reversed(self) -> SortField:
        return replace(self, direction=self.direction.flipped())


class SortSpecification:
    """Immutable ordered list of sort fields ending in a unique tie-breaker."""

    __slots__ = ("_fields",)

    def __init__(self, fields: Sequence[SortField]) -> None:
        fields = tuple(fields)
        if not fields:
            raise InvalidSortSpecification("sort specification needs at least one field")

        names = [f.name for f in fields]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise InvalidSortSpecification(
                "sort fields must be distinct", details={"duplicates": duplicates}
            )

        if not fields[-1].unique:
            raise InvalidSortSpecification(
                "last sort field must be unique per entity",
                details={"field": fields[-1].name},
            )

        self._fields: tuple[SortField, ...] = fields

    @classmethod
    def of(cls, *entries: Any) -> SortSpecification:
        """Build a specification from fields, columns or ``(column, direction)`` pairs.

        Example:
            SortSpecification.of(Product.name, Product.id)
            SortSpecification.of(SortField("name"), SortField("id", unique=True))
        """
        fields: list[SortField] = []
        for entry in entries:
            if isinstance(entry, SortField):
                fields.append(entry)
            elif isinstance(entry, tuple):
                target, direction = entry
                if _is_column(target):
                    fields.append(SortField.of_column(target, direction))
                else:
                    fields.append(SortField(str(target), SortDirection(str(direction).lower())))
            elif _is_column(entry):
                fields.append(SortField.of_column(entry))
            else:
                raise InvalidSortSpecification(
                    f"unsupported sort entry {entry!r}",
                )
        return cls(fields)

    @property
    def fields(self) -> tuple[SortField, ...]:
        return self._fields

    @property
    def names(self) -> list[str]:
        return [f.name for f in self._fields]

    def __len__(self) -> int:
        return len(self._fields)

    def __iter__(self) -> Iterator[SortField]:
        return iter(self._fields)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SortSpecification):
            return NotImplemented
        return self._fields == other._fields

    def __hash__(self) -> int:
        return hash(self._fields)

    def __repr__(self) -> str:
        parts = ", ".join(f"{f.name} {f.direction.value}" for f in self._fields)
        return f"SortSpecification({parts})"

    def key_of(self, item: Any) -> tuple[Any, ...]:
        """Project an item onto its cursor key."""
        return tuple(f.value_of(item) for f in self._fields)

    def compare(self, left: Sequence[Any], right: Sequence[Any]) -> int:
        """Lexicographically compare two key tuples in this order."""
        for sort_field, a, b in zip(self._fields, left, right, strict=True):
            result = sort_field.compare(a, b)
            if result:
                return result
        return 0

    def reversed(self) -> SortSpecification:
        """Same fields with every direction flipped (backward traversal)."""
        return SortSpecification([f.reversed() for f in self._fields])


__all__ = [
    "SortDirection",
    "SortField",
    "SortSpecification",
    "compare_values",
]
