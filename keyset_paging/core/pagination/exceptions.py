"""Pagination exceptions.

Custom exceptions for cursor decoding, sort definitions and paging
arguments. Fetch failures raised by a page source are never wrapped;
they reach the caller unchanged.
"""
from __future__ import annotations

from typing import Any


class PaginationError(Exception):
    """Base exception for pagination operations.

    Attributes:
        message: Error description
        details: Additional context rendered into ``str()``
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        """Initialize pagination error.

        Args:
            message: Error description
            details: Additional context about the error
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Format error message with details."""
        if self.details:
            details_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class InvalidCursorFormat(PaginationError):
    """Cursor string is not a validly encoded (or validly signed) token."""

    def __init__(self, cursor: str, reason: str):
        self.cursor = cursor
        self.reason = reason
        super().__init__(f"invalid cursor: {reason}", details={"cursor": cursor})


class CursorArityMismatch(PaginationError):
    """Decoded cursor has a different number of values than the sort has fields."""

    def __init__(self, cursor: str, expected: int, actual: int):
        self.cursor = cursor
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"cursor holds {actual} values, sort expects {expected}",
            details={"cursor": cursor},
        )


class CursorEncodeError(PaginationError, TypeError):
    """A key value has a type the cursor codec cannot carry."""

    def __init__(self, value: Any):
        self.value = value
        super().__init__(
            f"cannot encode {type(value).__name__} value in a cursor",
            details={"value": value},
        )


class InvalidSortSpecification(PaginationError):
    """Sort definition cannot produce a stable total order."""


class InvalidPagingArguments(PaginationError):
    """Paging arguments were rejected.

    Raised for negative counts, counts above the configured maximum and
    cursors that cannot be decoded against the active sort.

    Attributes:
        argument: Name of the offending argument (``first``, ``after``, ...)
        cursor: The offending cursor string, when a cursor was at fault
    """

    def __init__(
        self,
        message: str,
        *,
        argument: str | None = None,
        cursor: str | None = None,
    ):
        self.argument = argument
        self.cursor = cursor
        details: dict[str, Any] = {}
        if argument is not None:
            details["argument"] = argument
        if cursor is not None:
            details["cursor"] = cursor
        super().__init__(message, details=details)

    def __repr__(self) -> str:
        """Repr for debugging."""
        return (
            f"InvalidPagingArguments(message={self.message!r}, "
            f"argument={self.argument!r}, cursor={self.cursor!r})"
        )


__all__ = [
    "CursorArityMismatch",
    "CursorEncodeError",
    "InvalidCursorFormat",
    "InvalidPagingArguments",
    "InvalidSortSpecification",
    "PaginationError",
]
