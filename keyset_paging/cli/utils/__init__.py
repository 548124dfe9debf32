"""CLI output helpers."""

from keyset_paging.cli.utils.formatters import cursor_line, error, header, key_value, success

__all__ = [
    "cursor_line",
    "error",
    "header",
    "key_value",
    "success",
]
