"""Cursor inspection commands."""

import json
import sys
from typing import Any

import click

from keyset_paging.cli.utils import cursor_line, error, header, key_value, success
from keyset_paging.core.pagination import CursorCodec, PaginationError
from keyset_paging.core.settings import get_pagination_settings


def _codec() -> CursorCodec:
    secret = get_pagination_settings().cursor_secret
    return CursorCodec(secret.get_secret_value() if secret else None)


def _parse_value(raw: str) -> Any:
    """JSON literal when it parses, plain string otherwise."""
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


@click.group(name="cursor")
def cursor() -> None:
    """Encode and decode pagination cursors."""


@cursor.command()
@click.argument("token")
@click.option(
    "--arity",
    type=int,
    default=None,
    help="Number of sort fields the cursor must carry.",
)
def decode(token: str, arity: int | None) -> None:
    """Show the key values carried by TOKEN."""
    codec = _codec()
    try:
        key = codec.inspect(token) if arity is None else codec.decode(token, arity)
    except PaginationError as e:
        error(str(e))
        sys.exit(1)

    header(f"Cursor key ({len(key)} values{', signed' if codec.signed else ''})")
    for position, value in enumerate(key):
        key_value(position, value)


@cursor.command()
@click.argument("values", nargs=-1, required=True)
def encode(values: tuple[str, ...]) -> None:
    """Build a cursor from VALUES, given in sort-field order.

    Each value is read as a JSON literal (13, "Brand:12", null, true) and
    falls back to a plain string.
    """
    key = tuple(_parse_value(v) for v in values)
    try:
        token = _codec().encode(key)
    except PaginationError as e:
        error(str(e))
        sys.exit(1)

    success(f"Encoded {len(key)} values")
    cursor_line(token)
