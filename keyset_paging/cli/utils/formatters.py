"""Output formatting for the cursor commands.

Status lines go through ``click.secho`` with a leading glyph; cursor
tokens are echoed bare on their own line so shells can capture them.
"""

from typing import Any

import click


def success(message: str) -> None:
    """Print a success message in green."""
    click.secho(f"✓ {message}", fg="green")


def error(message: str) -> None:
    """Print an error message in red on stderr."""
    click.secho(f"✗ {message}", fg="red", err=True)


def header(message: str) -> None:
    click.secho(f"\n{message}", fg="cyan", bold=True)


def key_value(position: int, value: Any) -> None:
    """Print one decoded key value with its Python type."""
    click.echo(f"  [{position}] ", nl=False)
    click.secho(f"{type(value).__name__}: ", fg="blue", nl=False)
    click.echo(repr(value))


def cursor_line(cursor: str) -> None:
    """Print a bare cursor token."""
    click.echo(cursor)
