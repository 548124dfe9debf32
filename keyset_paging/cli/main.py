"""Main CLI entry point for keyset-paging tooling."""

import click

from keyset_paging import __version__
from keyset_paging.cli.commands import cursor
from keyset_paging.infra.logging.config import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="keyset-paging")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """keyset-paging CLI - inspect and build pagination cursors.

    \b
    Command Groups:
      cursor     Encode and decode cursors

    \b
    Quick Start:
      keyset-paging cursor encode '"Brand:12"' 13
      keyset-paging cursor decode W1sicyIsIkJyYW5kOjEyIl0sWyJpIiwxM11d --arity 2
    """
    ctx.ensure_object(dict)
    setup_logging()


cli.add_command(cursor.cursor)


def main() -> None:
    """Main entry point for the CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
