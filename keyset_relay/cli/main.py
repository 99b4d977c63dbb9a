"""Main CLI entry point for keyset-relay commands."""

import click

from keyset_relay import __version__
from keyset_relay.cli.commands import cursor
from keyset_relay.infra.logging.config import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="keyset-relay")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """keyset-relay CLI - tools for keyset pagination cursors.

    \b
    Command Groups:
      cursor     Decode and encode pagination cursors
    """
    ctx.ensure_object(dict)


cli.add_command(cursor.cursor)


def main() -> None:
    """Entry point for the CLI."""
    setup_logging()
    cli(obj={})


if __name__ == "__main__":
    main()
