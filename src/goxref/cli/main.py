"""goxref CLI - cross-reference Go source."""

import click

from goxref import __version__
from goxref.cli.check import check_command
from goxref.cli.xrefs import xrefs_command
from goxref.core.logging import configure_logging


@click.group()
@click.version_option(version=__version__, prog_name="goxref")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """goxref - resolve Go identifiers to their declarations."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    configure_logging(level="DEBUG" if verbose else "WARNING")


cli.add_command(xrefs_command, name="xrefs")
cli.add_command(check_command, name="check")


if __name__ == "__main__":
    cli()
