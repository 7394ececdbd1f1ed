"""contextstamp CLI - cstamp command."""

import click

from contextstamp.cli.bundles import bundles_command
from contextstamp.cli.compare import compare_command
from contextstamp.cli.serve import serve_command
from contextstamp.core.logging import configure_logging


@click.group()
@click.version_option(version="0.1.0", prog_name="cstamp")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """contextstamp - snapshot and diff LogicStamp context files."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    configure_logging(level="DEBUG" if verbose else "WARNING")


cli.add_command(serve_command, name="serve")
cli.add_command(compare_command, name="compare")
cli.add_command(bundles_command, name="bundles")


if __name__ == "__main__":
    cli()
