"""cstamp bundles command - list bundles of a context directory."""

import asyncio
import json
from pathlib import Path

import click

from contextstamp.config.loader import load_config
from contextstamp.core.errors import ContextStampError
from contextstamp.snapshot.ops import SnapshotOps
from contextstamp.snapshot.registry import SnapshotRegistry


@click.command()
@click.argument("path", default=".", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--prefix", "folder_prefix", default=None, help="Only folders starting with this literal prefix")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def bundles_command(path: Path, folder_prefix: str | None, as_json: bool) -> None:
    """List bundles in a context directory.

    PATH holds context_main.json (default: current directory).
    """
    root = path.resolve()
    try:
        ops = SnapshotOps(SnapshotRegistry(), load_config(root), root)
        listing = asyncio.run(ops.list_bundles(project_path=str(root), folder_prefix=folder_prefix))
    except ContextStampError as e:
        raise click.ClickException(e.message) from e

    if as_json:
        click.echo(json.dumps(listing, indent=2))
        return

    click.echo(f"{listing['totalBundles']} bundles")
    for bundle in listing["bundles"]:
        click.echo(
            f"  {bundle['rootComponent']:<24} {bundle['bundlePath']:<40} "
            f"{bundle['position']:>6}  ~{bundle['approxTokens']} tokens"
        )
