"""cstamp compare command - diff two context directories."""

import asyncio
import json
import sys
from pathlib import Path

import click

from contextstamp.config.loader import load_config
from contextstamp.core.errors import ConfigError
from contextstamp.mcp.tools.compare import describe
from contextstamp.snapshot.models import CompareResult
from contextstamp.snapshot.ops import SnapshotOps
from contextstamp.snapshot.registry import SnapshotRegistry

EXIT_PASS = 0
EXIT_DIFF = 1
EXIT_ERROR = 2


def _print_result(result: CompareResult) -> None:
    click.echo(describe(result))
    for diff in result.folder_diffs:
        click.echo(f"  {diff.status:<8} {diff.path}")
        for change in diff.changes:
            line = f"    {change.type:<21} {change.root_component}"
            if change.token_delta:
                line += f" ({change.token_delta:+d} tokens)"
            click.echo(line)
            if change.details is not None:
                for key, values in change.details.to_dict().items():
                    click.echo(f"      {key}: {', '.join(values)}")


@click.command()
@click.argument("baseline", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.argument("current", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def compare_command(baseline: Path, current: Path, as_json: bool) -> None:
    """Compare two context directories.

    Exit code is 0 when nothing changed, 1 on drift and 2 on error.
    """
    current_root = current.resolve()
    try:
        config = load_config(current_root)
    except ConfigError as e:
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(EXIT_ERROR)

    ops = SnapshotOps(SnapshotRegistry(), config, current_root)
    result = asyncio.run(ops.compare(project_path=str(current_root), baseline=str(baseline.resolve())))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        _print_result(result)

    if result.status == "error":
        sys.exit(EXIT_ERROR)
    if result.status == "diff":
        sys.exit(EXIT_DIFF)
