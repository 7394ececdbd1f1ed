"""cstamp serve command - run the MCP server."""

from pathlib import Path

import click

from contextstamp.config.loader import load_config
from contextstamp.core.errors import ConfigError


@click.command()
@click.argument("path", default=".", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option(
    "--transport",
    type=click.Choice(["stdio", "http"]),
    default=None,
    help="Override the configured MCP transport",
)
@click.option("--port", type=int, default=None, help="Port for http transport")
def serve_command(path: Path, transport: str | None, port: int | None) -> None:
    """Serve snapshot tools over MCP for a project.

    PATH is the project root holding context_main.json (default: current directory).
    """
    from contextstamp.mcp.server import run_server

    project_root = path.resolve()
    overrides: dict[str, object] = {}
    if transport:
        overrides["transport"] = transport
    if port is not None:
        overrides["port"] = port

    try:
        config = load_config(project_root)
        if overrides:
            config = config.model_copy(
                update={"server": config.server.model_copy(update=overrides)}
            )
    except ConfigError as e:
        raise click.ClickException(e.message) from e

    run_server(project_root, config)
