"""Root CLI group for graphwriter with global flags and command registration."""

from __future__ import annotations

import click
from pydantic import ValidationError

from graphwriter import __version__
from graphwriter.commands import register_commands
from graphwriter.commands._context import AppContext
from graphwriter.config.settings import GraphwriterSettings


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="graphwriter")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging and timing details.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
) -> None:
    """graphwriter: idempotent upserts into a Dgraph store."""
    try:
        settings = GraphwriterSettings.from_cli(
            config_path=config_path,
            json_output=json_output,
            verbose=verbose,
            log_json=log_json,
        )
    except ValidationError as exc:
        raise click.ClickException(f"Invalid configuration: {exc}") from exc
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
