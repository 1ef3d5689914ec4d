"""Main CLI entry point for Switchboard."""

from pathlib import Path
from typing import Optional

import click
from rich.console import Console

from switchboard import __version__
from switchboard.cli.providers_cli import providers_group
from switchboard.core.config import ConfigManager
from switchboard.utils.log import get_logger, init_logger

console = Console()
logger = get_logger()


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="switchboard")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to the configuration file (default: ~/.switchboard.json).",
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write debug logs to this file.",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path], log_file: Optional[Path]) -> None:
    """Switchboard - model provider registry."""
    if log_file is not None:
        init_logger(log_file)
    ctx.obj = ConfigManager(config_path)
    logger.debug(
        "[cli] Starting",
        extra={
            "config_path": str(ctx.obj.global_config_path),
            "subcommand": ctx.invoked_subcommand,
        },
    )
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command(name="version")
def version_cmd() -> None:
    """Show version information."""
    console.print(f"Switchboard version {__version__}")


cli.add_command(providers_group)


def main() -> None:
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
