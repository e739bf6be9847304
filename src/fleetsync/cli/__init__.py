"""
fleetsync CLI - Main application entry point.

This module sets up the Typer CLI application with all subcommands.
"""

import logging
import sys

import typer
from rich.console import Console

from fleetsync import __version__
from fleetsync.cli import repos, setup

app = typer.Typer(
    name="fleetsync",
    help="Clone and update a fleet of repositories and plugins",
    no_args_is_help=True,
    add_completion=True,
    context_settings={"help_option_names": ["--help", "-h"]},
)

console = Console()


def setup_logging(debug: bool = False) -> None:
    """
    Configure logging for all commands.

    Args:
        debug: If True, enable DEBUG level logging (git commands included)
    """
    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


@app.callback()
def main(
    ctx: typer.Context,
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug output with detailed logging",
    ),
) -> None:
    """
    fleetsync - keep repository and plugin clones up to date.

    Quick Start:
        fleetsync list               # Show what the manifest contains
        fleetsync setup              # Clone/update everything, then install
    """
    setup_logging(debug)
    ctx.obj = {"debug": debug}


app.command(name="setup")(setup.setup)
app.command(name="list")(repos.list_repos)


@app.command()
def version() -> None:
    """Show fleetsync version and exit."""
    console.print(f"fleetsync version {__version__}")
    raise typer.Exit(0)


def cli_main() -> None:
    """Main CLI entry point."""
    app()


__all__ = ["app", "cli_main"]
