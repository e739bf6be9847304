"""
fleetsync CLI - List command.

Shows the repositories and plugins from the manifest and whether each
one has been cloned yet.
"""

from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from fleetsync.cli.errors import ExitCode, print_config_error, print_manifest_error
from fleetsync.cli.setup import resolve_root
from fleetsync.core.config import load_config
from fleetsync.core.manifest import ManifestError, RepoCategory, load_manifest

console = Console()


def list_repos(
    root: Path | None = typer.Option(
        None,
        "--root",
        "-r",
        help="Fleet root holding repos/, plugins/ and the manifest (default: cwd)",
        file_okay=False,
    ),
    manifest: Path | None = typer.Option(
        None,
        "--manifest",
        "-m",
        help="Manifest file (default: <root>/repos.json)",
        dir_okay=False,
    ),
) -> None:
    """
    List manifest entries and their local clone status.

    Examples:
        fleetsync list
        fleetsync list --manifest fleet.yaml
    """
    root = resolve_root(root)

    try:
        config = load_config(root)
    except ValidationError as e:
        print_config_error(str(e))
        raise typer.Exit(ExitCode.USER_ERROR)

    try:
        entries = load_manifest(manifest or root / config.manifest)
    except ManifestError as e:
        print_manifest_error(str(e))
        raise typer.Exit(ExitCode.USER_ERROR)

    if not len(entries):
        console.print("[dim]Manifest is empty.[/dim]")
        return

    dirs = {
        RepoCategory.REPOS: root / config.repos_dir,
        RepoCategory.PLUGINS: root / config.plugins_dir,
    }

    table = Table(title="Fleet")
    table.add_column("Entry", style="bold")
    table.add_column("URL")
    table.add_column("Local")

    for descriptor in entries.descriptors():
        cloned = (dirs[descriptor.category] / descriptor.name).exists()
        table.add_row(
            escape(descriptor.label),
            escape(descriptor.url),
            "[green]cloned[/green]" if cloned else "[yellow]missing[/yellow]",
        )

    console.print(table)
