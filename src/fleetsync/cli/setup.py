"""
fleetsync CLI - Setup command.

Clones or updates every repository and plugin in the manifest, runs the
install step and prints a summary of repositories needing attention.
"""

import os
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console

from fleetsync.cli.errors import (
    ExitCode,
    print_config_error,
    print_error,
    print_install_failed_error,
    print_invalid_option_error,
    print_manifest_error,
)
from fleetsync.core.config import (
    DEFAULT_SKIP_ENV_VAR,
    FleetConfig,
    ReconcilePolicy,
    load_config,
    load_fleet_env,
)
from fleetsync.core.manifest import ManifestError
from fleetsync.core.setup import InstallError, RunContext, SetupOrchestrator, SetupReporter

console = Console()


def resolve_root(root: Path | None) -> Path:
    """Fleet root: the given path or the current directory, absolute."""
    return (root or Path.cwd()).resolve()


def _run_skipped(config: FleetConfig, root: Path, reporter: SetupReporter) -> None:
    """Report a skipped run; touches no files, repositories or subprocesses."""
    SetupOrchestrator(config, reporter=reporter).run(RunContext(root=root, skip=True))


def setup(
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
    policy: str | None = typer.Option(
        None,
        "--policy",
        help="Update policy: simple or branch-aware",
    ),
    primary_branch: str | None = typer.Option(
        None,
        "--primary-branch",
        help="Branch clean clones are switched back to (branch-aware policy)",
    ),
    only: list[str] | None = typer.Option(
        None,
        "--only",
        help="Only reconcile this repository or plugin (repeatable)",
    ),
    skip_install: bool = typer.Option(
        False,
        "--skip-install",
        help="Do not run the install step after reconciling",
    ),
) -> None:
    """
    Clone or update all repositories and plugins, then run the install step.

    Existing clones are updated without losing local work: changes are
    stashed and reapplied, clones on other branches are switched back to
    the primary branch only when clean, and a modified package-lock.json
    is discarded.

    Set SKIP_SETUP to any value to make this command a no-op.

    Examples:
        fleetsync setup                        # Sync everything, then npm install
        fleetsync setup --policy simple        # Always stash + pull current branch
        fleetsync setup --only cli --only php  # Sync two entries only
        fleetsync setup --skip-install         # Sync without installing
    """
    root = resolve_root(root)
    load_fleet_env(root)
    reporter = SetupReporter(console)

    # Honored even when the config or options are invalid
    if os.environ.get(DEFAULT_SKIP_ENV_VAR):
        _run_skipped(FleetConfig(), root, reporter)
        return

    try:
        config = load_config(root)
    except ValidationError as e:
        print_config_error(str(e))
        raise typer.Exit(ExitCode.USER_ERROR)

    if os.environ.get(config.install.skip_env_var):
        _run_skipped(config, root, reporter)
        return

    overrides: dict[str, object] = {}
    if policy is not None:
        try:
            overrides["policy"] = ReconcilePolicy.parse(policy)
        except ValueError:
            print_invalid_option_error(policy, ["simple", "branch-aware"])
            raise typer.Exit(ExitCode.USER_ERROR)
    if primary_branch is not None:
        overrides["primary_branch"] = primary_branch
    if overrides:
        config = config.model_copy(
            update={"reconcile": config.reconcile.model_copy(update=overrides)}
        )

    context = RunContext(
        root=root,
        skip_install=skip_install,
        manifest_path=manifest,
        only=frozenset(only) if only else None,
    )

    orchestrator = SetupOrchestrator(config, reporter=reporter)
    try:
        summary = orchestrator.run(context)
    except ManifestError as e:
        print_manifest_error(str(e))
        raise typer.Exit(ExitCode.USER_ERROR)
    except InstallError as e:
        print_install_failed_error(str(e))
        raise typer.Exit(ExitCode.INSTALL_FAILED)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/yellow]")
        raise typer.Exit(ExitCode.SIGINT)
    except Exception as e:
        print_error(f"Setup failed: {e}")
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    if summary is not None and not summary.has_issues:
        console.print("[green]✓[/green] Setup complete. All repositories are up to date.")
