"""
Standardized error handling and exit codes for the fleetsync CLI.

This module provides consistent error messaging with actionable guidance
and standardized exit codes across all CLI commands.
"""

from enum import IntEnum

from rich.console import Console
from rich.markup import escape

console = Console(stderr=True)


class ExitCode(IntEnum):
    """Standard exit codes for fleetsync operations."""

    SUCCESS = 0
    """Operation completed successfully."""

    GENERAL_ERROR = 1
    """Unexpected error."""

    USER_ERROR = 2
    """Configuration, manifest or option error (actionable by user)."""

    INSTALL_FAILED = 3
    """The install step exited non-zero, could not start, or timed out."""

    SIGINT = 130
    """Terminated by SIGINT (Ctrl+C) - Unix standard."""


def print_error(
    problem: str,
    *,
    reason: str | None = None,
    solution: str | None = None,
) -> None:
    """
    Print a standardized error message with actionable guidance.

    Args:
        problem: Brief description of what went wrong
        reason: Optional explanation of why it happened
        solution: Optional command or action to fix it
    """
    console.print(f"[red]Error:[/red] {escape(problem)}")

    if reason:
        console.print(f"[dim]{escape(reason)}[/dim]")

    if solution:
        console.print(f"[cyan]→ Try:[/cyan] {escape(solution)}")


def print_manifest_error(detail: str) -> None:
    """Print error when the repository manifest cannot be used."""
    print_error(
        "Invalid repository manifest",
        reason=detail,
        solution="fix repos.json or pass --manifest PATH",
    )


def print_config_error(detail: str) -> None:
    """Print error when the merged configuration fails validation."""
    print_error(
        "Invalid configuration",
        reason=detail,
        solution="check .fleetsync.json and FLEETSYNC_* environment variables",
    )


def print_install_failed_error(detail: str) -> None:
    """Print error when the install step fails."""
    print_error(
        "Install step failed",
        reason=detail,
        solution="run the install command manually to see the full error",
    )


def print_invalid_option_error(option: str, valid_options: list[str]) -> None:
    """Print error when an invalid option value is provided."""
    valid_str = ", ".join(valid_options)
    print_error(
        f"Invalid option: {option}",
        reason=f"Valid options are: {valid_str}",
        solution=f"Use one of: {valid_str}",
    )


__all__ = [
    "ExitCode",
    "print_error",
    "print_manifest_error",
    "print_config_error",
    "print_install_failed_error",
    "print_invalid_option_error",
]
