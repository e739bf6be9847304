"""
Reporter for live progress and the end-of-run summary.

This module provides the SetupReporter class, which prints per-repository
progress lines while reconciling and the categorized "attention required"
summary once the install step has succeeded.
"""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape

from fleetsync.core.manifest.models import RepoDescriptor
from fleetsync.core.reconcile.models import NotificationCategory
from fleetsync.core.setup.models import RunSummary, SummaryEntry

RULE_WIDTH = 80

_GROUP_HEADINGS: dict[NotificationCategory, tuple[str, str]] = {
    NotificationCategory.UNCOMMITTED_CHANGES: (
        "⚠️  Repos with branch/uncommitted changes issues:",
        "bold yellow",
    ),
    NotificationCategory.MERGE_CONFLICT: ("❌ Repos with merge conflicts:", "bold red"),
    NotificationCategory.OTHER_ERROR: ("⚡ Repos with other errors:", "bold red"),
    NotificationCategory.PACKAGE_LOCK_RESET: ("📝 Other notifications:", "bold cyan"),
}


def _indent(message: str, prefix: str = "        ") -> str:
    """Indent every line of a multi-line message."""
    return "\n".join(f"{prefix}{line.strip()}" for line in message.splitlines())


class SetupReporter:
    """Terminal output for a setup run."""

    def __init__(self, console: Console | None = None) -> None:
        """Initialize the reporter.

        Args:
            console: Rich console for output (creates default if None)
        """
        self.console = console or Console()

    def progress(self, descriptor: RepoDescriptor, message: str) -> None:
        self.console.print(f"[dim]{escape(descriptor.label)}[/dim] {escape(message)}")

    def skipped(self, env_var: str) -> None:
        self.console.print(
            f"[blue]{escape(env_var)} environment variable detected. Skipping setup.[/blue]"
        )

    def unknown_names(self, names: list[str]) -> None:
        self.console.print(
            f"[yellow]⚠[/yellow]  Not in manifest, ignored: {escape(', '.join(names))}"
        )

    def processed(self, summary: RunSummary) -> None:
        self.console.print(
            f"[green]✓[/green] All repositories and plugins have been processed "
            f"({summary.processed} total)."
        )

    def install_started(self, command: list[str], env_var: str) -> None:
        self.console.print(
            f"\n[blue]Running {escape(' '.join(command))} with {escape(env_var)} flag...[/blue]"
        )

    def install_completed(self, command: list[str]) -> None:
        self.console.print(f"[green]✓[/green] {escape(' '.join(command))} completed successfully.")

    def install_skipped(self) -> None:
        self.console.print("[dim]Install step skipped.[/dim]")

    def render_summary(self, summary: RunSummary) -> None:
        """Print the categorized summary. Prints nothing when there are no entries."""
        if not summary.has_issues:
            return

        rule = "=" * RULE_WIDTH
        self.console.print(f"\n{rule}")
        self.console.print("[bold]🚨 REPOSITORY STATUS SUMMARY - ATTENTION REQUIRED 🚨[/bold]")
        self.console.print(rule)

        for category, entries in summary.groups():
            heading, style = _GROUP_HEADINGS[category]
            self.console.print(f"\n[{style}]{heading}[/{style}]")
            for entry in entries:
                self._render_entry(entry)

        self.console.print(f"\n{rule}")

    def _render_entry(self, entry: SummaryEntry) -> None:
        self.console.print(f"\n    >>> [bold]{escape(entry.label)}[/bold] <<<")
        self.console.print(f"\n{escape(_indent(entry.notification.message))}")
