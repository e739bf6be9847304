"""
Data models for a setup run.

RunSummary is built once, after every repository has been reconciled,
by folding the per-repository outcomes. It is immutable and only used
for display.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from fleetsync.core.manifest.models import RepoDescriptor
from fleetsync.core.reconcile.models import Notification, NotificationCategory

# Order in which categories are shown in the summary report
REPORT_ORDER: tuple[NotificationCategory, ...] = (
    NotificationCategory.UNCOMMITTED_CHANGES,
    NotificationCategory.MERGE_CONFLICT,
    NotificationCategory.OTHER_ERROR,
    NotificationCategory.PACKAGE_LOCK_RESET,
)


@dataclass(frozen=True)
class RunContext:
    """
    Invocation parameters for one run.

    Attributes:
        root: Fleet root; repos/, plugins/ and the manifest live here
        skip: Return immediately without side effects (re-entrant invocation)
        skip_install: Reconcile repositories but do not run the install step
        manifest_path: Manifest override (defaults to the configured path)
        only: Restrict reconciliation to these descriptor names
    """

    root: Path
    skip: bool = False
    skip_install: bool = False
    manifest_path: Path | None = None
    only: frozenset[str] | None = None


class RepoOutcome(BaseModel):
    """Result of reconciling one descriptor."""

    model_config = ConfigDict(frozen=True)

    descriptor: RepoDescriptor
    notification: Notification | None = None

    @property
    def clean(self) -> bool:
        return self.notification is None


class SummaryEntry(BaseModel):
    """A repository that needs attention, labeled with its list."""

    model_config = ConfigDict(frozen=True)

    label: str = Field(description="'repos/<name>' or 'plugins/<name>'")
    notification: Notification

    @property
    def category(self) -> NotificationCategory:
        return self.notification.category


class RunSummary(BaseModel):
    """
    Aggregate of all notifications for one run, in input order.

    Example:
        >>> summary = RunSummary.from_outcomes(outcomes)
        >>> for category, entries in summary.groups():
        ...     print(category.value, [e.label for e in entries])
    """

    model_config = ConfigDict(frozen=True)

    processed: int = Field(default=0, ge=0, description="Repositories reconciled")
    entries: tuple[SummaryEntry, ...] = Field(default=())

    @classmethod
    def from_outcomes(cls, outcomes: Iterable[RepoOutcome]) -> RunSummary:
        outcomes = list(outcomes)
        return cls(
            processed=len(outcomes),
            entries=tuple(
                SummaryEntry(label=o.descriptor.label, notification=o.notification)
                for o in outcomes
                if o.notification is not None
            ),
        )

    @property
    def has_issues(self) -> bool:
        return bool(self.entries)

    @property
    def has_blocking_issues(self) -> bool:
        return any(e.category.blocking for e in self.entries)

    def by_category(self, category: NotificationCategory) -> tuple[SummaryEntry, ...]:
        return tuple(e for e in self.entries if e.category == category)

    def groups(self) -> list[tuple[NotificationCategory, tuple[SummaryEntry, ...]]]:
        """Non-empty category groups in report order."""
        groups = []
        for category in REPORT_ORDER:
            entries = self.by_category(category)
            if entries:
                groups.append((category, entries))
        return groups

    def counts(self) -> dict[NotificationCategory, int]:
        return {category: len(self.by_category(category)) for category in REPORT_ORDER}
