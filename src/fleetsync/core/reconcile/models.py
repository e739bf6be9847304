"""
Data models for repository reconciliation.

Defines the notification a reconciliation can produce. The category is
fixed when the notification is created and is never re-derived from the
message text.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class NotificationCategory(str, Enum):
    """Why a repository needs attention after a run."""

    PACKAGE_LOCK_RESET = "package_lock_reset"
    UNCOMMITTED_CHANGES = "uncommitted_changes"
    MERGE_CONFLICT = "merge_conflict"
    OTHER_ERROR = "other_error"

    @property
    def blocking(self) -> bool:
        """Whether the repository was left un-updated and needs a human."""
        return self is not NotificationCategory.PACKAGE_LOCK_RESET


class Notification(BaseModel):
    """
    Outcome of reconciling one repository, when it was not fully clean.

    Example:
        >>> Notification(
        ...     repo_name="cli",
        ...     category=NotificationCategory.MERGE_CONFLICT,
        ...     message="Merge conflict when reapplying changes in cli.",
        ... )
    """

    model_config = ConfigDict(frozen=True)

    repo_name: str = Field(description="Descriptor name of the repository")
    category: NotificationCategory = Field(description="Kind of issue")
    message: str = Field(description="Human-readable details, may span lines")
