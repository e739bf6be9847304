"""
Repository reconciliation.

Brings one local clone up to date with its upstream without losing
uncommitted work. The decision sequence for an existing clone is:

1. A modified ``package-lock.json`` is discarded and reported; nothing
   else runs for that clone.
2. Under the branch-aware policy, a clone on a branch other than the
   primary branch is switched back when clean, and left alone (with a
   notification) when dirty.
3. Otherwise local changes are stashed, upstream is pulled and the stash
   is popped. A failed pop is reported as a merge conflict and the stash
   entry is kept.

Missing clones are cloned. Submodules are updated whenever no earlier step
stopped processing. Every failure becomes a notification; nothing raises
out of ``Reconciler.reconcile``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from fleetsync.core.config.models import ReconcileConfig, ReconcilePolicy
from fleetsync.core.git.client import GitClient, GitError, RepoStatus
from fleetsync.core.manifest.models import RepoDescriptor
from fleetsync.core.reconcile.models import Notification, NotificationCategory

logger = logging.getLogger(__name__)

PACKAGE_LOCK = "package-lock.json"

# Changed paths listed in a notification before the rest are elided
MAX_LISTED_PATHS = 10

ProgressCallback = Callable[[RepoDescriptor, str], None]


def _no_progress(descriptor: RepoDescriptor, message: str) -> None:
    pass


def _format_paths(paths: list[str]) -> str:
    lines = [f"- {p}" for p in paths[:MAX_LISTED_PATHS]]
    if len(paths) > MAX_LISTED_PATHS:
        lines.append(f"... and {len(paths) - MAX_LISTED_PATHS} more")
    return "\n".join(lines)


class Reconciler:
    """
    Clones or updates a single repository according to a policy.

    Example:
        >>> reconciler = Reconciler(policy=ReconcilePolicy.BRANCH_AWARE)
        >>> notification = reconciler.reconcile(descriptor, Path("repos"))
        >>> if notification is not None:
        ...     print(notification.category, notification.message)
    """

    def __init__(
        self,
        policy: ReconcilePolicy = ReconcilePolicy.BRANCH_AWARE,
        primary_branch: str = "main",
        git_timeout: float | None = None,
        stash_message: str = "Automatic stash by fleetsync",
        client_class: type[GitClient] = GitClient,
        progress: ProgressCallback | None = None,
    ) -> None:
        """
        Initialize the reconciler.

        Args:
            policy: SIMPLE always stashes and pulls the current branch;
                BRANCH_AWARE also returns clean clones to ``primary_branch``
            primary_branch: Branch treated as canonical by BRANCH_AWARE
            git_timeout: Seconds after which a git command is killed
            stash_message: Message recorded on stashes this tool creates
            client_class: GitClient implementation (clone classmethod + ctor)
            progress: Called with each live progress line
        """
        self.policy = policy
        self.primary_branch = primary_branch
        self.git_timeout = git_timeout
        self.stash_message = stash_message
        self.client_class = client_class
        self.progress = progress or _no_progress

    @classmethod
    def from_config(
        cls,
        config: ReconcileConfig,
        *,
        client_class: type[GitClient] = GitClient,
        progress: ProgressCallback | None = None,
    ) -> Reconciler:
        return cls(
            policy=config.policy,
            primary_branch=config.primary_branch,
            git_timeout=config.git_timeout,
            stash_message=config.stash_message,
            client_class=client_class,
            progress=progress,
        )

    def _say(self, descriptor: RepoDescriptor, message: str) -> None:
        logger.info("%s: %s", descriptor.label, message)
        self.progress(descriptor, message)

    def reconcile(self, descriptor: RepoDescriptor, target_dir: Path) -> Notification | None:
        """
        Clone or update ``descriptor`` inside ``target_dir``.

        Args:
            descriptor: Repository to process
            target_dir: Directory holding the clone (``<target_dir>/<name>``)

        Returns:
            A Notification when the repository needs attention, None when the
            outcome was fully clean
        """
        repo_path = target_dir / descriptor.name
        self._say(descriptor, f"Setting up {descriptor.name}...")

        try:
            if repo_path.exists():
                self._say(descriptor, f"{descriptor.name} already exists. Checking for changes...")
                client = self.client_class(repo_path, timeout=self.git_timeout)
                notification = self._update(descriptor, client)
                if notification is not None:
                    return notification
            else:
                self._say(descriptor, f"Cloning {descriptor.name}...")
                client = self.client_class.clone(
                    descriptor.url, repo_path, timeout=self.git_timeout
                )

            self._say(descriptor, f"Updating submodules for {descriptor.name}...")
            client.submodule_update()

        except Exception as e:
            detail = e.stderr if isinstance(e, GitError) and e.stderr else str(e)
            logger.error("Error setting up %s: %s", descriptor.name, detail)
            self.progress(descriptor, f"Error setting up {descriptor.name}: {detail}")
            return Notification(
                repo_name=descriptor.name,
                category=NotificationCategory.OTHER_ERROR,
                message=(
                    f"Error in {descriptor.name}: {detail}\n"
                    "Please check and update manually if needed."
                ),
            )

        return None

    def _update(self, descriptor: RepoDescriptor, client: GitClient) -> Notification | None:
        """Bring an existing clone up to date. Returns a notification to stop early."""
        status = client.status()

        if PACKAGE_LOCK in status.modified_paths:
            self._say(descriptor, f"Resetting {PACKAGE_LOCK} in {descriptor.name}...")
            client.restore_file(PACKAGE_LOCK)
            return Notification(
                repo_name=descriptor.name,
                category=NotificationCategory.PACKAGE_LOCK_RESET,
                message=(
                    f"{PACKAGE_LOCK} was reset in {descriptor.name}. "
                    "You may need to redo any package updates."
                ),
            )

        if self.policy is ReconcilePolicy.SIMPLE:
            return self._stash_and_pull(descriptor, client, status, prune=False)

        if status.current_branch != self.primary_branch:
            return self._switch_to_primary(descriptor, client, status)

        return self._stash_and_pull(descriptor, client, status, prune=True)

    def _switch_to_primary(
        self, descriptor: RepoDescriptor, client: GitClient, status: RepoStatus
    ) -> Notification | None:
        branch = status.current_branch

        if not status.is_clean:
            logger.warning(
                "%s is on branch '%s' with uncommitted changes; not switching",
                descriptor.label,
                branch,
            )
            return Notification(
                repo_name=descriptor.name,
                category=NotificationCategory.UNCOMMITTED_CHANGES,
                message=(
                    f"{descriptor.name} is on branch '{branch}' with uncommitted changes. "
                    f"Skipping switch to '{self.primary_branch}'.\n"
                    f"Changed files:\n{_format_paths(status.changed_paths)}"
                ),
            )

        self._say(
            descriptor,
            f"{descriptor.name} is on branch '{branch}' with clean working tree. "
            f"Switching to {self.primary_branch}...",
        )
        client.fetch(prune=True)
        client.checkout(self.primary_branch)
        client.pull()
        return None

    def _stash_and_pull(
        self,
        descriptor: RepoDescriptor,
        client: GitClient,
        status: RepoStatus,
        *,
        prune: bool,
    ) -> Notification | None:
        stashed = False
        if not status.is_clean:
            self._say(descriptor, f"Local changes detected in {descriptor.name}. Stashing changes...")
            before = client.stash_count()
            client.stash_push(self.stash_message)
            stashed = client.stash_count() > before

        self._say(descriptor, f"Fetching and pulling latest changes for {descriptor.name}...")
        try:
            client.fetch(prune=prune)
            client.pull()
        except GitError as e:
            if not stashed:
                raise
            raise GitError(
                str(e),
                command=e.command,
                stderr=(
                    f"{e.stderr or e}\n"
                    f"Local changes remain in the stash as '{self.stash_message}'."
                ),
            ) from e

        if not stashed:
            return None

        self._say(descriptor, f"Attempting to reapply local changes for {descriptor.name}...")
        try:
            client.stash_pop()
        except GitError as e:
            logger.warning("Stash pop failed in %s: %s", descriptor.label, e.stderr or e)
            return self._merge_conflict(descriptor, client)

        self._say(descriptor, f"Successfully reapplied local changes for {descriptor.name}.")
        return None

    def _merge_conflict(self, descriptor: RepoDescriptor, client: GitClient) -> Notification:
        try:
            conflicts = client.conflicted_paths()
        except GitError as e:
            logger.warning("Could not list conflicts in %s: %s", descriptor.label, e)
            conflicts = []

        message = (
            f"Merge conflict when reapplying changes in {descriptor.name}. "
            "Please resolve conflicts manually.\n"
            f"Your changes are kept in the stash as '{self.stash_message}' "
            f"(see 'git stash list' in {client.path})."
        )
        if conflicts:
            message += f"\nConflicting files:\n{_format_paths(conflicts)}"

        return Notification(
            repo_name=descriptor.name,
            category=NotificationCategory.MERGE_CONFLICT,
            message=message,
        )
