"""
GitPython wrapper used by the reconciler.

This module provides the GitClient class, which exposes exactly the git
operations needed to clone and update a repository clone: status, fetch,
pull, checkout, stash and submodule update.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from git import GitCommandError, InvalidGitRepositoryError, NoSuchPathError, Repo
from git.cmd import Git

logger = logging.getLogger(__name__)


class GitError(Exception):
    """Exception raised when a git operation fails."""

    def __init__(self, message: str, command: list[str] | None = None, stderr: str = ""):
        super().__init__(message)
        self.command = command
        self.stderr = stderr


def _stderr(error: GitCommandError) -> str:
    """Extract readable stderr from a GitCommandError."""
    stderr = error.stderr or ""
    if isinstance(stderr, bytes):
        stderr = stderr.decode(errors="replace")
    stderr = stderr.strip()
    # GitPython wraps stderr as "stderr: '...'"
    if stderr.startswith("stderr:"):
        stderr = stderr[len("stderr:") :].strip()
    return stderr.strip("'").strip()


@dataclass(frozen=True)
class RepoStatus:
    """
    Working tree state of a clone.

    Attributes:
        modified_paths: Tracked paths with staged or unstaged changes
        untracked_paths: Paths git does not track (reported as ``??``)
        current_branch: Checked-out branch name, or "HEAD" when detached
    """

    modified_paths: frozenset[str] = field(default_factory=frozenset)
    untracked_paths: frozenset[str] = field(default_factory=frozenset)
    current_branch: str = "HEAD"

    @property
    def is_clean(self) -> bool:
        return not self.modified_paths and not self.untracked_paths

    @property
    def changed_paths(self) -> list[str]:
        """All modified and untracked paths, sorted."""
        return sorted(self.modified_paths | self.untracked_paths)


def parse_porcelain_status(output: str) -> tuple[frozenset[str], frozenset[str]]:
    """
    Parse ``git status --porcelain -z`` output.

    Returns:
        Tuple of (modified paths, untracked paths)
    """
    modified: set[str] = set()
    untracked: set[str] = set()

    fields = output.split("\0")
    i = 0
    while i < len(fields):
        entry = fields[i]
        i += 1
        if len(entry) < 4:
            continue

        code, path = entry[:2], entry[3:]
        if code == "??":
            untracked.add(path)
        elif code == "!!":
            continue
        else:
            modified.add(path)
            # Renames and copies are followed by the source path
            if "R" in code or "C" in code:
                i += 1

    return frozenset(modified), frozenset(untracked)


class GitClient:
    """
    Git operations on a single local clone.

    Example:
        >>> client = GitClient.clone("https://github.com/lando/cli.git", Path("repos/cli"))
        >>> client.status().current_branch
        'main'
        >>> client.submodule_update()
    """

    def __init__(self, path: Path, timeout: float | None = None):
        """
        Initialize the client.

        Args:
            path: Working directory of the clone
            timeout: Seconds after which a git command is killed (None = no limit)
        """
        self.path = path
        self.timeout = timeout
        self._repo: Repo | None = None

    @classmethod
    def clone(cls, url: str, path: Path, timeout: float | None = None) -> GitClient:
        """
        Clone ``url`` into ``path`` and return a client for the new clone.

        Raises:
            GitError: If the clone fails
        """
        cmd = ["git", "clone", "--", url, str(path)]
        logger.debug("Running git command: %s", " ".join(cmd))
        try:
            Git().execute(cmd, kill_after_timeout=timeout)
        except GitCommandError as e:
            raise GitError(f"Failed to clone {url}", command=cmd, stderr=_stderr(e)) from e
        return cls(path, timeout=timeout)

    @property
    def repo(self) -> Repo:
        """The GitPython Repo, opened on first use."""
        if self._repo is None:
            try:
                self._repo = Repo(self.path)
            except (InvalidGitRepositoryError, NoSuchPathError) as e:
                raise GitError(f"Not a git repository: {self.path}") from e
        return self._repo

    def _run(self, *args: str) -> str:
        """
        Run a git command in the clone and return its stdout.

        Raises:
            GitError: If the command exits non-zero or is killed by the timeout
        """
        cmd = ["git", *args]
        logger.debug("Running git command in %s: %s", self.path, " ".join(cmd))
        try:
            return self.repo.git.execute(cmd, kill_after_timeout=self.timeout)
        except GitCommandError as e:
            raise GitError(
                f"Git command failed: {' '.join(cmd)}",
                command=cmd,
                stderr=_stderr(e),
            ) from e

    def current_branch(self) -> str:
        """Name of the checked-out branch, or "HEAD" when detached."""
        if self.repo.head.is_detached:
            return "HEAD"
        return self.repo.active_branch.name

    def status(self) -> RepoStatus:
        """Query modified paths, untracked paths and the current branch."""
        output = self._run("status", "--porcelain", "-z")
        modified, untracked = parse_porcelain_status(output)
        return RepoStatus(
            modified_paths=modified,
            untracked_paths=untracked,
            current_branch=self.current_branch(),
        )

    def restore_file(self, path: str) -> None:
        """Reset a single file, in the index and the working tree, to HEAD."""
        self._run("checkout", "HEAD", "--", path)

    def fetch(self, prune: bool = False) -> None:
        """
        Fetch from the default remote.

        Args:
            prune: Also drop remote-tracking branches deleted upstream
        """
        args = ["fetch"]
        if prune:
            args.append("--prune")
        self._run(*args)

    def checkout(self, branch: str) -> None:
        """Switch the working tree to ``branch``."""
        self._run("checkout", branch)

    def pull(self) -> None:
        """Merge the upstream of the current branch into it."""
        self._run("pull")

    def stash_count(self) -> int:
        """Number of entries in the stash list."""
        output = self._run("stash", "list")
        return len([line for line in output.splitlines() if line.strip()])

    def stash_push(self, message: str) -> None:
        """Stash tracked changes and untracked files."""
        self._run("stash", "push", "--include-untracked", "-m", message)

    def stash_pop(self) -> None:
        """
        Reapply the newest stash entry.

        On conflict git leaves the entry in the stash list and raises GitError.
        """
        self._run("stash", "pop")

    def conflicted_paths(self) -> list[str]:
        """Paths left unmerged by a failed merge or stash pop."""
        output = self._run("diff", "--name-only", "--diff-filter=U")
        return [line for line in output.splitlines() if line]

    def submodule_update(self) -> None:
        """Initialize and recursively update all submodules."""
        self._run("submodule", "update", "--init", "--recursive")
