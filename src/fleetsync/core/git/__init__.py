"""
Git access for repository reconciliation.

Example:
    >>> from fleetsync.core.git import GitClient
    >>> client = GitClient(Path("repos/cli"))
    >>> status = client.status()
    >>> status.is_clean
    True
"""

from .client import GitClient, GitError, RepoStatus, parse_porcelain_status

__all__ = [
    "GitClient",
    "GitError",
    "RepoStatus",
    "parse_porcelain_status",
]
