"""
Configuration data models for fleetsync.

These models define the structure of .fleetsync.json and
~/.config/fleetsync/config.json files, with validation and type safety
via Pydantic.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

# Variable that turns a setup run into a no-op; also set for the install command
DEFAULT_SKIP_ENV_VAR = "SKIP_SETUP"


class ReconcilePolicy(str, Enum):
    """How an existing clone is brought up to date."""

    SIMPLE = "simple"
    BRANCH_AWARE = "branch_aware"

    @classmethod
    def parse(cls, value: str) -> "ReconcilePolicy":
        """Parse a policy name, accepting dashes as well as underscores."""
        return cls(value.strip().lower().replace("-", "_"))


class ReconcileConfig(BaseModel):
    """
    Per-repository reconciliation settings.

    Controls which update policy is applied to existing clones and how
    long individual git operations may run.
    """
    policy: ReconcilePolicy = Field(
        default=ReconcilePolicy.BRANCH_AWARE,
        description="Update policy: 'simple' or 'branch_aware'"
    )
    primary_branch: str = Field(
        default="main",
        min_length=1,
        description="Branch that clones are switched back to when clean"
    )
    git_timeout: Optional[float] = Field(
        default=None,
        gt=0,
        description="Kill a git operation after this many seconds (None = no limit)"
    )
    stash_message: str = Field(
        default="Automatic stash by fleetsync",
        min_length=1,
        description="Message recorded on stashes created during an update"
    )

    @field_validator("policy", mode="before")
    @classmethod
    def normalize_policy(cls, v: object) -> object:
        """Accept 'branch-aware' spelling from config files."""
        if isinstance(v, str):
            return ReconcilePolicy.parse(v)
        return v


class InstallConfig(BaseModel):
    """
    The package installation step run after all repositories are synced.
    """
    command: list[str] = Field(
        default_factory=lambda: ["npm", "install"],
        min_length=1,
        description="Command run in the root directory after reconciliation"
    )
    timeout: Optional[float] = Field(
        default=None,
        gt=0,
        description="Kill the install command after this many seconds (None = no limit)"
    )
    skip_env_var: str = Field(
        default=DEFAULT_SKIP_ENV_VAR,
        min_length=1,
        description="Environment variable set for the install command to prevent re-entry"
    )


class FleetConfig(BaseModel):
    """
    Top-level fleetsync configuration.

    Loaded from defaults, user config, project config, and env vars.

    Example:
        >>> config = FleetConfig(
        ...     reconcile=ReconcileConfig(policy=ReconcilePolicy.SIMPLE),
        ...     install=InstallConfig(command=["npm", "ci"]),
        ... )
        >>> config.reconcile.primary_branch
        'main'
    """
    manifest: str = Field(
        default="repos.json",
        description="Path to the repository manifest, relative to the root"
    )
    repos_dir: str = Field(
        default="repos",
        min_length=1,
        description="Directory (relative to the root) holding repository clones"
    )
    plugins_dir: str = Field(
        default="plugins",
        min_length=1,
        description="Directory (relative to the root) holding plugin clones"
    )
    reconcile: ReconcileConfig = Field(
        default_factory=ReconcileConfig,
        description="Reconciliation behavior"
    )
    install: InstallConfig = Field(
        default_factory=InstallConfig,
        description="Post-sync install step"
    )
