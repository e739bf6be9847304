"""
Data models for the repository manifest.

The manifest lists every repository and plugin that fleetsync keeps
checked out, as name + clone URL pairs.
"""

from __future__ import annotations

from collections.abc import Iterator
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class RepoCategory(str, Enum):
    """Which list a descriptor came from.

    The value doubles as the label prefix used in reports (``repos/<name>``).
    """

    REPOS = "repos"
    PLUGINS = "plugins"


class RepoDescriptor(BaseModel):
    """
    A repository to keep in sync.

    Example:
        >>> repo = RepoDescriptor(name="cli", url="https://github.com/lando/cli.git")
        >>> repo.label
        'repos/cli'
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1, description="Directory name of the clone")
    url: str = Field(min_length=1, description="Clone source")
    category: RepoCategory = Field(
        default=RepoCategory.REPOS,
        description="Manifest list the descriptor belongs to",
    )

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Names become directory names, so they must be a single path component."""
        if v in (".", "..") or "/" in v or "\\" in v:
            raise ValueError(f"invalid repository name: {v!r}")
        return v

    @property
    def label(self) -> str:
        """Report label, e.g. ``plugins/php``."""
        return f"{self.category.value}/{self.name}"


class Manifest(BaseModel):
    """
    The full list of repositories and plugins.

    Entries are kept in file order; names must be unique within a list.
    """

    model_config = ConfigDict(frozen=True)

    repos: tuple[RepoDescriptor, ...] = Field(default=())
    plugins: tuple[RepoDescriptor, ...] = Field(default=())

    @model_validator(mode="after")
    def check_entries(self) -> Manifest:
        for category, entries in (
            (RepoCategory.REPOS, self.repos),
            (RepoCategory.PLUGINS, self.plugins),
        ):
            seen: set[str] = set()
            for entry in entries:
                if entry.category != category:
                    raise ValueError(
                        f"{entry.name} is listed under {category.value} "
                        f"but tagged {entry.category.value}"
                    )
                if entry.name in seen:
                    raise ValueError(f"duplicate {category.value} entry: {entry.name}")
                seen.add(entry.name)
        return self

    def descriptors(self) -> Iterator[RepoDescriptor]:
        """Yield all repos, then all plugins, in file order."""
        yield from self.repos
        yield from self.plugins

    def __len__(self) -> int:
        return len(self.repos) + len(self.plugins)

    def filter(self, names: set[str]) -> Manifest:
        """Return a manifest restricted to descriptors whose name is in ``names``."""
        return Manifest(
            repos=tuple(r for r in self.repos if r.name in names),
            plugins=tuple(p for p in self.plugins if p.name in names),
        )
