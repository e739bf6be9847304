"""
Pytest configuration and shared fixtures.

Provides isolated git configuration, throwaway upstream repositories
(a bare remote plus a seed working copy that pushes to it), manifests
and a capturing reporter.
"""

import io
import json
import subprocess
from dataclasses import dataclass
from pathlib import Path

import pytest
from rich.console import Console

from fleetsync.core.config import clear_cache
from fleetsync.core.setup import SetupReporter

# ==============================================================================
# Git helpers
# ==============================================================================


def git(cwd: Path, *args: str) -> str:
    """Run a git command in ``cwd`` and return stripped stdout."""
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


def commit_file(repo: Path, name: str, content: str, message: str = "update") -> None:
    path = repo / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    git(repo, "add", name)
    git(repo, "commit", "-m", message)


def stash_count(repo: Path) -> int:
    return len([line for line in git(repo, "stash", "list").splitlines() if line])


@dataclass
class Upstream:
    """A bare remote and the working copy used to push commits to it."""

    bare: Path
    seed: Path

    @property
    def url(self) -> str:
        return str(self.bare)

    def commit(self, name: str, content: str, message: str = "upstream change") -> None:
        commit_file(self.seed, name, content, message)
        git(self.seed, "push", "origin", "main")


# ==============================================================================
# Environment Fixtures
# ==============================================================================


@pytest.fixture(autouse=True)
def isolated_env(tmp_path_factory, monkeypatch):
    """Give every test its own git identity/config and no fleetsync overrides."""
    home = tmp_path_factory.mktemp("home")
    gitconfig = home / ".gitconfig"
    gitconfig.write_text("[pull]\n\trebase = false\n[advice]\n\tdetachedHead = false\n")

    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(gitconfig))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Test User")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "test@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Test User")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "test@example.com")
    monkeypatch.setenv("GIT_TERMINAL_PROMPT", "0")
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))

    for var in (
        "SKIP_SETUP",
        "FLEETSYNC_POLICY",
        "FLEETSYNC_PRIMARY_BRANCH",
        "FLEETSYNC_GIT_TIMEOUT",
        "FLEETSYNC_INSTALL_TIMEOUT",
    ):
        monkeypatch.delenv(var, raising=False)

    clear_cache()
    yield
    clear_cache()


# ==============================================================================
# Repository Fixtures
# ==============================================================================


@pytest.fixture
def make_upstream(tmp_path):
    """Factory creating an upstream repository with one commit on main."""

    def _make(name: str = "upstream", files: dict[str, str] | None = None) -> Upstream:
        base = tmp_path / "upstreams" / name
        bare = base / "remote.git"
        seed = base / "seed"
        bare.mkdir(parents=True)
        seed.mkdir()

        git(bare, "init", "--bare", "--initial-branch=main")
        git(seed, "init", "--initial-branch=main")

        for filename, content in (files or {"README.md": "# Test Repo\n"}).items():
            path = seed / filename
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)
        git(seed, "add", ".")
        git(seed, "commit", "-m", "Initial commit")
        git(seed, "remote", "add", "origin", str(bare))
        git(seed, "push", "-u", "origin", "main")

        return Upstream(bare=bare, seed=seed)

    return _make


@pytest.fixture
def upstream(make_upstream) -> Upstream:
    return make_upstream()


@pytest.fixture
def target_dir(tmp_path) -> Path:
    directory = tmp_path / "repos"
    directory.mkdir()
    return directory


@pytest.fixture
def clone(upstream, target_dir) -> Path:
    """A local clone of ``upstream`` at ``target_dir/sample``."""
    path = target_dir / "sample"
    git(target_dir, "clone", upstream.url, str(path))
    return path


# ==============================================================================
# Output Fixtures
# ==============================================================================


@pytest.fixture
def output():
    return io.StringIO()


@pytest.fixture
def reporter(output) -> SetupReporter:
    """A SetupReporter writing plain text into ``output``."""
    console = Console(file=output, width=200, force_terminal=False, color_system=None)
    return SetupReporter(console)


@pytest.fixture
def write_manifest():
    """Write a repos.json into a directory."""

    def _write(root: Path, repos: list[dict], plugins: list[dict] | None = None) -> Path:
        path = root / "repos.json"
        path.write_text(json.dumps({"repos": repos, "plugins": plugins or []}, indent=2))
        return path

    return _write
