"""
Tests for SetupOrchestrator.

End-to-end runs use real upstream repositories and a mocked install step.
"""

from unittest.mock import MagicMock

import pytest
from conftest import commit_file, git

from fleetsync.core.config import FleetConfig
from fleetsync.core.manifest import ManifestError, RepoCategory, parse_manifest
from fleetsync.core.reconcile import Notification, NotificationCategory
from fleetsync.core.setup import InstallError, RunContext, SetupOrchestrator


@pytest.fixture
def fleet(tmp_path, make_upstream, write_manifest):
    """A fleet root with 3 repos (one unreachable) and 2 plugins."""
    root = tmp_path / "fleet"
    root.mkdir()
    cli = make_upstream("cli")
    docs = make_upstream("docs")
    php = make_upstream("php")
    node = make_upstream("node")

    write_manifest(
        root,
        repos=[
            {"name": "cli", "url": cli.url},
            {"name": "broken", "url": str(tmp_path / "does-not-exist.git")},
            {"name": "docs", "url": docs.url},
        ],
        plugins=[
            {"name": "php", "url": php.url},
            {"name": "node", "url": node.url},
        ],
    )
    return root


class TestSkip:
    """Test the skip short-circuit."""

    def test_skip_has_no_side_effects(self, tmp_path, reporter, output):
        installer = MagicMock()
        reconciler = MagicMock()
        orchestrator = SetupOrchestrator(
            FleetConfig(), reconciler=reconciler, reporter=reporter, installer=installer
        )

        result = orchestrator.run(RunContext(root=tmp_path, skip=True))

        assert result is None
        assert not (tmp_path / "repos").exists()
        assert not (tmp_path / "plugins").exists()
        reconciler.reconcile.assert_not_called()
        installer.assert_not_called()
        assert "Skipping setup" in output.getvalue()

    def test_skip_does_not_read_manifest(self, tmp_path, reporter):
        (tmp_path / "repos.json").write_text("{broken")
        orchestrator = SetupOrchestrator(FleetConfig(), reporter=reporter, installer=MagicMock())

        assert orchestrator.run(RunContext(root=tmp_path, skip=True)) is None


class TestEndToEnd:
    """Full runs against real repositories."""

    def test_one_failure_does_not_stop_the_run(self, fleet, reporter, output):
        installer = MagicMock()
        orchestrator = SetupOrchestrator(FleetConfig(), reporter=reporter, installer=installer)

        summary = orchestrator.run(RunContext(root=fleet))

        assert summary.processed == 5
        assert [e.label for e in summary.entries] == ["repos/broken"]
        assert summary.entries[0].category is NotificationCategory.OTHER_ERROR
        installer.assert_called_once_with(
            ["npm", "install"], fleet, skip_env_var="SKIP_SETUP", timeout=None
        )

        for path in ("repos/cli", "repos/docs", "plugins/php", "plugins/node"):
            assert (fleet / path / "README.md").exists()
        assert not (fleet / "repos" / "broken").exists()

        text = output.getvalue()
        assert "All repositories and plugins have been processed (5 total)." in text
        assert ">>> repos/broken <<<" in text
        assert "Error in broken:" in text

    def test_order_repos_then_plugins(self, fleet, reporter):
        seen = []
        reconciler = MagicMock()
        reconciler.reconcile.side_effect = lambda d, target: seen.append(d.label)
        orchestrator = SetupOrchestrator(
            FleetConfig(), reconciler=reconciler, reporter=reporter, installer=MagicMock()
        )

        orchestrator.run(RunContext(root=fleet))

        assert seen == ["repos/cli", "repos/broken", "repos/docs", "plugins/php", "plugins/node"]

    def test_plugins_go_to_plugins_dir(self, fleet, reporter):
        targets = {}
        reconciler = MagicMock()
        reconciler.reconcile.side_effect = lambda d, target: targets.update({d.name: target})
        orchestrator = SetupOrchestrator(
            FleetConfig(), reconciler=reconciler, reporter=reporter, installer=MagicMock()
        )

        orchestrator.run(RunContext(root=fleet))

        assert targets["cli"] == fleet / "repos"
        assert targets["php"] == fleet / "plugins"

    def test_second_run_updates_in_place(self, fleet, reporter):
        orchestrator = SetupOrchestrator(FleetConfig(), reporter=reporter, installer=MagicMock())
        orchestrator.run(RunContext(root=fleet))

        upstream_seed = fleet.parent / "upstreams" / "cli" / "seed"
        commit_file(upstream_seed, "CHANGELOG.md", "v2\n")
        git(upstream_seed, "push", "origin", "main")

        summary = orchestrator.run(RunContext(root=fleet))

        assert (fleet / "repos" / "cli" / "CHANGELOG.md").read_text() == "v2\n"
        assert [e.label for e in summary.entries] == ["repos/broken"]

    def test_summary_printed_after_install(self, fleet, reporter, output):
        def installer(command, cwd, **kwargs):
            reporter.console.print("INSTALL RAN")

        orchestrator = SetupOrchestrator(FleetConfig(), reporter=reporter, installer=installer)

        orchestrator.run(RunContext(root=fleet))

        text = output.getvalue()
        assert text.index("INSTALL RAN") < text.index("REPOSITORY STATUS SUMMARY")


class TestRunOptions:
    """Test skip_install, only and custom directories."""

    def test_skip_install(self, fleet, reporter, output):
        installer = MagicMock()
        reconciler = MagicMock()
        reconciler.reconcile.return_value = None
        orchestrator = SetupOrchestrator(
            FleetConfig(), reconciler=reconciler, reporter=reporter, installer=installer
        )

        summary = orchestrator.run(RunContext(root=fleet, skip_install=True))

        installer.assert_not_called()
        assert not summary.has_issues
        assert "Install step skipped." in output.getvalue()

    def test_only_filters_and_warns(self, fleet, reporter, output):
        reconciler = MagicMock()
        reconciler.reconcile.return_value = None
        orchestrator = SetupOrchestrator(
            FleetConfig(), reconciler=reconciler, reporter=reporter, installer=MagicMock()
        )

        summary = orchestrator.run(RunContext(root=fleet, only=frozenset({"php", "nope"})))

        assert summary.processed == 1
        descriptor = reconciler.reconcile.call_args.args[0]
        assert descriptor.label == "plugins/php"
        assert "nope" in output.getvalue()

    def test_custom_directories(self, tmp_path, reporter):
        config = FleetConfig(repos_dir="src", plugins_dir="ext")
        manifest = parse_manifest({"repos": [], "plugins": []})
        orchestrator = SetupOrchestrator(
            config, manifest=manifest, reporter=reporter, installer=MagicMock()
        )

        orchestrator.run(RunContext(root=tmp_path))

        assert (tmp_path / "src").is_dir()
        assert (tmp_path / "ext").is_dir()

    def test_explicit_manifest_path(self, tmp_path, reporter, write_manifest):
        elsewhere = tmp_path / "elsewhere"
        elsewhere.mkdir()
        path = write_manifest(elsewhere, repos=[{"name": "a", "url": "u"}])
        reconciler = MagicMock()
        reconciler.reconcile.return_value = None
        orchestrator = SetupOrchestrator(
            FleetConfig(), reconciler=reconciler, reporter=reporter, installer=MagicMock()
        )

        summary = orchestrator.run(RunContext(root=tmp_path, manifest_path=path))

        assert summary.processed == 1


class TestFailures:
    """Test fatal errors."""

    def test_install_failure_propagates(self, tmp_path, reporter, output):
        installer = MagicMock(side_effect=InstallError("npm install failed with code 1", 1))
        reconciler = MagicMock()
        reconciler.reconcile.return_value = Notification(
            repo_name="a", category=NotificationCategory.OTHER_ERROR, message="boom"
        )
        manifest = parse_manifest({"repos": [{"name": "a", "url": "u"}]})
        orchestrator = SetupOrchestrator(
            FleetConfig(),
            manifest=manifest,
            reconciler=reconciler,
            reporter=reporter,
            installer=installer,
        )

        with pytest.raises(InstallError):
            orchestrator.run(RunContext(root=tmp_path))

        assert "REPOSITORY STATUS SUMMARY" not in output.getvalue()

    def test_missing_manifest(self, tmp_path, reporter):
        orchestrator = SetupOrchestrator(FleetConfig(), reporter=reporter, installer=MagicMock())

        with pytest.raises(ManifestError, match="Manifest not found"):
            orchestrator.run(RunContext(root=tmp_path))

    def test_target_dirs(self, tmp_path):
        orchestrator = SetupOrchestrator(FleetConfig(), installer=MagicMock())

        dirs = orchestrator.target_dirs(tmp_path)

        assert dirs == {
            RepoCategory.REPOS: tmp_path / "repos",
            RepoCategory.PLUGINS: tmp_path / "plugins",
        }
