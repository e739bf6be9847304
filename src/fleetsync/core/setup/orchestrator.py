"""
Setup orchestration.

Reconciles every repository, then every plugin, one at a time and in
manifest order, then runs the install step and reports what needs
attention. Per-repository failures never stop the run; only a failed
install step is fatal.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from fleetsync.core.config.models import FleetConfig
from fleetsync.core.manifest.loader import load_manifest
from fleetsync.core.manifest.models import Manifest, RepoCategory, RepoDescriptor
from fleetsync.core.reconcile.reconciler import Reconciler
from fleetsync.core.setup.installer import run_install
from fleetsync.core.setup.models import RepoOutcome, RunContext, RunSummary
from fleetsync.core.setup.reporter import SetupReporter

logger = logging.getLogger(__name__)

Installer = Callable[..., None]


class SetupOrchestrator:
    """
    Runs a full setup: reconcile all descriptors, install, summarize.

    Example:
        >>> orchestrator = SetupOrchestrator(load_config(root))
        >>> summary = orchestrator.run(RunContext(root=root))
        >>> summary.has_blocking_issues
        False
    """

    def __init__(
        self,
        config: FleetConfig,
        *,
        manifest: Manifest | None = None,
        reconciler: Reconciler | None = None,
        reporter: SetupReporter | None = None,
        installer: Installer | None = None,
    ) -> None:
        """
        Initialize the orchestrator.

        Args:
            config: Fleet configuration
            manifest: Pre-loaded manifest (loaded from the root on run if None)
            reconciler: Reconciler to use (built from config if None)
            reporter: Output reporter (prints to stdout if None)
            installer: Callable running the install step; raises InstallError
                (run_install if None)
        """
        self.config = config
        self.manifest = manifest
        self.reporter = reporter or SetupReporter()
        self.reconciler = reconciler or Reconciler.from_config(
            config.reconcile, progress=self.reporter.progress
        )
        self.installer = installer or run_install

    def target_dirs(self, root: Path) -> dict[RepoCategory, Path]:
        return {
            RepoCategory.REPOS: root / self.config.repos_dir,
            RepoCategory.PLUGINS: root / self.config.plugins_dir,
        }

    def _load_manifest(self, context: RunContext) -> Manifest:
        manifest = self.manifest
        if manifest is None:
            path = context.manifest_path or context.root / self.config.manifest
            manifest = load_manifest(path)

        if context.only is not None:
            known = {d.name for d in manifest.descriptors()}
            unknown = sorted(context.only - known)
            if unknown:
                logger.warning("Names not in manifest: %s", ", ".join(unknown))
                self.reporter.unknown_names(unknown)
            manifest = manifest.filter(set(context.only))

        return manifest

    def reconcile_all(
        self, descriptors: list[RepoDescriptor], dirs: dict[RepoCategory, Path]
    ) -> list[RepoOutcome]:
        """Reconcile descriptors sequentially, in order."""
        return [
            RepoOutcome(
                descriptor=descriptor,
                notification=self.reconciler.reconcile(descriptor, dirs[descriptor.category]),
            )
            for descriptor in descriptors
        ]

    def run(self, context: RunContext) -> RunSummary | None:
        """
        Execute the setup run.

        Args:
            context: Invocation parameters

        Returns:
            The run summary, or None when the run was skipped

        Raises:
            ManifestError: If the manifest cannot be loaded
            InstallError: If the install step fails
        """
        install = self.config.install

        if context.skip:
            logger.info("%s set, skipping setup", install.skip_env_var)
            self.reporter.skipped(install.skip_env_var)
            return None

        manifest = self._load_manifest(context)

        dirs = self.target_dirs(context.root)
        for directory in dirs.values():
            directory.mkdir(parents=True, exist_ok=True)

        outcomes = self.reconcile_all(list(manifest.descriptors()), dirs)
        summary = RunSummary.from_outcomes(outcomes)
        logger.info(
            "Processed %d repositories, %d need attention",
            summary.processed,
            len(summary.entries),
        )
        self.reporter.processed(summary)

        if context.skip_install:
            self.reporter.install_skipped()
        else:
            self.reporter.install_started(install.command, install.skip_env_var)
            self.installer(
                install.command,
                context.root,
                skip_env_var=install.skip_env_var,
                timeout=install.timeout,
            )
            self.reporter.install_completed(install.command)

        self.reporter.render_summary(summary)
        return summary
