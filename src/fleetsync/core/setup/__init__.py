"""
Fleet setup: reconcile every repository, install, report.

Example:
    >>> from fleetsync.core.setup import RunContext, SetupOrchestrator
    >>> summary = SetupOrchestrator(config).run(RunContext(root=Path.cwd()))
"""

from .installer import InstallError, run_install
from .models import RepoOutcome, RunContext, RunSummary, SummaryEntry
from .orchestrator import SetupOrchestrator
from .reporter import SetupReporter

__all__ = [
    "InstallError",
    "RepoOutcome",
    "RunContext",
    "RunSummary",
    "SetupOrchestrator",
    "SetupReporter",
    "SummaryEntry",
    "run_install",
]
