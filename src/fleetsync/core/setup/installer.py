"""
Dependent install step.

Runs the package-manager install command after all repositories are in
place. The command inherits stdout/stderr so its native output is shown
live, and runs with the skip variable set so that an install hook which
re-invokes fleetsync returns immediately.
"""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)


class InstallError(Exception):
    """Raised when the install command fails. Fatal for the whole run."""

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        self.exit_code = exit_code


def run_install(
    command: list[str],
    cwd: Path,
    *,
    skip_env_var: str = "SKIP_SETUP",
    timeout: float | None = None,
) -> None:
    """
    Run the install command and wait for it.

    Args:
        command: Command and arguments, e.g. ``["npm", "install"]``
        cwd: Directory to run in
        skip_env_var: Variable set to "true" in the child environment
        timeout: Seconds after which the command is killed (None = no limit)

    Raises:
        InstallError: If the command cannot start, times out, or exits non-zero
    """
    display = " ".join(command)
    env = {**os.environ, skip_env_var: "true"}

    logger.info("Running %s in %s with %s=true", display, cwd, skip_env_var)
    try:
        result = subprocess.run(command, cwd=cwd, env=env, timeout=timeout, check=False)
    except FileNotFoundError as e:
        raise InstallError(f"{command[0]} not found in PATH", exit_code=127) from e
    except subprocess.TimeoutExpired as e:
        raise InstallError(f"{display} timed out after {timeout}s") from e

    if result.returncode != 0:
        raise InstallError(
            f"{display} failed with code {result.returncode}",
            exit_code=result.returncode,
        )

    logger.info("%s completed successfully", display)
