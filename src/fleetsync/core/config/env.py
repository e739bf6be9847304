"""
Fleet root .env loading.

A fleet root may carry the environment fleetsync reads (FLEETSYNC_*
overrides and the SKIP_SETUP gate) in dotenv files next to the manifest:

    <root>/.env.local   machine-local values, not committed
    <root>/.env         shared values

Precedence, highest first: process environment, .env.local, .env.
"""

from __future__ import annotations

import logging
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Highest precedence first; load_dotenv never overrides keys already set
ENV_FILES = (".env.local", ".env")


def load_fleet_env(root: Path) -> list[Path]:
    """
    Load the fleet root's dotenv files into the process environment.

    Args:
        root: Fleet root directory

    Returns:
        The files that were found and loaded, in load order
    """
    loaded: list[Path] = []
    for name in ENV_FILES:
        path = root / name
        if not path.is_file():
            continue
        load_dotenv(path, override=False)
        logger.debug("Loaded environment from %s", path)
        loaded.append(path)
    return loaded
