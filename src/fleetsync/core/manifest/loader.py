"""
Manifest loading.

Reads ``repos.json`` (or a YAML equivalent) of the form::

    {
      "repos": [{"name": "cli", "url": "https://github.com/lando/cli.git"}],
      "plugins": [{"name": "php", "url": "https://github.com/lando/php.git"}]
    }
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from fleetsync.core.manifest.models import Manifest, RepoCategory, RepoDescriptor

logger = logging.getLogger(__name__)

YAML_SUFFIXES = {".yaml", ".yml"}


class ManifestError(Exception):
    """Raised when the manifest is missing or malformed."""

    pass


def _parse(path: Path, content: str) -> Any:
    if path.suffix.lower() in YAML_SUFFIXES:
        try:
            return yaml.safe_load(content) or {}
        except yaml.YAMLError as e:
            raise ManifestError(f"Failed to parse {path}: {e}") from e
    try:
        return json.loads(content)
    except json.JSONDecodeError as e:
        raise ManifestError(f"Failed to parse {path}: {e}") from e


def parse_manifest(data: Any, source: str = "manifest") -> Manifest:
    """
    Build a Manifest from already-decoded data.

    Args:
        data: Mapping with optional ``repos`` and ``plugins`` lists
        source: Name used in error messages

    Raises:
        ManifestError: If the data does not describe a valid manifest
    """
    if not isinstance(data, dict):
        raise ManifestError(f"{source}: expected a mapping with 'repos' and 'plugins'")

    lists: dict[str, list[RepoDescriptor]] = {}
    try:
        for category in RepoCategory:
            entries = data.get(category.value) or []
            if not isinstance(entries, list):
                raise ManifestError(f"{source}: '{category.value}' must be a list")
            lists[category.value] = [
                RepoDescriptor.model_validate({**entry, "category": category})
                if isinstance(entry, dict)
                else RepoDescriptor.model_validate(entry)
                for entry in entries
            ]
        return Manifest(repos=tuple(lists["repos"]), plugins=tuple(lists["plugins"]))
    except ValidationError as e:
        raise ManifestError(f"{source}: {e}") from e


def load_manifest(path: Path) -> Manifest:
    """
    Load and validate the manifest file.

    Args:
        path: Path to a ``.json``, ``.yaml`` or ``.yml`` manifest

    Returns:
        Validated Manifest

    Raises:
        ManifestError: If the file is missing, unreadable or invalid
    """
    try:
        content = path.read_text()
    except FileNotFoundError as e:
        raise ManifestError(f"Manifest not found: {path}") from e
    except OSError as e:
        raise ManifestError(f"Failed to read {path}: {e}") from e

    manifest = parse_manifest(_parse(path, content), source=str(path))
    logger.debug(
        "Loaded %d repos and %d plugins from %s",
        len(manifest.repos),
        len(manifest.plugins),
        path,
    )
    return manifest
