"""
Configuration loading with multi-layer merging.

Implements the configuration precedence chain:
    defaults < user config < project config < env vars
"""

import json
import logging
import os
from pathlib import Path
from typing import Any

from .models import FleetConfig

logger = logging.getLogger(__name__)

# Global cache to avoid reloading config multiple times per session
_config_cache: FleetConfig | None = None


def get_xdg_config_home() -> Path:
    """
    Get XDG config home directory.

    Returns:
        Path to config directory (defaults to ~/.config)
    """
    if xdg_home := os.environ.get("XDG_CONFIG_HOME"):
        return Path(xdg_home)
    return Path.home() / ".config"


def get_user_config_path() -> Path:
    """
    Get path to user configuration file.

    Returns:
        Path to ~/.config/fleetsync/config.json (or XDG equivalent)
    """
    return get_xdg_config_home() / "fleetsync" / "config.json"


def get_project_config_path(root: Path | None = None) -> Path:
    """
    Get path to project configuration file.

    Args:
        root: Fleet root directory (defaults to current directory)

    Returns:
        Path to .fleetsync.json in the root
    """
    if root is None:
        root = Path.cwd()
    return root / ".fleetsync.json"


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Deep merge two dictionaries.

    Values in `override` take precedence over values in `base`.
    Nested dicts are merged, not replaced.

    Example:
        >>> deep_merge({"a": 1, "b": {"x": 10}}, {"b": {"y": 2}})
        {'a': 1, 'b': {'x': 10, 'y': 2}}
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def load_json_file(path: Path) -> dict[str, Any] | None:
    """
    Load a JSON file, returning None if it doesn't exist or is invalid.

    Args:
        path: Path to JSON file

    Returns:
        Parsed JSON as dict, or None if file doesn't exist or can't be parsed
    """
    if not path.exists():
        return None

    try:
        with path.open() as f:
            data = json.load(f)
            if isinstance(data, dict):
                return data
            return None
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Failed to parse config at %s: %s", path, e)
        return None


def _parse_timeout(name: str, raw: str) -> float | None:
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Invalid %s value '%s', ignoring", name, raw)
        return None
    if value <= 0:
        logger.warning("%s must be > 0, got %s, ignoring", name, raw)
        return None
    return value


def apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    """
    Apply environment variable overrides to configuration.

    Supported env vars:
        FLEETSYNC_POLICY - overrides reconcile.policy
        FLEETSYNC_PRIMARY_BRANCH - overrides reconcile.primary_branch
        FLEETSYNC_GIT_TIMEOUT - overrides reconcile.git_timeout (seconds)
        FLEETSYNC_INSTALL_TIMEOUT - overrides install.timeout (seconds)

    Args:
        config_dict: Configuration dictionary to override

    Returns:
        Configuration dictionary with env var overrides applied
    """
    result = config_dict.copy()
    reconcile = dict(result.get("reconcile") or {})
    install = dict(result.get("install") or {})

    if policy := os.environ.get("FLEETSYNC_POLICY"):
        reconcile["policy"] = policy

    if branch := os.environ.get("FLEETSYNC_PRIMARY_BRANCH"):
        reconcile["primary_branch"] = branch

    if raw := os.environ.get("FLEETSYNC_GIT_TIMEOUT"):
        if (timeout := _parse_timeout("FLEETSYNC_GIT_TIMEOUT", raw)) is not None:
            reconcile["git_timeout"] = timeout

    if raw := os.environ.get("FLEETSYNC_INSTALL_TIMEOUT"):
        if (timeout := _parse_timeout("FLEETSYNC_INSTALL_TIMEOUT", raw)) is not None:
            install["timeout"] = timeout

    if reconcile:
        result["reconcile"] = reconcile
    if install:
        result["install"] = install
    return result


def load_config(root: Path | None = None, use_cache: bool = True) -> FleetConfig:
    """
    Load configuration with multi-layer merging.

    Configuration precedence (highest to lowest):
        1. Environment variables (FLEETSYNC_*)
        2. Project config (.fleetsync.json in the root)
        3. User config (~/.config/fleetsync/config.json)
        4. Model defaults

    Args:
        root: Fleet root directory to load .fleetsync.json from (defaults to cwd)
        use_cache: If True, return cached config from previous load

    Returns:
        Validated FleetConfig instance

    Raises:
        ValidationError: If the merged config fails Pydantic validation
    """
    global _config_cache

    if use_cache and _config_cache is not None:
        return _config_cache

    merged: dict[str, Any] = {}

    if user_config := load_json_file(get_user_config_path()):
        merged = deep_merge(merged, user_config)

    if project_config := load_json_file(get_project_config_path(root)):
        merged = deep_merge(merged, project_config)

    merged = apply_env_overrides(merged)

    config = FleetConfig(**merged)
    _config_cache = config
    return config


def clear_cache() -> None:
    """Clear the cached configuration."""
    global _config_cache
    _config_cache = None
