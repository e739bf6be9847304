"""
Configuration models and loading.

This module provides Pydantic models for fleetsync configuration
with multi-layer merging: defaults < user < project < env vars.
"""

from .env import load_fleet_env
from .loader import (
    clear_cache,
    get_project_config_path,
    get_user_config_path,
    get_xdg_config_home,
    load_config,
)
from .models import (
    DEFAULT_SKIP_ENV_VAR,
    FleetConfig,
    InstallConfig,
    ReconcileConfig,
    ReconcilePolicy,
)

__all__ = [
    # Models
    "DEFAULT_SKIP_ENV_VAR",
    "FleetConfig",
    "InstallConfig",
    "ReconcileConfig",
    "ReconcilePolicy",
    # Loader functions
    "clear_cache",
    "get_project_config_path",
    "get_user_config_path",
    "get_xdg_config_home",
    "load_config",
    "load_fleet_env",
]
