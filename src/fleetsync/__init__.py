"""
fleetsync - keep a fleet of repository and plugin clones up to date

Clones missing repositories, updates existing ones without losing local
work, runs the dependent install step and reports what needs attention.
"""

__version__ = "0.1.0"

# Re-export core models for convenience
from fleetsync.core.config.models import FleetConfig, ReconcilePolicy
from fleetsync.core.manifest.models import Manifest, RepoCategory, RepoDescriptor
from fleetsync.core.reconcile.models import Notification, NotificationCategory

__all__ = [
    "FleetConfig",
    "Manifest",
    "Notification",
    "NotificationCategory",
    "ReconcilePolicy",
    "RepoCategory",
    "RepoDescriptor",
    "__version__",
]
