"""
Per-repository reconciliation.

Example:
    >>> from fleetsync.core.reconcile import Reconciler
    >>> reconciler = Reconciler(primary_branch="main")
    >>> notification = reconciler.reconcile(descriptor, Path("plugins"))
"""

from .models import Notification, NotificationCategory
from .reconciler import PACKAGE_LOCK, ProgressCallback, Reconciler

__all__ = [
    "Notification",
    "NotificationCategory",
    "PACKAGE_LOCK",
    "ProgressCallback",
    "Reconciler",
]
