"""
Repository manifest: the static list of repos and plugins to sync.

Example:
    >>> from fleetsync.core.manifest import load_manifest
    >>> manifest = load_manifest(Path("repos.json"))
    >>> for descriptor in manifest.descriptors():
    ...     print(descriptor.label, descriptor.url)
"""

from .loader import ManifestError, load_manifest, parse_manifest
from .models import Manifest, RepoCategory, RepoDescriptor

__all__ = [
    "Manifest",
    "ManifestError",
    "RepoCategory",
    "RepoDescriptor",
    "load_manifest",
    "parse_manifest",
]
