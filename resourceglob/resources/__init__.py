"""resourceglob Resources.

Resource handles, result sets and the providers that locate them:
- ResourceHandle and its file, archive, provider and virtual variants
- ResultSet: ordered, location-deduplicated handle collection
- ResourceProvider / SearchPathProvider: hierarchical literal lookup
"""

from .handles import (
    ArchiveResource,
    FileResource,
    ProviderResource,
    ResourceHandle,
    VirtualResource,
    apply_relative_path,
    to_posix_path,
)
from .providers import ArchiveIntrospection, ResourceProvider, SearchPathProvider, is_archive_path
from .result_set import ResultSet

__all__ = [
    # Handles
    "ResourceHandle",
    "FileResource",
    "ArchiveResource",
    "ProviderResource",
    "VirtualResource",
    "apply_relative_path",
    "to_posix_path",
    # Results
    "ResultSet",
    # Providers
    "ArchiveIntrospection",
    "ResourceProvider",
    "SearchPathProvider",
    "is_archive_path",
]
