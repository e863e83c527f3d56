"""resourceglob Resolution Strategies.

Backend-specific expansion of a sub-pattern below a resolved root:
- ArchiveScanner: zip archive entries
- FilesystemWalker: on-disk directory trees
- VirtualFsStrategy: pluggable virtual filesystems
- MultiProviderLookup: every provider visible from a context
"""

from .archive import ArchiveEntry, ArchiveScanner, iter_entries, open_archive
from .filesystem import FilesystemWalker, is_readable_directory
from .multi_provider import MultiProviderLookup
from .virtual import (
    InMemoryVirtualFilesystem,
    NodeVisitor,
    VirtualFilesystem,
    VirtualFsStrategy,
    VirtualFsVisitor,
)

__all__ = [
    "ArchiveEntry",
    "ArchiveScanner",
    "iter_entries",
    "open_archive",
    "FilesystemWalker",
    "is_readable_directory",
    "MultiProviderLookup",
    "InMemoryVirtualFilesystem",
    "NodeVisitor",
    "VirtualFilesystem",
    "VirtualFsStrategy",
    "VirtualFsVisitor",
]
