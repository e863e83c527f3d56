"""
resourceglob Core: Constants and Type Definitions

This module provides library-wide constants, error codes, location prefixes
and resource kinds shared by the resolver and its strategies.
"""
from enum import Enum, IntEnum

# Version information
RESOURCEGLOB_VERSION = "1.0.0"


class ErrorCode(IntEnum):
    """Standardized error codes for resourceglob operations."""

    SUCCESS = 0  # Operation completed successfully
    INVALID_INPUT = 1  # Malformed expression or configuration
    NOT_FOUND = 2  # Resource or file doesn't exist
    PERMISSION_DENIED = 3  # Insufficient permissions
    IO_ERROR = 4  # Archive or stream could not be opened
    DEPENDENCY_ERROR = 5  # Optional collaborator missing
    INTERNAL_ERROR = 6  # Bug in resourceglob


class ResourceKind(Enum):
    """Backend kind of a resource handle."""

    FILESYSTEM = "filesystem"  # Plain file or directory on disk
    ARCHIVE = "archive"  # Entry inside a zip container
    PROVIDER = "provider"  # Provider literal that could not be located
    VIRTUAL = "virtual"  # Node of a pluggable virtual filesystem


class PrefixKind(Enum):
    """Kind of prefix found at the head of a location expression."""

    NONE = "none"  # Plain path, resolved via the primary provider
    MULTI_PROVIDER_ALL = "multi_provider_all"  # Search every visible provider
    SCHEME = "scheme"  # Any other scheme, kept verbatim in the root


class Prefix:
    """Recognized location prefixes (including the trailing colon)."""

    MULTI_PROVIDER_ALL = "classpath-all:"
    PROVIDER = "classpath:"
    FILE = "file:"
    ARCHIVE = "archive:"
    VIRTUAL = "vfs:"


# Separator between archive path and entry path in archive locations
ARCHIVE_SEPARATOR = "!/"

# File suffixes treated as zip archives on a search path
ARCHIVE_SUFFIXES = (".zip", ".jar", ".whl", ".egg", ".war", ".ear")

# Path separator used by patterns and locations
PATH_SEPARATOR = "/"


class ConfigKey:
    """Configuration key constants (dot-separated, below the root key)."""

    ROOT = "resourceglob"
    SEARCH_PATH = "resourceglob.search_path"
    CASE_SENSITIVE = "resourceglob.resolver.case_sensitive"
    FOLLOW_SYMLINKS = "resourceglob.resolver.follow_symlinks"
    LOG_LEVEL = "resourceglob.logging.level"
    LOG_FILE = "resourceglob.logging.file"


# Default configuration values
DEFAULT_CONFIG = {
    "resourceglob": {
        "search_path": [],
        "resolver": {
            "case_sensitive": True,
            "follow_symlinks": True,
        },
        "logging": {
            "level": "INFO",
            "file": None,
        },
    }
}
