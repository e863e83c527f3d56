"""resourceglob Core - Shared constants and error types.

Import specific names from submodules:
    from resourceglob.core.constants import ResourceKind, Prefix
    from resourceglob.core.errors import ResolutionIOError
"""

from resourceglob.core import constants, errors

__all__ = [
    "constants",
    "errors",
]
