"""Exception types raised by resourceglob.

Only unrecoverable I/O escapes a resolution call; everything else is logged
and skipped by the strategies.
"""

from typing import Optional

from resourceglob.core.constants import ErrorCode


class ResourceGlobError(Exception):
    """Base exception for resourceglob errors."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.INTERNAL_ERROR):
        """Initialize error.

        Args:
            message: Error message
            error_code: Associated error code
        """
        self.message = message
        self.error_code = error_code
        super().__init__(message)


class ResolutionIOError(ResourceGlobError):
    """Unrecoverable I/O failure while opening an archive or stream."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        """Initialize resolution I/O error.

        Args:
            message: Error message
            cause: Underlying exception, if any
        """
        super().__init__(message, ErrorCode.IO_ERROR)
        self.cause = cause


class InvalidLocationError(ResourceGlobError):
    """A location expression or archive reference could not be parsed."""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.INVALID_INPUT)
