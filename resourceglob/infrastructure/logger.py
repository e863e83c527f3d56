#!/usr/bin/env python3
"""Structured logging for resourceglob.

Every module logs through a thin wrapper around the standard ``logging``
package that renders keyword context as ``message | key=value ...``:
- An extra TRACE level below DEBUG for per-directory and per-root detail
- Per-thread context pushed with ``add_context()``
- A "resourceglob" root logger owning the console and rotating file outputs
- Module loggers below the root that only propagate

Example:
    >>> logger = get_logger("resourceglob.strategies.filesystem")
    >>> logger.trace("Skipping missing root", root="/opt/conf")
    >>> with logger.add_context(expression="classpath-all:**/*.yaml"):
    ...     logger.debug("Resolving roots")
"""

import logging
import logging.handlers
import threading
from contextlib import contextmanager
from enum import IntEnum
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

ROOT_LOGGER_NAME = "resourceglob"
TRACE = 5
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

logging.addLevelName(TRACE, "TRACE")


class LogLevel(IntEnum):
    """Log levels of the standard logging module, plus TRACE."""

    TRACE = TRACE  # 5
    DEBUG = logging.DEBUG  # 10
    INFO = logging.INFO  # 20
    WARNING = logging.WARNING  # 30
    ERROR = logging.ERROR  # 40
    CRITICAL = logging.CRITICAL  # 50

    @classmethod
    def parse(cls, level: Union["LogLevel", int, str]) -> "LogLevel":
        """Coerce a level name or number.

        Raises:
            KeyError: If a level name is unknown
        """
        if isinstance(level, str):
            return cls[level.upper()]
        return cls(level)


def _formatted(handler: logging.Handler) -> logging.Handler:
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    return handler


class Logger:
    """Structured logger bound to one ``logging.Logger``.

    Context pushed with ``add_context`` is shared by all Logger instances of
    the current thread, so a resolver call can tag the records of every
    strategy it drives.
    """

    _local = threading.local()

    def __init__(
        self,
        name: str = ROOT_LOGGER_NAME,
        level: Optional[Union[LogLevel, str]] = LogLevel.INFO,
        handlers: Optional[List[logging.Handler]] = None,
        propagate: bool = False,
    ):
        """Initialize logger.

        Args:
            name: Dotted logger name
            level: Minimum level, None to inherit the parent's level
            handlers: Output handlers; a console handler when omitted
            propagate: Whether records are passed on to the parent logger
        """
        self.name = name
        self.logger = logging.getLogger(name)
        self.logger.propagate = propagate
        self.set_level(level)

        self.logger.handlers.clear()
        for handler in [self._create_console_handler()] if handlers is None else handlers:
            self.add_handler(handler)

    def _create_console_handler(self) -> logging.StreamHandler:
        return _formatted(logging.StreamHandler())

    def create_file_handler(
        self,
        filename: Union[str, Path],
        max_bytes: int = 10 * 1024 * 1024,
        backup_count: int = 5,
    ) -> logging.handlers.RotatingFileHandler:
        """Build a size-rotated file handler using the console format.

        Args:
            filename: Log file path
            max_bytes: Size at which the file is rotated
            backup_count: Rotated files kept

        Returns:
            Handler ready to be passed to ``add_handler``
        """
        return _formatted(
            logging.handlers.RotatingFileHandler(
                filename, maxBytes=max_bytes, backupCount=backup_count
            )
        )

    def add_handler(self, handler: logging.Handler) -> None:
        self.logger.addHandler(handler)

    def remove_handler(self, handler: logging.Handler) -> None:
        self.logger.removeHandler(handler)

    def set_level(self, level: Optional[Union[LogLevel, str]]) -> None:
        """Change the minimum level; None makes the logger inherit it."""
        self.logger.setLevel(logging.NOTSET if level is None else LogLevel.parse(level))

    def get_level(self) -> LogLevel:
        """Effective level, taking inheritance into account."""
        return LogLevel(self.logger.getEffectiveLevel())

    def is_enabled_for(self, level: Union[LogLevel, str]) -> bool:
        return self.logger.isEnabledFor(LogLevel.parse(level))

    @classmethod
    def _frames(cls) -> List[Dict[str, Any]]:
        frames = getattr(cls._local, "frames", None)
        if frames is None:
            frames = cls._local.frames = []
        return frames

    @contextmanager
    def add_context(self, **context: Any) -> Iterator[None]:
        """Attach key-value pairs to every record logged inside the block.

        Example:
            >>> with logger.add_context(expression="conf/*.yaml"):
            ...     logger.info("Resolving")
        """
        frames = self._frames()
        frames.append(context)
        try:
            yield
        finally:
            frames.pop()

    def _context(self, extra: Dict[str, Any]) -> Dict[str, Any]:
        merged: Dict[str, Any] = {}
        for frame in self._frames():
            merged.update(frame)
        merged.update(extra)
        return merged

    @staticmethod
    def _render(msg: str, context: Dict[str, Any]) -> str:
        if not context:
            return msg
        pairs = " ".join(f"{key}={value}" for key, value in context.items())
        return f"{msg} | {pairs}"

    def _log(self, level: int, msg: str, context: Dict[str, Any], exc_info: Any = None) -> None:
        if not self.logger.isEnabledFor(level):
            return
        merged = self._context(context)
        self.logger.log(
            level, self._render(msg, merged), exc_info=exc_info, extra={"context": merged}
        )

    def trace(self, msg: str, **context: Any) -> None:
        """Log at TRACE, the level used for skipped roots and visited directories."""
        self._log(TRACE, msg, context)

    def debug(self, msg: str, **context: Any) -> None:
        self._log(logging.DEBUG, msg, context)

    def info(self, msg: str, **context: Any) -> None:
        self._log(logging.INFO, msg, context)

    def warning(self, msg: str, **context: Any) -> None:
        self._log(logging.WARNING, msg, context)

    def error(self, msg: str, **context: Any) -> None:
        self._log(logging.ERROR, msg, context)

    def exception(self, msg: str, exc: BaseException, **context: Any) -> None:
        """Log an error with the exception's type, message and traceback.

        Args:
            msg: Log message
            exc: Exception being reported
            **context: Additional key-value pairs
        """
        context.update(exception_type=type(exc).__name__, exception_message=str(exc))
        self._log(logging.ERROR, msg, context, exc_info=exc)


_loggers: Dict[str, Logger] = {}
_loggers_lock = threading.Lock()


def get_logger(name: str = ROOT_LOGGER_NAME) -> Logger:
    """Get or create the logger registered under ``name``.

    The root logger is created with a console handler. Loggers below it have
    no handlers or level of their own and propagate to the root.

    Args:
        name: Dotted logger name

    Returns:
        Logger instance
    """
    with _loggers_lock:
        if name not in _loggers:
            if name != ROOT_LOGGER_NAME and ROOT_LOGGER_NAME not in _loggers:
                _loggers[ROOT_LOGGER_NAME] = Logger(ROOT_LOGGER_NAME)
            if name == ROOT_LOGGER_NAME:
                _loggers[name] = Logger(name)
            else:
                _loggers[name] = Logger(name, level=None, handlers=[], propagate=True)
        return _loggers[name]


def set_global_logger(logger: Logger) -> None:
    """Register ``logger`` as the resourceglob root logger."""
    with _loggers_lock:
        _loggers[ROOT_LOGGER_NAME] = logger


def configure_logging(
    level: Union[LogLevel, str] = LogLevel.INFO, log_file: Optional[str] = None
) -> Logger:
    """Apply a level, and optionally a rotating log file, to the root logger.

    Args:
        level: Minimum level for every resourceglob logger
        log_file: Path of an additional rotating log file

    Returns:
        The root logger

    Raises:
        KeyError: If ``level`` is an unknown level name
    """
    root = get_logger(ROOT_LOGGER_NAME)
    root.set_level(level)
    if log_file:
        root.add_handler(root.create_file_handler(log_file))
    return root
