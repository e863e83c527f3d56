"""resourceglob Infrastructure Layer.

This layer provides services used by the resolver and its strategies:
- ConfigManager: Hierarchical configuration (YAML, environment, runtime)
- Logger: Structured logging system
"""

from .config_manager import CONFIG_SCHEMA, ConfigError
from .config_manager import ConfigManager as Config
from .config_manager import ConfigManager, ConfigSource, get_config_manager, set_global_config
from .logger import Logger, LogLevel, configure_logging, get_logger, set_global_logger

__all__ = [
    # Logger exports
    "Logger",
    "LogLevel",
    "configure_logging",
    "get_logger",
    "set_global_logger",
    # ConfigManager exports
    "CONFIG_SCHEMA",
    "ConfigSource",
    "ConfigError",
    "Config",
    "ConfigManager",
    "get_config_manager",
    "set_global_config",
]
