#!/usr/bin/env python3
"""Layered configuration for resourceglob.

Settings live under the ``resourceglob`` root key and are read from several
layers, highest precedence first:
- runtime updates made through ``set``/``load_dict``
- command-line arguments
- ``RESOURCEGLOB_*`` environment variables
- a YAML configuration file
- compiled defaults

Example:
    >>> config = ConfigManager("resourceglob.yaml")
    >>> config.get("resourceglob.resolver.case_sensitive", default=True)
"""

import copy
import os
import threading
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from resourceglob.core.constants import DEFAULT_CONFIG, ConfigKey, ErrorCode

ENV_PREFIX = "RESOURCEGLOB_"
ENV_NESTING = "__"

# Environment keys holding os.pathsep separated lists
_LIST_ENV_KEYS = ("search_path",)

_TRUE_WORDS = ("true", "yes", "on")
_FALSE_WORDS = ("false", "no", "off")


class ConfigSource(Enum):
    """Configuration layers, ordered by precedence."""

    COMPILED_DEFAULTS = 1
    USER_CONFIG = 2
    ENVIRONMENT = 3
    CLI_ARGS = 4
    RUNTIME = 5


class ConfigError(Exception):
    """Configuration could not be loaded or failed validation."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.INVALID_INPUT):
        self.message = message
        self.error_code = error_code
        super().__init__(message)


def _lookup(tree: Mapping[str, Any], key: str) -> Optional[Any]:
    node: Any = tree
    for part in key.split("."):
        if not isinstance(node, Mapping) or part not in node:
            return None
        node = node[part]
    return node


def _merge(base: Dict[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(merged.get(key), dict) and isinstance(value, Mapping):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class ConfigManager:
    """Thread-safe stack of configuration layers.

    ``get`` returns the value from the highest layer that defines a key;
    ``get_all`` deep-merges every layer into one tree.
    """

    DEFAULT_CONFIG = DEFAULT_CONFIG

    def __init__(
        self, config_file: Optional[str] = None, environ: Optional[Mapping[str, str]] = None
    ):
        """Initialize configuration manager.

        Args:
            config_file: Optional YAML file loaded as the user layer
            environ: Environment to read overrides from, defaults to ``os.environ``
        """
        self._lock = threading.RLock()
        self._layers: Dict[ConfigSource, Dict[str, Any]] = {
            ConfigSource.COMPILED_DEFAULTS: copy.deepcopy(self.DEFAULT_CONFIG)
        }

        if config_file:
            self.load_file(config_file)
        self._load_environment(os.environ if environ is None else environ)

    def load_file(self, file_path: str, source: ConfigSource = ConfigSource.USER_CONFIG) -> None:
        """Load a YAML file into a layer.

        Args:
            file_path: Path to the YAML file
            source: Layer to replace

        Raises:
            ConfigError: If the file is missing, unreadable, malformed or not a mapping
        """
        path = Path(file_path).expanduser()
        if not path.exists():
            raise ConfigError(f"Config file not found: {file_path}", ErrorCode.NOT_FOUND)

        try:
            data = yaml.safe_load(path.read_text())
        except yaml.YAMLError as e:
            raise ConfigError(f"YAML parse error in {file_path}: {e}")
        except OSError as e:
            raise ConfigError(f"Error loading config {file_path}: {e}", ErrorCode.IO_ERROR)

        if not isinstance(data, dict):
            raise ConfigError(f"Invalid config format in {file_path}: expected a mapping")

        with self._lock:
            self._layers[source] = data

    def load_dict(self, data: Mapping[str, Any], source: ConfigSource = ConfigSource.RUNTIME) -> None:
        """Replace a layer with a copy of ``data``."""
        with self._lock:
            self._layers[source] = copy.deepcopy(dict(data))

    def _load_environment(self, environ: Mapping[str, str]) -> None:
        """Build the environment layer.

        ``RESOURCEGLOB_RESOLVER__CASE_SENSITIVE=false`` sets
        ``resourceglob.resolver.case_sensitive``; ``RESOURCEGLOB_SEARCH_PATH``
        is split on ``os.pathsep``.
        """
        overrides: Dict[str, Any] = {}

        for name, raw in environ.items():
            if not name.startswith(ENV_PREFIX):
                continue
            *sections, leaf = name[len(ENV_PREFIX):].lower().split(ENV_NESTING)

            target = overrides
            for section in sections:
                target = target.setdefault(section, {})

            if leaf in _LIST_ENV_KEYS:
                target[leaf] = [item for item in raw.split(os.pathsep) if item]
            else:
                target[leaf] = self._parse_env_value(raw)

        if overrides:
            with self._lock:
                self._layers[ConfigSource.ENVIRONMENT] = {ConfigKey.ROOT: overrides}

    @staticmethod
    def _parse_env_value(raw: str) -> Any:
        """Coerce an environment string to bool, int or float where it looks like one."""
        lowered = raw.lower()
        if lowered in _TRUE_WORDS:
            return True
        if lowered in _FALSE_WORDS:
            return False
        for convert in (int, float):
            try:
                return convert(raw)
            except ValueError:
                continue
        return raw

    def _ordered(self, highest_first: bool):
        return sorted(self._layers.items(), key=lambda item: item[0].value, reverse=highest_first)

    def get(self, key: str, default: Any = None) -> Any:
        """Value of a dot-separated key from the highest layer defining it.

        Args:
            key: Key such as ``resourceglob.resolver.case_sensitive``
            default: Returned when no layer defines the key

        Returns:
            Configured value or ``default``
        """
        with self._lock:
            for _, layer in self._ordered(highest_first=True):
                value = _lookup(layer, key)
                if value is not None:
                    return value
        return default

    def set(self, key: str, value: Any, source: ConfigSource = ConfigSource.RUNTIME) -> None:
        """Set a dot-separated key in one layer."""
        *sections, leaf = key.split(".")
        with self._lock:
            target = self._layers.setdefault(source, {})
            for section in sections:
                target = target.setdefault(section, {})
            target[leaf] = value

    def get_all(self) -> Dict[str, Any]:
        """Deep merge of every layer, lowest precedence first."""
        merged: Dict[str, Any] = {}
        with self._lock:
            for _, layer in self._ordered(highest_first=False):
                merged = _merge(merged, layer)
        return merged

    def validate_schema(self, schema: Mapping[str, Any]) -> bool:
        """Check the merged configuration against a type schema.

        A schema maps keys to a type, a tuple of types, or a nested schema.
        Keys absent from the configuration are not checked.

        Returns:
            True if valid

        Raises:
            ConfigError: On the first mismatch
        """
        self._check(self.get_all(), schema)
        return True

    def _check(self, tree: Mapping[str, Any], schema: Mapping[str, Any]) -> None:
        for key, expected in schema.items():
            if key not in tree:
                continue
            value = tree[key]
            if isinstance(expected, Mapping):
                if not isinstance(value, dict):
                    raise ConfigError(f"Expected dict for {key}, got {type(value).__name__}")
                self._check(value, expected)
            elif not isinstance(value, expected):
                wanted = getattr(expected, "__name__", None) or " or ".join(t.__name__ for t in expected)
                raise ConfigError(f"Expected {wanted} for {key}, got {type(value).__name__}")

    def clear(self, source: Optional[ConfigSource] = None) -> None:
        """Drop one layer, or every layer but the compiled defaults."""
        with self._lock:
            doomed = [source] if source else list(self._layers)
            for layer in doomed:
                if layer is not ConfigSource.COMPILED_DEFAULTS:
                    self._layers.pop(layer, None)


CONFIG_SCHEMA = {
    "resourceglob": {
        "search_path": list,
        "resolver": {
            "case_sensitive": bool,
            "follow_symlinks": bool,
        },
        "logging": {
            "level": str,
            "file": (str, type(None)),
        },
    }
}


_global_config: Optional[ConfigManager] = None


def get_config_manager(config_file: Optional[str] = None) -> ConfigManager:
    """Get or create the process-wide configuration manager."""
    global _global_config
    if _global_config is None:
        _global_config = ConfigManager(config_file)
    return _global_config


def set_global_config(config: Optional[ConfigManager]) -> None:
    """Install the process-wide configuration manager (None resets it)."""
    global _global_config
    _global_config = config
