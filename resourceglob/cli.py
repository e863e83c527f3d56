#!/usr/bin/env python3
"""Command-line interface for resourceglob.

This module provides a thin CLI over PatternResolver:
- Argument parsing and validation
- Configuration file loading (YAML)
- Output rendering with Jinja2 templates
- Help and version information

Example:
    >>> from resourceglob.cli import parse_arguments
    >>> args = parse_arguments(["-p", "conf", "lib/core.zip", "--", "classpath-all:**/*.yaml"])
"""

import argparse
import sys
from pathlib import Path
from typing import Iterable, List, Optional

import jinja2

from resourceglob.core.constants import RESOURCEGLOB_VERSION, ConfigKey
from resourceglob.core.errors import ResolutionIOError
from resourceglob.infrastructure.config_manager import (
    CONFIG_SCHEMA,
    ConfigError,
    ConfigManager,
    ConfigSource,
)
from resourceglob.infrastructure.logger import Logger, configure_logging
from resourceglob.resolver import build_resolver
from resourceglob.resources.handles import ResourceHandle

VERSION = RESOURCEGLOB_VERSION
DESCRIPTION = "resourceglob - Resolve Ant-style resource patterns across directories and archives"
DEFAULT_FORMAT = "{{ location }}"


class CLIError(Exception):
    """Exception raised for CLI-related errors."""

    pass


def parse_arguments(args: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Args:
        args: Argument list to parse (defaults to sys.argv[1:])

    Returns:
        Parsed arguments namespace

    Raises:
        SystemExit: On invalid arguments or --help/--version
        CLIError: If validation fails
    """
    parser = argparse.ArgumentParser(
        prog="resourceglob",
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # All YAML files below a directory
  resourceglob "file:/etc/app/**/*.yaml"

  # Every defaults.yaml on a search path of directories and archives
  resourceglob -p conf lib/core.zip -- "classpath-all:defaults.yaml"

  # Custom output
  resourceglob -p conf --format "{{ kind }} {{ filename }}" -- "**/*.properties"
        """,
    )

    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {VERSION}",
    )

    parser.add_argument(
        "expressions",
        metavar="EXPRESSION",
        nargs="+",
        help="Location expressions to resolve",
    )

    parser.add_argument(
        "-c",
        "--config",
        metavar="FILE",
        type=str,
        help="Configuration file path (YAML format)",
    )

    # Resolution options
    resolve_group = parser.add_argument_group("resolution options")

    resolve_group.add_argument(
        "-p",
        "--search-path",
        metavar="PATH",
        nargs="+",
        type=str,
        help="Directories and archives searched for provider lookups (default: current directory)",
    )

    resolve_group.add_argument(
        "--ignore-case",
        action="store_true",
        help="Match patterns case-insensitively",
    )

    resolve_group.add_argument(
        "--no-follow-symlinks",
        action="store_true",
        help="Do not descend into symlinked directories",
    )

    # Output options
    output_group = parser.add_argument_group("output options")

    output_group.add_argument(
        "-f",
        "--format",
        metavar="TEMPLATE",
        default=DEFAULT_FORMAT,
        help="Jinja2 template per result; variables: location, kind, filename, exists",
    )

    output_group.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    output_group.add_argument(
        "--trace",
        action="store_true",
        help="Enable trace logging (every skipped root and visited directory)",
    )

    output_group.add_argument(
        "--log-file",
        metavar="FILE",
        type=str,
        help="Also write logs to a rotating file",
    )

    parsed = parser.parse_args(args)

    _validate_arguments(parsed)

    return parsed


def _validate_arguments(args: argparse.Namespace) -> None:
    """
    Validate parsed arguments.

    Args:
        args: Parsed arguments namespace

    Raises:
        CLIError: If validation fails
    """
    if args.config:
        config_path = Path(args.config)

        if not config_path.exists():
            raise CLIError(f"Configuration file does not exist: {args.config}")

        if not config_path.is_file():
            raise CLIError(f"Configuration path is not a file: {args.config}")

    for expression in args.expressions:
        if not expression.strip():
            raise CLIError("Location expressions must not be empty")


def load_config(args: argparse.Namespace) -> ConfigManager:
    """
    Build configuration from file, environment and arguments.

    Command-line arguments take precedence over file and environment.

    Args:
        args: Parsed arguments namespace

    Returns:
        Configuration manager

    Raises:
        CLIError: If the configuration file cannot be loaded or is invalid
    """
    try:
        config = ConfigManager(args.config)
    except ConfigError as e:
        raise CLIError(f"Failed to load configuration file: {args.config}\n{e.message}")

    if args.search_path:
        config.set(ConfigKey.SEARCH_PATH, list(args.search_path), ConfigSource.CLI_ARGS)
    if args.ignore_case:
        config.set(ConfigKey.CASE_SENSITIVE, False, ConfigSource.CLI_ARGS)
    if args.no_follow_symlinks:
        config.set(ConfigKey.FOLLOW_SYMLINKS, False, ConfigSource.CLI_ARGS)
    if args.trace:
        config.set(ConfigKey.LOG_LEVEL, "TRACE", ConfigSource.CLI_ARGS)
    elif args.debug:
        config.set(ConfigKey.LOG_LEVEL, "DEBUG", ConfigSource.CLI_ARGS)
    if args.log_file:
        config.set(ConfigKey.LOG_FILE, args.log_file, ConfigSource.CLI_ARGS)

    try:
        config.validate_schema(CONFIG_SCHEMA)
    except ConfigError as e:
        raise CLIError(f"Invalid configuration: {e.message}")

    return config


def setup_logging(config: ConfigManager) -> Logger:
    """
    Setup logging based on configuration.

    Args:
        config: Configuration manager

    Returns:
        Configured root logger
    """
    level = str(config.get(ConfigKey.LOG_LEVEL, "INFO"))
    log_file = config.get(ConfigKey.LOG_FILE)
    try:
        return configure_logging(level, log_file)
    except KeyError:
        raise CLIError(f"Unknown log level: {level}")
    except OSError as e:
        raise CLIError(f"Cannot open log file {log_file}: {e}")


def render_handles(handles: Iterable[ResourceHandle], template: str) -> List[str]:
    """
    Render one output line per handle.

    Args:
        handles: Resolved handles
        template: Jinja2 template source

    Returns:
        Rendered lines

    Raises:
        CLIError: If the template is invalid or references unknown variables
    """
    environment = jinja2.Environment(undefined=jinja2.StrictUndefined, autoescape=False)
    try:
        compiled = environment.from_string(template)
        return [
            compiled.render(
                location=handle.location,
                kind=handle.kind.value,
                filename=handle.filename,
                exists=handle.exists(),
            )
            for handle in handles
        ]
    except jinja2.TemplateError as e:
        raise CLIError(f"Invalid output template {template!r}: {e}")


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Args:
        argv: Argument list (defaults to sys.argv[1:])

    Returns:
        Exit code (0 success, 1 usage or configuration error, 2 I/O error)
    """
    try:
        args = parse_arguments(argv)
        config = load_config(args)
        logger = setup_logging(config)

        resolver = build_resolver(config)
        logger.debug("Resolving expressions", count=len(args.expressions))
        result = resolver.resolve_many(args.expressions)

        for line in render_handles(result, args.format):
            print(line)
        return 0

    except CLIError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except ResolutionIOError as e:
        print(f"I/O error: {e.message}", file=sys.stderr)
        return 2

    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
