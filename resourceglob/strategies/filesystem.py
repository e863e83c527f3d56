#!/usr/bin/env python3
"""Pattern matching over on-disk directory trees.

The walker descends from a root directory and prunes every subtree whose
path cannot be the prefix of a match. Problems with the root or with
individual subdirectories are logged and skipped, never raised.

Example:
    >>> walker = FilesystemWalker(GlobMatcher())
    >>> [h.path for h in walker.walk("/etc/app", "**/*.yaml")]
"""

import os
from pathlib import Path
from typing import Set, Tuple, Union

from resourceglob.core.constants import PATH_SEPARATOR
from resourceglob.infrastructure.logger import get_logger
from resourceglob.resources.handles import FileResource, to_posix_path
from resourceglob.resources.result_set import ResultSet
from resourceglob.rules.patterns import GlobMatcher, normalize_separators

logger = get_logger("resourceglob.strategies.filesystem")


def is_readable_directory(path: Union[str, Path]) -> bool:
    """Check that a directory can be listed."""
    return os.access(path, os.R_OK | os.X_OK)


class FilesystemWalker:
    """Recursive, pruning directory walker.

    Visited directories are tracked by (device, inode), so symlink cycles
    are entered at most once per walk.
    """

    def __init__(self, matcher: GlobMatcher, follow_symlinks: bool = True):
        """Initialize walker.

        Args:
            matcher: Matcher applied to absolute "/"-separated paths
            follow_symlinks: Whether symlinked directories are descended into
        """
        self._matcher = matcher
        self._follow_symlinks = follow_symlinks

    def walk(self, root_dir: Union[str, Path], sub_pattern: str) -> ResultSet:
        """Find files and directories below ``root_dir`` matching ``sub_pattern``.

        Args:
            root_dir: Directory to start from
            sub_pattern: Pattern relative to the root directory

        Returns:
            Matching handles; empty if the root is missing, not a directory or unreadable
        """
        root = os.path.abspath(root_dir)

        if not os.path.exists(root):
            logger.trace("Skipping root because it does not exist", root=root)
            return ResultSet()
        if not os.path.isdir(root):
            logger.warning("Skipping root because it does not denote a directory", root=root)
            return ResultSet()
        if not is_readable_directory(root):
            logger.warning(
                "Cannot search for matching files underneath root because it is not readable",
                root=root,
            )
            return ResultSet()

        full_pattern = to_posix_path(root)
        sub_pattern = normalize_separators(sub_pattern)
        if not sub_pattern.startswith(PATH_SEPARATOR):
            full_pattern += PATH_SEPARATOR
        full_pattern += sub_pattern

        result = ResultSet()
        self._walk_directory(full_pattern, root, result, set())
        return result

    def _walk_directory(
        self, full_pattern: str, directory: str, result: ResultSet, visited: Set[Tuple[int, int]]
    ) -> None:
        logger.trace("Searching directory for matching files", directory=directory, pattern=full_pattern)

        try:
            stat = os.stat(directory)
            with os.scandir(directory) as it:
                children = sorted(it, key=lambda e: e.name)
        except OSError as e:
            logger.warning("Could not retrieve contents of directory", directory=directory, error=str(e))
            return

        identity = (stat.st_dev, stat.st_ino)
        if identity in visited:
            logger.warning("Skipping directory already visited through a symlink", directory=directory)
            return
        visited.add(identity)

        for child in children:
            current_path = to_posix_path(child.path)

            try:
                is_dir = child.is_dir(follow_symlinks=self._follow_symlinks)
            except OSError:
                is_dir = False

            if is_dir and self._matcher.match_start(full_pattern, current_path + PATH_SEPARATOR):
                if not is_readable_directory(child.path):
                    logger.warning(
                        "Skipping subdirectory because it is not readable", directory=child.path
                    )
                else:
                    self._walk_directory(full_pattern, child.path, result, visited)

            if self._matcher.match(full_pattern, current_path):
                result.add(FileResource(child.path))
