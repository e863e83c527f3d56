#!/usr/bin/env python3
"""Pattern matching over the entries of zip archives.

The scanner enumerates every entry of an archive, keeps those below the
root handle's entry path and matches their relative paths against the
sub-pattern. Archives opened here are always closed again; archives carried
by the root handle belong to whoever cached them and are left open.

Example:
    >>> scanner = ArchiveScanner(GlobMatcher())
    >>> root = ArchiveResource("/opt/app.zip", "conf/")
    >>> [h.location for h in scanner.scan(root, "**/*.yaml")]
"""

import zipfile
from dataclasses import dataclass
from typing import Iterator

from resourceglob.core.constants import PATH_SEPARATOR
from resourceglob.core.errors import ResolutionIOError
from resourceglob.infrastructure.logger import get_logger
from resourceglob.resources.handles import ArchiveResource
from resourceglob.resources.result_set import ResultSet
from resourceglob.rules.patterns import GlobMatcher, normalize_separators

logger = get_logger("resourceglob.strategies.archive")


@dataclass(frozen=True)
class ArchiveEntry:
    """A single entry read from an open archive."""

    name: str
    is_dir: bool

    @classmethod
    def from_info(cls, info: zipfile.ZipInfo) -> "ArchiveEntry":
        name = normalize_separators(info.filename)
        return cls(name=name, is_dir=name.endswith(PATH_SEPARATOR))


def iter_entries(archive: zipfile.ZipFile) -> Iterator[ArchiveEntry]:
    """Yield the entries of an open archive in stored order."""
    for info in archive.infolist():
        yield ArchiveEntry.from_info(info)


def open_archive(archive_path: str) -> zipfile.ZipFile:
    """Open an archive for reading.

    Raises:
        ResolutionIOError: If the file is missing, unreadable or not a zip
    """
    try:
        return zipfile.ZipFile(archive_path)
    except (OSError, zipfile.BadZipFile) as e:
        raise ResolutionIOError(f"Cannot open archive {archive_path}: {e}", cause=e) from e


class ArchiveScanner:
    """Finds archive entries matching a sub-pattern below a root handle."""

    def __init__(self, matcher: GlobMatcher):
        self._matcher = matcher

    def scan(self, root: ArchiveResource, sub_pattern: str) -> ResultSet:
        """Scan an archive for entries matching a sub-pattern.

        Args:
            root: Archive handle denoting the archive root or a directory inside it
            sub_pattern: Pattern relative to the root entry

        Returns:
            Matching entry handles in archive order

        Raises:
            ResolutionIOError: If the archive cannot be opened
        """
        archive = root.archive
        newly_opened = archive is None
        if newly_opened:
            archive = open_archive(root.archive_path)

        try:
            logger.trace("Looking for matching resources in archive", archive=root.archive_path)

            root_entry_path = root.entry
            if root_entry_path and not root_entry_path.endswith(PATH_SEPARATOR):
                # Root entry path must end with a slash for prefix matching
                root_entry_path += PATH_SEPARATOR
            base = root.with_entry(root_entry_path)

            result = ResultSet()
            for entry in iter_entries(archive):
                if not entry.name.startswith(root_entry_path):
                    continue
                relative_path = entry.name[len(root_entry_path):]
                if self._matcher.match(sub_pattern, relative_path):
                    result.add(base.create_relative(relative_path))
            return result
        finally:
            if newly_opened:
                archive.close()
