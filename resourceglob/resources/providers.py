#!/usr/bin/env python3
"""Resource providers: hierarchical literal-name lookup.

A provider is one level of a lookup hierarchy, the way a nested loader is
one tier of a classpath. Providers form a chain through parent links and
delegate parent-first:

- resolve(name) returns the first handle found along the chain, or a
  non-existent ProviderResource, never raising for a missing name
- resolve_all(name) returns every handle visible from the provider and its
  ancestors

SearchPathProvider is the default implementation over a list of directories
and zip archives, in the manner of ``sys.path``.

Example:
    >>> base = SearchPathProvider(["/opt/app/lib/core.zip"])
    >>> app = SearchPathProvider(["/opt/app/conf"], parent=base)
    >>> [h.location for h in app.resolve_all("defaults.yaml")]
"""

import os
import sys
import weakref
import zipfile
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional, Protocol, Sequence, runtime_checkable

from resourceglob.core.constants import ARCHIVE_SUFFIXES, PATH_SEPARATOR
from resourceglob.infrastructure.logger import get_logger
from resourceglob.resources.handles import (
    ArchiveResource,
    FileResource,
    ProviderResource,
    ResourceHandle,
    to_posix_path,
)
from resourceglob.resources.result_set import ResultSet

logger = get_logger("resourceglob.resources.providers")


@runtime_checkable
class ArchiveIntrospection(Protocol):
    """Optional capability: a provider exposing its flat list of archives."""

    def list_archive_roots(self) -> Sequence[str]:
        """Return archive file paths (or ``archive:`` references) of this provider."""
        ...


def is_archive_path(path: str) -> bool:
    """Check whether a search-path entry names a zip archive file."""
    return path.lower().endswith(ARCHIVE_SUFFIXES) and os.path.isfile(path)


class ResourceProvider(ABC):
    """One level of a hierarchical lookup context.

    The parent is held through a weak reference: it is used for traversal
    only and its lifetime is owned elsewhere.
    """

    def __init__(self, parent: Optional["ResourceProvider"] = None, name: Optional[str] = None):
        """Initialize provider.

        Args:
            parent: Parent provider, consulted first
            name: Optional name used in logs and reprs
        """
        self._parent_ref = weakref.ref(parent) if parent is not None else None
        self.name = name or self.__class__.__name__

    @property
    def parent(self) -> Optional["ResourceProvider"]:
        if self._parent_ref is None:
            return None
        return self._parent_ref()

    def chain(self) -> List["ResourceProvider"]:
        """Providers from the root ancestor down to this one."""
        providers = []
        current: Optional[ResourceProvider] = self
        while current is not None:
            providers.append(current)
            current = current.parent
        providers.reverse()
        return providers

    @abstractmethod
    def find_all(self, name: str) -> List[ResourceHandle]:
        """Handles for ``name`` found by this provider alone (no ancestors).

        Args:
            name: Literal name without leading "/"

        Returns:
            Existing handles in entry order
        """

    def locate(self, name: str) -> Optional[ResourceHandle]:
        """First existing handle for ``name`` along the chain, parent-first."""
        name = name.lstrip(PATH_SEPARATOR)
        for provider in self.chain():
            found = provider.find_all(name)
            if found:
                return found[0]
        return None

    def resolve(self, name: str) -> ResourceHandle:
        """Resolve a literal name to a single handle.

        Args:
            name: Literal name

        Returns:
            The first handle found, or a ProviderResource whose exists() is False
        """
        located = self.locate(name)
        if located is not None:
            return located
        return ProviderResource(name.lstrip(PATH_SEPARATOR), self)

    def resolve_all(self, name: str) -> ResultSet:
        """Resolve a literal name to every handle visible from this provider.

        Args:
            name: Literal name

        Returns:
            Handles in provider visitation order (ancestors first)
        """
        name = name.lstrip(PATH_SEPARATOR)
        result = ResultSet()
        for provider in self.chain():
            result.update(provider.find_all(name))
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"


class SearchPathProvider(ResourceProvider):
    """Provider over an ordered list of directories and zip archives."""

    def __init__(
        self,
        entries: Iterable[str],
        parent: Optional[ResourceProvider] = None,
        name: Optional[str] = None,
    ):
        """Initialize search-path provider.

        Args:
            entries: Directories and archive files, searched in order
            parent: Parent provider
            name: Optional provider name
        """
        super().__init__(parent, name)
        self._entries = [to_posix_path(entry) for entry in entries]

    @classmethod
    def from_sys_path(cls, parent: Optional[ResourceProvider] = None) -> "SearchPathProvider":
        """Provider over the interpreter's import path."""
        return cls([entry or os.getcwd() for entry in sys.path], parent=parent, name="sys.path")

    @property
    def entries(self) -> List[str]:
        return list(self._entries)

    def list_archive_roots(self) -> List[str]:
        """Archive files on this provider's search path."""
        return [entry for entry in self._entries if is_archive_path(entry)]

    def find_all(self, name: str) -> List[ResourceHandle]:
        name = name.lstrip(PATH_SEPARATOR)
        found: List[ResourceHandle] = []
        for entry in self._entries:
            if os.path.isdir(entry):
                candidate = os.path.join(entry, name) if name else entry
                if os.path.exists(candidate):
                    found.append(FileResource(candidate))
            elif name and is_archive_path(entry):
                handle = self._find_in_archive(entry, name)
                if handle is not None:
                    found.append(handle)
        return found

    def _find_in_archive(self, archive_path: str, name: str) -> Optional[ArchiveResource]:
        try:
            with zipfile.ZipFile(archive_path) as archive:
                names = archive.namelist()
        except (OSError, zipfile.BadZipFile) as e:
            logger.warning("Skipping unreadable archive on search path", archive=archive_path, error=str(e))
            return None

        directory = name.rstrip(PATH_SEPARATOR) + PATH_SEPARATOR
        if name in names or directory in names or any(n.startswith(directory) for n in names):
            return ArchiveResource(archive_path, name)
        return None

    def __repr__(self) -> str:
        return f"SearchPathProvider(name={self.name!r}, entries={self._entries!r})"
