#!/usr/bin/env python3
"""Resource handles: located resources across backing stores.

A handle is an immutable reference identified by its canonical location
string. Handles check existence lazily, open binary streams on demand and
derive relative handles of the same backend kind:

- FileResource: a file or directory on disk (``file:/abs/path``)
- ArchiveResource: an entry inside a zip container (``archive:/abs/a.zip!/entry``)
- ProviderResource: a provider literal no search-path entry could locate
- VirtualResource: a node of a pluggable virtual filesystem (``vfs:/path``)

Example:
    >>> handle = ArchiveResource.from_url("archive:/opt/app.zip!/conf/")
    >>> handle.create_relative("db.yaml").location
    'archive:/opt/app.zip!/conf/db.yaml'
"""

import os
import posixpath
import zipfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Any, BinaryIO, Optional, Union
from urllib.parse import urlsplit

from resourceglob.core.constants import ARCHIVE_SEPARATOR, PATH_SEPARATOR, Prefix, ResourceKind
from resourceglob.core.errors import InvalidLocationError
from resourceglob.infrastructure.logger import get_logger
from resourceglob.rules.locations import split_prefix

if TYPE_CHECKING:
    from resourceglob.resources.providers import ResourceProvider
    from resourceglob.strategies.virtual import VirtualFilesystem

logger = get_logger("resourceglob.resources.handles")


def to_posix_path(path: Union[str, Path]) -> str:
    """Absolute, "/"-separated form of a filesystem path."""
    return Path(os.path.abspath(path)).as_posix()


def apply_relative_path(path: str, relative_path: str) -> str:
    """Apply a relative path to a base path, URL style.

    A base ending with "/" is treated as a directory; otherwise the
    relative path replaces the last segment.

    Args:
        path: Base path
        relative_path: Path relative to the base

    Returns:
        Combined path
    """
    separator_index = path.rfind(PATH_SEPARATOR)
    if separator_index == -1:
        return relative_path
    new_path = path[: separator_index + 1]
    return new_path + relative_path.lstrip(PATH_SEPARATOR)


class ResourceHandle(ABC):
    """Abstract base class for all resource handles.

    Two handles are equal iff their canonical location strings are equal.
    """

    kind: ResourceKind

    def __init__(self, location: str):
        self._location = location

    @property
    def location(self) -> str:
        """Canonical location string (the handle's identity)."""
        return self._location

    @property
    def filename(self) -> str:
        """Last path segment of the location."""
        return self._location.rstrip(PATH_SEPARATOR).rsplit(PATH_SEPARATOR, 1)[-1]

    @abstractmethod
    def exists(self) -> bool:
        """Check whether the resource currently exists."""

    @abstractmethod
    def open(self) -> BinaryIO:
        """Open a binary stream over the resource contents.

        Raises:
            FileNotFoundError: If the resource does not exist
        """

    @abstractmethod
    def create_relative(self, relative_path: str) -> "ResourceHandle":
        """Create a handle for a path relative to this one, same backend kind."""

    def read_bytes(self) -> bytes:
        """Read the whole resource."""
        with self.open() as stream:
            return stream.read()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ResourceHandle):
            return NotImplemented
        return self._location == other._location

    def __hash__(self) -> int:
        return hash(self._location)

    def __str__(self) -> str:
        return self._location

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._location!r})"


class FileResource(ResourceHandle):
    """A file or directory on the local filesystem."""

    kind = ResourceKind.FILESYSTEM

    def __init__(self, path: Union[str, Path]):
        self._path = to_posix_path(path)
        super().__init__(Prefix.FILE + self._path)

    @property
    def path(self) -> str:
        """Absolute posix path."""
        return self._path

    def exists(self) -> bool:
        return os.path.exists(self._path)

    def is_directory(self) -> bool:
        return os.path.isdir(self._path)

    def open(self) -> BinaryIO:
        return open(self._path, "rb")

    def create_relative(self, relative_path: str) -> "FileResource":
        # Directories act as their own base, files resolve to siblings
        base = self._path + PATH_SEPARATOR if self.is_directory() else self._path
        return FileResource(apply_relative_path(base, relative_path))


class ArchiveResource(ResourceHandle):
    """An entry (or the root) of a zip archive.

    Attributes:
        archive_path: Absolute posix path of the archive file
        entry: Entry path inside the archive, "" for the archive root
        archive: Optional externally cached, already-open ZipFile; its owner
            remains responsible for closing it
    """

    kind = ResourceKind.ARCHIVE

    def __init__(
        self,
        archive_path: Union[str, Path],
        entry: str = "",
        archive: Optional[zipfile.ZipFile] = None,
    ):
        self._archive_path = to_posix_path(archive_path)
        self._entry = entry.replace("\\", PATH_SEPARATOR).lstrip(PATH_SEPARATOR)
        self._archive = archive
        super().__init__(f"{Prefix.ARCHIVE}{self._archive_path}{ARCHIVE_SEPARATOR}{self._entry}")

    @classmethod
    def from_url(cls, url: str) -> "ArchiveResource":
        """Create a handle from an ``archive:<path>!/<entry>`` reference.

        The reference is parsed as a URL first; references that are not
        valid URLs fall back to manual splitting on the "!/" separator.

        Args:
            url: Archive reference, with or without the "archive:" prefix

        Returns:
            Archive handle

        Raises:
            InvalidLocationError: If no archive path can be extracted
        """
        try:
            parts = urlsplit(url)
            if parts.scheme != Prefix.ARCHIVE[:-1] or parts.netloc or parts.query or parts.fragment:
                raise ValueError(f"not an archive URL: {url}")
            body = parts.path
        except ValueError as e:
            logger.debug("Falling back to manual archive reference parsing", url=url, reason=str(e))
            body = url[len(Prefix.ARCHIVE):] if url.startswith(Prefix.ARCHIVE) else url

        # Tolerate a nested "file:" scheme on the archive path
        prefix, rest = split_prefix(body)
        if prefix == Prefix.FILE:
            body = rest

        separator_index = body.find(ARCHIVE_SEPARATOR)
        if separator_index == -1:
            archive_path, entry = body, ""
        else:
            archive_path = body[:separator_index]
            entry = body[separator_index + len(ARCHIVE_SEPARATOR):]

        if not archive_path:
            raise InvalidLocationError(f"Archive reference has no archive path: {url}")

        return cls(archive_path, entry)

    @property
    def archive_path(self) -> str:
        return self._archive_path

    @property
    def entry(self) -> str:
        return self._entry

    @property
    def archive(self) -> Optional[zipfile.ZipFile]:
        return self._archive

    @property
    def filename(self) -> str:
        if not self._entry:
            return posixpath.basename(self._archive_path)
        return super().filename

    def exists(self) -> bool:
        if not os.path.isfile(self._archive_path):
            return False
        if not self._entry:
            return zipfile.is_zipfile(self._archive_path)
        try:
            if self._archive is not None:
                return self._contains(self._archive)
            with zipfile.ZipFile(self._archive_path) as archive:
                return self._contains(archive)
        except (OSError, zipfile.BadZipFile):
            return False

    def _stored_name(self, archive: zipfile.ZipFile) -> Optional[str]:
        """Name of this entry as written in the archive, which may use backslashes."""
        for name in archive.namelist():
            if name.replace("\\", PATH_SEPARATOR) == self._entry:
                return name
        return None

    def _contains(self, archive: zipfile.ZipFile) -> bool:
        if self._stored_name(archive) is not None:
            return True
        directory = self._entry.rstrip(PATH_SEPARATOR) + PATH_SEPARATOR
        return any(
            name.replace("\\", PATH_SEPARATOR).startswith(directory) for name in archive.namelist()
        )

    def open(self) -> BinaryIO:
        if not self._entry or self._entry.endswith(PATH_SEPARATOR):
            raise IsADirectoryError(f"Cannot open archive directory: {self.location}")
        if self._archive is not None:
            return self._open_entry(self._archive)
        archive = zipfile.ZipFile(self._archive_path)
        try:
            # The entry stream keeps the underlying file open after close()
            return self._open_entry(archive)
        finally:
            archive.close()

    def _open_entry(self, archive: zipfile.ZipFile) -> BinaryIO:
        stored_name = self._stored_name(archive)
        if stored_name is None:
            raise FileNotFoundError(f"No such archive entry: {self.location}")
        return archive.open(stored_name)

    def with_entry(self, entry: str) -> "ArchiveResource":
        """Handle for another entry of the same archive."""
        return ArchiveResource(self._archive_path, entry)

    def create_relative(self, relative_path: str) -> "ArchiveResource":
        base = PATH_SEPARATOR + self._entry
        return self.with_entry(apply_relative_path(base, relative_path))


class ProviderResource(ResourceHandle):
    """A provider literal that is located lazily.

    Returned when a provider cannot place a name on any of its entries.
    Existence is re-checked through the provider on every call.
    """

    kind = ResourceKind.PROVIDER

    def __init__(self, name: str, provider: "ResourceProvider"):
        self._name = name
        self._provider = provider
        prefix, _ = split_prefix(name)
        super().__init__(name if prefix else Prefix.PROVIDER + name)

    @property
    def name(self) -> str:
        return self._name

    @property
    def provider(self) -> "ResourceProvider":
        return self._provider

    @property
    def filename(self) -> str:
        return posixpath.basename(self._name.rstrip(PATH_SEPARATOR))

    def locate(self) -> Optional[ResourceHandle]:
        """Concrete handle the name currently resolves to, if any."""
        return self._provider.locate(self._name)

    def exists(self) -> bool:
        return self.locate() is not None

    def open(self) -> BinaryIO:
        located = self.locate()
        if located is None:
            raise FileNotFoundError(f"Resource not found: {self.location}")
        return located.open()

    def create_relative(self, relative_path: str) -> "ProviderResource":
        return ProviderResource(apply_relative_path(self._name, relative_path), self._provider)


class VirtualResource(ResourceHandle):
    """A node of a pluggable virtual filesystem."""

    kind = ResourceKind.VIRTUAL

    def __init__(self, node: Any, filesystem: "VirtualFilesystem"):
        self._node = node
        self._filesystem = filesystem
        super().__init__(Prefix.VIRTUAL + filesystem.get_path(node))

    @property
    def node(self) -> Any:
        return self._node

    @property
    def filesystem(self) -> "VirtualFilesystem":
        return self._filesystem

    @property
    def path(self) -> str:
        return self._filesystem.get_path(self._node)

    def exists(self) -> bool:
        return self._filesystem.exists(self._node)

    def open(self) -> BinaryIO:
        return self._filesystem.open(self._node)

    def create_relative(self, relative_path: str) -> "VirtualResource":
        return VirtualResource(self._filesystem.child(self._node, relative_path), self._filesystem)
