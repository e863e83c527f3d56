#!/usr/bin/env python3
"""Pattern matching over a pluggable virtual filesystem.

A VirtualFilesystem is an optional collaborator injected into the resolver.
When one is present, roots of the virtual kind are expanded by visiting every
node below the root and matching node paths, stripped of the root path,
against the sub-pattern.

InMemoryVirtualFilesystem is a small dict-backed implementation, usable as a
reference and in tests.

Example:
    >>> vfs = InMemoryVirtualFilesystem({"/conf/app.yaml": b"debug: true"})
    >>> strategy = VirtualFsStrategy(vfs, GlobMatcher())
    >>> root = VirtualResource(vfs.lookup("/conf"), vfs)
    >>> [h.location for h in strategy.find(root, "*.yaml")]
    ['vfs:/conf/app.yaml']
"""

import io
import posixpath
from typing import Any, BinaryIO, Dict, Iterator, Optional, Protocol, runtime_checkable

from resourceglob.core.constants import PATH_SEPARATOR
from resourceglob.infrastructure.logger import get_logger
from resourceglob.resources.handles import VirtualResource
from resourceglob.resources.result_set import ResultSet
from resourceglob.rules.patterns import GlobMatcher

logger = get_logger("resourceglob.strategies.virtual")


class NodeVisitor(Protocol):
    """Callback invoked once per visited virtual node."""

    def visit(self, node: Any) -> None:
        ...


@runtime_checkable
class VirtualFilesystem(Protocol):
    """Optional virtual filesystem capability."""

    def lookup(self, path: str) -> Any:
        """Node for a path; the node may not exist."""
        ...

    def get_path(self, node: Any) -> str:
        """Absolute "/"-separated path of a node."""
        ...

    def visit(self, root: Any, visitor: NodeVisitor) -> None:
        """Invoke ``visitor.visit`` for every node below ``root``."""
        ...

    def exists(self, node: Any) -> bool:
        ...

    def open(self, node: Any) -> BinaryIO:
        ...

    def child(self, node: Any, relative_path: str) -> Any:
        ...


class VirtualFsVisitor:
    """Visitor collecting nodes whose root-relative path matches a sub-pattern."""

    def __init__(
        self, root_path: str, sub_pattern: str, matcher: GlobMatcher, filesystem: VirtualFilesystem
    ):
        """Initialize visitor.

        Args:
            root_path: Path of the root node, stripped from visited node paths
            sub_pattern: Pattern relative to the root
            matcher: Glob matcher
            filesystem: Filesystem the nodes belong to
        """
        if root_path and not root_path.endswith(PATH_SEPARATOR):
            root_path += PATH_SEPARATOR
        self.root_path = root_path
        self.sub_pattern = sub_pattern
        self._matcher = matcher
        self._filesystem = filesystem
        self.resources = ResultSet()

    def visit(self, node: Any) -> None:
        path = self._filesystem.get_path(node)
        if not path.startswith(self.root_path):
            return
        if self._matcher.match(self.sub_pattern, path[len(self.root_path):]):
            self.resources.add(VirtualResource(node, self._filesystem))

    def __repr__(self) -> str:
        return f"sub-pattern: {self.sub_pattern}, resources: {self.resources!r}"


class VirtualFsStrategy:
    """Expands virtual roots through an injected VirtualFilesystem."""

    def __init__(self, filesystem: VirtualFilesystem, matcher: GlobMatcher):
        self._filesystem = filesystem
        self._matcher = matcher

    @property
    def filesystem(self) -> VirtualFilesystem:
        return self._filesystem

    def find(self, root: VirtualResource, sub_pattern: str) -> ResultSet:
        """Find virtual nodes below ``root`` matching ``sub_pattern``."""
        visitor = VirtualFsVisitor(
            self._filesystem.get_path(root.node), sub_pattern, self._matcher, self._filesystem
        )
        self._filesystem.visit(root.node, visitor)
        logger.trace("Visited virtual filesystem", root=root.location, matches=len(visitor.resources))
        return visitor.resources


class InMemoryVirtualFilesystem:
    """Dict-backed virtual filesystem.

    Nodes are normalized absolute path strings. Files hold bytes;
    directories exist implicitly as the parents of files.
    """

    def __init__(self, files: Optional[Dict[str, bytes]] = None):
        self._files: Dict[str, bytes] = {}
        for path, data in (files or {}).items():
            self.add_file(path, data)

    @staticmethod
    def _normalize(path: str) -> str:
        normalized = posixpath.normpath(PATH_SEPARATOR + path.lstrip(PATH_SEPARATOR))
        # posixpath keeps a leading "//" intact
        return PATH_SEPARATOR + normalized.lstrip(PATH_SEPARATOR)

    def add_file(self, path: str, data: bytes) -> None:
        self._files[self._normalize(path)] = data

    def remove_file(self, path: str) -> None:
        self._files.pop(self._normalize(path), None)

    def _directories(self) -> Iterator[str]:
        seen = set()
        for path in self._files:
            parent = posixpath.dirname(path)
            while parent not in seen and parent != PATH_SEPARATOR:
                seen.add(parent)
                yield parent
                parent = posixpath.dirname(parent)

    def lookup(self, path: str) -> str:
        return self._normalize(path)

    def get_path(self, node: str) -> str:
        return node

    def exists(self, node: str) -> bool:
        if node == PATH_SEPARATOR or node in self._files:
            return True
        return any(path.startswith(node + PATH_SEPARATOR) for path in self._files)

    def is_directory(self, node: str) -> bool:
        return self.exists(node) and node not in self._files

    def open(self, node: str) -> BinaryIO:
        if node not in self._files:
            raise FileNotFoundError(f"No such virtual file: {node}")
        return io.BytesIO(self._files[node])

    def child(self, node: str, relative_path: str) -> str:
        return self._normalize(posixpath.join(node, relative_path))

    def visit(self, root: str, visitor: NodeVisitor) -> None:
        prefix = root.rstrip(PATH_SEPARATOR) + PATH_SEPARATOR
        nodes = set(self._files) | set(self._directories())
        for node in sorted(nodes):
            if node.startswith(prefix):
                visitor.visit(node)
