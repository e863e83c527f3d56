#!/usr/bin/env python3
"""Resource pattern resolution.

This module ties the grammar, the providers and the strategies together:
- Literal expressions resolve to exactly one handle, possibly non-existent
- ``classpath-all:`` expressions search every provider of the chain
- Wildcard expressions resolve their root literal first, then expand the
  sub-pattern below each root with the strategy matching its backend kind
- ResolverRegistry memoizes one resolver per provider context

Example:
    >>> resolver = PatternResolver(SearchPathProvider(["/opt/app/conf", "/opt/app/lib/core.zip"]))
    >>> for handle in resolver.resolve("classpath-all:META-INF/**/*.yaml"):
    ...     print(handle.location)
"""

import os
import threading
from typing import Callable, Dict, Iterable, Optional, Protocol, runtime_checkable

from resourceglob.core.constants import ConfigKey, Prefix, PrefixKind, ResourceKind
from resourceglob.core.errors import InvalidLocationError, ResolutionIOError
from resourceglob.infrastructure.config_manager import ConfigManager
from resourceglob.infrastructure.logger import get_logger
from resourceglob.resources.handles import (
    ArchiveResource,
    FileResource,
    ProviderResource,
    ResourceHandle,
    VirtualResource,
)
from resourceglob.resources.providers import ResourceProvider, SearchPathProvider
from resourceglob.resources.result_set import ResultSet
from resourceglob.rules.locations import LocationGrammar, ParsedLocation, split_prefix
from resourceglob.rules.patterns import GlobMatcher
from resourceglob.strategies.archive import ArchiveScanner
from resourceglob.strategies.filesystem import FilesystemWalker
from resourceglob.strategies.multi_provider import MultiProviderLookup
from resourceglob.strategies.virtual import VirtualFilesystem, VirtualFsStrategy

logger = get_logger("resourceglob.resolver")


@runtime_checkable
class RootResolver(Protocol):
    """Optional capability rewriting a root handle before it is expanded.

    Used to bridge container-specific handles (bundle URLs and the like) to a
    handle of a kind the strategies can walk.
    """

    def resolve_root(self, handle: ResourceHandle) -> ResourceHandle:
        ...


class PatternResolver:
    """Resolves location expressions to deduplicated sets of resource handles.

    A resolver keeps no state between calls beyond its configuration, so
    one instance can be shared across threads.
    """

    def __init__(
        self,
        provider: Optional[ResourceProvider] = None,
        matcher: Optional[GlobMatcher] = None,
        virtual_filesystem: Optional[VirtualFilesystem] = None,
        root_resolver: Optional[RootResolver] = None,
        follow_symlinks: bool = True,
    ):
        """Initialize resolver.

        Args:
            provider: Primary provider; defaults to one over ``sys.path``
            matcher: Glob matcher; defaults to a case-sensitive matcher
            virtual_filesystem: Optional virtual filesystem capability
            root_resolver: Optional root handle rewriting capability
            follow_symlinks: Whether filesystem walks follow symlinked directories
        """
        self._provider = provider if provider is not None else SearchPathProvider.from_sys_path()
        self._matcher = matcher or GlobMatcher()
        self._grammar = LocationGrammar(self._matcher)
        self._root_resolver = root_resolver

        self._lookup = MultiProviderLookup(self._provider)
        self._archive_scanner = ArchiveScanner(self._matcher)
        self._walker = FilesystemWalker(self._matcher, follow_symlinks=follow_symlinks)
        self._virtual: Optional[VirtualFsStrategy] = None
        if virtual_filesystem is not None:
            self._virtual = VirtualFsStrategy(virtual_filesystem, self._matcher)

    @classmethod
    def for_provider(cls, provider: ResourceProvider) -> "PatternResolver":
        """Shared resolver for ``provider`` from the default registry."""
        return get_resolver_registry().get(provider)

    @property
    def provider(self) -> ResourceProvider:
        return self._provider

    @property
    def matcher(self) -> GlobMatcher:
        return self._matcher

    @property
    def virtual_filesystem(self) -> Optional[VirtualFilesystem]:
        return self._virtual.filesystem if self._virtual is not None else None

    def is_pattern(self, fragment: str) -> bool:
        """Check whether a location fragment contains wildcards."""
        return self._matcher.is_pattern(fragment)

    def determine_root(self, expression: str) -> str:
        """Wildcard-free root literal of an expression (e.g. "/WEB-INF/")."""
        return self._grammar.determine_root(expression)

    def get_resource(self, location: str) -> ResourceHandle:
        """Resolve a literal location to a single handle.

        Never raises for a missing resource; existence is a property of the
        returned handle.

        Args:
            location: Literal location, optionally prefixed with a scheme

        Returns:
            Handle for the location

        Raises:
            InvalidLocationError: If an ``archive:`` location names no archive
        """
        prefix, rest = split_prefix(location)

        if prefix is None or prefix == Prefix.PROVIDER:
            return self._provider.resolve(rest)
        if prefix == Prefix.FILE:
            return FileResource(rest)
        if prefix == Prefix.ARCHIVE:
            return ArchiveResource.from_url(location)
        if prefix == Prefix.VIRTUAL and self._virtual is not None:
            filesystem = self._virtual.filesystem
            return VirtualResource(filesystem.lookup(rest), filesystem)

        logger.trace("No loader for location scheme, deferring to provider", location=location)
        return ProviderResource(location, self._provider)

    def resolve(self, expression: str) -> ResultSet:
        """Resolve a location expression.

        Args:
            expression: Location expression, possibly with Ant-style wildcards

        Returns:
            Matching handles, deduplicated by location, in first-seen order

        Raises:
            ResolutionIOError: If an archive cannot be opened
        """
        with logger.add_context(expression=expression):
            parsed = self._grammar.parse(expression)

            if parsed.prefix_kind is PrefixKind.MULTI_PROVIDER_ALL:
                if parsed.has_pattern:
                    result = self._find_path_matching(parsed)
                else:
                    result = self._lookup.find_all(parsed.path)
            elif parsed.has_pattern:
                result = self._find_path_matching(parsed)
            else:
                result = self._literal(expression)

            logger.trace("Resolved location expression", matches=len(result))
            return result

    def resolve_many(self, expressions: Iterable[str]) -> ResultSet:
        """Resolve several expressions into one result, ordered by expression."""
        result = ResultSet()
        for expression in expressions:
            result.update(self.resolve(expression))
        return result

    def _literal(self, location: str) -> ResultSet:
        try:
            return ResultSet([self.get_resource(location)])
        except InvalidLocationError as e:
            logger.warning("Skipping malformed location", location=location, error=e.message)
            return ResultSet()

    def _resolve_roots(self, parsed: ParsedLocation) -> ResultSet:
        if parsed.prefix_kind is PrefixKind.MULTI_PROVIDER_ALL:
            return self._lookup.find_all(parsed.root_path)
        return self._literal(parsed.root)

    def _find_path_matching(self, parsed: ParsedLocation) -> ResultSet:
        result = ResultSet()
        for root in self._resolve_roots(parsed):
            root = self._resolve_root_handle(root)
            result.update(self._dispatch(root, parsed.sub_pattern))
        return result

    def _resolve_root_handle(self, root: ResourceHandle) -> ResourceHandle:
        if self._root_resolver is None:
            return root
        try:
            return self._root_resolver.resolve_root(root)
        except OSError as e:
            raise ResolutionIOError(f"Cannot resolve root {root.location}: {e}", cause=e) from e

    def _dispatch(self, root: ResourceHandle, sub_pattern: str) -> ResultSet:
        if root.kind is ResourceKind.VIRTUAL:
            if self._virtual is None:
                logger.trace("Skipping virtual root, no virtual filesystem available", root=root.location)
                return ResultSet()
            return self._virtual.find(root, sub_pattern)
        if root.kind is ResourceKind.ARCHIVE:
            return self._archive_scanner.scan(root, sub_pattern)
        if root.kind is ResourceKind.FILESYSTEM:
            return self._walker.walk(root.path, sub_pattern)

        logger.trace("Skipping root because it could not be located", root=root.location)
        return ResultSet()


class ResolverRegistry:
    """Thread-safe memo of one resolver per provider context.

    Entries live until discarded; the owner of a provider should discard it
    when the provider goes away.
    """

    def __init__(self, factory: Optional[Callable[[ResourceProvider], PatternResolver]] = None):
        """Initialize registry.

        Args:
            factory: Builds a resolver for a provider, defaults to PatternResolver
        """
        self._factory = factory or PatternResolver
        self._resolvers: Dict[ResourceProvider, PatternResolver] = {}
        self._lock = threading.RLock()

    def get(self, provider: ResourceProvider) -> PatternResolver:
        """Get or create the resolver for ``provider``."""
        with self._lock:
            resolver = self._resolvers.get(provider)
            if resolver is None:
                resolver = self._factory(provider)
                self._resolvers[provider] = resolver
            return resolver

    def discard(self, provider: ResourceProvider) -> bool:
        """Forget the resolver for ``provider``.

        Returns:
            True if a resolver was registered
        """
        with self._lock:
            return self._resolvers.pop(provider, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._resolvers.clear()

    def __contains__(self, provider: ResourceProvider) -> bool:
        with self._lock:
            return provider in self._resolvers

    def __len__(self) -> int:
        with self._lock:
            return len(self._resolvers)


def build_resolver(
    config: Optional[ConfigManager] = None,
    virtual_filesystem: Optional[VirtualFilesystem] = None,
    root_resolver: Optional[RootResolver] = None,
) -> PatternResolver:
    """Build a resolver from configuration.

    An empty ``resourceglob.search_path`` searches the current directory.

    Args:
        config: Configuration manager, defaults to a fresh one
        virtual_filesystem: Optional virtual filesystem capability
        root_resolver: Optional root handle rewriting capability

    Returns:
        Configured resolver
    """
    config = config or ConfigManager()
    search_path = config.get(ConfigKey.SEARCH_PATH) or [os.getcwd()]
    provider = SearchPathProvider(search_path, name="search_path")
    matcher = GlobMatcher(case_sensitive=bool(config.get(ConfigKey.CASE_SENSITIVE, True)))
    return PatternResolver(
        provider,
        matcher=matcher,
        virtual_filesystem=virtual_filesystem,
        root_resolver=root_resolver,
        follow_symlinks=bool(config.get(ConfigKey.FOLLOW_SYMLINKS, True)),
    )


# Global resolver registry instance
_global_registry: Optional[ResolverRegistry] = None
_global_registry_lock = threading.Lock()


def get_resolver_registry() -> ResolverRegistry:
    """Get or create the default resolver registry."""
    global _global_registry
    with _global_registry_lock:
        if _global_registry is None:
            _global_registry = ResolverRegistry()
        return _global_registry


def set_resolver_registry(registry: ResolverRegistry) -> None:
    """Set the default resolver registry."""
    global _global_registry
    with _global_registry_lock:
        _global_registry = registry
