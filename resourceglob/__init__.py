"""resourceglob - Ant-style resource pattern resolution.

Resolves location expressions such as ``classpath-all:META-INF/**/*.yaml``
or ``file:/etc/app/*.properties`` to the resources that exist across
directories, zip archives, provider hierarchies and virtual filesystems.

Example:
    >>> from resourceglob import PatternResolver, SearchPathProvider
    >>> resolver = PatternResolver(SearchPathProvider(["conf", "lib/core.zip"]))
    >>> [h.location for h in resolver.resolve("classpath-all:**/*.yaml")]
"""

from resourceglob.core.constants import RESOURCEGLOB_VERSION, PrefixKind, ResourceKind
from resourceglob.core.errors import InvalidLocationError, ResolutionIOError, ResourceGlobError
from resourceglob.resolver import (
    PatternResolver,
    ResolverRegistry,
    RootResolver,
    build_resolver,
    get_resolver_registry,
    set_resolver_registry,
)
from resourceglob.resources import (
    ArchiveIntrospection,
    ArchiveResource,
    FileResource,
    ProviderResource,
    ResourceHandle,
    ResourceProvider,
    ResultSet,
    SearchPathProvider,
    VirtualResource,
)
from resourceglob.rules import GlobMatcher, LocationGrammar, ParsedLocation
from resourceglob.strategies import InMemoryVirtualFilesystem, VirtualFilesystem

__version__ = RESOURCEGLOB_VERSION

__all__ = [
    "__version__",
    # Resolution
    "PatternResolver",
    "ResolverRegistry",
    "RootResolver",
    "build_resolver",
    "get_resolver_registry",
    "set_resolver_registry",
    # Matching
    "GlobMatcher",
    "LocationGrammar",
    "ParsedLocation",
    "PrefixKind",
    # Resources
    "ResourceKind",
    "ResourceHandle",
    "FileResource",
    "ArchiveResource",
    "ProviderResource",
    "VirtualResource",
    "ResultSet",
    "ResourceProvider",
    "SearchPathProvider",
    "ArchiveIntrospection",
    # Virtual filesystems
    "VirtualFilesystem",
    "InMemoryVirtualFilesystem",
    # Errors
    "ResourceGlobError",
    "ResolutionIOError",
    "InvalidLocationError",
]
