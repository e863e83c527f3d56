#!/usr/bin/env python3
"""Lookup across every provider visible from a context.

This is the "search all providers" strategy behind ``classpath-all:``
expressions. A literal name is resolved on every provider of the chain.
For the empty name, archive roots are synthesized as well: providers only
report their directories for "", so each archive reported through the
ArchiveIntrospection capability is added as an ``archive:...!/`` root.
"""

from typing import Optional

from resourceglob.core.constants import PATH_SEPARATOR, Prefix
from resourceglob.core.errors import InvalidLocationError
from resourceglob.infrastructure.logger import get_logger
from resourceglob.resources.handles import ArchiveResource
from resourceglob.resources.providers import ArchiveIntrospection, ResourceProvider
from resourceglob.resources.result_set import ResultSet

logger = get_logger("resourceglob.strategies.multi_provider")


class MultiProviderLookup:
    """Resolves literal names against a provider and all of its ancestors."""

    def __init__(self, provider: ResourceProvider):
        self._provider = provider

    @property
    def provider(self) -> ResourceProvider:
        return self._provider

    def find_all(self, location: str) -> ResultSet:
        """Find every handle for a literal location.

        Args:
            location: Literal name, a leading "/" is ignored

        Returns:
            Handles in provider visitation order, plus archive roots for ""
        """
        path = location[1:] if location.startswith(PATH_SEPARATOR) else location
        result = self._provider.resolve_all(path)
        if path == "":
            # Providers report only directory roots for the empty name
            self.add_archive_roots(self._provider, result)
        return result

    def add_archive_roots(self, provider: ResourceProvider, result: ResultSet) -> None:
        """Add one archive-root handle per archive known along the provider chain.

        Args:
            provider: Provider whose chain is searched (ancestors included)
            result: Result set to add archive roots to
        """
        for current in provider.chain():
            if not isinstance(current, ArchiveIntrospection):
                logger.trace("Provider does not expose archive roots", provider=current.name)
                continue

            try:
                references = list(current.list_archive_roots())
            except Exception as e:
                logger.warning(
                    "Cannot introspect archives of provider", provider=current.name, error=str(e)
                )
                continue

            for reference in references:
                root = self._archive_root(reference)
                if root is not None and root.exists():
                    result.add(root)

    def _archive_root(self, reference: str) -> Optional[ArchiveResource]:
        try:
            if isinstance(reference, str) and reference.startswith(Prefix.ARCHIVE):
                return ArchiveResource.from_url(reference).with_entry("")
            return ArchiveResource(reference)
        except (InvalidLocationError, ValueError, TypeError) as e:
            logger.warning(
                "Cannot search underneath archive reference because it is not a valid archive location",
                reference=reference,
                error=str(e),
            )
            return None
