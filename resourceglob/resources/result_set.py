"""Insertion-ordered, location-deduplicated collection of resource handles."""

from typing import Dict, Iterable, Iterator, List, Optional, Union

from resourceglob.resources.handles import ResourceHandle


class ResultSet:
    """An insertion-ordered set of handles keyed by canonical location.

    The first handle seen for a location wins; later duplicates are ignored.
    Built fresh for every resolution call.
    """

    def __init__(self, handles: Optional[Iterable[ResourceHandle]] = None):
        self._handles: Dict[str, ResourceHandle] = {}
        if handles is not None:
            self.update(handles)

    def add(self, handle: ResourceHandle) -> bool:
        """Add a handle.

        Args:
            handle: Handle to add

        Returns:
            True if the handle's location was not present yet
        """
        if handle.location in self._handles:
            return False
        self._handles[handle.location] = handle
        return True

    def update(self, handles: Iterable[ResourceHandle]) -> None:
        """Add every handle, preserving first-seen order."""
        for handle in handles:
            self.add(handle)

    def locations(self) -> List[str]:
        """Locations in insertion order."""
        return list(self._handles)

    def to_list(self) -> List[ResourceHandle]:
        return list(self._handles.values())

    def first(self) -> Optional[ResourceHandle]:
        return next(iter(self._handles.values()), None)

    def __contains__(self, item: Union[ResourceHandle, str]) -> bool:
        location = item.location if isinstance(item, ResourceHandle) else item
        return location in self._handles

    def __iter__(self) -> Iterator[ResourceHandle]:
        return iter(list(self._handles.values()))

    def __len__(self) -> int:
        return len(self._handles)

    def __bool__(self) -> bool:
        return bool(self._handles)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ResultSet):
            return NotImplemented
        return self.locations() == other.locations()

    def __repr__(self) -> str:
        return f"ResultSet({self.locations()!r})"
