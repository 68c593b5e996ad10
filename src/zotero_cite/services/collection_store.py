"""
In-memory cache of the last synced collection tree.
"""

from collections.abc import Iterable

from zotero_cite.models import Collection, Source


class CollectionStore:
    """
    Holds the most recent materialized collection list.

    The snapshot is an immutable tuple swapped wholesale by ``replace``, so a
    reader never sees a half-updated list. There is no locking: callers run on
    a single event loop and only the sync provider writes.
    """

    def __init__(self) -> None:
        self._collections: tuple[Collection, ...] = ()

    def current(self) -> list[Collection]:
        """Return the last committed collections (empty before the first sync)."""
        return list(self._collections)

    def replace(self, collections: Iterable[Collection]) -> None:
        """Atomically swap in a new snapshot."""
        self._collections = tuple(collections)

    def clear(self) -> None:
        self._collections = ()

    def flatten(self) -> list[Source]:
        """
        Concatenate the items of every collection, in collection order.

        Sources are returned as stored (not copied); a source that belongs to
        several collections appears once per collection.
        """
        sources: list[Source] = []
        for collection in self._collections:
            if collection.items:
                sources.extend(collection.items)
        return sources

    def find_by_name(self, name: str) -> Collection | None:
        """Return the first collection with the given name."""
        for collection in self._collections:
            if collection.name == name:
                return collection
        return None

    def __len__(self) -> int:
        return len(self._collections)

    def __bool__(self) -> bool:
        return bool(self._collections)
