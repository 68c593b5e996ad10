"""
Remote library client interface.

The sync layer talks to the library only through this interface, so a
Zotero Web API client, a local Zotero client or a test double are
interchangeable.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from zotero_cite.models import Collection, CollectionSpec, DocumentContext, LibraryResult

# Better BibTeX translator IDs
TRANSLATOR_BIBTEX = "ca65189f-8815-4afe-8c8b-8c7c15f0edca"
TRANSLATOR_BIBLATEX = "f895aa0d-f28e-47fe-b247-2ea77c6ed583"
TRANSLATOR_CSL_JSON = "36a3b0b5-bad0-4a04-b79b-441c7cef77db"

# Library scope for exports from the personal library
MY_LIBRARY = 1


class LibraryClient(ABC):
    """Access to a remote, hierarchical library of citable works."""

    @abstractmethod
    async def get_collection_specs(
        self,
        context: DocumentContext,
        root_names: Sequence[str],
    ) -> LibraryResult[list[CollectionSpec]]:
        """
        Fetch the collection tree shape.

        Args:
            context: The document requesting the sync
            root_names: Root collections to include (empty for all)

        Returns:
            Specs for the roots and all of their descendants
        """

    @abstractmethod
    async def get_collections(
        self,
        context: DocumentContext,
        root_names: Sequence[str],
        known_specs: Sequence[CollectionSpec],
        use_cache: bool,
    ) -> LibraryResult[list[Collection]]:
        """
        Fetch collections with their items.

        Args:
            context: The document requesting the sync
            root_names: Root collections to include (empty for all)
            known_specs: Collections the caller already holds
            use_cache: Whether bodies of unchanged collections may be omitted

        Returns:
            Collections of the resolved closure; ``items`` is None for
            collections whose body was omitted
        """

    @abstractmethod
    async def export_format(
        self,
        ids: Sequence[str],
        translator: str,
        library_scope: int,
    ) -> LibraryResult[str] | None:
        """
        Export sources in a translator's format.

        Returns:
            The exported text, or None when exporting is unavailable
        """
