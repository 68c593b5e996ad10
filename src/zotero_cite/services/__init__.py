"""
Bibliography sync services.

This module provides the collection cache, the per-document session and
the incremental sync provider.
"""

from zotero_cite.services.bibliography_sync import (
    ZOTERO_PROVIDER_KEY,
    BibliographySyncProvider,
)
from zotero_cite.services.collection_store import CollectionStore
from zotero_cite.services.directive import ZoteroConfig, zotero_config
from zotero_cite.services.session import LibrarySession

__all__ = [
    "BibliographySyncProvider",
    "CollectionStore",
    "LibrarySession",
    "ZOTERO_PROVIDER_KEY",
    "ZoteroConfig",
    "zotero_config",
]
