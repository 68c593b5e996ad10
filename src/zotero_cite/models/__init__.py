"""
Data models for zotero-cite.

Provides the library models (collections, sources), the remote result
envelope and the document-side inputs.
"""

from zotero_cite.models.document import CitationContext, DocumentContext, EditorState
from zotero_cite.models.library import (
    BibliographyCollection,
    Collection,
    CollectionSpec,
    Creator,
    Source,
)
from zotero_cite.models.results import LibraryResult

__all__ = [
    # Library models
    "BibliographyCollection",
    "Collection",
    "CollectionSpec",
    "Creator",
    "Source",
    # Remote results
    "LibraryResult",
    # Document inputs
    "CitationContext",
    "DocumentContext",
    "EditorState",
]
