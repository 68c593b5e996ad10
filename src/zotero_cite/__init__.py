"""
zotero-cite.

Incremental Zotero bibliography sync and citation completion for
document editors.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("zotero-cite")
except PackageNotFoundError:
    __version__ = "unknown"

from zotero_cite.completion import CompletionOrchestrator
from zotero_cite.services import BibliographySyncProvider, LibrarySession

__all__ = [
    "__version__",
    "BibliographySyncProvider",
    "CompletionOrchestrator",
    "LibrarySession",
]
