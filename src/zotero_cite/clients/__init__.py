"""
Remote library clients.
"""

from zotero_cite.clients.better_bibtex import (
    BetterBibTeXClient,
    BetterBibTeXError,
    get_better_bibtex_client,
)
from zotero_cite.clients.library import (
    MY_LIBRARY,
    TRANSLATOR_BIBLATEX,
    TRANSLATOR_BIBTEX,
    TRANSLATOR_CSL_JSON,
    LibraryClient,
)
from zotero_cite.clients.zotero_client import ZoteroLibraryClient, get_zotero_client

__all__ = [
    "BetterBibTeXClient",
    "BetterBibTeXError",
    "LibraryClient",
    "MY_LIBRARY",
    "TRANSLATOR_BIBLATEX",
    "TRANSLATOR_BIBTEX",
    "TRANSLATOR_CSL_JSON",
    "ZoteroLibraryClient",
    "get_better_bibtex_client",
    "get_zotero_client",
]
