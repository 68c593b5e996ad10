"""
Per-document library session.

All mutable sync state lives here instead of on the provider, so one
provider can serve many open documents and closing a document drops its
cache.
"""

from dataclasses import dataclass, field
import logging

from zotero_cite.models import CollectionSpec
from zotero_cite.services.collection_store import CollectionStore
from zotero_cite.utils.errors import SessionClosedError

logger = logging.getLogger(__name__)


@dataclass
class LibrarySession:
    """Sync state for one open document."""

    document_path: str | None = None
    store: CollectionStore = field(default_factory=CollectionStore)
    collection_specs: list[CollectionSpec] = field(default_factory=list)
    warning: str | None = None
    enabled: bool = True
    cycles: int = 0
    closed: bool = False

    @classmethod
    def open(cls, document_path: str | None = None) -> "LibrarySession":
        """Create the session for a newly opened document."""
        logger.debug(f"Opened library session for {document_path or '<untitled>'}")
        return cls(document_path=document_path)

    @property
    def has_loaded(self) -> bool:
        """Whether at least one sync cycle has completed."""
        return self.cycles > 0

    def ensure_open(self) -> None:
        if self.closed:
            raise SessionClosedError(
                f"Library session for {self.document_path or '<untitled>'} is closed"
            )

    def reset(self) -> None:
        """Drop cached collections and specs."""
        self.store.clear()
        self.collection_specs = []

    def close(self) -> None:
        """Tear down the session when its document closes."""
        if self.closed:
            return
        self.reset()
        self.warning = None
        self.closed = True
        logger.debug(f"Closed library session for {self.document_path or '<untitled>'}")

    def __enter__(self) -> "LibrarySession":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
