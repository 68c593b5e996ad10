"""
Completion provider backed by the synced Zotero bibliography.
"""

import asyncio
import logging

from zotero_cite.completion.entries import CompletionCandidate
from zotero_cite.completion.provider import CompletionProvider
from zotero_cite.models import DocumentContext, Source
from zotero_cite.services.bibliography_sync import BibliographySyncProvider
from zotero_cite.services.session import LibrarySession
from zotero_cite.utils.helpers import format_creators, truncate_text

logger = logging.getLogger(__name__)

BIBLIOGRAPHY_KIND = "bibliography"


def _secondary_text(source: Source):
    def text(max_chars: int) -> str:
        authors = truncate_text(format_creators(source.creators), max(max_chars, 0))
        return " ".join(part for part in (authors, source.year) if part)

    return text


def source_candidate(source: Source) -> CompletionCandidate:
    """Wrap a source for presentation."""
    cite_id = source.id or ""
    return CompletionCandidate(
        id=cite_id,
        kind=BIBLIOGRAPHY_KIND,
        primary_text=cite_id,
        secondary_text=_secondary_text(source),
        detail_text=source.title or "",
        image=source.type,
        source=source,
    )


class BibliographyCompletionProvider(CompletionProvider):
    """
    Completes citation keys from the sources of a library session.

    Concurrent refreshes for the same document share one sync cycle.
    """

    def __init__(self, sync_provider: BibliographySyncProvider, session: LibrarySession):
        self.sync_provider = sync_provider
        self.session = session
        self._inflight: asyncio.Future[bool] | None = None
        self._inflight_doc: DocumentContext | None = None

    def _sources(self) -> list[Source]:
        """Sources with an id, once each (a source can sit in several collections)."""
        seen: set[str] = set()
        sources = []
        for source in self.sync_provider.items(self.session):
            if source.id and source.id not in seen:
                seen.add(source.id)
                sources.append(source)
        return sources

    def _entries(self) -> list[CompletionCandidate]:
        return [source_candidate(source) for source in self._sources()]

    def exact_match(self, token: str) -> bool:
        return any(source.id == token for source in self.sync_provider.items(self.session))

    def search(self, token: str, max_completions: int) -> list[CompletionCandidate]:
        needle = token.lower()
        ranked: list[tuple[int, int, Source]] = []

        for index, source in enumerate(self._sources()):
            cite_id = (source.id or "").lower()
            if cite_id.startswith(needle):
                rank = 0
            elif needle in cite_id:
                rank = 1
            else:
                haystack = " ".join(
                    part
                    for part in (
                        source.title,
                        format_creators(source.creators),
                        source.year,
                        source.container_title,
                    )
                    if part
                ).lower()
                if needle not in haystack:
                    continue
                rank = 2
            ranked.append((rank, index, source))

        ranked.sort(key=lambda entry: (entry[0], entry[1]))
        return [source_candidate(source) for _, _, source in ranked[:max_completions]]

    def current_entries(self) -> list[CompletionCandidate] | None:
        if not self.session.has_loaded:
            return None
        return self._entries()

    async def await_entries(self, doc: DocumentContext) -> list[CompletionCandidate]:
        if self._inflight is None or self._inflight.done() or doc != self._inflight_doc:
            self._inflight = asyncio.ensure_future(self.sync_provider.load(self.session, doc))
            self._inflight_doc = doc
        else:
            logger.debug("Joining in-flight bibliography sync")

        # Shielded so one cancelled waiter does not abort the shared sync
        await asyncio.shield(self._inflight)
        return self._entries()

    def warning_message(self) -> str | None:
        return self.sync_provider.warning(self.session) or None
