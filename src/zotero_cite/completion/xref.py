"""
Completion provider for cross references (figures, tables, sections...).
"""

from dataclasses import dataclass
from typing import Protocol

from zotero_cite.completion.entries import CompletionCandidate
from zotero_cite.completion.provider import CompletionProvider
from zotero_cite.models import DocumentContext
from zotero_cite.utils.helpers import truncate_text

XREF_KIND = "xref"

XREF_TYPE_LABELS = {
    "fig": "Figure",
    "tbl": "Table",
    "eq": "Equation",
    "sec": "Section",
    "lst": "Listing",
    "thm": "Theorem",
    "lem": "Lemma",
    "cor": "Corollary",
    "prp": "Proposition",
    "cnj": "Conjecture",
    "def": "Definition",
    "exm": "Example",
    "exr": "Exercise",
}


@dataclass(frozen=True)
class XRef:
    """A cross-reference target, referenced as ``@{type}-{id}``."""

    type: str
    id: str
    title: str = ""
    file: str | None = None

    @property
    def key(self) -> str:
        return f"{self.type}-{self.id}"


class XRefIndex(Protocol):
    """Supplies the cross-reference targets of a document (and its project)."""

    async def xrefs(self, doc: DocumentContext) -> list[XRef]:
        ...


def xref_candidate(xref: XRef) -> CompletionCandidate:
    label = XREF_TYPE_LABELS.get(xref.type, xref.type)
    location = f"{label} ({xref.file})" if xref.file else label
    return CompletionCandidate(
        id=xref.key,
        kind=XREF_KIND,
        primary_text=xref.key,
        secondary_text=lambda max_chars: truncate_text(location, max(max_chars, 0)),
        detail_text=xref.title,
        image=xref.type,
        source=xref,
    )


class CrossReferenceCompletionProvider(CompletionProvider):
    """Completes cross-reference ids from an external index."""

    def __init__(self, index: XRefIndex):
        self.index = index
        self._xrefs: list[XRef] | None = None

    def exact_match(self, token: str) -> bool:
        return any(xref.key == token for xref in self._xrefs or [])

    def search(self, token: str, max_completions: int) -> list[CompletionCandidate]:
        needle = token.lower()
        prefix, rest = [], []
        for xref in self._xrefs or []:
            key = xref.key.lower()
            if key.startswith(needle):
                prefix.append(xref)
            elif needle in key or needle in xref.title.lower():
                rest.append(xref)
        return [xref_candidate(xref) for xref in (prefix + rest)[:max_completions]]

    def current_entries(self) -> list[CompletionCandidate] | None:
        if self._xrefs is None:
            return None
        return [xref_candidate(xref) for xref in self._xrefs]

    async def await_entries(self, doc: DocumentContext) -> list[CompletionCandidate]:
        self._xrefs = list(await self.index.xrefs(doc))
        return [xref_candidate(xref) for xref in self._xrefs]
