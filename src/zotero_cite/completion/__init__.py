"""
Citation completion.

Providers answer citation-key queries; the orchestrator merges them.
"""

from zotero_cite.completion.bibliography import (
    BIBLIOGRAPHY_KIND,
    BibliographyCompletionProvider,
)
from zotero_cite.completion.entries import (
    CitationEditor,
    CompletionCandidate,
    dedupe,
    merge_entries,
    sort_entries,
)
from zotero_cite.completion.orchestrator import CompletionOrchestrator, CompletionResult
from zotero_cite.completion.parser import parse_citation
from zotero_cite.completion.provider import CompletionProvider
from zotero_cite.completion.xref import (
    XREF_KIND,
    CrossReferenceCompletionProvider,
    XRef,
    XRefIndex,
)

__all__ = [
    "BIBLIOGRAPHY_KIND",
    "XREF_KIND",
    "BibliographyCompletionProvider",
    "CitationEditor",
    "CompletionCandidate",
    "CompletionOrchestrator",
    "CompletionProvider",
    "CompletionResult",
    "CrossReferenceCompletionProvider",
    "XRef",
    "XRefIndex",
    "dedupe",
    "merge_entries",
    "parse_citation",
    "sort_entries",
]
