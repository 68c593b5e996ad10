"""
Completion candidates and the merge rules shared by every provider.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, Protocol


class CitationEditor(Protocol):
    """The editor surface a selected candidate is committed to."""

    async def insert_citation(self, pos: int, citation_id: str, source: Any = None) -> None:
        ...


@dataclass(eq=False)
class CompletionCandidate:
    """
    A presentation-ready completion.

    Candidates are built fresh for every query and never cached.
    """

    id: str
    kind: str
    primary_text: str
    secondary_text: Callable[[int], str]
    detail_text: str = ""
    image: str | None = None
    source: Any = None

    @property
    def dedupe_key(self) -> tuple[str, str]:
        return (self.id, self.kind)

    async def commit(self, editor: CitationEditor, pos: int) -> None:
        """Insert this candidate's citation id at ``pos``."""
        await editor.insert_citation(pos, self.id, self.source)


def dedupe(entries: Iterable[CompletionCandidate]) -> list[CompletionCandidate]:
    """Drop repeated ``(id, kind)`` pairs, keeping the first occurrence."""
    seen: set[tuple[str, str]] = set()
    unique = []
    for entry in entries:
        if entry.dedupe_key not in seen:
            seen.add(entry.dedupe_key)
            unique.append(entry)
    return unique


def sort_entries(entries: Iterable[CompletionCandidate]) -> list[CompletionCandidate]:
    """Dedupe, then sort ascending by id (stable)."""
    return sorted(dedupe(entries), key=lambda entry: entry.id)


def merge_entries(*groups: Iterable[CompletionCandidate] | None) -> list[CompletionCandidate]:
    """Concatenate provider results in order, then dedupe and sort."""
    combined: list[CompletionCandidate] = []
    for group in groups:
        if group:
            combined.extend(group)
    return sort_entries(combined)
