"""
Document-side inputs handed to the sync and completion layers.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class DocumentContext:
    """What the library layer needs to know about the open document."""

    path: str | None = None
    yaml_blocks: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class EditorState:
    """Plain-text view of the editor: document text and cursor offset."""

    text: str
    cursor: int


@dataclass(frozen=True)
class CitationContext:
    """An in-progress citation key at the cursor.

    ``pos`` is the document offset where the token starts (just after ``@``).
    """

    token: str
    pos: int

    @property
    def end(self) -> int:
        return self.pos + len(self.token)
