"""
Default citation-syntax parser for plain-text editor state.
"""

import re

from zotero_cite.models import CitationContext, EditorState

# "@key" or "-@key" at the start of the text or after whitespace, "[", ";" or "(".
# Key characters follow Pandoc: alphanumerics, "_" and internal punctuation.
_CITATION_AT_CURSOR = re.compile(
    r"(?:^|[\s\[;(])-?@(?P<token>[\w:.#$%&+?<>~/-]*)$"
)


def parse_citation(state: EditorState) -> CitationContext | None:
    """
    Find the citation key being typed at the cursor.

    Examples:
        >>> parse_citation(EditorState("As shown by [@smi", 17))
        CitationContext(token='smi', pos=14)
        >>> parse_citation(EditorState("email me@home", 13)) is None
        True
    """
    if state.cursor < 0 or state.cursor > len(state.text):
        return None

    # Start at the preceding newline (if any) so it can serve as the delimiter
    line_start = max(state.text.rfind("\n", 0, state.cursor), 0)
    match = _CITATION_AT_CURSOR.search(state.text, line_start, state.cursor)
    if match is None:
        return None

    return CitationContext(token=match.group("token"), pos=match.start("token"))
