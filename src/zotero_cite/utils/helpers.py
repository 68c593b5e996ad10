"""
Common helper functions for zotero-cite.
"""

import re
import unicodedata
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from zotero_cite.models.library import Creator, Source

# Shared DOI regex pattern
DOI_PATTERN = re.compile(r"10\.\d{4,9}/[-._;()/:A-Z0-9]+", re.IGNORECASE)

# Better BibTeX pins keys in the Extra field as "Citation Key: smith2020"
_CITATION_KEY_PATTERN = re.compile(
    r"^\s*citation key\s*:\s*(\S+)\s*$", re.IGNORECASE | re.MULTILINE
)

_NON_KEY_CHARS = re.compile(r"[^a-z0-9]")


def has_doi(text: str) -> bool:
    """
    Check whether a string contains a DOI.

    Examples:
        >>> has_doi("10.1234/abc.def")
        True
        >>> has_doi("smith2020")
        False
    """
    return bool(text) and DOI_PATTERN.search(text) is not None


def citation_key_from_extra(extra: str | None) -> str | None:
    """
    Extract a pinned citation key from a Zotero Extra field.

    Examples:
        >>> citation_key_from_extra("tex.foo: bar\\nCitation Key: smith2020")
        'smith2020'
    """
    if not extra:
        return None
    match = _CITATION_KEY_PATTERN.search(extra)
    return match.group(1) if match else None


def _ascii_key_part(text: str) -> str:
    normalized = unicodedata.normalize("NFKD", text)
    folded = normalized.encode("ascii", "ignore").decode("ascii").lower()
    return _NON_KEY_CHARS.sub("", folded)


def suggest_cite_id(source: "Source", existing_ids: set[str] | None = None) -> str:
    """
    Synthesize a citation key for a source that has none.

    The key is the first creator's family name followed by the year,
    falling back to the first word of the title. With no existing ids the
    result depends only on the source, so repeated syncs produce the same key.

    Args:
        source: Source missing an id
        existing_ids: Keys already taken; a letter suffix is appended on collision

    Returns:
        Citation key

    Examples:
        >>> from zotero_cite.models.library import Creator, Source
        >>> suggest_cite_id(Source(creators=[Creator(family="Müller")], year="2019"))
        'muller2019'
    """
    base = ""
    for creator in source.creators:
        base = _ascii_key_part(creator.family or creator.literal or "")
        if base:
            break

    if not base and source.title:
        for word in source.title.split():
            base = _ascii_key_part(word)
            if base:
                break

    base = (base or "ref") + (source.year or "")

    if not existing_ids or base not in existing_ids:
        return base

    suffix = ord("a")
    while f"{base}{chr(suffix)}" in existing_ids:
        suffix += 1
    return f"{base}{chr(suffix)}"


def format_creators(creators: list["Creator"]) -> str:
    """
    Format creator names for display.

    Args:
        creators: Creators of a source

    Returns:
        Family names joined with commas, "et al." past three creators.
        Returns an empty string if no named creators are present.

    Examples:
        >>> from zotero_cite.models.library import Creator
        >>> format_creators([Creator(family="Einstein", given="Albert")])
        'Einstein'
        >>> format_creators([])
        ''
    """
    names = [c.family or c.literal for c in creators if c.family or c.literal]
    if len(names) > 3:
        return f"{names[0]} et al."
    if len(names) > 1:
        return ", ".join(names[:-1]) + f" and {names[-1]}"
    return names[0] if names else ""


def truncate_text(text: str, max_length: int = 500, suffix: str = "...") -> str:
    """
    Truncate text to a maximum length, preserving word boundaries.

    Args:
        text: Text to truncate.
        max_length: Maximum length of the result (including suffix).
        suffix: Suffix to append if text is truncated.

    Returns:
        Truncated text with suffix if it exceeded max_length.
    """
    if len(text) <= max_length:
        return text
    if max_length <= len(suffix):
        return suffix[: max(max_length, 0)]

    truncate_at = max_length - len(suffix)
    last_space = text.rfind(" ", 0, truncate_at)

    if last_space > 0:
        return text[:last_space] + suffix
    return text[:truncate_at] + suffix
