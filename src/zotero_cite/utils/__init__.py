"""
Utilities for zotero-cite.
"""

from zotero_cite.utils.errors import (
    AuthenticationError,
    ConfigurationError,
    ConnectionError,
    NotFoundError,
    SessionClosedError,
    ZoteroCiteError,
    describe_error,
)
from zotero_cite.utils.helpers import (
    DOI_PATTERN,
    citation_key_from_extra,
    format_creators,
    has_doi,
    suggest_cite_id,
    truncate_text,
)

__all__ = [
    # Errors
    "ZoteroCiteError",
    "ConnectionError",
    "AuthenticationError",
    "NotFoundError",
    "ConfigurationError",
    "SessionClosedError",
    "describe_error",
    # Helpers
    "DOI_PATTERN",
    "citation_key_from_extra",
    "format_creators",
    "has_doi",
    "suggest_cite_id",
    "truncate_text",
]
