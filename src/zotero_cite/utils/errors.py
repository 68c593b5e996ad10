"""
Unified error handling for zotero-cite.
"""

import logging

logger = logging.getLogger(__name__)


class ZoteroCiteError(Exception):
    """Base exception for zotero-cite errors."""

    def __init__(self, message: str, suggestion: str | None = None):
        super().__init__(message)
        self.message = message
        self.suggestion = suggestion

    def __str__(self) -> str:
        if self.suggestion:
            return f"{self.message}. {self.suggestion}"
        return self.message


class ConnectionError(ZoteroCiteError):
    """Error connecting to Zotero or Better BibTeX."""
    pass


class AuthenticationError(ZoteroCiteError):
    """Authentication or authorization error."""
    pass


class NotFoundError(ZoteroCiteError):
    """Resource not found error."""
    pass


class ConfigurationError(ZoteroCiteError):
    """Configuration error."""
    pass


class SessionClosedError(ZoteroCiteError):
    """Operation attempted on a library session whose document was closed."""
    pass


def describe_error(error: Exception, operation: str = "operation") -> str | None:
    """
    Turn a remote-library failure into a warning suitable for display.

    Only problems the user can act on produce a warning (credentials,
    permissions, rate limits, an unreachable Zotero). Anything else
    returns None and is treated as a transient failure.

    Args:
        error: The exception that occurred
        operation: Name of the operation that failed

    Returns:
        User-facing warning text, or None
    """
    logger.error(f"Error in {operation}: {str(error)}")

    if isinstance(error, ZoteroCiteError):
        return str(error)

    error_str = str(error).lower()

    if "401" in error_str or "unauthorized" in error_str:
        return (
            "Zotero authentication failed. "
            "Please check that ZOTERO_API_KEY is correct and has library access."
        )

    if "403" in error_str or "forbidden" in error_str:
        return (
            "Zotero denied access to the library. "
            "Please check the API key permissions."
        )

    if "429" in error_str or "rate limit" in error_str:
        return "Zotero rate limit exceeded. Citations may be out of date."

    if "connection" in error_str or "timeout" in error_str or "timed out" in error_str:
        return (
            "Could not connect to Zotero. "
            "Please ensure Zotero is running and 'Allow other applications' is enabled."
        )

    return None
