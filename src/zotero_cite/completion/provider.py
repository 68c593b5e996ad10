"""
Citation completion provider interface.
"""

from abc import ABC, abstractmethod
import asyncio
from collections.abc import Callable

from zotero_cite.completion.entries import CompletionCandidate
from zotero_cite.models import DocumentContext

StreamCallback = Callable[[list[CompletionCandidate]], None]


class CompletionProvider(ABC):
    """
    One source of citation completions.

    A provider answers synchronously from whatever it has loaded
    (``current_entries``, ``search``, ``exact_match``) and refreshes
    asynchronously (``await_entries``, ``stream_entries``).
    """

    @abstractmethod
    def exact_match(self, token: str) -> bool:
        """Whether ``token`` is already a complete, known id."""

    @abstractmethod
    def search(self, token: str, max_completions: int) -> list[CompletionCandidate]:
        """Search the loaded entries, best matches first."""

    @abstractmethod
    def current_entries(self) -> list[CompletionCandidate] | None:
        """Entries available right now, or None before the first load."""

    @abstractmethod
    async def await_entries(self, doc: DocumentContext) -> list[CompletionCandidate]:
        """Refresh and return the authoritative entries."""

    def stream_entries(
        self, doc: DocumentContext, on_ready: StreamCallback
    ) -> "asyncio.Task[None]":
        """
        Start a refresh and call ``on_ready`` with the entries when it finishes.

        Must be called from a running event loop. The returned task lets the
        caller track or cancel the refresh.
        """

        async def refresh() -> None:
            on_ready(await self.await_entries(doc))

        return asyncio.get_running_loop().create_task(
            refresh(), name=f"{type(self).__name__}.refresh"
        )

    def warning_message(self) -> str | None:
        return None
