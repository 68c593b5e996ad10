"""
Merges citation completions from several providers.

Completions are delivered at two speeds: whatever the providers have
already loaded is returned at once, and each provider's refresh replaces
its contribution as it arrives. Every query opens a new generation and
refreshes belonging to an older generation are discarded, so a slow
refresh for an earlier keystroke never overwrites newer results.
"""

import asyncio
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
import logging

from zotero_cite.completion.entries import CompletionCandidate, dedupe, merge_entries, sort_entries
from zotero_cite.completion.parser import parse_citation
from zotero_cite.completion.provider import CompletionProvider
from zotero_cite.models import CitationContext, DocumentContext, EditorState
from zotero_cite.settings import settings
from zotero_cite.utils.helpers import has_doi

logger = logging.getLogger(__name__)

CitationParser = Callable[[EditorState], CitationContext | None]

# Punctuation typed after a complete key, e.g. "@smith2020," or "@smith2020."
_TRAILING_PUNCTUATION = ",!?.:"


@dataclass
class CompletionResult:
    """
    Completions for one query.

    ``items`` is the first paint. ``stream()`` returns the refreshed list once
    any provider's refresh has arrived, and None until then.
    """

    token: str
    generation: int
    items: list[CompletionCandidate]
    _latest: list[CompletionCandidate] | None = None
    _tasks: list["asyncio.Task[None]"] = field(default_factory=list)

    def stream(self) -> list[CompletionCandidate] | None:
        return self._latest

    async def wait(self) -> list[CompletionCandidate] | None:
        """Wait for every refresh of this query, then return the streamed list."""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        return self._latest


class CompletionOrchestrator:
    """Fans citation queries out to providers and merges their answers."""

    def __init__(
        self,
        providers: Sequence[CompletionProvider],
        parser: CitationParser = parse_citation,
        max_completions: int | None = None,
    ):
        """
        Args:
            providers: Providers in priority order; earlier ones win dedup ties
            parser: Finds the citation token at the cursor
            max_completions: Cap on search results per provider
        """
        self.providers = list(providers)
        self.parser = parser
        self.max_completions = max_completions or settings.max_completions
        self._generation = 0
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def generation(self) -> int:
        return self._generation

    def is_current(self, result: CompletionResult) -> bool:
        """Whether ``result`` belongs to the latest query."""
        return result.generation == self._generation

    def compute_context(self, state: EditorState) -> CitationContext | None:
        """Return the citation token being typed, or None outside a citation."""
        try:
            return self.parser(state)
        except Exception as e:
            logger.warning(f"Citation parser failed: {e}")
            return None

    def filter(
        self, entries: list[CompletionCandidate], token: str
    ) -> list[CompletionCandidate]:
        """
        Narrow completions to the typed token.

        An empty token or a DOI shows every entry. A token that already
        equals a known id (ignoring trailing punctuation) shows nothing.
        Otherwise each provider's bounded search is merged.
        """
        if not token.strip() or has_doi(token):
            return entries

        try:
            completion_id = token.rstrip(_TRAILING_PUNCTUATION) or token
            if any(provider.exact_match(completion_id) for provider in self.providers):
                return []

            results: list[CompletionCandidate] = []
            for provider in self.providers:
                results.extend(provider.search(token, self.max_completions) or [])
            return sort_entries(results)
        except Exception as e:
            logger.warning(f"Citation search for {token!r} failed, showing all entries: {e}")
            return entries

    async def completions(self, token: str, doc: DocumentContext) -> CompletionResult:
        """
        Start a completion query.

        If any provider has entries loaded they are returned immediately and
        every provider refreshes in the background. Otherwise all providers
        are awaited in parallel and their merged results returned.
        """
        self._generation += 1
        generation = self._generation

        current = [provider.current_entries() for provider in self.providers]
        if all(entries is None for entries in current):
            return CompletionResult(
                token=token,
                generation=generation,
                items=await self._await_all(doc),
            )

        result = CompletionResult(
            token=token,
            generation=generation,
            items=merge_entries(*current),
        )
        contributions = [entries or [] for entries in current]

        for index, provider in enumerate(self.providers):
            on_ready = self._stream_callback(result, contributions, index)
            task = provider.stream_entries(doc, on_ready)
            self._track(task)
            result._tasks.append(task)

        return result

    def _stream_callback(
        self,
        result: CompletionResult,
        contributions: list[list[CompletionCandidate]],
        index: int,
    ) -> Callable[[list[CompletionCandidate]], None]:
        def on_ready(entries: list[CompletionCandidate]) -> None:
            if result.generation != self._generation:
                logger.debug(
                    f"Discarding refresh for stale query {result.token!r} "
                    f"(generation {result.generation}, current {self._generation})"
                )
                return
            contributions[index] = dedupe(entries)
            result._latest = merge_entries(*contributions)

        return on_ready

    async def _await_all(self, doc: DocumentContext) -> list[CompletionCandidate]:
        results = await asyncio.gather(
            *(provider.await_entries(doc) for provider in self.providers),
            return_exceptions=True,
        )

        groups = []
        for provider, entries in zip(self.providers, results):
            if isinstance(entries, BaseException):
                logger.warning(f"{type(provider).__name__} failed to load entries: {entries}")
                continue
            groups.append(entries)
        return merge_entries(*groups)

    def _track(self, task: "asyncio.Task[None]") -> None:
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: "asyncio.Task[None]") -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.warning(f"Completion refresh {task.get_name()} failed: {error}")

    def warning_message(self) -> str | None:
        """The first provider warning, in registration order."""
        for provider in self.providers:
            message = provider.warning_message()
            if message:
                return message
        return None

    def close(self) -> None:
        """Cancel outstanding refreshes."""
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()
