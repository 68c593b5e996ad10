"""
Incremental bibliography provider backed by a remote collection library.

Each call to ``load`` runs one sync cycle against the remote library and
reuses cached items of every collection whose version did not change.
"""

import logging

from zotero_cite.clients.library import MY_LIBRARY, TRANSLATOR_BIBLATEX, LibraryClient
from zotero_cite.models import (
    BibliographyCollection,
    Collection,
    DocumentContext,
    Source,
)
from zotero_cite.services.directive import ZoteroConfig, zotero_config
from zotero_cite.services.session import LibrarySession
from zotero_cite.utils.helpers import suggest_cite_id
from zotero_cite.utils.logging_config import PerformanceMonitor

logger = logging.getLogger(__name__)

ZOTERO_PROVIDER_KEY = "zotero"


class BibliographySyncProvider:
    """
    Keeps a session's collection cache coherent with the remote library.

    The provider itself is stateless; everything it learns is written to
    the ``LibrarySession`` passed to each call.

    Collections are matched across cycles by name rather than key so that
    cached items survive key churn. Two different collections renamed to
    the same name between cycles are therefore treated as one.
    """

    name = "Zotero"
    key = ZOTERO_PROVIDER_KEY

    def __init__(self, client: LibraryClient):
        self.client = client

    async def load(
        self,
        session: LibrarySession,
        context: DocumentContext,
        config: ZoteroConfig | None = None,
    ) -> bool:
        """
        Run one sync cycle.

        Remote failures are logged and leave the previous cache in place.

        Args:
            session: Session of the document being synced
            context: The document (path and front matter)
            config: Directive value; resolved from the front matter when None

        Returns:
            Whether the flattened item set changed since the previous cycle
        """
        session.ensure_open()
        if config is None:
            config = zotero_config(context.yaml_blocks)

        if config is False:
            had_state = bool(session.store) or bool(session.collection_specs)
            session.enabled = False
            session.reset()
            session.cycles += 1
            return had_state

        session.enabled = True
        with PerformanceMonitor(logger, "Zotero sync", document=context.path):
            try:
                has_updates = await self._sync(session, context, config)
            except Exception as e:
                logger.warning(f"Zotero sync failed, keeping cached collections: {e}")
                has_updates = False

        session.cycles += 1
        return has_updates

    async def _sync(
        self,
        session: LibrarySession,
        context: DocumentContext,
        config: ZoteroConfig,
    ) -> bool:
        # A pending warning means the cache may be stale, so take a full trip
        # through the remote until the warning clears.
        use_cache = not session.warning

        root_names = config if isinstance(config, list) else []
        previous = session.store.current()
        known_specs = [collection.spec() for collection in previous]

        # The collection tree is needed to find the descendants of the named roots
        specs_result = await self.client.get_collection_specs(context, root_names)
        if specs_result.ok and specs_result.message is not None:
            session.collection_specs = specs_result.message
        else:
            logger.info(f"Could not read collection tree: {specs_result.error}")

        result = await self.client.get_collections(
            context, root_names, known_specs, use_cache
        )
        session.warning = result.warning

        if not result.ok:
            logger.info(f"Could not read collections: {result.error}")
            return False
        if result.message is None:
            return False
        if session.closed:
            return False

        has_updates = False
        previous_by_key = {collection.key: collection for collection in previous}
        merged: list[Collection] = []
        fresh: list[Collection] = []
        for collection in result.message:
            existing = session.store.find_by_name(collection.name)
            if use_cache and existing is not None and existing.version == collection.version:
                collection.items = existing.items
            else:
                if collection.items is None and collection.key in previous_by_key:
                    # The remote omitted a body it considers unchanged
                    collection.items = previous_by_key[collection.key].items
                else:
                    fresh.append(collection)
                has_updates = True
            merged.append(collection)

        self._resolve_fresh(merged, fresh)

        has_updates = has_updates or len(merged) != len(previous)
        session.store.replace(merged)

        logger.debug(
            f"Synced {len(merged)} collections "
            f"(use_cache={use_cache}, has_updates={has_updates})"
        )
        return has_updates

    def _resolve_fresh(self, merged: list[Collection], fresh: list[Collection]) -> None:
        """
        Give fresh items their ids, provider and collection membership.

        Synthesized ids avoid every id already present in this cycle and are
        assigned in library order. An item that sits in several collections
        gets the same id in each.
        """
        fresh_ids = {id(collection) for collection in fresh}
        assigned: dict[str, str] = {}
        taken: set[str] = set()

        for collection in merged:
            for source in collection.items or []:
                if source.id:
                    taken.add(source.id)
                    if source.key and id(collection) not in fresh_ids:
                        assigned.setdefault(source.key, source.id)

        for collection in fresh:
            collection.items = [
                source.model_copy(
                    update={
                        "id": source.id or self._synthesize_id(source, assigned, taken),
                        "provider_key": self.key,
                        "collection_keys": source.collection_keys or [collection.key],
                    }
                )
                for source in collection.items or []
            ]

    @staticmethod
    def _synthesize_id(source: Source, assigned: dict[str, str], taken: set[str]) -> str:
        if source.key and source.key in assigned:
            return assigned[source.key]
        cite_id = suggest_cite_id(source, taken)
        taken.add(cite_id)
        if source.key:
            assigned[source.key] = cite_id
        return cite_id

    def is_active(self, session: LibrarySession) -> bool:
        """Whether the integration is enabled and has any collections."""
        return session.enabled and len(session.collection_specs) > 0

    def collections(self, session: LibrarySession) -> list[BibliographyCollection]:
        return [
            BibliographyCollection(
                key=spec.key,
                name=spec.name,
                parent_key=spec.parent_key,
                provider=self.key,
            )
            for spec in session.collection_specs
        ]

    def items(self, session: LibrarySession) -> list[Source]:
        return session.store.flatten()

    def items_in_collection(
        self, session: LibrarySession, collection_key: str | None = None
    ) -> list[Source]:
        """Sources belonging to a collection, or every source for no key."""
        if not collection_key:
            return self.items(session)
        return [
            source
            for source in self.items(session)
            if collection_key in source.collection_keys
        ]

    def warning(self, session: LibrarySession) -> str | None:
        return session.warning

    async def generate_biblatex(
        self,
        session: LibrarySession,
        source: Source,
        use_better_bibtex: bool = True,
    ) -> str | None:
        """
        Export a source as BibLaTeX through Better BibTeX.

        Returns:
            The BibLaTeX entry, or None when the export is unavailable
        """
        session.ensure_open()
        if not use_better_bibtex or not source.id:
            return None

        try:
            result = await self.client.export_format(
                [source.id], TRANSLATOR_BIBLATEX, MY_LIBRARY
            )
        except Exception as e:
            logger.warning(f"BibLaTeX export of {source.id} failed: {e}")
            return None

        if result is not None and result.ok and result.message:
            return result.message
        return None
