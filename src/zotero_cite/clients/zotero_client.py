"""
Zotero library client.

Implements the remote library interface on top of pyzotero. pyzotero is
blocking, so every call runs in the event loop's default executor.
"""

import asyncio
from collections.abc import Callable, Sequence
import logging
import re
from typing import Any, Literal, TypeVar

from pyzotero import zotero

from zotero_cite.clients.better_bibtex import BetterBibTeXClient
from zotero_cite.clients.library import LibraryClient
from zotero_cite.models import (
    Collection,
    CollectionSpec,
    Creator,
    DocumentContext,
    LibraryResult,
    Source,
)
from zotero_cite.settings import CiteSettings, settings as default_settings
from zotero_cite.utils.errors import ConfigurationError, describe_error
from zotero_cite.utils.helpers import citation_key_from_extra
from zotero_cite.utils.retry import async_retry_with_backoff

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Item types that are never cited on their own
SKIPPED_ITEM_TYPES = frozenset({"attachment", "note", "annotation"})

_YEAR_PATTERN = re.compile(r"\b(\d{4})\b")

# Zotero field holding the container title, per item type
_CONTAINER_FIELDS = (
    "publicationTitle",
    "bookTitle",
    "proceedingsTitle",
    "encyclopediaTitle",
    "dictionaryTitle",
    "websiteTitle",
    "blogTitle",
)


class ZoteroLibraryClient(LibraryClient):
    """
    Async-compatible library client backed by pyzotero.

    Collection versions reported by this client are content versions:
    the highest of the collection's own version and the versions of its
    top-level items. Editing or adding an item therefore bumps the
    version of every collection that contains it.
    """

    def __init__(
        self,
        library_id: str | int,
        library_type: Literal["user", "group"] = "user",
        api_key: str | None = None,
        local: bool = False,
        better_bibtex: BetterBibTeXClient | None = None,
        retry_attempts: int = 3,
        retry_delay: float = 2.0,
    ):
        """
        Initialize the Zotero library client.

        Args:
            library_id: Zotero library ID
            library_type: Type of library ("user" or "group")
            api_key: API key for web access (not needed for local)
            local: Whether to use the local Zotero API
            better_bibtex: Client used for citation keys and exports
            retry_attempts: Attempts for transient failures
            retry_delay: Base backoff delay in seconds
        """
        self.library_id = str(library_id)
        self.library_type = library_type
        self.api_key = api_key
        self.local = local
        self.better_bibtex = better_bibtex
        self.retry_attempts = retry_attempts
        self.retry_delay = retry_delay
        self._client: zotero.Zotero | None = None

    @property
    def client(self) -> zotero.Zotero:
        """Get or create the pyzotero client."""
        if self._client is None:
            self._client = zotero.Zotero(
                library_id=self.library_id,
                library_type=self.library_type,
                api_key=self.api_key,
                local=self.local,
            )
        return self._client

    async def _run(self, func: Callable[[], T], description: str) -> T:
        """Run a blocking pyzotero call in the executor, with retries."""
        loop = asyncio.get_running_loop()

        async def call() -> T:
            return await loop.run_in_executor(None, func)

        return await async_retry_with_backoff(
            call,
            max_retries=self.retry_attempts,
            base_delay=self.retry_delay,
            description=description,
        )

    # -------------------- Collection Tree --------------------

    async def _all_collections(self) -> list[dict[str, Any]]:
        return await self._run(
            lambda: self.client.everything(self.client.collections()),
            "Fetch collections",
        )

    @staticmethod
    def _spec_from_api(collection: dict[str, Any]) -> CollectionSpec:
        data = collection.get("data", collection)
        return CollectionSpec(
            key=data.get("key") or collection["key"],
            name=data.get("name", ""),
            # The API reports root collections with parentCollection = false
            parent_key=data.get("parentCollection") or None,
            version=data.get("version") or collection.get("version") or 0,
        )

    @staticmethod
    def resolve_closure(
        specs: Sequence[CollectionSpec],
        root_names: Sequence[str],
    ) -> list[CollectionSpec]:
        """
        Select the named root collections and all of their descendants.

        Args:
            specs: Every collection in the library
            root_names: Names of the root collections (empty selects everything)

        Returns:
            Selected specs, in library order
        """
        if not root_names:
            return list(specs)

        wanted = set(root_names)
        selected = {spec.key for spec in specs if spec.name in wanted}

        missing = wanted - {spec.name for spec in specs}
        if missing:
            logger.info(f"Collections not found in library: {', '.join(sorted(missing))}")

        children: dict[str, list[str]] = {}
        for spec in specs:
            if spec.parent_key:
                children.setdefault(spec.parent_key, []).append(spec.key)

        pending = list(selected)
        while pending:
            for child in children.get(pending.pop(), []):
                if child not in selected:
                    selected.add(child)
                    pending.append(child)

        return [spec for spec in specs if spec.key in selected]

    async def get_collection_specs(
        self,
        context: DocumentContext,
        root_names: Sequence[str],
    ) -> LibraryResult[list[CollectionSpec]]:
        try:
            collections = await self._all_collections()
        except Exception as e:
            return LibraryResult.failure(
                str(e), describe_error(e, "get_collection_specs")
            )

        specs = [self._spec_from_api(c) for c in collections]
        return LibraryResult.success(self.resolve_closure(specs, root_names))

    # -------------------- Collections With Items --------------------

    async def _item_versions(self, collection_key: str) -> dict[str, int]:
        versions = await self._run(
            lambda: self.client.collection_items_top(collection_key, format="versions"),
            f"Fetch item versions of {collection_key}",
        )
        return versions if isinstance(versions, dict) else {}

    async def _collection_items(self, collection_key: str) -> list[dict[str, Any]]:
        return await self._run(
            lambda: self.client.everything(
                self.client.collection_items_top(collection_key)
            ),
            f"Fetch items of {collection_key}",
        )

    async def get_collections(
        self,
        context: DocumentContext,
        root_names: Sequence[str],
        known_specs: Sequence[CollectionSpec],
        use_cache: bool,
    ) -> LibraryResult[list[Collection]]:
        known = {spec.key: spec for spec in known_specs}

        try:
            api_collections = await self._all_collections()
            specs = self.resolve_closure(
                [self._spec_from_api(c) for c in api_collections], root_names
            )
            library_version: int | None = None

            collections = []
            for spec in specs:
                versions = await self._item_versions(spec.key)
                version = max([spec.version, *versions.values()])
                item_count = len(versions)

                previous = known.get(spec.key)
                # A known version may be a library version reported after an
                # item was removed, so it can be ahead of the content version.
                if use_cache and previous is not None and version <= previous.version:
                    if previous.item_count in (None, item_count):
                        collections.append(
                            Collection(
                                key=spec.key,
                                name=spec.name,
                                parent_key=spec.parent_key,
                                version=previous.version,
                                item_count=item_count,
                            )
                        )
                        continue
                    # An item was removed: no remaining item carries a newer
                    # version, so report the library version instead.
                    if library_version is None:
                        library_version = await self._run(
                            self.client.last_modified_version,
                            "Fetch library version",
                        )
                    version = max(previous.version + 1, library_version)

                items = await self._collection_items(spec.key)
                collections.append(
                    Collection(
                        key=spec.key,
                        name=spec.name,
                        parent_key=spec.parent_key,
                        version=version,
                        item_count=item_count,
                        items=[
                            self._source_from_api(item, spec.key)
                            for item in items
                            if item.get("data", {}).get("itemType") not in SKIPPED_ITEM_TYPES
                        ],
                    )
                )
        except Exception as e:
            return LibraryResult.failure(str(e), describe_error(e, "get_collections"))

        await self._assign_better_bibtex_keys(collections)
        return LibraryResult.success(collections)

    async def _assign_better_bibtex_keys(self, collections: list[Collection]) -> None:
        """Fill in missing citation keys from Better BibTeX, when configured."""
        if self.better_bibtex is None:
            return

        missing = [
            source
            for collection in collections
            for source in collection.items or []
            if not source.id and source.key
        ]
        if not missing:
            return

        bbt = self.better_bibtex
        item_keys = sorted({s.key for s in missing if s.key})
        loop = asyncio.get_running_loop()
        try:
            citekeys = await loop.run_in_executor(
                None, lambda: bbt.get_citekeys(item_keys)
            )
        except Exception as e:
            logger.debug(f"Better BibTeX citation keys unavailable: {e}")
            return

        for source in missing:
            source.id = citekeys.get(source.key or "")

    @staticmethod
    def _source_from_api(item: dict[str, Any], collection_key: str) -> Source:
        """Map a Zotero API item to a Source."""
        data = item.get("data", item)

        creators = []
        for creator in data.get("creators", []):
            creators.append(
                Creator(
                    creator_type=creator.get("creatorType", "author"),
                    given=creator.get("firstName"),
                    family=creator.get("lastName"),
                    literal=creator.get("name"),
                )
            )

        year_match = _YEAR_PATTERN.search(data.get("date") or "")
        container = next(
            (data[field] for field in _CONTAINER_FIELDS if data.get(field)), None
        )

        return Source(
            id=data.get("citationKey") or citation_key_from_extra(data.get("extra")),
            key=data.get("key") or item.get("key"),
            type=data.get("itemType", "document"),
            title=data.get("title"),
            creators=creators,
            year=year_match.group(1) if year_match else None,
            doi=data.get("DOI") or None,
            container_title=container,
            collection_keys=data.get("collections") or [collection_key],
        )

    # -------------------- Export --------------------

    async def export_format(
        self,
        ids: Sequence[str],
        translator: str,
        library_scope: int,
    ) -> LibraryResult[str] | None:
        if self.better_bibtex is None:
            return None

        bbt = self.better_bibtex
        loop = asyncio.get_running_loop()
        try:
            text = await loop.run_in_executor(
                None, lambda: bbt.export(list(ids), translator, library_scope)
            )
        except Exception as e:
            logger.warning(f"Better BibTeX export failed: {e}")
            return None
        return LibraryResult.success(text)


def get_zotero_client(config: CiteSettings | None = None) -> ZoteroLibraryClient:
    """
    Build a library client from settings.

    Raises:
        ConfigurationError: If the web API is configured without a library ID
    """
    config = config or default_settings

    if not config.local and not config.library_id:
        raise ConfigurationError(
            "No Zotero library configured",
            "Set ZOTERO_LIBRARY_ID and ZOTERO_API_KEY, or ZOTERO_LOCAL=true",
        )

    better_bibtex = None
    if config.use_better_bibtex:
        better_bibtex = BetterBibTeXClient(
            port=config.better_bibtex_port, timeout=config.request_timeout
        )

    return ZoteroLibraryClient(
        # The local API always serves the personal library as user 0
        library_id=config.library_id or "0",
        library_type=config.library_type,
        api_key=config.api_key,
        local=config.local,
        better_bibtex=better_bibtex,
        retry_attempts=config.retry_attempts,
    )
