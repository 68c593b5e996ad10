from unittest.mock import AsyncMock, MagicMock

import pytest

from zotero_cite.clients.library import LibraryClient
from zotero_cite.models import (
    Collection,
    CollectionSpec,
    Creator,
    DocumentContext,
    LibraryResult,
    Source,
)
from zotero_cite.services import BibliographySyncProvider, LibrarySession


def _source(cite_id: str | None, title: str = "", family: str = "Smith", year: str = "2020", **extra) -> Source:
    return Source(
        id=cite_id,
        key=extra.pop("key", (cite_id or title or "ITEM").upper()[:8]),
        title=title or f"Title of {cite_id}",
        creators=[Creator(family=family, given="Ann")],
        year=year,
        **extra,
    )


def _collection(key: str, name: str | None = None, version: int = 1, items=None, parent_key=None) -> Collection:
    return Collection(
        key=key,
        name=name or f"Collection {key}",
        version=version,
        parent_key=parent_key,
        items=items,
    )


@pytest.fixture
def make_source():
    """Factory for Source objects."""
    return _source


@pytest.fixture
def make_collection():
    """Factory for Collection objects."""
    return _collection


@pytest.fixture
def library_client():
    """LibraryClient mock answering with an empty library by default."""
    client = MagicMock(spec=LibraryClient)
    client.get_collection_specs = AsyncMock(return_value=LibraryResult.success([]))
    client.get_collections = AsyncMock(return_value=LibraryResult.success([]))
    client.export_format = AsyncMock(return_value=None)
    return client


@pytest.fixture
def serve_collections(library_client):
    """Configure the mock client to answer each cycle with the given collections."""

    def serve(*cycles: list[Collection], warning: str | None = None) -> None:
        library_client.get_collections.side_effect = [
            LibraryResult.success(collections, warning=warning) for collections in cycles
        ]
        library_client.get_collection_specs.side_effect = [
            LibraryResult.success(
                [
                    CollectionSpec(
                        key=c.key, name=c.name, parent_key=c.parent_key, version=c.version
                    )
                    for c in collections
                ]
            )
            for collections in cycles
        ]

    return serve


@pytest.fixture
def sync_provider(library_client):
    return BibliographySyncProvider(library_client)


@pytest.fixture
def session():
    with LibrarySession.open("paper.qmd") as session:
        yield session


@pytest.fixture
def document():
    return DocumentContext(path="paper.qmd")
