"""
Tests for ZoteroLibraryClient.
"""

from unittest.mock import MagicMock, patch

import pytest

from zotero_cite.clients.zotero_client import ZoteroLibraryClient, get_zotero_client
from zotero_cite.models import CollectionSpec, DocumentContext
from zotero_cite.services import BibliographySyncProvider
from zotero_cite.settings import CiteSettings
from zotero_cite.utils.errors import ConfigurationError


def api_collection(key, name, parent=False, version=1):
    return {
        "key": key,
        "version": version,
        "data": {"key": key, "name": name, "parentCollection": parent, "version": version},
    }


def api_item(key, title, version=1, item_type="journalArticle", **data):
    return {
        "key": key,
        "version": version,
        "data": {
            "key": key,
            "itemType": item_type,
            "title": title,
            "creators": [{"creatorType": "author", "firstName": "Ann", "lastName": "Smith"}],
            "date": "March 2020",
            **data,
        },
    }


class FakeZotero:
    """Stand-in for pyzotero's Zotero with one library's collections and items."""

    def __init__(self, collections, items, library_version=100):
        self._collections = collections
        self._items = items
        self.library_version = library_version
        self.item_fetches = []

    def collections(self):
        return self._collections

    def everything(self, result):
        return result

    def collection_items_top(self, key, format=None):
        items = self._items.get(key, [])
        if format == "versions":
            return {item["key"]: item["version"] for item in items}
        self.item_fetches.append(key)
        return items

    def last_modified_version(self):
        return self.library_version


@pytest.fixture
def fake_zotero():
    return FakeZotero(
        collections=[
            api_collection("ROOT", "Thesis", version=3),
            api_collection("CH1", "Chapter 1", parent="ROOT", version=2),
            api_collection("OTHER", "Reading", version=1),
        ],
        items={
            "ROOT": [
                api_item("I1", "Deep learning", version=5, extra="Citation Key: smith2020a"),
                api_item("N1", "A note", item_type="note"),
            ],
            "CH1": [api_item("I2", "Shallow learning", version=1, citationKey="smith2020b")],
            "OTHER": [],
        },
    )


@pytest.fixture
def client(fake_zotero):
    library = ZoteroLibraryClient(library_id="123", retry_attempts=1, retry_delay=0)
    library._client = fake_zotero
    return library


class TestResolveClosure:
    specs = [
        CollectionSpec(key="A", name="Thesis"),
        CollectionSpec(key="B", name="Chapter", parent_key="A"),
        CollectionSpec(key="C", name="Section", parent_key="B"),
        CollectionSpec(key="D", name="Reading"),
    ]

    def test_no_roots_selects_everything(self):
        assert ZoteroLibraryClient.resolve_closure(self.specs, []) == self.specs

    def test_root_and_descendants(self):
        result = ZoteroLibraryClient.resolve_closure(self.specs, ["Thesis"])

        assert [s.key for s in result] == ["A", "B", "C"]

    def test_missing_roots_are_ignored(self):
        result = ZoteroLibraryClient.resolve_closure(self.specs, ["Reading", "Missing"])

        assert [s.key for s in result] == ["D"]


class TestCollectionSpecs:
    @pytest.mark.asyncio
    async def test_specs_map_root_parent_to_none(self, client, document):
        result = await client.get_collection_specs(document, [])

        assert result.ok
        specs = {s.key: s for s in result.message}
        assert specs["ROOT"].parent_key is None
        assert specs["CH1"].parent_key == "ROOT"
        assert specs["ROOT"].version == 3

    @pytest.mark.asyncio
    async def test_specs_failure(self, client, fake_zotero, document):
        fake_zotero.collections = MagicMock(side_effect=Exception("401 Unauthorized"))

        result = await client.get_collection_specs(document, [])

        assert not result.ok
        assert "authentication" in result.warning


class TestGetCollections:
    @pytest.mark.asyncio
    async def test_full_fetch(self, client, document):
        result = await client.get_collections(document, ["Thesis"], [], True)

        assert result.ok
        root, chapter = result.message
        assert root.key == "ROOT"
        assert root.version == 5
        assert root.item_count == 2
        assert [s.id for s in root.items] == ["smith2020a"]
        assert chapter.items[0].id == "smith2020b"

    @pytest.mark.asyncio
    async def test_source_mapping(self, client, document):
        result = await client.get_collections(document, ["Thesis"], [], True)

        source = result.message[0].items[0]
        assert source.key == "I1"
        assert source.title == "Deep learning"
        assert source.year == "2020"
        assert source.type == "journalArticle"
        assert source.creators[0].family == "Smith"
        assert source.collection_keys == ["ROOT"]

    @pytest.mark.asyncio
    async def test_unchanged_collection_is_sent_without_items(self, client, fake_zotero, document):
        known = [
            CollectionSpec(key="ROOT", name="Thesis", version=5, item_count=2),
            CollectionSpec(key="CH1", name="Chapter 1", version=1, item_count=1),
        ]

        result = await client.get_collections(document, ["Thesis"], known, True)

        root, chapter = result.message
        assert root.items is None
        # CH1's own version (2) is newer than the known content version
        assert chapter.version == 2
        assert [s.id for s in chapter.items] == ["smith2020b"]
        assert fake_zotero.item_fetches == ["CH1"]

    @pytest.mark.asyncio
    async def test_cache_bypass_fetches_everything(self, client, fake_zotero, document):
        known = [CollectionSpec(key="ROOT", name="Thesis", version=5, item_count=2)]

        result = await client.get_collections(document, ["Thesis"], known, False)

        assert result.message[0].items is not None
        assert "ROOT" in fake_zotero.item_fetches

    @pytest.mark.asyncio
    async def test_removed_item_bumps_version(self, client, document):
        known = [CollectionSpec(key="ROOT", name="Thesis", version=5, item_count=3)]

        result = await client.get_collections(document, ["Thesis"], known, True)

        root = result.message[0]
        assert root.version == 100
        assert root.items is not None

    @pytest.mark.asyncio
    async def test_failure_is_an_error_result(self, client, fake_zotero, document):
        fake_zotero.collection_items_top = MagicMock(
            side_effect=Exception("Connection refused")
        )

        result = await client.get_collections(document, [], [], True)

        assert result.status == "error"
        assert "Could not connect" in result.warning

    @pytest.mark.asyncio
    async def test_better_bibtex_fills_missing_keys(self, fake_zotero, document):
        fake_zotero._items["OTHER"] = [api_item("I3", "No key")]
        bbt = MagicMock()
        bbt.get_citekeys.return_value = {"I3": "smith2020c"}
        client = ZoteroLibraryClient(
            library_id="123", better_bibtex=bbt, retry_attempts=1, retry_delay=0
        )
        client._client = fake_zotero

        result = await client.get_collections(document, ["Reading"], [], True)

        assert result.message[0].items[0].id == "smith2020c"
        bbt.get_citekeys.assert_called_once_with(["I3"])

    @pytest.mark.asyncio
    async def test_better_bibtex_failure_leaves_keys_missing(self, fake_zotero, document):
        fake_zotero._items["OTHER"] = [api_item("I3", "No key")]
        bbt = MagicMock()
        bbt.get_citekeys.side_effect = Exception("Cannot connect to Zotero")
        client = ZoteroLibraryClient(
            library_id="123", better_bibtex=bbt, retry_attempts=1, retry_delay=0
        )
        client._client = fake_zotero

        result = await client.get_collections(document, ["Reading"], [], True)

        assert result.ok
        assert result.message[0].items[0].id is None


class TestSyncCycles:
    """The client driving real sync cycles."""

    @pytest.mark.asyncio
    async def test_removed_item_settles_after_one_update(self, client, fake_zotero, session, document):
        fake_zotero._items["OTHER"] = [
            api_item("I3", "Kept", version=5, citationKey="kept2020"),
            api_item("I4", "Removed", version=3, citationKey="gone2020"),
        ]
        provider = BibliographySyncProvider(client)
        reading = DocumentContext(path="paper.qmd", yaml_blocks=("zotero: Reading",))

        assert await provider.load(session, reading) is True
        assert await provider.load(session, reading) is False

        fake_zotero._items["OTHER"].pop()
        assert await provider.load(session, reading) is True
        assert [s.id for s in provider.items(session)] == ["kept2020"]

        assert await provider.load(session, reading) is False
        assert await provider.load(session, reading) is False

    @pytest.mark.asyncio
    async def test_edit_after_removal_is_picked_up(self, client, fake_zotero, session):
        fake_zotero._items["OTHER"] = [
            api_item("I3", "Kept", version=5, citationKey="kept2020"),
            api_item("I4", "Removed", version=3, citationKey="gone2020"),
        ]
        provider = BibliographySyncProvider(client)
        reading = DocumentContext(path="paper.qmd", yaml_blocks=("zotero: Reading",))

        await provider.load(session, reading)
        fake_zotero._items["OTHER"].pop()
        await provider.load(session, reading)

        fake_zotero._items["OTHER"][0] = api_item(
            "I3", "Kept, revised", version=101, citationKey="kept2020"
        )
        fake_zotero.library_version = 101

        assert await provider.load(session, reading) is True
        assert provider.items(session)[0].title == "Kept, revised"


class TestExportFormat:
    @pytest.mark.asyncio
    async def test_without_better_bibtex(self, client):
        assert await client.export_format(["smith2020"], "translator", 1) is None

    @pytest.mark.asyncio
    async def test_export(self, client):
        client.better_bibtex = MagicMock()
        client.better_bibtex.export.return_value = "@article{smith2020}"

        result = await client.export_format(["smith2020"], "translator", 1)

        assert result.message == "@article{smith2020}"
        client.better_bibtex.export.assert_called_once_with(["smith2020"], "translator", 1)

    @pytest.mark.asyncio
    async def test_export_failure(self, client):
        client.better_bibtex = MagicMock()
        client.better_bibtex.export.side_effect = Exception("RPC error")

        assert await client.export_format(["smith2020"], "translator", 1) is None


class TestGetZoteroClient:
    def test_requires_library_id_for_web_api(self):
        with pytest.raises(ConfigurationError):
            get_zotero_client(CiteSettings(_env_file=None, library_id=None, local=False))

    def test_local_defaults_to_user_zero(self):
        client = get_zotero_client(
            CiteSettings(_env_file=None, library_id=None, local=True, use_better_bibtex=False)
        )

        assert client.library_id == "0"
        assert client.local
        assert client.better_bibtex is None

    def test_web_client_with_better_bibtex(self):
        client = get_zotero_client(
            CiteSettings(_env_file=None, library_id="42", api_key="secret", better_bibtex_port=24119)
        )

        assert client.library_id == "42"
        assert client.better_bibtex.port == 24119

    def test_pyzotero_client_is_created_lazily(self):
        client = ZoteroLibraryClient(library_id="42", api_key="secret")

        with patch("zotero_cite.clients.zotero_client.zotero.Zotero") as zotero_cls:
            assert client.client is client.client

        zotero_cls.assert_called_once_with(
            library_id="42", library_type="user", api_key="secret", local=False
        )
