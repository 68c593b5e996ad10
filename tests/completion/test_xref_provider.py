"""
Tests for CrossReferenceCompletionProvider.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from zotero_cite.completion import XREF_KIND, CrossReferenceCompletionProvider, XRef


@pytest.fixture
def index():
    mock = MagicMock()
    mock.xrefs = AsyncMock(
        return_value=[
            XRef("fig", "plot", "Scatter plot of results"),
            XRef("tbl", "summary", "Summary statistics", file="appendix.qmd"),
            XRef("sec", "figures", "Figures"),
        ]
    )
    return mock


@pytest.fixture
def provider(index):
    return CrossReferenceCompletionProvider(index)


def test_nothing_before_load(provider):
    assert provider.current_entries() is None
    assert provider.search("fig", 10) == []
    assert not provider.exact_match("fig-plot")


@pytest.mark.asyncio
async def test_await_entries(provider, index, document):
    entries = await provider.await_entries(document)

    index.xrefs.assert_awaited_once_with(document)
    assert [e.id for e in entries] == ["fig-plot", "tbl-summary", "sec-figures"]
    assert all(e.kind == XREF_KIND for e in entries)
    assert provider.current_entries() is not None


@pytest.mark.asyncio
async def test_candidate_texts(provider, document):
    entries = {e.id: e for e in await provider.await_entries(document)}

    assert entries["fig-plot"].secondary_text(40) == "Figure"
    assert entries["tbl-summary"].secondary_text(40) == "Table (appendix.qmd)"
    assert entries["tbl-summary"].detail_text == "Summary statistics"


@pytest.mark.asyncio
async def test_search_prefix_first(provider, document):
    await provider.await_entries(document)

    assert [e.id for e in provider.search("fig", 10)] == ["fig-plot", "sec-figures"]
    assert [e.id for e in provider.search("statistics", 10)] == ["tbl-summary"]


@pytest.mark.asyncio
async def test_exact_match(provider, document):
    await provider.await_entries(document)

    assert provider.exact_match("fig-plot")
    assert not provider.exact_match("fig")
