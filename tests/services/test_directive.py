"""
Tests for the zotero front-matter directive.
"""

import pytest

from zotero_cite.services.directive import directive_value, zotero_config


class TestDirectiveValue:
    def test_plain_block(self):
        assert directive_value("title: Paper\nzotero: true") is True

    def test_fenced_block(self):
        assert directive_value("---\nzotero: Thesis\n---") == "Thesis"

    def test_block_without_directive(self):
        assert directive_value("title: Paper") is None

    def test_non_mapping_block(self):
        assert directive_value("- just\n- a list") is None

    def test_invalid_yaml(self):
        assert directive_value("zotero: [unclosed") is None


class TestZoteroConfig:
    def test_no_blocks_enables_everything(self):
        assert zotero_config([]) is True

    def test_no_directive_enables_everything(self):
        assert zotero_config(["title: Paper"]) is True

    @pytest.mark.parametrize(
        "block, expected",
        [
            ("zotero: false", False),
            ("zotero: true", True),
            ("zotero: Thesis", ["Thesis"]),
            ("zotero: [Thesis, Papers]", ["Thesis", "Papers"]),
            ("zotero: [2021, Papers]", ["2021", "Papers"]),
            ("zotero: {nested: mapping}", True),
        ],
    )
    def test_values(self, block, expected):
        assert zotero_config([block]) == expected

    def test_last_directive_wins(self):
        blocks = ["zotero: false", "title: Paper", "zotero: [Thesis]"]

        assert zotero_config(blocks) == ["Thesis"]

    def test_null_directive_is_ignored(self):
        assert zotero_config(["zotero: false", "zotero:"]) is False
