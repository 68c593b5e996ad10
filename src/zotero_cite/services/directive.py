"""
Resolution of the ``zotero`` front-matter directive.

The directive accepts:

    zotero: true | false          Enable or disable the integration globally.
                                  true uses every collection, false uses none.
    zotero: "My Collection"       Restrict to one collection (and its children).
    zotero: [A, B]                Restrict to several collections.

Without a directive the integration is enabled for all collections.
"""

from collections.abc import Iterable
import logging
from typing import Any

import yaml

logger = logging.getLogger(__name__)

DIRECTIVE_KEY = "zotero"

ZoteroConfig = bool | list[str]


def _strip_fences(block: str) -> str:
    lines = block.strip().splitlines()
    if lines and lines[0].strip() == "---":
        lines = lines[1:]
    if lines and lines[-1].strip() in ("---", "..."):
        lines = lines[:-1]
    return "\n".join(lines)


def directive_value(block: str) -> Any | None:
    """
    Read the ``zotero`` value from one YAML block.

    Returns:
        The value, or None when the block has no directive or cannot be parsed
    """
    try:
        data = yaml.safe_load(_strip_fences(block))
    except yaml.YAMLError as e:
        logger.debug(f"Skipping unparseable YAML block: {e}")
        return None

    if not isinstance(data, dict):
        return None
    return data.get(DIRECTIVE_KEY)


def zotero_config(yaml_blocks: Iterable[str]) -> ZoteroConfig:
    """
    Resolve the integration configuration for a document.

    When several blocks carry the directive the last one wins, the same
    way Pandoc treats repeated bibliography metadata.

    Args:
        yaml_blocks: Front-matter blocks of the document, in order

    Returns:
        True (all collections), False (disabled) or a list of collection names
    """
    values = [v for v in (directive_value(block) for block in yaml_blocks) if v is not None]
    if not values:
        return True

    value = values[-1]
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [str(v) for v in value]

    logger.debug(f"Unrecognised zotero directive {value!r}, using all collections")
    return True
