"""
Library models: collections and the citable sources they contain.

A Zotero library is a tree of collections. Each sync cycle replaces the
whole list of collections; the items of a collection whose version did
not change are carried forward from the previous cycle.
"""

from pydantic import BaseModel, ConfigDict, Field


class Creator(BaseModel):
    """An author, editor or other contributor of a source."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    creator_type: str = Field(
        default="author",
        alias="creatorType",
        description="Role of the creator (author, editor, etc.)",
    )
    given: str | None = Field(default=None, description="Given name")
    family: str | None = Field(default=None, description="Family name")
    literal: str | None = Field(
        default=None, description="Full name for organizations or single-name creators"
    )


class Source(BaseModel):
    """A single citable work.

    Bibliographic fields beyond the ones declared here are kept as extras;
    they are opaque to the sync and completion logic.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str | None = Field(
        default=None, description="Citation key (synthesized when missing upstream)"
    )
    key: str | None = Field(default=None, description="Zotero item key")
    type: str = Field(default="article", description="Item type")
    title: str | None = Field(default=None, description="Title")
    creators: list[Creator] = Field(default_factory=list, description="Creators")
    year: str | None = Field(default=None, description="Publication year")
    doi: str | None = Field(default=None, alias="DOI", description="DOI")
    container_title: str | None = Field(
        default=None,
        alias="containerTitle",
        description="Journal, book or proceedings title",
    )

    provider_key: str | None = Field(
        default=None,
        alias="providerKey",
        description="Key of the bibliography provider that produced this source",
    )
    collection_keys: list[str] = Field(
        default_factory=list,
        alias="collectionKeys",
        description="Keys of every collection this source belongs to",
    )


class CollectionSpec(BaseModel):
    """Shape of a collection: identity, name, parent link and version."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    key: str = Field(..., description="Unique collection key")
    name: str = Field(..., description="Collection name")
    parent_key: str | None = Field(
        default=None,
        alias="parentKey",
        description="Parent collection key (None for root)",
    )
    version: int = Field(
        default=0, description="Version stamp; changes iff the contents changed"
    )
    item_count: int | None = Field(
        default=None,
        alias="itemCount",
        description="Number of items the remote reported for this collection",
    )


class Collection(CollectionSpec):
    """A collection together with its resolved items.

    ``items`` is None when the remote only sent the collection's shape,
    which it does for collections it knows are unchanged.
    """

    items: list[Source] | None = Field(
        default=None, description="Sources in this collection"
    )

    def spec(self) -> CollectionSpec:
        """Return this collection without its items."""
        return CollectionSpec(
            key=self.key,
            name=self.name,
            parent_key=self.parent_key,
            version=self.version,
            item_count=self.item_count,
        )


class BibliographyCollection(BaseModel):
    """A collection as listed to the presentation layer."""

    key: str
    name: str
    parent_key: str | None = None
    provider: str
