"""
Canonical feed model.

One format-agnostic representation of a syndication feed that every
encoder reads from. Encoders never mutate these objects; anything derived
during encoding lives in per-call structures.

Responsibility: Feed/Item value types and their invariants
"""

from datetime import datetime
from typing import Any, Callable, Optional, List, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .extension import ExtensionNode


class Link(BaseModel):
    """A related link. Only the href is shared across all targets."""
    model_config = ConfigDict(validate_assignment=True)

    href: str = ""


class Author(BaseModel):
    """A person with a name and optional email."""
    model_config = ConfigDict(validate_assignment=True)

    name: str = ""
    email: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.name.strip() and not self.email.strip()


class Category(BaseModel):
    """A top-level category (flat; nesting is left to extension nodes)."""
    model_config = ConfigDict(validate_assignment=True)

    text: str = ""


class Image(BaseModel):
    """Channel-level artwork."""
    model_config = ConfigDict(validate_assignment=True)

    url: str = ""
    title: str = ""
    link: str = ""


class Enclosure(BaseModel):
    """
    Media attachment of an item.

    RSS requires all three attributes; length is in bytes.
    """
    model_config = ConfigDict(validate_assignment=True)

    url: str = ""
    length: int = 0
    type: str = ""

    @property
    def is_complete(self) -> bool:
        """Url, type and a positive length are all present."""
        return bool(self.url.strip()) and bool(self.type.strip()) and self.length > 0


class Item(BaseModel):
    """
    A single entry/post/episode.

    The id is opaque: RSS guid, Atom id, JSON id or PSP guid depending on
    the target.
    """

    model_config = ConfigDict(validate_assignment=True)

    title: str = ""
    link: Optional[Link] = None
    source: Optional[Link] = Field(
        default=None,
        description="Related/mirror link distinct from the primary link"
    )
    author: Optional[Author] = None
    description: str = Field(default="", description="RSS description, Atom/JSON summary")
    id: str = ""
    is_perma_link: Optional[str] = Field(
        default=None,
        description="guid isPermaLink for RSS/PSP: 'true', 'false' or unset"
    )
    updated: Optional[datetime] = None
    created: Optional[datetime] = None
    enclosure: Optional[Enclosure] = None
    content: str = Field(default="", description="Raw HTML body")
    duration_seconds: int = Field(default=0, ge=0)
    extensions: List[ExtensionNode] = Field(default_factory=list)

    @field_validator("is_perma_link", mode="before")
    @classmethod
    def normalize_perma_link(cls, v: Union[bool, str, None]) -> Optional[str]:
        """Accept booleans and normalize blank strings to unset"""
        if v is None:
            return None
        if isinstance(v, bool):
            return "true" if v else "false"
        v = str(v).strip()
        lowered = v.lower()
        if lowered in ("true", "false"):
            return lowered
        return v or None

    @property
    def link_href(self) -> str:
        return self.link.href if self.link else ""


class Feed(BaseModel):
    """
    A feed/channel across formats.

    Item order is significant and preserved by every encoder.
    """

    model_config = ConfigDict(validate_assignment=True)

    title: str = ""
    link: Optional[Link] = None
    description: str = ""
    author: Optional[Author] = None
    updated: Optional[datetime] = None
    created: Optional[datetime] = None
    id: str = ""
    items: List[Item] = Field(default_factory=list)
    copyright: str = ""
    image: Optional[Image] = None
    language: str = ""
    categories: List[Category] = Field(
        default_factory=list,
        description="First non-empty category is used by single-category formats"
    )
    feed_url: str = Field(
        default="",
        description="Canonical self URL (JSON feed_url, PSP/Atom self link)"
    )
    extensions: List[ExtensionNode] = Field(default_factory=list)

    @property
    def link_href(self) -> str:
        return self.link.href if self.link else ""

    def first_category(self) -> str:
        """Text of the first non-empty category, or an empty string."""
        for category in self.categories:
            if category.text.strip():
                return category.text
        return ""

    def add(self, item: Item) -> None:
        """Append an item to the feed."""
        self.items.append(item)

    def sort(self, key: Callable[[Item], Any], reverse: bool = False) -> None:
        """Stable in-place sort of the items. Encoders never call this."""
        self.items.sort(key=key, reverse=reverse)
