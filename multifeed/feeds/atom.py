"""
Atom 1.0 Encoder
================
Maps the canonical feed to an RFC 4287 <feed> document in the Atom default
namespace.

A feed must carry an author unless every entry has one; when neither
holds, a placeholder author named "unknown" is written at feed level.

Responsibility: Canonical Feed -> Atom 1.0 XML
"""

from typing import Dict, Optional
import logging

from lxml import etree

from ..models.feed import Author, Feed, Item
from ..models.profile import Profile
from ..utils.cdata import use_cdata_for_feed, use_cdata_for_item
from ..utils.dates import first_set, format_rfc3339
from ..utils.identifiers import resolve_item_id
from ..utils.namespaces import ATOM_NS
from ..utils.xml_writer import rich_text_element, root_nsmap, text_element
from .base import (
    ConfigHandler,
    MergedExtensions,
    XML_SCOPE_HANDLERS,
    XmlFeedEncoder,
    merge_extensions,
    set_text,
)

logger = logging.getLogger(__name__)

UNKNOWN_AUTHOR = "unknown"

FEED_HANDLERS: Dict[str, ConfigHandler] = {
    **XML_SCOPE_HANDLERS,
    "_atom:icon": set_text("icon"),
    "_atom:logo": set_text("logo"),
    "_atom:category": set_text("category"),
}

ENTRY_HANDLERS: Dict[str, ConfigHandler] = dict(XML_SCOPE_HANDLERS)


def atom_tag(local: str) -> str:
    """Clark-notation name in the Atom namespace."""
    return f"{{{ATOM_NS}}}{local}"


def needs_placeholder_author(feed: Feed) -> bool:
    """True when neither the feed nor every entry carries an author."""
    if feed.author is not None and not feed.author.is_empty:
        return False
    return any(item.author is None or item.author.is_empty for item in feed.items)


class AtomEncoder(XmlFeedEncoder):
    """
    Encoder for Atom 1.0.

    Example:
        xml = AtomEncoder().encode(feed)
    """

    profile = Profile.ATOM
    media_type = "application/atom+xml"

    def build(self, feed: Feed) -> etree._Element:
        """
        Build the <feed> element tree.

        Args:
            feed: Canonical feed

        Returns:
            Root <feed> element
        """
        feed = self.require_feed(feed)
        feed_ext = merge_extensions(feed.extensions, FEED_HANDLERS, "feed")
        entry_exts = [
            merge_extensions(item.extensions, ENTRY_HANDLERS, f"entry[{index}]")
            for index, item in enumerate(feed.items)
        ]

        passthrough = list(feed_ext.passthrough)
        for ext in entry_exts:
            passthrough.extend(ext.passthrough)

        namespaces = self.namespaces_for(feed)
        nsmap = root_nsmap({None: ATOM_NS}, passthrough, namespaces)
        root = etree.Element(atom_tag("feed"), nsmap=nsmap)

        use_cdata = use_cdata_for_feed(feed.extensions, self.config.use_cdata)
        self._build_head(root, feed, feed_ext, use_cdata, namespaces)
        for item, ext in zip(feed.items, entry_exts):
            self._build_entry(root, item, ext, use_cdata, namespaces)
        return root

    def _build_head(
        self,
        root: etree._Element,
        feed: Feed,
        feed_ext: MergedExtensions,
        use_cdata: bool,
        namespaces: Dict[str, str],
    ) -> None:
        overrides = feed_ext.overrides
        image_url = feed.image.url if feed.image is not None else ""

        text_element(root, atom_tag("title"), feed.title, required=True)
        rich_text_element(root, atom_tag("subtitle"), feed.description, use_cdata)
        self._append_link(root, feed.link_href, "alternate")
        self._append_link(root, feed.feed_url, "self")
        text_element(root, atom_tag("id"), feed.id.strip() or feed.link_href, required=True)
        text_element(
            root,
            atom_tag("updated"),
            format_rfc3339(first_set(feed.updated, feed.created)),
            required=True,
        )

        if feed.author is not None and not feed.author.is_empty:
            self._append_person(root, feed.author)
        elif needs_placeholder_author(feed):
            logger.debug("Feed %r has no author; writing placeholder", feed.title)
            self._append_person(root, Author(name=UNKNOWN_AUTHOR))

        category = overrides.get("category") or feed.first_category()
        if category:
            etree.SubElement(root, atom_tag("category"), attrib={"term": category})

        text_element(root, atom_tag("icon"), overrides.get("icon") or image_url)
        text_element(root, atom_tag("logo"), overrides.get("logo") or image_url)
        text_element(root, atom_tag("rights"), feed.copyright)

        self.append_passthrough(root, feed_ext.passthrough, namespaces, ATOM_NS)

    def _build_entry(
        self,
        root: etree._Element,
        item: Item,
        ext: MergedExtensions,
        parent_cdata: bool,
        namespaces: Dict[str, str],
    ) -> None:
        use_cdata = use_cdata_for_item(parent_cdata, item.extensions)
        entry = etree.SubElement(root, atom_tag("entry"))

        text_element(entry, atom_tag("title"), item.title, required=True)
        self._append_link(entry, item.link_href, "alternate")

        enclosure = item.enclosure
        if enclosure is not None and enclosure.is_complete:
            self._append_link(
                entry,
                enclosure.url,
                "enclosure",
                type=enclosure.type,
                length=str(enclosure.length),
            )

        if item.source is not None:
            self._append_link(entry, item.source.href, "related")

        text_element(entry, atom_tag("id"), resolve_item_id(item), required=True)
        text_element(entry, atom_tag("updated"), format_rfc3339(first_set(item.updated, item.created)))
        text_element(entry, atom_tag("published"), format_rfc3339(item.created))

        if item.author is not None and not item.author.is_empty:
            self._append_person(entry, item.author)

        rich_text_element(entry, atom_tag("summary"), item.description, use_cdata, attrib={"type": "html"})
        rich_text_element(entry, atom_tag("content"), item.content, use_cdata, attrib={"type": "html"})

        self.append_passthrough(entry, ext.passthrough, namespaces, ATOM_NS)

    @staticmethod
    def _append_link(parent: etree._Element, href: str, rel: str, **extra: str) -> None:
        if not href or not href.strip():
            return
        attrib = {"href": href.strip(), "rel": rel}
        attrib.update(extra)
        etree.SubElement(parent, atom_tag("link"), attrib=attrib)

    @staticmethod
    def _append_person(parent: etree._Element, author: Author) -> None:
        person = etree.SubElement(parent, atom_tag("author"))
        text_element(person, atom_tag("name"), author.name)
        text_element(person, atom_tag("email"), author.email)


def to_atom(feed: Optional[Feed]) -> str:
    """Encode a feed as an Atom 1.0 string."""
    return AtomEncoder().encode(feed)
