"""
RSS 2.0.1 Encoder
=================
Maps the canonical feed to an <rss version="2.0"> document.

The content module namespace is declared only when an item emits
content:encoded. Channel-level knobs (ttl, image size, category override,
generator) arrive as reserved "_rss:*" extension nodes.

Responsibility: Canonical Feed -> RSS 2.0.1 XML
"""

from typing import Dict, List, Optional
import logging

from lxml import etree

from ..models.feed import Author, Feed, Item
from ..models.profile import Profile
from ..utils.cdata import use_cdata_for_feed, use_cdata_for_item
from ..utils.dates import first_set, format_rfc1123
from ..utils.namespaces import CONTENT_NS
from ..utils.xml_writer import int_element, rich_text_element, root_nsmap, text_element
from .base import (
    ConfigHandler,
    MergedExtensions,
    XML_SCOPE_HANDLERS,
    XmlFeedEncoder,
    merge_extensions,
    set_positive_int,
    set_text,
)

logger = logging.getLogger(__name__)

CONTENT_ENCODED = f"{{{CONTENT_NS}}}encoded"

CHANNEL_HANDLERS: Dict[str, ConfigHandler] = {
    **XML_SCOPE_HANDLERS,
    "_rss:ttl": set_positive_int("ttl"),
    "_rss:category": set_text("category"),
    "_rss:image-width": set_positive_int("image_width"),
    "_rss:image-height": set_positive_int("image_height"),
    "_rss:generator": set_text("generator"),
}

ITEM_HANDLERS: Dict[str, ConfigHandler] = dict(XML_SCOPE_HANDLERS)


def format_author(author: Optional[Author]) -> str:
    """
    RSS person string.

    Returns 'email (Name)' when both are present, else the bare email.
    """
    if author is None or not author.email:
        return ""
    if author.name:
        return f"{author.email} ({author.name})"
    return author.email


def has_rich_content(feed: Feed) -> bool:
    """True when any item will emit content:encoded."""
    return any(item.content.strip() for item in feed.items)


class RssEncoder(XmlFeedEncoder):
    """
    Encoder for RSS 2.0.1.

    Example:
        xml = RssEncoder().encode(feed)
    """

    profile = Profile.RSS
    media_type = "application/rss+xml"

    def build(self, feed: Feed) -> etree._Element:
        """
        Build the <rss> element tree.

        Args:
            feed: Canonical feed

        Returns:
            Root <rss> element
        """
        feed = self.require_feed(feed)
        channel_ext = merge_extensions(feed.extensions, CHANNEL_HANDLERS, "channel")
        item_exts = [
            merge_extensions(item.extensions, ITEM_HANDLERS, f"item[{index}]")
            for index, item in enumerate(feed.items)
        ]

        passthrough = list(channel_ext.passthrough)
        for ext in item_exts:
            passthrough.extend(ext.passthrough)

        namespaces = self.namespaces_for(feed)
        base = {"content": CONTENT_NS} if has_rich_content(feed) else {}
        nsmap = root_nsmap(base, passthrough, namespaces)

        root = etree.Element("rss", nsmap=nsmap or None)
        root.set("version", "2.0")
        self._build_channel(root, feed, channel_ext, item_exts, namespaces)
        return root

    def _build_channel(
        self,
        root: etree._Element,
        feed: Feed,
        channel_ext: MergedExtensions,
        item_exts: List[MergedExtensions],
        namespaces: Dict[str, str],
    ) -> None:
        overrides = channel_ext.overrides
        use_cdata = use_cdata_for_feed(feed.extensions, self.config.use_cdata)

        channel = etree.SubElement(root, "channel")
        text_element(channel, "title", feed.title, required=True)
        text_element(channel, "link", feed.link_href, required=True)
        rich_text_element(channel, "description", feed.description, use_cdata, required=True)
        text_element(channel, "language", feed.language)
        text_element(channel, "copyright", feed.copyright)
        text_element(channel, "managingEditor", format_author(feed.author))
        text_element(channel, "pubDate", format_rfc1123(first_set(feed.created, feed.updated)))
        text_element(channel, "lastBuildDate", format_rfc1123(feed.updated))
        text_element(channel, "category", overrides.get("category") or feed.first_category())
        text_element(channel, "generator", overrides.get("generator") or self.config.generator)
        int_element(channel, "ttl", overrides.get("ttl"))

        if feed.image is not None:
            image = etree.SubElement(channel, "image")
            text_element(image, "url", feed.image.url, required=True)
            text_element(image, "title", feed.image.title, required=True)
            text_element(image, "link", feed.image.link, required=True)
            int_element(image, "width", overrides.get("image_width"))
            int_element(image, "height", overrides.get("image_height"))

        for index, (item, ext) in enumerate(zip(feed.items, item_exts)):
            self._build_item(channel, index, item, ext, use_cdata, namespaces)

        self.append_passthrough(channel, channel_ext.passthrough, namespaces)

    def _build_item(
        self,
        channel: etree._Element,
        index: int,
        item: Item,
        ext: MergedExtensions,
        parent_cdata: bool,
        namespaces: Dict[str, str],
    ) -> None:
        use_cdata = use_cdata_for_item(parent_cdata, item.extensions)

        element = etree.SubElement(channel, "item")
        text_element(element, "title", item.title, required=True)
        text_element(element, "link", item.link_href)
        rich_text_element(element, "description", item.description, use_cdata)
        rich_text_element(element, CONTENT_ENCODED, item.content, use_cdata)
        text_element(element, "author", format_author(item.author))

        enclosure = item.enclosure
        if enclosure is not None:
            if enclosure.is_complete:
                etree.SubElement(element, "enclosure", attrib={
                    "url": enclosure.url,
                    "length": str(enclosure.length),
                    "type": enclosure.type,
                })
            else:
                logger.debug("Omitting incomplete enclosure on item[%d]", index)

        # RSS guid is optional; no identifier is generated here
        if item.id.strip():
            attrib = {"isPermaLink": item.is_perma_link} if item.is_perma_link else None
            text_element(element, "guid", item.id, attrib=attrib)

        text_element(element, "pubDate", format_rfc1123(first_set(item.created, item.updated)))

        if item.source is not None and item.source.href.strip():
            text_element(element, "source", item.source.href, attrib={"url": item.source.href})

        self.append_passthrough(element, ext.passthrough, namespaces)


def to_rss(feed: Optional[Feed]) -> str:
    """Encode a feed as an RSS 2.0.1 string."""
    return RssEncoder().encode(feed)
