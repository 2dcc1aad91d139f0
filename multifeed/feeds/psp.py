"""
PSP-1 Podcast RSS Encoder
=========================
Maps the canonical feed to RSS 2.0 following the Podcast Standards
Project (PSP-1) rules.

iTunes and Podcasting 2.0 elements are supplied as extension nodes using
their real names (e.g. 'itunes:explicit', 'podcast:funding'); the encoder
consumes the recognised ones, normalizes their values, and writes them in
the positions PSP-1 expects. Everything else passes through verbatim.

The feed is validated against the PSP profile before anything is built.

Responsibility: Canonical Feed -> PSP-1 podcast RSS XML
"""

from typing import Any, Dict, List, Optional
import logging

from lxml import etree

from ..models.extension import ExtensionNode
from ..models.feed import Feed, Item
from ..models.profile import Profile
from ..utils.cdata import use_cdata_for_feed, use_cdata_for_item
from ..utils.dates import first_set, format_rfc1123
from ..utils.identifiers import GuidBuilder, resolve_podcast_guid
from ..utils.namespaces import ATOM_NS, CONTENT_NS, ITUNES_NS, PODCAST_NS
from ..utils.xml_writer import int_element, rich_text_element, root_nsmap, text_element
from .base import (
    ConfigHandler,
    MergedExtensions,
    XML_SCOPE_HANDLERS,
    XmlFeedEncoder,
    merge_extensions,
    set_attr,
    set_positive_int,
    set_text,
)
from .validation import EXPLICIT_VALUES, validate_psp

logger = logging.getLogger(__name__)

SELF_LINK_TYPE = "application/rss+xml"

SHOW_TYPES = {"episodic": "episodic", "serial": "serial"}
EPISODE_TYPES = {"full": "full", "trailer": "trailer", "bonus": "bonus"}
YES = {"yes": "yes"}
YES_NO = {"yes": "yes", "no": "no"}

TRANSCRIPT_ATTRS = ("url", "type", "language", "rel")


def itunes(local: str) -> str:
    return f"{{{ITUNES_NS}}}{local}"


def podcast(local: str) -> str:
    return f"{{{PODCAST_NS}}}{local}"


def set_choice(key: str, accepted: Dict[str, str]) -> ConfigHandler:
    """Store the normalized node text when it is one of the accepted values."""
    def handler(node: ExtensionNode, overrides: Dict[str, Any]) -> None:
        value = accepted.get(node.text.strip().lower())
        if value is None:
            logger.warning("Ignoring %s: unsupported value %r", node.name, node.text)
            return
        overrides[key] = value
    return handler


def set_labelled(key: str, attr: str, attr_required: bool) -> ConfigHandler:
    """Store (attribute, text) for elements such as podcast:txt and podcast:funding."""
    def handler(node: ExtensionNode, overrides: Dict[str, Any]) -> None:
        value = node.attrs.get(attr, "").strip()
        text = node.text.strip()
        if attr_required and not value:
            logger.warning("Ignoring %s without a %s attribute", node.name, attr)
            return
        if not attr_required and not text:
            logger.warning("Ignoring empty %s", node.name)
            return
        overrides[key] = (value, text)
    return handler


def append_transcript(node: ExtensionNode, overrides: Dict[str, Any]) -> None:
    """Collect a podcast:transcript; url and type are mandatory."""
    attrs = {name: node.attrs.get(name, "").strip() for name in TRANSCRIPT_ATTRS}
    if not attrs["url"] or not attrs["type"]:
        logger.warning("Ignoring %s without url and type", node.name)
        return
    overrides.setdefault("transcripts", []).append(attrs)


CHANNEL_HANDLERS: Dict[str, ConfigHandler] = {
    **XML_SCOPE_HANDLERS,
    "itunes:explicit": set_choice("explicit", EXPLICIT_VALUES),
    "itunes:type": set_choice("show_type", SHOW_TYPES),
    "itunes:complete": set_choice("complete", YES),
    "itunes:image": set_attr("image", "href"),
    "podcast:locked": set_choice("locked", YES_NO),
    "podcast:guid": set_text("podcast_guid"),
    "podcast:txt": set_labelled("txt", "purpose", attr_required=False),
    "podcast:funding": set_labelled("funding", "url", attr_required=True),
    "_psp:guid-seed": set_text("guid_seed"),
}

ITEM_HANDLERS: Dict[str, ConfigHandler] = {
    **XML_SCOPE_HANDLERS,
    "itunes:image": set_attr("image", "href"),
    "itunes:explicit": set_choice("explicit", EXPLICIT_VALUES),
    "itunes:episode": set_positive_int("episode"),
    "itunes:season": set_positive_int("season"),
    "itunes:episodetype": set_choice("episode_type", EPISODE_TYPES),
    "itunes:block": set_choice("block", YES),
    "podcast:transcript": append_transcript,
}


def needs_content_namespace(feed: Feed) -> bool:
    """
    Whether the content module namespace is declared.

    Any item content counts, as does an item description containing both
    '<' and '>'. The description check is a heuristic and can match plain
    text with stray angle brackets.
    """
    for item in feed.items:
        if item.content.strip():
            return True
        if "<" in item.description and ">" in item.description:
            return True
    return False


def podcast_guid_for(feed: Feed, overrides: Dict[str, Any]) -> str:
    """Feed.id, then an explicit podcast:guid node, then the seed, then feed_url."""
    if feed.id.strip():
        return feed.id
    if overrides.get("podcast_guid"):
        return overrides["podcast_guid"]
    return resolve_podcast_guid(feed, overrides.get("guid_seed"))


class PspEncoder(XmlFeedEncoder):
    """
    Encoder for PSP-1 podcast RSS.

    Example:
        xml = PspEncoder().encode(feed)   # raises FeedValidationError first if invalid
    """

    profile = Profile.PSP
    media_type = "application/rss+xml"

    def prepare(self, feed: Optional[Feed]) -> Feed:
        """Reject missing or invalid feeds before building anything."""
        feed = self.require_feed(feed)
        validate_psp(feed)
        return feed

    def build(self, feed: Feed) -> etree._Element:
        """
        Build the PSP <rss> element tree.

        Args:
            feed: Canonical feed

        Returns:
            Root <rss> element with itunes, podcast and atom declared
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

        base = {"itunes": ITUNES_NS, "podcast": PODCAST_NS, "atom": ATOM_NS}
        if needs_content_namespace(feed):
            base["content"] = CONTENT_NS
        namespaces = self.namespaces_for(feed)
        nsmap = root_nsmap(base, passthrough, namespaces)

        root = etree.Element("rss", nsmap=nsmap)
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
        rich_text_element(channel, "description", feed.description, use_cdata, required=True)
        text_element(channel, "link", feed.link_href, required=True)
        text_element(channel, "language", feed.language, required=True)
        text_element(channel, "copyright", feed.copyright)
        text_element(channel, "pubDate", format_rfc1123(first_set(feed.created, feed.updated)))
        text_element(channel, "lastBuildDate", format_rfc1123(feed.updated))

        if feed.feed_url.strip():
            etree.SubElement(channel, f"{{{ATOM_NS}}}link", attrib={
                "href": feed.feed_url.strip(),
                "rel": "self",
                "type": SELF_LINK_TYPE,
            })

        image_href = overrides.get("image") or (feed.image.url if feed.image is not None else "")
        if image_href:
            etree.SubElement(channel, itunes("image"), attrib={"href": image_href})

        text_element(channel, itunes("explicit"), overrides.get("explicit"))
        text_element(channel, itunes("author"), feed.author.name if feed.author is not None else "")
        text_element(channel, itunes("type"), overrides.get("show_type"))
        text_element(channel, itunes("complete"), overrides.get("complete"))

        for category in feed.categories:
            if category.text.strip():
                etree.SubElement(channel, itunes("category"), attrib={"text": category.text})

        text_element(channel, podcast("locked"), overrides.get("locked"))
        text_element(channel, podcast("guid"), podcast_guid_for(feed, overrides))

        if "txt" in overrides:
            purpose, text = overrides["txt"]
            text_element(
                channel,
                podcast("txt"),
                text,
                required=True,
                attrib={"purpose": purpose} if purpose else None,
            )
        if "funding" in overrides:
            url, label = overrides["funding"]
            text_element(channel, podcast("funding"), label, required=True, attrib={"url": url})

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
        overrides = ext.overrides
        use_cdata = use_cdata_for_item(parent_cdata, item.extensions)

        element = etree.SubElement(channel, "item")
        text_element(element, "title", item.title, required=True)
        text_element(element, "link", item.link_href)
        rich_text_element(element, "description", item.description, use_cdata)
        rich_text_element(element, f"{{{CONTENT_NS}}}encoded", item.content, use_cdata)
        text_element(element, "pubDate", format_rfc1123(first_set(item.created, item.updated)))

        enclosure = item.enclosure
        if enclosure is not None and enclosure.is_complete:
            etree.SubElement(element, "enclosure", attrib={
                "url": enclosure.url,
                "length": str(enclosure.length),
                "type": enclosure.type,
            })

        if item.id.strip():
            attrib = {"isPermaLink": item.is_perma_link} if item.is_perma_link else None
            text_element(element, "guid", item.id, attrib=attrib)
        else:
            generated = GuidBuilder.fallback_item_id(item)
            logger.debug("Generated fallback guid %s for item[%d]", generated, index)
            text_element(element, "guid", generated, attrib={"isPermaLink": "false"})

        int_element(element, itunes("duration"), item.duration_seconds)
        if overrides.get("image"):
            etree.SubElement(element, itunes("image"), attrib={"href": overrides["image"]})
        text_element(element, itunes("explicit"), overrides.get("explicit"))
        int_element(element, itunes("episode"), overrides.get("episode"))
        int_element(element, itunes("season"), overrides.get("season"))
        text_element(element, itunes("episodeType"), overrides.get("episode_type"))
        text_element(element, itunes("block"), overrides.get("block"))

        for transcript in overrides.get("transcripts", []):
            attrib = {name: value for name, value in transcript.items() if value}
            etree.SubElement(element, podcast("transcript"), attrib=attrib)

        self.append_passthrough(element, ext.passthrough, namespaces)


def to_psp(feed: Optional[Feed]) -> str:
    """Validate, then encode a feed as PSP-1 podcast RSS."""
    return PspEncoder().encode(feed)
