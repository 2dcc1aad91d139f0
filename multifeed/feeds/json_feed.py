"""
JSON Feed 1.1 Encoder
=====================
Maps the canonical feed to a JSON Feed 1.1 document (a plain dict) and
serializes it with sorted keys.

Pass-through extension nodes are flattened: a node with a name and
non-empty text becomes a top-level "name": "text" pair at its scope and
overrides any projected key of the same name. Attributes and children
have no JSON representation and are dropped.

Responsibility: Canonical Feed -> JSON Feed 1.1
"""

from typing import Any, Dict, List, Optional, TextIO
import logging

from ..models.extension import ExtensionNode
from ..models.feed import Author, Enclosure, Feed, Item
from ..models.profile import Profile
from ..utils.dates import format_json_date
from ..utils.identifiers import resolve_item_id
from ..utils.json_writer import to_json_string, write_json
from .base import ConfigHandler, FeedEncoder, merge_extensions, set_bool, set_text

logger = logging.getLogger(__name__)

JSON_FEED_VERSION = "https://jsonfeed.org/version/1.1"

# Attachment sizes are 32-bit signed in common readers
MAX_ATTACHMENT_SIZE = 2147483647


def append_hub(node: ExtensionNode, overrides: Dict[str, Any]) -> None:
    """Collect a WebSub hub from the node's type/url attributes."""
    hub_type = node.attrs.get("type", "").strip()
    hub_url = node.attrs.get("url", "").strip()
    if not hub_type or not hub_url:
        logger.warning("Ignoring %s without type and url attributes", node.name)
        return
    overrides.setdefault("hubs", []).append({"type": hub_type, "url": hub_url})


def append_tag(node: ExtensionNode, overrides: Dict[str, Any]) -> None:
    """Collect one item tag."""
    tag = node.text.strip()
    if tag:
        overrides.setdefault("tags", []).append(tag)


FEED_HANDLERS: Dict[str, ConfigHandler] = {
    "_json:icon": set_text("icon"),
    "_json:favicon": set_text("favicon"),
    "_json:user_comment": set_text("user_comment"),
    "_json:next_url": set_text("next_url"),
    "_json:expired": set_bool("expired"),
    "_json:hub": append_hub,
}

ITEM_HANDLERS: Dict[str, ConfigHandler] = {
    "_json:content_text": set_text("content_text"),
    "_json:banner_image": set_text("banner_image"),
    "_json:tag": append_tag,
}


def json_authors(author: Optional[Author]) -> Optional[List[Dict[str, str]]]:
    """
    Single-element authors array.

    JSON Feed authors have no email field, so an email-only author is
    expressed as a mailto: url.
    """
    if author is None or author.is_empty:
        return None
    if author.name.strip():
        return [{"name": author.name}]
    return [{"url": f"mailto:{author.email.strip()}"}]


def json_attachment(enclosure: Enclosure, duration_seconds: int) -> Optional[Dict[str, Any]]:
    """
    Attachment object for a non-image enclosure.

    Returns None when the url or mime type is missing.
    """
    if not enclosure.url.strip() or not enclosure.type.strip():
        return None
    attachment: Dict[str, Any] = {
        "url": enclosure.url,
        "mime_type": enclosure.type,
    }
    if enclosure.length > 0:
        attachment["size"] = min(enclosure.length, MAX_ATTACHMENT_SIZE)
    if duration_seconds > 0:
        attachment["duration_in_seconds"] = duration_seconds
    return attachment


def flatten_extensions(document: Dict[str, Any], nodes: List[ExtensionNode]) -> None:
    """Copy name/text pairs of pass-through nodes onto a JSON object."""
    for node in nodes:
        name = node.name.strip()
        if not name or not node.text:
            continue
        if node.attrs or node.children:
            logger.debug("Flattening %s drops its attributes and children", name)
        document[name] = node.text


def _put(document: Dict[str, Any], key: str, value: Any) -> None:
    # Empty values are omitted from the document
    if value is None or value == "" or value == []:
        return
    document[key] = value


class JsonFeedEncoder(FeedEncoder):
    """
    Encoder for JSON Feed 1.1.

    Example:
        text = JsonFeedEncoder().encode(feed)
    """

    profile = Profile.JSON
    media_type = "application/feed+json"

    def build(self, feed: Feed) -> Dict[str, Any]:
        """
        Build the JSON Feed document.

        Args:
            feed: Canonical feed

        Returns:
            JSON-serializable dict
        """
        feed = self.require_feed(feed)
        merged = merge_extensions(feed.extensions, FEED_HANDLERS, "feed")
        overrides = merged.overrides
        image_url = feed.image.url if feed.image is not None else ""

        document: Dict[str, Any] = {"version": JSON_FEED_VERSION, "title": feed.title}
        _put(document, "home_page_url", feed.link_href)
        _put(document, "feed_url", feed.feed_url)
        _put(document, "description", feed.description)
        _put(document, "user_comment", overrides.get("user_comment"))
        _put(document, "next_url", overrides.get("next_url"))
        _put(document, "icon", overrides.get("icon") or image_url)
        _put(document, "favicon", overrides.get("favicon") or image_url)
        _put(document, "authors", json_authors(feed.author))
        _put(document, "language", feed.language)
        _put(document, "expired", overrides.get("expired"))
        _put(document, "hubs", overrides.get("hubs"))
        document["items"] = [
            self._build_item(index, item) for index, item in enumerate(feed.items)
        ]

        flatten_extensions(document, merged.passthrough)
        return document

    def _build_item(self, index: int, item: Item) -> Dict[str, Any]:
        merged = merge_extensions(item.extensions, ITEM_HANDLERS, f"item[{index}]")
        overrides = merged.overrides

        entry: Dict[str, Any] = {"id": resolve_item_id(item)}
        _put(entry, "url", item.link_href)
        _put(entry, "external_url", item.source.href if item.source is not None else "")
        _put(entry, "title", item.title)
        _put(entry, "content_html", item.content)
        _put(entry, "content_text", overrides.get("content_text"))
        _put(entry, "summary", item.description)
        _put(entry, "banner_image", overrides.get("banner_image"))
        _put(entry, "date_published", format_json_date(item.created))
        _put(entry, "date_modified", format_json_date(item.updated))
        _put(entry, "authors", json_authors(item.author))
        _put(entry, "tags", overrides.get("tags"))

        enclosure = item.enclosure
        if enclosure is not None:
            if enclosure.type.startswith("image/"):
                _put(entry, "image", enclosure.url)
            else:
                attachment = json_attachment(enclosure, item.duration_seconds)
                if attachment is not None:
                    entry["attachments"] = [attachment]
                else:
                    logger.debug("Omitting enclosure without url/type on item[%d]", index)

        flatten_extensions(entry, merged.passthrough)
        return entry

    def serialize(self, tree: Dict[str, Any]) -> str:
        return to_json_string(tree, indent=self.config.json_indent)

    def write_tree(self, tree: Dict[str, Any], sink: TextIO) -> None:
        write_json(tree, sink, indent=self.config.json_indent)


def to_json(feed: Optional[Feed]) -> str:
    """Encode a feed as a JSON Feed 1.1 string."""
    return JsonFeedEncoder().encode(feed)
