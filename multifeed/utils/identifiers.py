"""
Identifier generation for entries and podcasts.

Entry fallback IDs are tag URIs (stable for the same link and timestamp) or
random urn:uuid values. Podcast GUIDs are UUID v5 values derived from the
normalized feed URL.

Responsibility: Stable entry identifiers and podcast GUIDs
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Optional
from urllib.parse import urlsplit

from ..models.feed import Feed, Item
from .dates import first_set, format_tag_date
from .namespaces import PODCAST_GUID_NAMESPACE

logger = logging.getLogger(__name__)

# Case-sensitive; each prefix is tried once, in this order.
_FEED_URL_SCHEMES = ("http://", "https://", "feed://")


class GuidBuilder:
    """
    Utility class for building consistent identifiers.

    Formats:
        tag:example.com,2024-02-03:/ep/1
        urn:uuid:6f1c0a36-4cbb-4c6a-9a2e-0b7d1c1f0a11
        917393e3-1b1e-5cef-ace4-edaa54e1f810   (podcast:guid)
    """

    @staticmethod
    def tag_uri(href: str, timestamp: datetime) -> str:
        """
        Build a tag URI from a link and a timestamp.

        Args:
            href: Entry link
            timestamp: Representative date of the entry

        Returns:
            tag:<host>,<YYYY-MM-DD>:<path>
        """
        host, path = href, "/"
        try:
            parts = urlsplit(href)
        except ValueError:
            pass
        else:
            host = parts.netloc.rpartition("@")[2]
            path = parts.path
        return f"tag:{host},{format_tag_date(timestamp)}:{path}"

    @staticmethod
    def random_urn() -> str:
        """urn:uuid: URI from a random version 4 UUID."""
        return f"urn:uuid:{uuid.uuid4()}"

    @staticmethod
    def fallback_item_id(item: Item) -> str:
        """
        Best-effort identifier for an item without an ID.

        Uses a tag URI when the item has a link and any timestamp (updated
        preferred over created); otherwise a fresh random urn:uuid, which is
        not stable across calls.
        """
        href = item.link_href
        timestamp = first_set(item.updated, item.created)
        if href and timestamp is not None:
            return GuidBuilder.tag_uri(href, timestamp)
        return GuidBuilder.random_urn()

    @staticmethod
    def normalize_feed_url(feed_url: str) -> str:
        """Strip lowercase scheme prefixes (in order) and all trailing slashes."""
        normalized = feed_url.strip()
        for scheme in _FEED_URL_SCHEMES:
            if normalized.startswith(scheme):
                normalized = normalized[len(scheme):]
        while normalized.endswith("/"):
            normalized = normalized[:-1]
        return normalized

    @staticmethod
    def podcast_guid(feed_url: str) -> str:
        """UUID v5 of the normalized feed URL in the podcast namespace."""
        normalized = GuidBuilder.normalize_feed_url(feed_url)
        return str(uuid.uuid5(PODCAST_GUID_NAMESPACE, normalized))


def resolve_item_id(item: Item) -> str:
    """The item's own ID, or a generated fallback."""
    if item.id.strip():
        return item.id
    generated = GuidBuilder.fallback_item_id(item)
    logger.debug("Generated fallback id %s for item %r", generated, item.title)
    return generated


def resolve_podcast_guid(feed: Feed, seed: Optional[str] = None) -> str:
    """
    Podcast GUID for a feed.

    An explicit Feed.id always wins and is used verbatim. Otherwise the GUID
    is derived from the seed (when given) or the feed URL.
    """
    if feed.id.strip():
        return feed.id
    if seed and seed.strip():
        return GuidBuilder.podcast_guid(seed)
    if feed.feed_url.strip():
        return GuidBuilder.podcast_guid(feed.feed_url)
    return ""


def with_fallback_ids(feed: Feed) -> Feed:
    """
    Return a copy of the feed where every item has an ID.

    Generated IDs default isPermaLink to "false" when it was unset. The
    caller's feed is left untouched.
    """
    items = []
    for item in feed.items:
        if item.id.strip():
            items.append(item)
            continue
        update = {"id": GuidBuilder.fallback_item_id(item)}
        if item.is_perma_link is None:
            update["is_perma_link"] = "false"
        items.append(item.model_copy(update=update))
    return feed.model_copy(update={"items": items})
