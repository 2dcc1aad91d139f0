"""
Validation Profiles
===================
One validator per target format. Each walks the canonical model, raises
FeedValidationError for the first violated rule, and never mutates its
input. ``validate`` runs several profiles and aggregates their failures.

Validation is opt-in; only the PSP encoder validates before encoding.

Responsibility: Required-field rules per target format
"""

from typing import Callable, Dict, Iterable, List, Optional, Union
import logging
import re

from ..exceptions import FeedValidationError, FeedValidationErrors, MissingFeedError
from ..models.extension import ExtensionNode
from ..models.feed import Feed
from ..models.profile import Profile

logger = logging.getLogger(__name__)

# PSP-1 limit for channel and item descriptions
MAX_DESCRIPTION_BYTES = 4000

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

# Accepted itunes:explicit spellings and their normalized value
EXPLICIT_VALUES = {
    "true": "true",
    "yes": "true",
    "explicit": "true",
    "false": "false",
    "no": "false",
    "clean": "false",
}

Validator = Callable[[Feed], None]


def _blank(value: Optional[str]) -> bool:
    return not value or not value.strip()


def _nodes_named(nodes: Iterable[ExtensionNode], key: str) -> List[ExtensionNode]:
    return [node for node in nodes if node.key == key]


def _positive_int(text: str) -> bool:
    try:
        return int(text.strip()) > 0
    except ValueError:
        return False


def _has_explicit(feed: Feed) -> bool:
    return any(
        node.text.strip().lower() in EXPLICIT_VALUES
        for node in _nodes_named(feed.extensions, "itunes:explicit")
    )


def _has_image(feed: Feed) -> bool:
    if feed.image is not None and not _blank(feed.image.url):
        return True
    return any(
        not _blank(node.attrs.get("href"))
        for node in _nodes_named(feed.extensions, "itunes:image")
    )


def _require_feed(feed: Optional[Feed]) -> Feed:
    if feed is None:
        raise MissingFeedError()
    return feed


def validate_rss(feed: Optional[Feed]) -> None:
    """
    RSS 2.0.1 essentials.

    Raises:
        FeedValidationError: For the first violated rule
    """
    feed = _require_feed(feed)
    profile = Profile.RSS
    if _blank(feed.title):
        raise FeedValidationError(profile, "channel title required")
    if _blank(feed.link_href):
        raise FeedValidationError(profile, "channel link required")
    if _blank(feed.description):
        raise FeedValidationError(profile, "channel description required")
    if not feed.items:
        raise FeedValidationError(profile, "at least one item required")

    for index, item in enumerate(feed.items):
        if _blank(item.title) and _blank(item.description):
            raise FeedValidationError(profile, "must include a title or a description", index)
        if item.enclosure is not None and not item.enclosure.is_complete:
            raise FeedValidationError(
                profile, "enclosure url/type/length required when enclosure present", index
            )
        if item.author is not None and not EMAIL_PATTERN.match(item.author.email.strip()):
            raise FeedValidationError(profile, "author must be an email address", index)


def validate_atom(feed: Optional[Feed]) -> None:
    """
    Atom 1.0 (RFC 4287) essentials.

    Raises:
        FeedValidationError: For the first violated rule
    """
    feed = _require_feed(feed)
    profile = Profile.ATOM
    if _blank(feed.title):
        raise FeedValidationError(profile, "feed title required")
    if feed.updated is None and feed.created is None:
        raise FeedValidationError(profile, "feed updated timestamp required (set updated or created)")
    if _blank(feed.id) and _blank(feed.link_href):
        raise FeedValidationError(profile, "feed id required (set id or link)")
    if not feed.items:
        raise FeedValidationError(profile, "at least one entry required")

    for index, item in enumerate(feed.items):
        if _blank(item.title):
            raise FeedValidationError(profile, "title required", index)
        if item.updated is None and item.created is None:
            raise FeedValidationError(profile, "updated timestamp required (set updated or created)", index)

    feed_has_author = feed.author is not None and not feed.author.is_empty
    if not feed_has_author:
        for item in feed.items:
            if item.author is None or item.author.is_empty:
                raise FeedValidationError(
                    profile, "feed must contain an author or all entries must contain an author"
                )


def validate_json(feed: Optional[Feed]) -> None:
    """
    JSON Feed 1.1 essentials.

    Raises:
        FeedValidationError: For the first violated rule
    """
    feed = _require_feed(feed)
    profile = Profile.JSON
    if _blank(feed.title):
        raise FeedValidationError(profile, "feed title required")
    if not feed.items:
        raise FeedValidationError(profile, "at least one item required")
    for index, item in enumerate(feed.items):
        if _blank(item.id):
            raise FeedValidationError(profile, "id required", index)


def validate_psp(feed: Optional[Feed]) -> None:
    """
    PSP-1 podcast requirements.

    Channel: title, description (<= 4000 bytes), link, language, at least
    one category, an itunes:explicit node, artwork (Feed.image or an
    itunes:image href), feed_url and at least one item. Items: title, a
    complete enclosure, an id and a description of at most 4000 bytes.
    Transcripts need url and type, and serial shows need a positive episode
    number on every item.

    Raises:
        FeedValidationError: For the first violated rule
    """
    feed = _require_feed(feed)
    profile = Profile.PSP
    if _blank(feed.title):
        raise FeedValidationError(profile, "channel title required")
    if _blank(feed.description):
        raise FeedValidationError(profile, "channel description required")
    if len(feed.description.encode("utf-8")) > MAX_DESCRIPTION_BYTES:
        raise FeedValidationError(profile, f"channel description must be <= {MAX_DESCRIPTION_BYTES} bytes")
    if _blank(feed.link_href):
        raise FeedValidationError(profile, "channel link required")
    if _blank(feed.language):
        raise FeedValidationError(profile, "channel language required")
    if not feed.first_category():
        raise FeedValidationError(profile, "at least one itunes:category required")
    if not _has_explicit(feed):
        raise FeedValidationError(profile, "itunes:explicit required (true/false)")
    if not _has_image(feed):
        raise FeedValidationError(profile, "itunes:image (href) required (set image or an itunes:image node)")
    if _blank(feed.feed_url):
        raise FeedValidationError(profile, "atom:link rel=self required (set feed_url)")
    if not feed.items:
        raise FeedValidationError(profile, "at least one item required")

    for index, item in enumerate(feed.items):
        if _blank(item.title):
            raise FeedValidationError(profile, "title required", index)
        if item.enclosure is None or not item.enclosure.is_complete:
            raise FeedValidationError(profile, "enclosure url/type/length required", index)
        if _blank(item.id):
            raise FeedValidationError(profile, "guid (id) required", index)
        if len(item.description.encode("utf-8")) > MAX_DESCRIPTION_BYTES:
            raise FeedValidationError(profile, f"description must be <= {MAX_DESCRIPTION_BYTES} bytes", index)
        for transcript in _nodes_named(item.extensions, "podcast:transcript"):
            if _blank(transcript.attrs.get("url")) or _blank(transcript.attrs.get("type")):
                raise FeedValidationError(profile, "podcast:transcript requires url and type", index)

    show_types = _nodes_named(feed.extensions, "itunes:type")
    if show_types and show_types[-1].text.strip().lower() == "serial":
        for index, item in enumerate(feed.items):
            episodes = _nodes_named(item.extensions, "itunes:episode")
            if not episodes or not _positive_int(episodes[-1].text):
                raise FeedValidationError(
                    profile, "serial podcasts require a positive itunes:episode", index
                )


VALIDATORS: Dict[Profile, Validator] = {
    Profile.RSS: validate_rss,
    Profile.ATOM: validate_atom,
    Profile.JSON: validate_json,
    Profile.PSP: validate_psp,
}


def validate(feed: Optional[Feed], profiles: Iterable[Union[Profile, str]]) -> None:
    """
    Validate a feed against several profiles at once.

    Every requested profile runs even when an earlier one fails.

    Args:
        feed: Canonical feed
        profiles: Profiles (or their string values) to check

    Raises:
        MissingFeedError: If feed is None
        FeedValidationErrors: If any profile reports a violation
    """
    feed = _require_feed(feed)
    errors: List[FeedValidationError] = []
    for profile in profiles:
        validator = VALIDATORS[Profile(profile)]
        try:
            validator(feed)
        except FeedValidationError as e:
            logger.debug("Validation failed: %s", e)
            errors.append(e)
    if errors:
        raise FeedValidationErrors(errors)
