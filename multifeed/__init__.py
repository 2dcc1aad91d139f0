"""
multifeed
=========
Encode one canonical feed description as RSS 2.0.1, Atom 1.0, JSON Feed
1.1 or PSP-1 podcast RSS.

Example:
    from multifeed import Feed, Item, Link, to_atom

    feed = Feed(title="My Blog", link=Link(href="https://example.com/"))
    feed.add(Item(title="Hello World", link=Link(href="https://example.com/hello")))
    print(to_atom(feed))
"""

import logging

from .config import settings
from .exceptions import (
    FeedError,
    FeedSerializationError,
    FeedValidationError,
    FeedValidationErrors,
    MissingFeedError,
)
from .models import (
    Author,
    Category,
    Enclosure,
    ExtensionNode,
    Feed,
    Image,
    Item,
    Link,
    Profile,
)
from .feeds import (
    encode,
    to_atom,
    to_json,
    to_psp,
    to_rss,
    validate,
    validate_atom,
    validate_json,
    validate_psp,
    validate_rss,
    write,
    write_atom,
    write_json,
    write_psp,
    write_rss,
)
from .utils.cdata import (
    needs_cdata,
    unwrap_cdata,
    use_cdata_for_feed,
    use_cdata_for_item,
    with_cdata_override,
    wrap_cdata,
)
from .utils.identifiers import GuidBuilder, with_fallback_ids

__version__ = "1.0.0"

# Library logging: no output unless the application configures handlers
logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())
logger.setLevel(settings.app.log_level)

__all__ = [
    # Models
    'Author',
    'Category',
    'Enclosure',
    'ExtensionNode',
    'Feed',
    'Image',
    'Item',
    'Link',
    'Profile',

    # Encoding
    'encode',
    'write',
    'to_rss',
    'to_atom',
    'to_json',
    'to_psp',
    'write_rss',
    'write_atom',
    'write_json',
    'write_psp',

    # Validation
    'validate',
    'validate_rss',
    'validate_atom',
    'validate_json',
    'validate_psp',

    # CDATA policy
    'wrap_cdata',
    'unwrap_cdata',
    'needs_cdata',
    'use_cdata_for_feed',
    'use_cdata_for_item',
    'with_cdata_override',

    # Identifiers
    'GuidBuilder',
    'with_fallback_ids',

    # Errors
    'FeedError',
    'MissingFeedError',
    'FeedValidationError',
    'FeedValidationErrors',
    'FeedSerializationError',
]
