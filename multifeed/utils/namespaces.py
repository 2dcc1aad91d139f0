"""
Namespace constants shared by the XML encoders.

Namespace strings are case-sensitive and must match the published
specifications byte for byte.
"""

from __future__ import annotations

import uuid
from typing import Dict

ATOM_NS = "http://www.w3.org/2005/Atom"
CONTENT_NS = "http://purl.org/rss/1.0/modules/content/"
ITUNES_NS = "http://www.itunes.com/dtds/podcast-1.0.dtd"
PODCAST_NS = "https://podcastindex.org/namespace/1.0"
XML_NS = "http://www.w3.org/XML/1998/namespace"

# UUID v5 namespace for podcast:guid generation
PODCAST_GUID_NAMESPACE = uuid.UUID("ead4c236-bf58-58c6-a2c6-a6b28d128cb6")

# Prefixes extension nodes may use without declaring them.
KNOWN_NAMESPACES: Dict[str, str] = {
    "atom": ATOM_NS,
    "content": CONTENT_NS,
    "itunes": ITUNES_NS,
    "podcast": PODCAST_NS,
    "media": "http://search.yahoo.com/mrss/",
    "dc": "http://purl.org/dc/elements/1.1/",
    "sy": "http://purl.org/rss/1.0/modules/syndication/",
    "slash": "http://purl.org/rss/1.0/modules/slash/",
    "thr": "http://purl.org/syndication/thread/1.0",
    "georss": "http://www.georss.org/georss",
    "googleplay": "http://www.google.com/schemas/play-podcasts/1.0",
    "psc": "http://podlove.org/simple-chapters",
}
