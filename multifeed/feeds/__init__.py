"""
Feeds Module
============
Format encoders and validation profiles.

Exports:
    - FeedEncoder: Capability interface implemented by every format
    - RssEncoder / AtomEncoder / JsonFeedEncoder / PspEncoder: Format encoders
    - to_rss / to_atom / to_json / to_psp: One-shot string encoders
    - write_rss / write_atom / write_json / write_psp: Stream writers
    - encode / write: Dispatch on a Profile
    - validate_*: Per-format validators; validate aggregates several
"""

from .base import FeedEncoder, XmlFeedEncoder, merge_extensions

from .rss import RssEncoder, to_rss
from .atom import AtomEncoder, to_atom
from .json_feed import JsonFeedEncoder, to_json
from .psp import PspEncoder, to_psp

from .registry import (
    ENCODERS,
    encode,
    get_encoder,
    write,
    write_atom,
    write_json,
    write_psp,
    write_rss,
)

from .validation import (
    VALIDATORS,
    validate,
    validate_atom,
    validate_json,
    validate_psp,
    validate_rss,
)

__all__ = [
    # Encoders
    'FeedEncoder',
    'XmlFeedEncoder',
    'merge_extensions',
    'RssEncoder',
    'AtomEncoder',
    'JsonFeedEncoder',
    'PspEncoder',
    'ENCODERS',
    'get_encoder',

    # Entry points
    'to_rss',
    'to_atom',
    'to_json',
    'to_psp',
    'write_rss',
    'write_atom',
    'write_json',
    'write_psp',
    'encode',
    'write',

    # Validation
    'VALIDATORS',
    'validate',
    'validate_rss',
    'validate_atom',
    'validate_json',
    'validate_psp',
]
