"""
Encoder registry and the profile-dispatching entry points.

Responsibility: Map a Profile to its encoder; write_* helpers
"""

from typing import Dict, Optional, TextIO, Type, Union

from ..config import EncoderConfig
from ..models.feed import Feed
from ..models.profile import Profile
from .atom import AtomEncoder
from .base import FeedEncoder
from .json_feed import JsonFeedEncoder
from .psp import PspEncoder
from .rss import RssEncoder

ENCODERS: Dict[Profile, Type[FeedEncoder]] = {
    Profile.RSS: RssEncoder,
    Profile.ATOM: AtomEncoder,
    Profile.JSON: JsonFeedEncoder,
    Profile.PSP: PspEncoder,
}


def get_encoder(
    profile: Union[Profile, str],
    config: Optional[EncoderConfig] = None,
) -> FeedEncoder:
    """
    Instantiate the encoder for a profile.

    Raises:
        ValueError: If the profile is not supported
    """
    try:
        encoder_cls = ENCODERS[Profile(profile)]
    except (KeyError, ValueError):
        raise ValueError(f"Unsupported feed profile: {profile!r}") from None
    return encoder_cls(config)


def encode(
    feed: Optional[Feed],
    profile: Union[Profile, str],
    config: Optional[EncoderConfig] = None,
) -> str:
    """
    Encode a feed in the given format.

    Example:
        xml = encode(feed, Profile.ATOM)
        text = encode(feed, "json")
    """
    return get_encoder(profile, config).encode(feed)


def write(
    feed: Optional[Feed],
    profile: Union[Profile, str],
    sink: TextIO,
    config: Optional[EncoderConfig] = None,
) -> None:
    """Encode a feed in the given format and write it to a text stream."""
    get_encoder(profile, config).write(feed, sink)


def write_rss(feed: Optional[Feed], sink: TextIO) -> None:
    RssEncoder().write(feed, sink)


def write_atom(feed: Optional[Feed], sink: TextIO) -> None:
    AtomEncoder().write(feed, sink)


def write_json(feed: Optional[Feed], sink: TextIO) -> None:
    JsonFeedEncoder().write(feed, sink)


def write_psp(feed: Optional[Feed], sink: TextIO) -> None:
    """Validate, then write PSP-1 podcast RSS; nothing is written on failure."""
    PspEncoder().write(feed, sink)
