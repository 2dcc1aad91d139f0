import io

import pytest

from multifeed import Feed, Item, Link, Profile, encode, to_atom, to_json, to_rss, write
from multifeed.config import EncoderConfig
from multifeed.feeds import ENCODERS, get_encoder


def _make_feed() -> Feed:
    """Helper to create a feed with a fixed item id."""
    return Feed(
        title="My Blog",
        link=Link(href="https://example.com/"),
        description="Notes",
        items=[Item(id="post-1", title="Hello World")],
    )


def test_every_profile_has_an_encoder() -> None:
    assert set(ENCODERS) == set(Profile)


def test_encode_dispatches_by_profile() -> None:
    feed = _make_feed()

    assert encode(feed, Profile.RSS) == to_rss(feed)
    assert encode(feed, "atom") == to_atom(feed)
    assert encode(feed, Profile.JSON) == to_json(feed)


def test_encode_accepts_config() -> None:
    text = encode(_make_feed(), Profile.JSON, EncoderConfig(json_indent=4))

    assert '\n    "items"' in text


def test_unsupported_profile_raises() -> None:
    with pytest.raises(ValueError, match="Unsupported feed profile"):
        encode(_make_feed(), "opml")


def test_write_dispatches_by_profile() -> None:
    sink = io.StringIO()

    write(_make_feed(), Profile.ATOM, sink)

    assert sink.getvalue() == to_atom(_make_feed())


def test_media_types() -> None:
    assert get_encoder(Profile.RSS).media_type == "application/rss+xml"
    assert get_encoder(Profile.ATOM).media_type == "application/atom+xml"
    assert get_encoder(Profile.JSON).media_type == "application/feed+json"
