import io
from datetime import datetime, timezone

import pytest

from multifeed import (
    Author,
    Category,
    Enclosure,
    ExtensionNode,
    Feed,
    Image,
    Item,
    Link,
    MissingFeedError,
    to_rss,
    with_cdata_override,
    write_rss,
)
from multifeed.config import EncoderConfig
from multifeed.exceptions import FeedSerializationError
from multifeed.feeds import RssEncoder


def _make_feed(**overrides) -> Feed:
    """Helper to create the "My Blog" feed with a single HTML item."""
    fields = {
        "title": "My Blog",
        "link": Link(href="https://example.com/"),
        "description": "Notes and essays",
        "items": [
            Item(
                title="Hello World",
                link=Link(href="https://example.com/hello"),
                description="<p>Welcome!</p>",
                created=datetime(2024, 2, 3, tzinfo=timezone.utc),
            )
        ],
    }
    fields.update(overrides)
    return Feed(**fields)


def test_item_description_wrapped_in_cdata_by_default() -> None:
    xml = to_rss(_make_feed())

    assert "<description><![CDATA[<p>Welcome!</p>]]></description>" in xml


def test_cdata_disabled_by_feed_node_escapes_everywhere() -> None:
    feed = _make_feed()
    feed.extensions = with_cdata_override(feed.extensions, False)

    xml = to_rss(feed)

    assert "<description>&lt;p&gt;Welcome!&lt;/p&gt;</description>" in xml
    assert "<![CDATA[" not in xml
    assert "_xml:cdata" not in xml


def test_item_override_beats_feed_flag() -> None:
    feed = _make_feed(extensions=[ExtensionNode(name="_xml:cdata", text="false")])
    feed.items[0].extensions = [ExtensionNode(name="_xml:cdata", text="true")]

    xml = to_rss(feed)

    assert "<![CDATA[<p>Welcome!</p>]]>" in xml


def test_config_default_can_disable_cdata() -> None:
    xml = RssEncoder(EncoderConfig(use_cdata=False)).encode(_make_feed())

    assert "<![CDATA[" not in xml


def test_already_wrapped_input_is_not_nested() -> None:
    feed = _make_feed()
    feed.items[0].description = "<![CDATA[<p>Welcome!</p>]]>"

    xml = to_rss(feed)

    assert xml.count("<![CDATA[") == 1


def test_plain_text_is_not_wrapped() -> None:
    feed = _make_feed()
    feed.items[0].description = "Just text"

    assert "<description>Just text</description>" in to_rss(feed)


def test_document_header_and_root() -> None:
    xml = to_rss(_make_feed())

    assert xml.startswith('<?xml version="1.0" encoding="UTF-8"?><rss version="2.0">')
    assert not xml.endswith("\n")
    assert "\n  <channel>\n    <title>My Blog</title>" in xml


def test_incomplete_enclosure_is_omitted() -> None:
    feed = _make_feed()
    feed.items[0].enclosure = Enclosure(url="https://example.com/a.mp3", length=0, type="audio/mpeg")
    assert "<enclosure" not in to_rss(feed)

    feed.items[0].enclosure = Enclosure(url="https://example.com/a.mp3", length=10, type="")
    assert "<enclosure" not in to_rss(feed)

    feed.items[0].enclosure = Enclosure(url="https://example.com/a.mp3", length=10, type="audio/mpeg")
    xml = to_rss(feed)
    assert "<enclosure " in xml
    assert 'url="https://example.com/a.mp3"' in xml
    assert 'length="10"' in xml
    assert 'type="audio/mpeg"' in xml


def test_content_namespace_only_with_content() -> None:
    assert "xmlns:content" not in to_rss(_make_feed())

    feed = _make_feed()
    feed.items[0].content = "<p>Body</p>"
    xml = to_rss(feed)

    assert 'xmlns:content="http://purl.org/rss/1.0/modules/content/"' in xml
    assert "<content:encoded><![CDATA[<p>Body</p>]]></content:encoded>" in xml


def test_author_formats() -> None:
    feed = _make_feed(author=Author(name="Jane", email="jane@example.com"))
    feed.items[0].author = Author(email="joe@example.com")

    xml = to_rss(feed)

    assert "<managingEditor>jane@example.com (Jane)</managingEditor>" in xml
    assert "<author>joe@example.com</author>" in xml


def test_dates_use_rfc1123() -> None:
    feed = _make_feed(updated=datetime(2024, 2, 4, 10, 0, tzinfo=timezone.utc))

    xml = to_rss(feed)

    assert "<pubDate>Sun, 04 Feb 2024 10:00:00 +0000</pubDate>" in xml
    assert "<lastBuildDate>Sun, 04 Feb 2024 10:00:00 +0000</lastBuildDate>" in xml
    assert "<pubDate>Sat, 03 Feb 2024 00:00:00 +0000</pubDate>" in xml


def test_guid_is_never_generated() -> None:
    xml = to_rss(_make_feed())

    assert "<guid" not in xml


def test_guid_with_perma_link_flag() -> None:
    feed = _make_feed()
    feed.items[0].id = "https://example.com/hello"
    feed.items[0].is_perma_link = True

    assert '<guid isPermaLink="true">https://example.com/hello</guid>' in to_rss(feed)


def test_assigned_perma_link_flag_is_normalized() -> None:
    feed = _make_feed()
    feed.items[0].id = "g"
    feed.items[0].is_perma_link = "TRUE"

    assert '<guid isPermaLink="true">g</guid>' in to_rss(feed)


def test_source_link() -> None:
    feed = _make_feed()
    feed.items[0].source = Link(href="https://mirror.example.com/hello")

    xml = to_rss(feed)

    assert '<source url="https://mirror.example.com/hello">https://mirror.example.com/hello</source>' in xml


def test_channel_options_from_reserved_nodes() -> None:
    feed = _make_feed(
        categories=[Category(text="Tech")],
        image=Image(url="https://example.com/logo.png", title="Logo", link="https://example.com/"),
        extensions=[
            ExtensionNode(name="_rss:ttl", text="60"),
            ExtensionNode(name="_rss:category", text="Science"),
            ExtensionNode(name="_rss:image-width", text="88"),
            ExtensionNode(name="_rss:image-height", text="not-a-number"),
            ExtensionNode(name="_rss:generator", text="multifeed"),
            ExtensionNode(name="_unknown:thing", text="dropped"),
        ],
    )

    xml = to_rss(feed)

    assert "<category>Science</category>" in xml
    assert "<category>Tech</category>" not in xml
    assert "<generator>multifeed</generator>" in xml
    assert "<ttl>60</ttl>" in xml
    assert "<width>88</width>" in xml
    assert "<height>" not in xml
    assert "_rss" not in xml
    assert "_unknown" not in xml


def test_passthrough_nodes_are_emitted_with_namespaces() -> None:
    feed = _make_feed(extensions=[ExtensionNode(name="itunes:image", attrs={"href": "https://example.com/a.jpg"})])
    feed.items[0].extensions = [ExtensionNode(name="dc:creator", text="Jane")]

    xml = to_rss(feed)

    assert 'xmlns:itunes="http://www.itunes.com/dtds/podcast-1.0.dtd"' in xml
    assert 'xmlns:dc="http://purl.org/dc/elements/1.1/"' in xml
    assert '<itunes:image href="https://example.com/a.jpg"/>' in xml
    assert "<dc:creator>Jane</dc:creator>" in xml
    assert xml.index("<dc:creator>") < xml.index("</item>")
    assert xml.index("<itunes:image") > xml.index("</item>")


def test_undeclared_prefix_raises() -> None:
    feed = _make_feed(extensions=[ExtensionNode(name="nope:thing", text="x")])

    with pytest.raises(FeedSerializationError, match="EncoderConfig.extra_namespaces"):
        to_rss(feed)


def test_encoding_does_not_mutate_feed() -> None:
    feed = _make_feed()
    before = feed.model_dump()

    to_rss(feed)

    assert feed.model_dump() == before


def test_missing_feed_raises() -> None:
    with pytest.raises(MissingFeedError):
        to_rss(None)


def test_write_matches_string() -> None:
    feed = _make_feed()
    sink = io.StringIO()

    write_rss(feed, sink)

    assert sink.getvalue() == to_rss(feed)


def test_items_keep_input_order() -> None:
    feed = _make_feed(items=[
        Item(title="March", created=datetime(2024, 3, 1, tzinfo=timezone.utc)),
        Item(title="January", created=datetime(2024, 1, 1, tzinfo=timezone.utc)),
        Item(title="February", created=datetime(2024, 2, 1, tzinfo=timezone.utc)),
    ])

    xml = to_rss(feed)

    positions = [xml.index(f"<title>{title}</title>") for title in ("March", "January", "February")]
    assert positions == sorted(positions)


def test_default_namespace_passthrough_keeps_its_uri() -> None:
    feed = _make_feed(extensions=[ExtensionNode(name="foo", attrs={"xmlns": "https://acme.example/ns"}, text="v")])

    xml = to_rss(feed)

    assert '<foo xmlns="https://acme.example/ns">v</foo>' in xml
