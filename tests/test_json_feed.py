import io
import json
from datetime import datetime, timezone

import pytest

from multifeed import (
    Author,
    Enclosure,
    ExtensionNode,
    Feed,
    Image,
    Item,
    Link,
    MissingFeedError,
    to_json,
    write_json,
)
from multifeed.config import EncoderConfig
from multifeed.feeds import JsonFeedEncoder


def _make_feed(**overrides) -> Feed:
    """Helper to create a feed with one item carrying an id."""
    fields = {
        "title": "My Blog",
        "link": Link(href="https://example.com/"),
        "feed_url": "https://example.com/feed.json",
        "description": "Notes",
        "items": [
            Item(
                id="post-1",
                title="Hello World",
                link=Link(href="https://example.com/hello"),
                description="Summary",
                content="<p>Body</p>",
                created=datetime(2024, 2, 3, 12, 0, 0, 500000, tzinfo=timezone.utc),
                updated=datetime(2024, 2, 4, tzinfo=timezone.utc),
            )
        ],
    }
    fields.update(overrides)
    return Feed(**fields)


def _decode(feed: Feed) -> dict:
    return json.loads(to_json(feed))


def test_top_level_fields() -> None:
    doc = _decode(_make_feed(language="en", image=Image(url="https://example.com/icon.png")))

    assert doc["version"] == "https://jsonfeed.org/version/1.1"
    assert doc["title"] == "My Blog"
    assert doc["home_page_url"] == "https://example.com/"
    assert doc["feed_url"] == "https://example.com/feed.json"
    assert doc["description"] == "Notes"
    assert doc["language"] == "en"
    assert doc["icon"] == "https://example.com/icon.png"
    assert doc["favicon"] == "https://example.com/icon.png"


def test_item_fields() -> None:
    item = _decode(_make_feed())["items"][0]

    assert item["id"] == "post-1"
    assert item["url"] == "https://example.com/hello"
    assert item["summary"] == "Summary"
    assert item["content_html"] == "<p>Body</p>"
    assert item["date_published"] == "2024-02-03T12:00:00.500000Z"
    assert item["date_modified"] == "2024-02-04T00:00:00Z"
    assert "attachments" not in item


def test_keys_are_sorted_and_indented() -> None:
    text = to_json(_make_feed())

    assert text.startswith('{\n  "description": "Notes",')
    assert list(json.loads(text)) == sorted(json.loads(text))


def test_indent_is_configurable() -> None:
    text = JsonFeedEncoder(EncoderConfig(json_indent=0)).encode(_make_feed())

    assert "\n" not in text


def test_authors() -> None:
    feed = _make_feed(author=Author(name="Jane", email="jane@example.com"))
    feed.items[0].author = Author(email="joe@example.com")

    doc = _decode(feed)

    assert doc["authors"] == [{"name": "Jane"}]
    assert doc["items"][0]["authors"] == [{"url": "mailto:joe@example.com"}]


def test_attachment_size_is_capped() -> None:
    feed = _make_feed()
    feed.items[0].enclosure = Enclosure(url="https://example.com/big.mp3", length=2147483747, type="audio/mpeg")
    feed.items[0].duration_seconds = 3600

    attachment = _decode(feed)["items"][0]["attachments"][0]

    assert attachment == {
        "url": "https://example.com/big.mp3",
        "mime_type": "audio/mpeg",
        "size": 2147483647,
        "duration_in_seconds": 3600,
    }


def test_attachment_omits_non_positive_size() -> None:
    feed = _make_feed()
    feed.items[0].enclosure = Enclosure(url="https://example.com/a.mp3", length=0, type="audio/mpeg")

    attachment = _decode(feed)["items"][0]["attachments"][0]

    assert "size" not in attachment
    assert "duration_in_seconds" not in attachment


def test_image_enclosure_maps_to_image() -> None:
    feed = _make_feed()
    feed.items[0].enclosure = Enclosure(url="https://example.com/a.png", length=5, type="image/png")

    item = _decode(feed)["items"][0]

    assert item["image"] == "https://example.com/a.png"
    assert "attachments" not in item


def test_fallback_id_and_external_url() -> None:
    feed = _make_feed()
    feed.items[0].id = ""
    feed.items[0].source = Link(href="https://mirror.example.com/hello")

    item = _decode(feed)["items"][0]

    assert item["id"] == "tag:example.com,2024-02-04:/hello"
    assert item["external_url"] == "https://mirror.example.com/hello"


def test_passthrough_nodes_are_flattened() -> None:
    feed = _make_feed(extensions=[
        ExtensionNode(name="x-top", text="top"),
        ExtensionNode(name="x-empty", attrs={"a": "1"}),
        ExtensionNode(name="title", text="Overridden"),
    ])
    feed.items[0].extensions = [
        ExtensionNode(name="_xml:cdata", text="false"),
        ExtensionNode(name="x-item", attrs={"dropped": "yes"}, text="value"),
    ]

    doc = _decode(feed)

    assert doc["x-top"] == "top"
    assert "x-empty" not in doc
    assert doc["title"] == "Overridden"
    assert doc["items"][0]["x-item"] == "value"
    assert "_xml:cdata" not in doc["items"][0]


def test_reserved_feed_and_item_nodes() -> None:
    feed = _make_feed(extensions=[
        ExtensionNode(name="_json:user_comment", text="Subscribe!"),
        ExtensionNode(name="_json:next_url", text="https://example.com/feed.json?page=2"),
        ExtensionNode(name="_json:expired", text="false"),
        ExtensionNode(name="_json:hub", attrs={"type": "WebSub", "url": "https://hub.example.com/"}),
        ExtensionNode(name="_json:hub", attrs={"type": "rssCloud"}),
    ])
    feed.items[0].extensions = [
        ExtensionNode(name="_json:content_text", text="Body"),
        ExtensionNode(name="_json:banner_image", text="https://example.com/banner.png"),
        ExtensionNode(name="_json:tag", text="python"),
        ExtensionNode(name="_json:tag", text="feeds"),
    ]

    doc = _decode(feed)
    item = doc["items"][0]

    assert doc["user_comment"] == "Subscribe!"
    assert doc["next_url"] == "https://example.com/feed.json?page=2"
    assert doc["expired"] is False
    assert doc["hubs"] == [{"type": "WebSub", "url": "https://hub.example.com/"}]
    assert item["content_text"] == "Body"
    assert item["banner_image"] == "https://example.com/banner.png"
    assert item["tags"] == ["python", "feeds"]


def test_empty_feed_has_empty_items() -> None:
    assert _decode(Feed(title="Empty"))["items"] == []


def test_write_appends_newline() -> None:
    feed = _make_feed()
    sink = io.StringIO()

    write_json(feed, sink)

    assert sink.getvalue() == to_json(feed) + "\n"


def test_missing_feed_raises() -> None:
    with pytest.raises(MissingFeedError):
        to_json(None)


def test_items_keep_input_order() -> None:
    feed = _make_feed(items=[
        Item(id="march", created=datetime(2024, 3, 1, tzinfo=timezone.utc)),
        Item(id="january", created=datetime(2024, 1, 1, tzinfo=timezone.utc)),
        Item(id="february", created=datetime(2024, 2, 1, tzinfo=timezone.utc)),
    ])

    assert [item["id"] for item in _decode(feed)["items"]] == ["march", "january", "february"]
