from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from multifeed.models import Author, Category, Enclosure, Feed, Item


def _make_feed() -> Feed:
    """Helper to create a feed with three dated items."""
    feed = Feed(title="My Blog")
    for day in (3, 1, 2):
        feed.add(Item(title=f"Post {day}", created=datetime(2024, 1, day, tzinfo=timezone.utc)))
    return feed


def test_items_keep_insertion_order() -> None:
    assert [item.title for item in _make_feed().items] == ["Post 3", "Post 1", "Post 2"]


def test_sort_is_explicit_and_stable() -> None:
    feed = _make_feed()
    feed.add(Item(title="Post 1b", created=datetime(2024, 1, 1, tzinfo=timezone.utc)))

    feed.sort(key=lambda item: item.created)

    assert [item.title for item in feed.items] == ["Post 1", "Post 1b", "Post 2", "Post 3"]


@pytest.mark.parametrize(
    "value, expected",
    [(True, "true"), (False, "false"), ("TRUE", "true"), (" false ", "false"), ("", None), (None, None)],
)
def test_is_perma_link_normalization(value, expected) -> None:
    assert Item(is_perma_link=value).is_perma_link == expected


@pytest.mark.parametrize("value, expected", [(True, "true"), ("TRUE", "true"), (" ", None)])
def test_is_perma_link_normalized_on_assignment(value, expected) -> None:
    item = Item()

    item.is_perma_link = value

    assert item.is_perma_link == expected


def test_enclosure_completeness() -> None:
    assert Enclosure(url="https://example.com/a.mp3", length=10, type="audio/mpeg").is_complete
    assert not Enclosure(url="https://example.com/a.mp3", length=0, type="audio/mpeg").is_complete
    assert not Enclosure(url="https://example.com/a.mp3", length=10, type=" ").is_complete
    assert not Enclosure(url="", length=10, type="audio/mpeg").is_complete


def test_first_category_skips_blank_entries() -> None:
    feed = Feed(categories=[Category(text=" "), Category(text="Technology"), Category(text="News")])

    assert feed.first_category() == "Technology"


def test_author_is_empty() -> None:
    assert Author().is_empty
    assert not Author(email="a@example.com").is_empty


def test_negative_duration_is_rejected() -> None:
    with pytest.raises(ValidationError):
        Item(duration_seconds=-1)


def test_assignment_is_validated() -> None:
    item = Item()

    with pytest.raises(ValidationError):
        item.duration_seconds = -5
