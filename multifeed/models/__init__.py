"""Canonical feed models."""

from .extension import ExtensionNode, CONFIG_PREFIX
from .feed import Author, Category, Enclosure, Feed, Image, Item, Link
from .profile import Profile

__all__ = [
    'Author',
    'Category',
    'CONFIG_PREFIX',
    'Enclosure',
    'ExtensionNode',
    'Feed',
    'Image',
    'Item',
    'Link',
    'Profile',
]
