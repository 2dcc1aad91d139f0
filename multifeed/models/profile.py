"""Target format profiles."""

from enum import Enum


class Profile(str, Enum):
    """Supported output formats"""
    RSS = "rss"
    ATOM = "atom"
    JSON = "json"
    PSP = "psp"
