"""
Date formatting helpers for the target formats.

Naive datetimes are treated as UTC. Unset timestamps are represented as
None throughout the canonical model.
"""

from __future__ import annotations

from datetime import datetime, timezone
from email.utils import format_datetime
from typing import Optional


def ensure_aware(value: datetime) -> datetime:
    """Attach UTC to naive datetimes."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def first_set(*values: Optional[datetime]) -> Optional[datetime]:
    """Return the first timestamp that is set."""
    for value in values:
        if value is not None:
            return value
    return None


def format_rfc1123(value: Optional[datetime]) -> str:
    """RFC 1123 with a numeric zone, e.g. 'Sat, 03 Feb 2024 00:00:00 +0000'."""
    if value is None:
        return ""
    return format_datetime(ensure_aware(value).replace(microsecond=0))


def format_rfc3339(value: Optional[datetime]) -> str:
    """RFC 3339 without fractional seconds; UTC is written as 'Z'."""
    if value is None:
        return ""
    text = ensure_aware(value).replace(microsecond=0).isoformat()
    return text.replace("+00:00", "Z")


def format_json_date(value: Optional[datetime]) -> str:
    """RFC 3339 keeping fractional seconds when present."""
    if value is None:
        return ""
    return ensure_aware(value).isoformat().replace("+00:00", "Z")


def format_tag_date(value: datetime) -> str:
    """Calendar date used inside tag URIs (YYYY-MM-DD)."""
    return ensure_aware(value).strftime("%Y-%m-%d")
