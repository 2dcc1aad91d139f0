"""
CDATA emission policy for the XML encoders.

A scope-level flag decides whether rich-text values are wrapped in CDATA
instead of being entity-escaped. The flag is computed once per encode call
from the feed extensions and passed down to items explicitly; nothing here
keeps state between calls.

Responsibility: CDATA flag resolution and idempotent wrapping
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from ..models.extension import ExtensionNode

CDATA_NODE_NAME = "_xml:cdata"

_CDATA_OPEN = "<![CDATA["
_CDATA_CLOSE = "]]>"


def unwrap_cdata(value: str) -> str:
    """Remove a single top-level CDATA wrapper; other input is returned as-is."""
    if not value:
        return value
    trimmed = value.strip()
    if trimmed.startswith(_CDATA_OPEN) and trimmed.endswith(_CDATA_CLOSE):
        return trimmed[len(_CDATA_OPEN):-len(_CDATA_CLOSE)]
    return value


def wrap_cdata(value: str) -> str:
    """Wrap in a CDATA section without ever nesting wrappers."""
    return f"{_CDATA_OPEN}{unwrap_cdata(value)}{_CDATA_CLOSE}"


def needs_cdata(value: str) -> bool:
    """True when the value has characters that would otherwise be escaped."""
    return bool(value) and ("<" in value or "&" in value)


def can_wrap(value: str) -> bool:
    """A CDATA section cannot contain its own terminator."""
    return _CDATA_CLOSE not in value


def cdata_override(nodes: Iterable[ExtensionNode]) -> Optional[bool]:
    """
    Explicit CDATA preference from a list of extension nodes.

    Returns None when no recognised "_xml:cdata" node is present. Values
    other than "true"/"false" are ignored.
    """
    for node in nodes:
        if node.key != CDATA_NODE_NAME:
            continue
        flag = node.text.strip().lower()
        if flag == "true":
            return True
        if flag == "false":
            return False
    return None


def use_cdata_for_feed(nodes: Iterable[ExtensionNode], default: bool = True) -> bool:
    """Feed-scope flag: explicit override or the configured default."""
    override = cdata_override(nodes)
    return default if override is None else override


def use_cdata_for_item(parent_use: bool, nodes: Iterable[ExtensionNode]) -> bool:
    """Item-scope flag, cascading from the parent when not overridden."""
    override = cdata_override(nodes)
    return parent_use if override is None else override


def with_cdata_override(nodes: Iterable[ExtensionNode], use: bool) -> List[ExtensionNode]:
    """Return a new node list with a CDATA override appended."""
    out = list(nodes)
    out.append(ExtensionNode(name=CDATA_NODE_NAME, text="true" if use else "false"))
    return out
