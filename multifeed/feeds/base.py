"""
Feed Encoder Infrastructure
===========================
Capability interface shared by all output formats and the extension
merge step.

Each encoder takes the canonical Feed as a parameter and runs the same
three stages: project canonical fields, merge extension nodes (reserved
names are consumed through a lookup table of handler closures, everything
else passes through), and serialize.

Responsibility: Encoder contract, reserved-name dispatch, XML plumbing
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, NamedTuple, Optional, TextIO
import logging

from lxml import etree

from ..config import EncoderConfig, settings
from ..exceptions import MissingFeedError
from ..models.extension import ExtensionNode
from ..models.feed import Feed
from ..models.profile import Profile
from ..utils.cdata import CDATA_NODE_NAME
from ..utils.xml_writer import append_extension, namespace_table, to_xml_string, write_xml

logger = logging.getLogger(__name__)

# A handler consumes one reserved node into the per-call overrides dict.
ConfigHandler = Callable[[ExtensionNode, Dict[str, Any]], None]


class MergedExtensions(NamedTuple):
    """Result of splitting a scope's extension nodes"""
    overrides: Dict[str, Any]
    passthrough: List[ExtensionNode]


def merge_extensions(
    nodes: List[ExtensionNode],
    handlers: Dict[str, ConfigHandler],
    scope: str,
) -> MergedExtensions:
    """
    Split extension nodes into consumed overrides and pass-through nodes.

    Args:
        nodes: Extension nodes of one scope, in caller order
        handlers: Reserved lower-cased name -> handler closure
        scope: Label used in log messages (e.g. 'channel', 'item[3]')

    Returns:
        Overrides produced by the handlers and the nodes to emit verbatim
    """
    overrides: Dict[str, Any] = {}
    passthrough: List[ExtensionNode] = []
    for node in nodes:
        handler = handlers.get(node.key)
        if handler is not None:
            handler(node, overrides)
            logger.debug("Consumed %s at %s scope", node.name, scope)
            continue
        if node.is_config:
            logger.debug("Dropping unrecognised configuration node %s at %s scope", node.name, scope)
            continue
        passthrough.append(node)
    return MergedExtensions(overrides, passthrough)


# MARK: - Handler factories

def set_text(key: str) -> ConfigHandler:
    """Store the trimmed node text when non-empty."""
    def handler(node: ExtensionNode, overrides: Dict[str, Any]) -> None:
        value = node.text.strip()
        if value:
            overrides[key] = value
    return handler


def set_positive_int(key: str) -> ConfigHandler:
    """Store the node text as a positive integer; other values are ignored."""
    def handler(node: ExtensionNode, overrides: Dict[str, Any]) -> None:
        try:
            value = int(node.text.strip())
        except ValueError:
            logger.warning("Ignoring %s: %r is not an integer", node.name, node.text)
            return
        if value > 0:
            overrides[key] = value
        else:
            logger.warning("Ignoring %s: %d is not positive", node.name, value)
    return handler


def set_bool(key: str) -> ConfigHandler:
    """Store 'true'/'false' node text as a boolean."""
    def handler(node: ExtensionNode, overrides: Dict[str, Any]) -> None:
        value = node.text.strip().lower()
        if value in ("true", "false"):
            overrides[key] = value == "true"
        else:
            logger.warning("Ignoring %s: expected true/false, got %r", node.name, node.text)
    return handler


def set_attr(key: str, attr: str) -> ConfigHandler:
    """Store one attribute of the node when non-empty."""
    def handler(node: ExtensionNode, overrides: Dict[str, Any]) -> None:
        value = node.attrs.get(attr, "").strip()
        if value:
            overrides[key] = value
    return handler


def consume(node: ExtensionNode, overrides: Dict[str, Any]) -> None:
    """Strip a node that is read elsewhere (e.g. the CDATA flag)."""


# The CDATA flag is resolved per scope by utils.cdata; the node itself is
# never emitted.
XML_SCOPE_HANDLERS: Dict[str, ConfigHandler] = {CDATA_NODE_NAME: consume}


class FeedEncoder(ABC):
    """
    Produces a structural tree for one target format.

    Subclasses implement ``build`` (canonical Feed -> format tree) and the
    serialization hooks. Encoding never mutates the Feed; per-call values
    are computed into local structures.

    Example:
        xml = RssEncoder().encode(feed)
    """

    profile: Profile
    media_type: str = "application/octet-stream"

    def __init__(self, config: Optional[EncoderConfig] = None):
        """
        Initialize encoder.

        Args:
            config: Encoder configuration (defaults to the global settings)
        """
        self.config = config or settings.encoder

    @staticmethod
    def require_feed(feed: Optional[Feed]) -> Feed:
        if feed is None:
            raise MissingFeedError()
        return feed

    def prepare(self, feed: Optional[Feed]) -> Feed:
        """Pre-encode hook; the base version only rejects a missing feed."""
        return self.require_feed(feed)

    @abstractmethod
    def build(self, feed: Feed) -> Any:
        """Map the canonical feed to the target's structural tree."""

    @abstractmethod
    def serialize(self, tree: Any) -> str:
        """Render a structural tree as text."""

    @abstractmethod
    def write_tree(self, tree: Any, sink: TextIO) -> None:
        """Write a structural tree to a text stream."""

    def encode(self, feed: Optional[Feed]) -> str:
        """Encode the feed to a string."""
        feed = self.prepare(feed)
        tree = self.build(feed)
        logger.debug("Encoded %s feed %r with %d items", self.profile.value, feed.title, len(feed.items))
        return self.serialize(tree)

    def write(self, feed: Optional[Feed], sink: TextIO) -> None:
        """Encode the feed and write it to ``sink``."""
        feed = self.prepare(feed)
        self.write_tree(self.build(feed), sink)


class XmlFeedEncoder(FeedEncoder):
    """Shared plumbing for RSS, Atom and PSP."""

    media_type = "application/xml"

    def namespaces_for(self, feed: Feed) -> Dict[str, str]:
        """Prefix table covering every extension node in the feed."""
        nodes = list(feed.extensions)
        for item in feed.items:
            nodes.extend(item.extensions)
        return namespace_table(nodes, self.config.extra_namespaces)

    @staticmethod
    def append_passthrough(
        parent: etree._Element,
        nodes: List[ExtensionNode],
        namespaces: Dict[str, str],
        default_ns: Optional[str] = None,
    ) -> None:
        for node in nodes:
            if not node.name.strip():
                continue
            append_extension(parent, node, namespaces, default_ns)

    def serialize(self, tree: etree._Element) -> str:
        return to_xml_string(tree, pretty_print=self.config.pretty_print)

    def write_tree(self, tree: etree._Element, sink: TextIO) -> None:
        write_xml(tree, sink, pretty_print=self.config.pretty_print)
