"""
XML tree construction and serialization on top of lxml.

Encoders build an lxml element tree with these helpers and hand it to
``to_xml_string``/``write_xml``, which prepend a fixed XML declaration and
pretty-print the body.

Responsibility: Extension node encoding, CDATA-aware text elements, XML output
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Mapping, Optional, TextIO

from lxml import etree

from ..exceptions import FeedSerializationError
from ..models.extension import ExtensionNode
from .cdata import can_wrap, needs_cdata, unwrap_cdata
from .namespaces import KNOWN_NAMESPACES, XML_NS

logger = logging.getLogger(__name__)

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'

_XMLNS_PREFIX = "xmlns:"


def _split_name(name: str) -> tuple[str, str]:
    prefix, sep, local = name.strip().partition(":")
    if not sep:
        return "", prefix
    return prefix, local


def namespace_table(
    nodes: Iterable[ExtensionNode],
    extra: Optional[Mapping[str, str]] = None,
) -> Dict[str, str]:
    """
    Prefix -> URI table for a set of extension trees.

    Combines the known namespaces, configured extras, and any ``xmlns:p``
    attributes declared on the nodes themselves (later sources win).
    """
    table: Dict[str, str] = dict(KNOWN_NAMESPACES)
    if extra:
        table.update(extra)

    def visit(node: ExtensionNode) -> None:
        for key, value in node.attrs.items():
            if key.startswith(_XMLNS_PREFIX) and value:
                table[key[len(_XMLNS_PREFIX):]] = value
        for child in node.children:
            visit(child)

    for node in nodes:
        visit(node)
    return table


def used_prefixes(nodes: Iterable[ExtensionNode]) -> set[str]:
    """Every prefix referenced by element or attribute names in the trees."""
    found: set[str] = set()

    def visit(node: ExtensionNode) -> None:
        prefix, _ = _split_name(node.name)
        if prefix:
            found.add(prefix)
        for key in node.attrs:
            if key.startswith(_XMLNS_PREFIX) or key == "xmlns":
                continue
            prefix, _ = _split_name(key)
            if prefix:
                found.add(prefix)
        for child in node.children:
            visit(child)

    for node in nodes:
        visit(node)
    found.discard("xml")
    return found


def root_nsmap(
    base: Mapping[Optional[str], str],
    nodes: Iterable[ExtensionNode],
    namespaces: Mapping[str, str],
) -> Dict[Optional[str], str]:
    """
    Namespace map for a document root.

    Starts from the format's required declarations and adds every prefix the
    pass-through nodes use, so that each namespace is declared exactly once.
    """
    nsmap: Dict[Optional[str], str] = dict(base)
    for prefix in sorted(used_prefixes(nodes)):
        if prefix in nsmap:
            continue
        uri = namespaces.get(prefix)
        if uri is None:
            raise FeedSerializationError(
                f"undeclared namespace prefix {prefix!r}; declare it with an xmlns:{prefix} attribute "
                f"or in EncoderConfig.extra_namespaces"
            )
        # Already declared under another prefix (e.g. Atom as default namespace)
        if uri in nsmap.values():
            continue
        nsmap[prefix] = uri
    return nsmap


def qualify(name: str, namespaces: Mapping[str, str], default_ns: Optional[str] = None) -> str:
    """
    Resolve 'prefix:local' to lxml's '{uri}local' form.

    Unprefixed names land in ``default_ns`` when one is given.
    """
    prefix, local = _split_name(name)
    if not local:
        raise FeedSerializationError(f"invalid element name {name!r}")
    if not prefix:
        return f"{{{default_ns}}}{local}" if default_ns else local
    if prefix == "xml":
        return f"{{{XML_NS}}}{local}"
    uri = namespaces.get(prefix)
    if uri is None:
        raise FeedSerializationError(
            f"undeclared namespace prefix {prefix!r} in {name!r}; "
            f"add it to EncoderConfig.extra_namespaces"
        )
    return f"{{{uri}}}{local}"


def _qualify_attr(name: str, namespaces: Mapping[str, str]) -> str:
    # Unprefixed attributes never take the default namespace.
    return qualify(name, namespaces)


def append_extension(
    parent: etree._Element,
    node: ExtensionNode,
    namespaces: Mapping[str, str],
    default_ns: Optional[str] = None,
) -> etree._Element:
    """
    Encode an extension node (recursively) as a child of ``parent``.

    Attributes are written in sorted key order; ``xmlns:*`` attributes are
    namespace declarations and are already hoisted to the root. A bare
    ``xmlns`` attribute becomes the default namespace of the node and of
    its unprefixed descendants, and is declared on the node itself.
    """
    own_ns = (node.attrs.get("xmlns") or "").strip()
    nsmap = None
    if own_ns and own_ns != default_ns:
        nsmap = {None: own_ns}
        default_ns = own_ns
    element = etree.SubElement(parent, qualify(node.name, namespaces, default_ns), nsmap=nsmap)
    for key, value in node.sorted_attrs():
        if key == "xmlns" or key.startswith(_XMLNS_PREFIX):
            continue
        element.set(_qualify_attr(key, namespaces), value)
    if node.text:
        element.text = node.text
    for child in node.children:
        append_extension(element, child, namespaces, default_ns)
    return element


def text_element(
    parent: etree._Element,
    tag: str,
    value: Optional[str],
    required: bool = False,
    attrib: Optional[Mapping[str, str]] = None,
) -> Optional[etree._Element]:
    """Append <tag>value</tag> when the trimmed value is non-empty (or required)."""
    text = value.strip() if value else ""
    if not text and not required:
        return None
    element = etree.SubElement(parent, tag, attrib=dict(attrib) if attrib else None)
    if text:
        element.text = text
    return element


def int_element(parent: etree._Element, tag: str, value: Optional[int]) -> Optional[etree._Element]:
    """Append <tag>n</tag> when n is positive."""
    if value is None or value <= 0:
        return None
    element = etree.SubElement(parent, tag)
    element.text = str(value)
    return element


def rich_text_element(
    parent: etree._Element,
    tag: str,
    value: Optional[str],
    use_cdata: bool,
    required: bool = False,
    attrib: Optional[Mapping[str, str]] = None,
) -> Optional[etree._Element]:
    """
    Append a rich-text element following the CDATA policy.

    Existing CDATA wrappers are stripped first, so re-encoding never nests
    them. CDATA is used only when enabled and the value contains '<' or '&'.
    """
    text = unwrap_cdata(value.strip()) if value else ""
    if not text.strip() and not required:
        return None
    element = etree.SubElement(parent, tag, attrib=dict(attrib) if attrib else None)
    if not text:
        return element
    if use_cdata and needs_cdata(text) and can_wrap(text):
        element.text = etree.CDATA(text)
    else:
        if use_cdata and needs_cdata(text):
            logger.debug("Value of <%s> contains ']]>'; escaping instead of CDATA", tag)
        element.text = text
    return element


def to_xml_string(root: etree._Element, pretty_print: bool = True) -> str:
    """XML declaration immediately followed by the body, no trailing newline."""
    body = etree.tostring(root, encoding="unicode", pretty_print=pretty_print)
    return XML_DECLARATION + body.rstrip("\n")


def write_xml(root: etree._Element, sink: TextIO, pretty_print: bool = True) -> None:
    """Write the serialized document to a text stream."""
    sink.write(to_xml_string(root, pretty_print=pretty_print))
