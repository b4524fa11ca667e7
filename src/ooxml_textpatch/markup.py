"""
Generic markup tree for the XML parts of an OOXML package.

Parts are parsed with lxml and converted into a small ordered tree of
Element/Text nodes whose names are the literal qualified names used in the
source (``w:t``, ``a:r``). Namespace declarations are kept as ordinary
``xmlns``/``xmlns:p`` attributes on the element that introduces them, so the
projection layer can match on names exactly as they appear in the documents.

Serialization rebuilds an lxml tree from those literal names and writes it
without pretty printing, so no whitespace is introduced between elements.
"""

import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass, field

from lxml import etree

from .constants import DEFAULT_ENCODING, XML_NAMESPACE
from .errors import MalformedMarkupError

logger = logging.getLogger(__name__)

XMLNS = "xmlns"
XMLNS_PREFIX = "xmlns:"

# Characters that cannot appear in an XML 1.0 document, even escaped
_INVALID_XML_CHARS = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ufffe\uffff]")


@dataclass
class Text:
    """A run of character data."""

    value: str


@dataclass
class Comment:
    """An XML comment."""

    value: str


@dataclass
class ProcessingInstruction:
    """An XML processing instruction."""

    target: str
    value: str = ""


@dataclass
class Element:
    """An element with its qualified name, ordered attributes and children.

    Attributes:
        name: Qualified name as written in the source (e.g., "w:t")
        attributes: Attributes in source order, namespace declarations included
        children: Child nodes in document order
    """

    name: str
    attributes: dict[str, str] = field(default_factory=dict)
    children: list["MarkupNode"] = field(default_factory=list)

    @property
    def prefix(self) -> str | None:
        """Namespace prefix of the element name, if any."""
        prefix, sep, _ = self.name.partition(":")
        return prefix if sep else None

    @property
    def local_name(self) -> str:
        """Element name without its prefix."""
        return self.name.rpartition(":")[2]

    def elements(self) -> Iterator["Element"]:
        """Iterate over direct element children."""
        for child in self.children:
            if isinstance(child, Element):
                yield child

    def find(self, name: str) -> "Element | None":
        """Return the first direct child element with the given name."""
        for child in self.elements():
            if child.name == name:
                return child
        return None

    def iter(self, name: str | None = None) -> Iterator["Element"]:
        """Iterate depth-first over this element and its descendants.

        Args:
            name: Only yield elements with this qualified name
        """
        stack: list[Element] = [self]
        while stack:
            node = stack.pop()
            if name is None or node.name == name:
                yield node
            stack.extend(reversed(list(node.elements())))

    def text_content(self) -> str:
        """Concatenate the Text children of this element (not descendants)."""
        return "".join(child.value for child in self.children if isinstance(child, Text))

    def namespace_declarations(self) -> dict[str | None, str]:
        """Get the namespace declarations made on this element.

        Returns:
            Mapping of prefix (None for the default namespace) to URI
        """
        declared: dict[str | None, str] = {}
        for key, value in self.attributes.items():
            if key == XMLNS:
                declared[None] = value
            elif key.startswith(XMLNS_PREFIX):
                declared[key[len(XMLNS_PREFIX) :]] = value
        return declared


MarkupNode = Element | Text | Comment | ProcessingInstruction


@dataclass
class MarkupDocument:
    """A parsed XML part: its root element plus declaration details.

    Attributes:
        root: The document element
        encoding: Encoding named in the XML declaration
        standalone: Value of the standalone declaration, None if absent
        prolog: Comments/PIs before the root element
        epilog: Comments/PIs after the root element
    """

    root: Element
    encoding: str = DEFAULT_ENCODING
    standalone: bool | None = None
    prolog: list[Comment | ProcessingInstruction] = field(default_factory=list)
    epilog: list[Comment | ProcessingInstruction] = field(default_factory=list)


def xml_safe(text: str) -> str:
    """Remove characters that are not allowed anywhere in XML 1.0."""
    return _INVALID_XML_CHARS.sub("", text)


# =============================================================================
# Parsing
# =============================================================================


def _make_parser() -> etree.XMLParser:
    return etree.XMLParser(
        remove_blank_text=False,
        resolve_entities=False,
        no_network=True,
        huge_tree=True,
    )


def parse(data: bytes, part: str | None = None) -> MarkupDocument:
    """Parse XML bytes into a MarkupDocument.

    Args:
        data: Raw XML bytes of a part
        part: Part name, used in error messages

    Returns:
        MarkupDocument with literal qualified names

    Raises:
        MalformedMarkupError: If the bytes are not well-formed XML
    """
    try:
        lxml_root = etree.fromstring(data, _make_parser())
    except (etree.XMLSyntaxError, ValueError) as e:
        raise MalformedMarkupError(str(e), part) from e
    if lxml_root is None:
        raise MalformedMarkupError("document is empty", part)

    docinfo = lxml_root.getroottree().docinfo
    if docinfo.doctype:
        raise MalformedMarkupError("DTD declarations are not allowed in OOXML parts", part)

    prolog = [_convert_misc(node) for node in lxml_root.itersiblings(preceding=True)]
    prolog.reverse()
    epilog = [_convert_misc(node) for node in lxml_root.itersiblings()]

    root = _convert_element(lxml_root, {}, part)
    return MarkupDocument(
        root=root,
        encoding=docinfo.encoding or DEFAULT_ENCODING,
        standalone=docinfo.standalone,
        prolog=prolog,
        epilog=epilog,
    )


def _convert_misc(node: etree._Element) -> Comment | ProcessingInstruction:
    if isinstance(node, etree._ProcessingInstruction):
        return ProcessingInstruction(node.target, node.text or "")
    return Comment(node.text or "")


def _convert_element(
    node: etree._Element, parent_nsmap: dict[str | None, str], part: str | None
) -> Element:
    nsmap = node.nsmap
    attributes: dict[str, str] = {}

    # nsmap lists the element's own declarations first, then inherited ones
    for prefix, uri in nsmap.items():
        if prefix not in parent_nsmap or parent_nsmap[prefix] != uri:
            attributes[XMLNS if prefix is None else f"{XMLNS_PREFIX}{prefix}"] = uri
    if parent_nsmap.get(None) and None not in nsmap:
        attributes[XMLNS] = ""

    for key, value in node.attrib.items():
        attributes[_qualify_attribute(key, nsmap, part)] = value

    qname = etree.QName(node)
    name = f"{node.prefix}:{qname.localname}" if node.prefix else qname.localname
    element = Element(name, attributes)

    if node.text is not None:
        element.children.append(Text(node.text))
    for child in node:
        if isinstance(child, etree._Comment):
            element.children.append(Comment(child.text or ""))
        elif isinstance(child, etree._ProcessingInstruction):
            element.children.append(ProcessingInstruction(child.target, child.text or ""))
        elif isinstance(child, etree._Entity):
            raise MalformedMarkupError(f"unresolved entity reference {child.text}", part)
        else:
            element.children.append(_convert_element(child, nsmap, part))
        if child.tail is not None:
            element.children.append(Text(child.tail))

    return element


def _qualify_attribute(key: str, nsmap: dict[str | None, str], part: str | None) -> str:
    if not key.startswith("{"):
        return key
    qname = etree.QName(key)
    if qname.namespace == XML_NAMESPACE:
        return f"xml:{qname.localname}"
    for prefix, uri in nsmap.items():
        if prefix is not None and uri == qname.namespace:
            return f"{prefix}:{qname.localname}"
    raise MalformedMarkupError(f"no prefix bound to namespace {qname.namespace}", part)


# =============================================================================
# Serialization
# =============================================================================


def serialize(node: MarkupDocument | Element) -> bytes:
    """Serialize a markup tree back to XML bytes.

    The output always starts with an XML declaration using the original
    encoding and standalone flag. Attribute and child order is preserved and
    no formatting whitespace is added.

    Args:
        node: A MarkupDocument, or a bare root Element (written as UTF-8)

    Returns:
        Encoded XML bytes

    Raises:
        MalformedMarkupError: If a name uses an undeclared prefix or a value
            cannot be represented in XML
    """
    document = node if isinstance(node, MarkupDocument) else MarkupDocument(node)

    try:
        lxml_root = _build_element(document.root, None, {})
        for item in document.prolog:
            lxml_root.addprevious(_build_misc(item))
        for item in reversed(document.epilog):
            lxml_root.addnext(_build_misc(item))
    except ValueError as e:
        raise MalformedMarkupError(str(e)) from e

    return etree.tostring(
        lxml_root.getroottree(),
        xml_declaration=True,
        encoding=document.encoding,
        standalone=document.standalone,
    )


def _build_misc(node: Comment | ProcessingInstruction) -> etree._Element:
    if isinstance(node, ProcessingInstruction):
        return etree.ProcessingInstruction(node.target, node.value or None)
    return etree.Comment(node.value)


def _build_element(
    node: Element, parent: etree._Element | None, scope: dict[str | None, str]
) -> etree._Element:
    declared: dict[str | None, str] = {}
    plain: list[tuple[str, str]] = []
    for key, value in node.attributes.items():
        if key == XMLNS:
            declared[None] = value
        elif key.startswith(XMLNS_PREFIX):
            declared[key[len(XMLNS_PREFIX) :]] = value
        else:
            plain.append((key, value))

    scope = {**scope, **declared}
    if scope.get(None) == "":
        del scope[None]
    nsmap = {prefix: uri for prefix, uri in declared.items() if uri}

    tag = _clark_name(node.name, scope, is_attribute=False)
    if parent is None:
        element = etree.Element(tag, nsmap=nsmap)
    else:
        element = etree.SubElement(parent, tag, nsmap=nsmap)

    for key, value in plain:
        element.set(_clark_name(key, scope, is_attribute=True), value)

    last: etree._Element | None = None
    for child in node.children:
        if isinstance(child, Text):
            if last is None:
                element.text = (element.text or "") + child.value
            else:
                last.tail = (last.tail or "") + child.value
        elif isinstance(child, Element):
            last = _build_element(child, element, scope)
        else:
            last = _build_misc(child)
            element.append(last)

    return element


def _clark_name(name: str, scope: dict[str | None, str], is_attribute: bool) -> str:
    prefix, sep, local = name.partition(":")
    if not sep:
        # Unprefixed attributes are never in a namespace
        if is_attribute or None not in scope:
            return name
        return f"{{{scope[None]}}}{name}"
    if prefix == "xml":
        return f"{{{XML_NAMESPACE}}}{local}"
    if prefix not in scope:
        raise MalformedMarkupError(f"undeclared namespace prefix '{prefix}' in '{name}'")
    return f"{{{scope[prefix]}}}{local}"
