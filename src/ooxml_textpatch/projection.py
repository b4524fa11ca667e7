"""
Text-node projection: addressable handles to the text leaves of a markup tree.

Only elements named as the flavor's atomic text leaf (``w:t`` or ``a:t``)
are ever read as text. Every other element is either recursed into or, for
the flavor's skipped containers, ignored; nothing is flattened into a string.
"""

import logging
from dataclasses import dataclass

from .errors import StaleSlotError
from .flavors import Flavor, FlavorSpec, flavor_spec
from .markup import Element, Text, xml_safe

logger = logging.getLogger(__name__)

XML_SPACE = "xml:space"


@dataclass(frozen=True)
class TextSlot:
    """Handle to one text leaf in a parsed part.

    A slot does not own its node: reads and writes resolve ``address``
    against the tree of ``part`` held by the session.

    Attributes:
        part: Name of the part owning the leaf
        address: Child indices from the part root to the text leaf element
        original_text: Leaf text when the slot was enumerated
        paragraph: Ordinal of the enclosing paragraph within the part (-1 if none)
        index: Position of the slot in its enumeration
    """

    part: str
    address: tuple[int, ...]
    original_text: str
    paragraph: int = -1
    index: int = 0


def leaf_text(leaf: Element) -> str | None:
    """Get the text of a leaf element.

    Returns:
        The single Text child's value, "" for an empty leaf, or None if the
        leaf holds anything other than exactly one Text node
    """
    if not leaf.children:
        return ""
    if len(leaf.children) == 1 and isinstance(leaf.children[0], Text):
        return leaf.children[0].value
    return None


class _SlotWalker:
    """Depth-first, document-order collector of text slots."""

    def __init__(self, spec: FlavorSpec, part: str, start: int) -> None:
        self.spec = spec
        self.part = part
        self.slots: list[TextSlot] = []
        self._next_index = start
        self._paragraphs = 0

    def walk(self, element: Element, address: tuple[int, ...], paragraph: int) -> None:
        if element.name in self.spec.skipped_containers:
            return

        if element.name == self.spec.text_leaf:
            text = leaf_text(element)
            if text is None:
                logger.debug(f"Skipping non-text content in {self.part} leaf at {address}")
                return
            self.slots.append(TextSlot(self.part, address, text, paragraph, self._next_index))
            self._next_index += 1
            return

        if element.name == self.spec.paragraph:
            paragraph = self._paragraphs
            self._paragraphs += 1

        for position, child in enumerate(element.children):
            if isinstance(child, Element):
                self.walk(child, address + (position,), paragraph)


def enumerate_slots(
    root: Element, flavor: Flavor | str, part: str, start: int = 0
) -> list[TextSlot]:
    """Enumerate the text leaves of one part in document order.

    Args:
        root: Root element of the part
        flavor: Document flavor deciding the leaf and grouping names
        part: Name of the part, recorded on every slot
        start: Index given to the first slot (for concatenating parts)

    Returns:
        Slots in reading order; no two slots share an address
    """
    walker = _SlotWalker(flavor_spec(flavor), part, start)
    walker.walk(root, (), -1)
    logger.debug(f"Found {len(walker.slots)} text slots in {part}")
    return walker.slots


def resolve_leaf(root: Element, slot: TextSlot, flavor: Flavor | str) -> Element:
    """Resolve a slot's address to its leaf element.

    Raises:
        StaleSlotError: If the address does not lead to a text leaf
    """
    node = root
    for depth, position in enumerate(slot.address):
        if position >= len(node.children) or not isinstance(node.children[position], Element):
            raise StaleSlotError(slot.part, slot.address, f"no element at depth {depth}")
        node = node.children[position]  # type: ignore[assignment]

    leaf_name = flavor_spec(flavor).text_leaf
    if node.name != leaf_name:
        raise StaleSlotError(slot.part, slot.address, f"expected {leaf_name}, found {node.name}")
    return node


def read_text(root: Element, slot: TextSlot, flavor: Flavor | str) -> str:
    """Read the current text of a slot."""
    text = leaf_text(resolve_leaf(root, slot, flavor))
    if text is None:
        raise StaleSlotError(slot.part, slot.address, "leaf no longer holds plain text")
    return text


def write_text(root: Element, slot: TextSlot, text: str, flavor: Flavor | str) -> bool:
    """Replace the text of a slot in place.

    Only the leaf's Text node changes (plus ``xml:space="preserve"`` for
    flavors that need it when the text has outer whitespace). Writing the
    text already present is a no-op.

    Returns:
        True if the tree was modified
    """
    spec = flavor_spec(flavor)
    leaf = resolve_leaf(root, slot, spec.flavor)
    current = leaf_text(leaf)
    if current is None:
        raise StaleSlotError(slot.part, slot.address, "leaf no longer holds plain text")

    text = xml_safe(text)
    if text == current:
        return False

    if leaf.children:
        leaf.children[0].value = text  # type: ignore[union-attr]
    else:
        leaf.children.append(Text(text))

    if spec.preserve_space and text != text.strip() and leaf.attributes.get(XML_SPACE) != "preserve":
        leaf.attributes[XML_SPACE] = "preserve"

    return True
