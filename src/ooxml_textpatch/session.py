"""
DocumentSession: one edit of one Word or PowerPoint package.

A session opens a package, parses the parts that hold editable text,
enumerates their text slots, and lets a caller read the text, hand it to an
external text generator, and write the results back. Emitting re-serializes
only the parts that actually changed; every other part of the package is
copied through untouched.

Example:
    >>> session = open_document(data, "word-processing")
    >>> text = session.extract_plain_text()
    >>> session.apply_plain_text(rewrite(text))  # rewrite() is external
    >>> output = session.emit()
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, BinaryIO

from .constants import PRESENTATION_PART
from .content_types import ContentTypeMap
from .errors import (
    DocumentError,
    EmitError,
    MarkupError,
    SlotCountMismatchError,
    UnsupportedFlavorError,
)
from .flavors import FLAVOR_TABLE, Flavor, FlavorSpec
from .markup import MarkupDocument, parse, serialize
from .package import OOXMLPackage, write_atomic
from .plaintext import join_paragraphs, join_slides, split_paragraphs, split_slides
from .projection import TextSlot, enumerate_slots, read_text, write_text
from .relationships import RelationshipMap
from .templates import new_package_parts

logger = logging.getLogger(__name__)


@dataclass
class ApplyResult:
    """Result of applying generated text to a session.

    Attributes:
        segments: Number of paragraph segments the text was split into
        slots: Number of text slots in the session
        changed: Number of slots whose text actually changed
        fallback: True if the counts did not match and the whole text was
            written into the first slot instead
    """

    segments: int
    slots: int
    changed: int
    fallback: bool = False

    def __str__(self) -> str:
        """Get string representation of the result."""
        if self.fallback:
            return (
                f"Fallback: {self.segments} segments for {self.slots} slots, "
                "whole text written to the first slot"
            )
        return f"Applied {self.segments} segments ({self.changed} changed)"


def detect_flavor(package: OOXMLPackage) -> Flavor:
    """Work out whether a package is a Word document or a presentation.

    The content type of the main part decides; packages without a usable
    manifest fall back to checking which required parts are present.

    Raises:
        UnsupportedFlavorError: If the package matches no flavor
    """
    content_types = ContentTypeMap(package)
    for spec in FLAVOR_TABLE.values():
        if content_types.get_content_type(spec.required_parts[0]) in spec.main_content_types:
            return spec.flavor

    for spec in FLAVOR_TABLE.values():
        if all(package.has_part(part) for part in spec.required_parts):
            return spec.flavor

    raise UnsupportedFlavorError(
        "unknown",
        [part for spec in FLAVOR_TABLE.values() for part in spec.required_parts],
    )


def _presentation_order(package: OOXMLPackage) -> list[str]:
    """List slide parts in the order of the presentation's slide ID list."""
    root = parse(package.get_part(PRESENTATION_PART), PRESENTATION_PART).root
    id_list = next((el for el in root.elements() if el.local_name == "sldIdLst"), None)
    if id_list is None:
        return []

    rels = RelationshipMap(package, PRESENTATION_PART)
    order = []
    for slide_id in id_list.elements():
        rel_id = next(
            (value for key, value in slide_id.attributes.items() if key.endswith(":id")), None
        )
        target = rels.resolve(rel_id) if rel_id else None
        if target and package.has_part(target):
            order.append(target)
    return order


def _body_parts(package: OOXMLPackage, spec: FlavorSpec) -> list[str]:
    """List the parts holding editable text, in reading order."""
    if spec.flavor is Flavor.PRESENTATION:
        ordered = _presentation_order(package)
        if ordered:
            return ordered

    matches = []
    for name in package.part_names:
        match = spec.body_part_pattern.match(name)
        if match:
            number = int(match.group(1)) if match.groups() else 0
            matches.append((number, name))
    return [name for _, name in sorted(matches)]


class DocumentSession:
    """An in-memory edit of one package.

    Attributes:
        flavor: The document flavor
        package: The underlying OOXMLPackage
    """

    def __init__(self, package: OOXMLPackage, flavor: Flavor | str) -> None:
        """Parse the editable parts of a package and enumerate their slots.

        Use `open()`, `new()` or the module-level `open_document()` and
        `new_document()` instead of calling this constructor directly.

        Raises:
            UnsupportedFlavorError: If parts required by the flavor are missing
            MalformedMarkupError: If an editable part is not well-formed XML
        """
        self.flavor = Flavor.parse(flavor)
        self.package = package
        self._spec = FLAVOR_TABLE[self.flavor]

        missing = [part for part in self._spec.required_parts if not package.has_part(part)]
        if missing:
            raise UnsupportedFlavorError(self.flavor.value, missing)

        self._body_parts = _body_parts(package, self._spec)
        self._documents: dict[str, MarkupDocument] = {
            name: parse(package.get_part(name), name) for name in self._body_parts
        }
        self._slots: list[TextSlot] = []
        for name in self._body_parts:
            root = self._documents[name].root
            self._slots.extend(enumerate_slots(root, self.flavor, name, start=len(self._slots)))
        self._dirty: set[str] = set()
        self._closed = False

        logger.debug(
            f"Opened {self.flavor.value} session: {len(self._body_parts)} parts, "
            f"{len(self._slots)} text slots"
        )

    @classmethod
    def open(
        cls, source: bytes | str | Path | BinaryIO, flavor: Flavor | str | None = None
    ) -> "DocumentSession":
        """Open a session on an existing package.

        Args:
            source: Package bytes, a path, or a binary file object
            flavor: Document flavor; detected from the package when None
        """
        package = OOXMLPackage.open(source)
        if flavor is None:
            flavor = detect_flavor(package)
        return cls(package, flavor)

    @classmethod
    def new(cls, flavor: Flavor | str, text: str = "") -> "DocumentSession":
        """Open a session on a freshly synthesized package.

        Args:
            flavor: Kind of document to create
            text: Initial text in the layout produced by extract_plain_text()
        """
        return cls(OOXMLPackage.new(new_package_parts(flavor, text)), flavor)

    # -------------------------------------------------------------------------
    # Slots
    # -------------------------------------------------------------------------

    @property
    def slots(self) -> list[TextSlot]:
        """Get the text slots in reading order."""
        self._ensure_open()
        return list(self._slots)

    @property
    def number_of_slots(self) -> int:
        """Get the number of text slots."""
        return len(self._slots)

    @property
    def body_parts(self) -> list[str]:
        """Get the names of the parts holding editable text, in reading order."""
        return list(self._body_parts)

    @property
    def modified_parts(self) -> list[str]:
        """Get the names of parts changed by writes, in reading order."""
        return [name for name in self._body_parts if name in self._dirty]

    @property
    def is_modified(self) -> bool:
        """Check if any write changed the document."""
        return bool(self._dirty)

    def _resolve_slot(self, slot: TextSlot | int) -> TextSlot:
        self._ensure_open()
        if isinstance(slot, int):
            return self._slots[slot]
        if not (0 <= slot.index < len(self._slots) and self._slots[slot.index] is slot):
            raise DocumentError(
                f"Slot {slot.index} of part '{slot.part}' does not belong to this session"
            )
        return slot

    def read_text(self, slot: TextSlot | int) -> str:
        """Read the current text of a slot.

        Args:
            slot: A TextSlot of this session, or its index
        """
        slot = self._resolve_slot(slot)
        return read_text(self._documents[slot.part].root, slot, self.flavor)

    def write_text(self, slot: TextSlot | int, text: str) -> bool:
        """Replace the text of a slot.

        Args:
            slot: A TextSlot of this session, or its index
            text: New text for the slot

        Returns:
            True if the text changed
        """
        slot = self._resolve_slot(slot)
        changed = write_text(self._documents[slot.part].root, slot, text, self.flavor)
        if changed:
            self._dirty.add(slot.part)
        return changed

    def segments(self) -> list[str]:
        """Get the current text of every slot, in reading order."""
        self._ensure_open()
        return [self.read_text(slot) for slot in self._slots]

    # -------------------------------------------------------------------------
    # Plain text
    # -------------------------------------------------------------------------

    def _paragraph_groups(self, part: str | None = None) -> list[list[TextSlot]]:
        """Group consecutive slots by their enclosing paragraph, in reading order.

        Slots outside any paragraph each form a group of their own.

        Args:
            part: Only group the slots of this part; all parts when None
        """
        groups: list[list[TextSlot]] = []
        for slot in self._slots:
            if part is not None and slot.part != part:
                continue
            last = groups[-1][-1] if groups else None
            if (
                last is not None
                and slot.paragraph >= 0
                and last.part == slot.part
                and last.paragraph == slot.paragraph
            ):
                groups[-1].append(slot)
            else:
                groups.append([slot])
        return groups

    def _group_text(self, group: list[TextSlot]) -> str:
        return "".join(self.read_text(slot) for slot in group)

    def _part_paragraphs(self, part: str) -> list[str]:
        return [self._group_text(group) for group in self._paragraph_groups(part)]

    def extract_plain_text(self) -> str:
        """Get the document text for an external text generator.

        Word paragraphs are separated by a blank line. Presentation text is
        laid out as "Slide N:" blocks with one paragraph per line.
        """
        self._ensure_open()
        if self.flavor is Flavor.WORD_PROCESSING:
            paragraphs = [p for part in self._body_parts for p in self._part_paragraphs(part)]
            return join_paragraphs(paragraphs)
        return join_slides([self._part_paragraphs(part) for part in self._body_parts])

    def split_plain_text(self, text: str) -> list[str]:
        """Split generated text into segments using this flavor's layout."""
        if self.flavor is Flavor.WORD_PROCESSING:
            return split_paragraphs(text)
        return [paragraph for slide in split_slides(text) for paragraph in slide]

    # -------------------------------------------------------------------------
    # Replacement
    # -------------------------------------------------------------------------

    def apply_replacements(self, new_texts: Sequence[str]) -> int:
        """Write one replacement text per slot, paired by position.

        Args:
            new_texts: Exactly one text per slot, in reading order

        Returns:
            Number of slots whose text changed

        Raises:
            SlotCountMismatchError: If the count differs from number_of_slots;
                the document is left unmodified
        """
        self._ensure_open()
        if isinstance(new_texts, str) or len(new_texts) != len(self._slots):
            actual = 1 if isinstance(new_texts, str) else len(new_texts)
            raise SlotCountMismatchError(len(self._slots), actual)
        for text in new_texts:
            if not isinstance(text, str):
                raise TypeError(f"Replacement texts must be strings, got {type(text).__name__}")

        changed = 0
        for slot, text in zip(self._slots, new_texts, strict=True):
            if self.write_text(slot, text):
                changed += 1
        logger.debug(f"Applied {len(new_texts)} replacements, {changed} changed")
        return changed

    def _write_group(self, group: list[TextSlot], text: str) -> int:
        """Write a paragraph's text into its first slot and empty the others.

        A paragraph whose runs already join to the text is left alone, so
        applying unchanged text keeps every run as it was.

        Returns:
            Number of slots whose text changed
        """
        if self._group_text(group) == text:
            return 0
        changed = 0
        for position, slot in enumerate(group):
            if self.write_text(slot, text if position == 0 else ""):
                changed += 1
        return changed

    def apply_plain_text(self, text: str) -> ApplyResult:
        """Apply generated plain text, falling back to a single-slot replacement.

        The text is split with split_plain_text() into one segment per
        paragraph, the same layout extract_plain_text() produces. When the
        segment count matches the paragraphs, each segment replaces its
        paragraph: the text goes into the paragraph's first slot and its
        other slots are emptied. Otherwise the whole text replaces the first
        slot and every other slot keeps its text, rather than pairing
        segments with the wrong paragraphs.
        """
        self._ensure_open()
        segments = self.split_plain_text(text)
        groups = self._paragraph_groups()
        if len(segments) == len(groups):
            changed = 0
            for group, segment in zip(groups, segments, strict=True):
                changed += self._write_group(group, segment)
            logger.debug(f"Applied {len(segments)} paragraph segments, {changed} slots changed")
            return ApplyResult(segments=len(segments), slots=len(self._slots), changed=changed)

        logger.warning(
            f"Generated text has {len(segments)} segments for {len(groups)} paragraphs; "
            "writing it to the first slot only"
        )
        changed = 0
        if self._slots and self.write_text(self._slots[0], text):
            changed = 1
        return ApplyResult(
            segments=len(segments), slots=len(self._slots), changed=changed, fallback=True
        )

    # -------------------------------------------------------------------------
    # Output
    # -------------------------------------------------------------------------

    def emit(self) -> bytes:
        """Write the edited package to bytes.

        Only parts changed by a write are re-serialized.

        Raises:
            EmitError: If any part cannot be serialized or written
        """
        self._ensure_open()
        replacements = {}
        for name in self.modified_parts:
            try:
                replacements[name] = serialize(self._documents[name])
            except MarkupError as e:
                raise EmitError(f"Failed to serialize {name}: {e}") from e

        logger.debug(f"Emitting package with {len(replacements)} replaced parts")
        return self.package.emit(replacements)

    def save(self, output_path: str | Path) -> None:
        """Save the edited package to a file atomically."""
        write_atomic(Path(output_path), self.emit())

    def close(self) -> None:
        """Discard the parsed trees and slots."""
        self._documents = {}
        self._slots = []
        self._dirty = set()
        self._closed = True

    def _ensure_open(self) -> None:
        if self._closed:
            raise DocumentError("Session is closed")

    def __enter__(self) -> "DocumentSession":
        """Context manager support."""
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Context manager cleanup."""
        self.close()


def open_document(
    source: bytes | str | Path | BinaryIO, flavor: Flavor | str | None = None
) -> DocumentSession:
    """Open a session on an existing package. See DocumentSession.open()."""
    return DocumentSession.open(source, flavor)


def new_document(flavor: Flavor | str, text: str = "") -> DocumentSession:
    """Open a session on a new package. See DocumentSession.new()."""
    return DocumentSession.new(flavor, text)
