"""
ooxml_textpatch - Replace the text of Word and PowerPoint documents in place.

This package opens a .docx or .pptx package, exposes every run of visible
text as an addressable slot, and writes replacement text back into exactly
those slots. Formatting, media, relationships and every part that was not
edited are copied through unchanged.

Example:
    >>> from ooxml_textpatch import open_document
    >>> with open_document("deck.pptx") as session:
    ...     text = session.extract_plain_text()
    ...     session.apply_plain_text(translate(text))  # translate() is external
    ...     session.save("deck_translated.pptx")
"""

__version__ = "0.1.0"
__all__ = [
    "DocumentSession",
    "open_document",
    "new_document",
    "detect_flavor",
    "ApplyResult",
    "OOXMLPackage",
    "Part",
    "Flavor",
    "FlavorSpec",
    "FLAVOR_TABLE",
    "TextSlot",
    "enumerate_slots",
    "read_text",
    "write_text",
    "parse",
    "serialize",
    "Element",
    "Text",
    "MarkupDocument",
    "TextPatchError",
    "PackageError",
    "NotAContainerError",
    "CorruptEntryError",
    "PartNotFoundError",
    "EmitError",
    "MarkupError",
    "MalformedMarkupError",
    "DocumentError",
    "UnsupportedFlavorError",
    "SlotCountMismatchError",
    "StaleSlotError",
    "scan_documents",
    "rewrite_document",
    "rewrite_documents",
    "BatchResult",
    "from_python_docx",
    "to_python_docx",
]

# Import batch helpers
from .batch import BatchResult, rewrite_document, rewrite_documents, scan_documents

# Import python-docx interop
from .compat import from_python_docx, to_python_docx

# Import error classes
from .errors import (
    CorruptEntryError,
    DocumentError,
    EmitError,
    MalformedMarkupError,
    MarkupError,
    NotAContainerError,
    PackageError,
    PartNotFoundError,
    SlotCountMismatchError,
    StaleSlotError,
    TextPatchError,
    UnsupportedFlavorError,
)
from .flavors import FLAVOR_TABLE, Flavor, FlavorSpec

# Import markup tree
from .markup import Element, MarkupDocument, Text, parse, serialize

# Import package container
from .package import OOXMLPackage, Part
from .projection import TextSlot, enumerate_slots, read_text, write_text

# Import session
from .session import ApplyResult, DocumentSession, detect_flavor, new_document, open_document
