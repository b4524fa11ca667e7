"""
Flavor tables for the document kinds the session can edit.

A flavor decides which parts hold the editable body, which element is the
atomic text leaf, and which elements only group text for ordering (runs and
paragraphs). Grouping elements are never read as text themselves.
"""

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .constants import PRESENTATION_PART, WORD_DOCUMENT_PART
from .content_types import ContentTypes
from .errors import UnsupportedFlavorError


class Flavor(str, Enum):
    """Kind of OOXML document."""

    WORD_PROCESSING = "word-processing"
    PRESENTATION = "presentation"

    @classmethod
    def parse(cls, value: "Flavor | str") -> "Flavor":
        """Resolve a flavor from an enum member, its value or a common alias.

        Args:
            value: e.g. Flavor.PRESENTATION, "presentation", "pptx", "docx"

        Raises:
            UnsupportedFlavorError: If the value names no known flavor
        """
        if isinstance(value, Flavor):
            return value
        key = value.strip().lower().lstrip(".")
        flavor = _ALIASES.get(key)
        if flavor is None:
            raise UnsupportedFlavorError(value)
        return flavor

    @classmethod
    def from_extension(cls, path: str | Path) -> "Flavor":
        """Resolve a flavor from a file name's extension.

        Raises:
            UnsupportedFlavorError: If the extension is not a Word or PowerPoint package
        """
        suffix = Path(path).suffix.lower()
        flavor = _EXTENSIONS.get(suffix)
        if flavor is None:
            raise UnsupportedFlavorError(suffix or str(path))
        return flavor


_ALIASES = {
    "word-processing": Flavor.WORD_PROCESSING,
    "wordprocessing": Flavor.WORD_PROCESSING,
    "word": Flavor.WORD_PROCESSING,
    "docx": Flavor.WORD_PROCESSING,
    "presentation": Flavor.PRESENTATION,
    "powerpoint": Flavor.PRESENTATION,
    "pptx": Flavor.PRESENTATION,
}

_EXTENSIONS = {
    ".docx": Flavor.WORD_PROCESSING,
    ".docm": Flavor.WORD_PROCESSING,
    ".dotx": Flavor.WORD_PROCESSING,
    ".pptx": Flavor.PRESENTATION,
    ".pptm": Flavor.PRESENTATION,
    ".potx": Flavor.PRESENTATION,
}


@dataclass(frozen=True)
class FlavorSpec:
    """Static description of one flavor.

    Attributes:
        flavor: The flavor described
        required_parts: Parts that must exist for a package to be editable
        body_part_pattern: Matches the parts that hold editable text
        text_leaf: Qualified name of the atomic text leaf
        run: Qualified name of the run element (grouping only)
        paragraph: Qualified name of the paragraph element (grouping only)
        skipped_containers: Elements whose subtrees are never entered
        main_content_types: Content types of the package's main part
        preserve_space: Whether leading/trailing whitespace needs xml:space="preserve"
        extension: Default file extension
    """

    flavor: Flavor
    required_parts: tuple[str, ...]
    body_part_pattern: re.Pattern[str]
    text_leaf: str
    run: str
    paragraph: str
    skipped_containers: frozenset[str]
    main_content_types: tuple[str, ...]
    preserve_space: bool
    extension: str

    def is_body_part(self, part_name: str) -> bool:
        """Check whether a part holds editable text for this flavor."""
        return self.body_part_pattern.match(part_name) is not None


# mc:Fallback repeats the content of its mc:Choice sibling for older readers
_SKIPPED = frozenset({"mc:Fallback"})

FLAVOR_TABLE: dict[Flavor, FlavorSpec] = {
    Flavor.WORD_PROCESSING: FlavorSpec(
        flavor=Flavor.WORD_PROCESSING,
        required_parts=(WORD_DOCUMENT_PART,),
        body_part_pattern=re.compile(r"^word/document\.xml$"),
        text_leaf="w:t",
        run="w:r",
        paragraph="w:p",
        skipped_containers=_SKIPPED,
        main_content_types=(
            ContentTypes.DOCUMENT,
            ContentTypes.DOCUMENT_MACRO,
            ContentTypes.DOCUMENT_TEMPLATE,
        ),
        preserve_space=True,
        extension=".docx",
    ),
    Flavor.PRESENTATION: FlavorSpec(
        flavor=Flavor.PRESENTATION,
        required_parts=(PRESENTATION_PART,),
        body_part_pattern=re.compile(r"^ppt/slides/slide(\d+)\.xml$"),
        text_leaf="a:t",
        run="a:r",
        paragraph="a:p",
        skipped_containers=_SKIPPED,
        main_content_types=(
            ContentTypes.PRESENTATION,
            ContentTypes.PRESENTATION_MACRO,
            ContentTypes.PRESENTATION_TEMPLATE,
        ),
        preserve_space=False,
        extension=".pptx",
    ),
}


def flavor_spec(flavor: Flavor | str) -> FlavorSpec:
    """Look up the table entry for a flavor."""
    return FLAVOR_TABLE[Flavor.parse(flavor)]
