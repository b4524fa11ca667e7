"""
ContentTypeMap class for reading [Content_Types].xml in OOXML packages.

Content types define the MIME type of each part in the package. Two
mechanisms are used:
- Default: maps file extensions to content types (e.g., .xml -> application/xml)
- Override: maps specific part names to content types (e.g., /word/document.xml)

The session only needs to look types up (to detect a package's flavor), so
this map is read-only; new packages get their manifest from the templates.
"""

import logging

from .constants import CONTENT_TYPES_PART
from .markup import Element, parse
from .package import OOXMLPackage

logger = logging.getLogger(__name__)


class ContentTypes:
    """Common OOXML content type strings."""

    # Package-level
    RELATIONSHIPS = "application/vnd.openxmlformats-package.relationships+xml"
    XML = "application/xml"

    # Word document parts
    DOCUMENT = "application/vnd.openxmlformats-officedocument.wordprocessingml.document.main+xml"
    DOCUMENT_MACRO = "application/vnd.ms-word.document.macroEnabled.main+xml"
    DOCUMENT_TEMPLATE = (
        "application/vnd.openxmlformats-officedocument.wordprocessingml.template.main+xml"
    )
    STYLES = "application/vnd.openxmlformats-officedocument.wordprocessingml.styles+xml"
    SETTINGS = "application/vnd.openxmlformats-officedocument.wordprocessingml.settings+xml"
    FONT_TABLE = "application/vnd.openxmlformats-officedocument.wordprocessingml.fontTable+xml"

    # PowerPoint presentation parts
    PRESENTATION = (
        "application/vnd.openxmlformats-officedocument.presentationml.presentation.main+xml"
    )
    PRESENTATION_MACRO = "application/vnd.ms-powerpoint.presentation.macroEnabled.main+xml"
    PRESENTATION_TEMPLATE = (
        "application/vnd.openxmlformats-officedocument.presentationml.template.main+xml"
    )
    SLIDE = "application/vnd.openxmlformats-officedocument.presentationml.slide+xml"
    SLIDE_LAYOUT = "application/vnd.openxmlformats-officedocument.presentationml.slideLayout+xml"
    SLIDE_MASTER = "application/vnd.openxmlformats-officedocument.presentationml.slideMaster+xml"
    THEME = "application/vnd.openxmlformats-officedocument.theme+xml"


class ContentTypeMap:
    """Read-only view of the [Content_Types].xml part of a package.

    Example:
        >>> ct_map = ContentTypeMap(package)
        >>> ct_map.get_content_type("/word/document.xml")
        'application/vnd.openxmlformats-officedocument.wordprocessingml.document.main+xml'

    Attributes:
        package: The OOXMLPackage containing the content types part
    """

    def __init__(self, package: OOXMLPackage) -> None:
        """Initialize a ContentTypeMap for a package.

        Args:
            package: The OOXMLPackage containing the [Content_Types].xml part
        """
        self._package = package
        self._defaults: dict[str, str] | None = None
        self._overrides: dict[str, str] = {}

    def _ensure_loaded(self) -> None:
        """Parse the content types part on first use."""
        if self._defaults is not None:
            return

        self._defaults = {}
        if not self._package.has_part(CONTENT_TYPES_PART):
            logger.debug("Package has no content types part")
            return

        root = parse(self._package.get_part(CONTENT_TYPES_PART), CONTENT_TYPES_PART).root
        for entry in root.elements():
            self._load_entry(entry)

    def _load_entry(self, entry: Element) -> None:
        content_type = entry.attributes.get("ContentType")
        if content_type is None:
            return
        if entry.local_name == "Default" and "Extension" in entry.attributes:
            assert self._defaults is not None
            self._defaults[entry.attributes["Extension"].lower()] = content_type
        elif entry.local_name == "Override" and "PartName" in entry.attributes:
            self._overrides[entry.attributes["PartName"]] = content_type

    def get_content_type(self, part_name: str) -> str | None:
        """Get the content type for a part.

        Overrides take precedence over extension defaults.

        Args:
            part_name: Part name with or without leading slash

        Returns:
            The content type string if declared, None otherwise
        """
        self._ensure_loaded()
        assert self._defaults is not None

        normalized = part_name if part_name.startswith("/") else f"/{part_name}"
        if normalized in self._overrides:
            return self._overrides[normalized]

        _, dot, extension = normalized.rpartition(".")
        if dot:
            return self._defaults.get(extension.lower())
        return None
