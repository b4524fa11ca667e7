"""
Centralized constants for OOXML namespaces, content types and relationship types.

Import from here to keep namespace URLs and part names consistent across the
container, session and template modules.
"""

# =============================================================================
# Namespaces
# =============================================================================

# Main WordprocessingML namespace (Word 2007+)
WORD_NAMESPACE = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"

# PresentationML namespace (PowerPoint 2007+)
P_NAMESPACE = "http://schemas.openxmlformats.org/presentationml/2006/main"

# DrawingML main namespace
A_NAMESPACE = "http://schemas.openxmlformats.org/drawingml/2006/main"

# Open Packaging Convention namespaces
PACKAGE_RELATIONSHIPS_NAMESPACE = "http://schemas.openxmlformats.org/package/2006/relationships"
CONTENT_TYPES_NAMESPACE = "http://schemas.openxmlformats.org/package/2006/content-types"

# Office Document relationships
OFFICE_RELATIONSHIPS_NAMESPACE = (
    "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
)

# XML namespace (bound to the reserved "xml" prefix)
XML_NAMESPACE = "http://www.w3.org/XML/1998/namespace"


# =============================================================================
# Relationship Types
# =============================================================================

REL_TYPE_OFFICE_DOCUMENT = (
    "http://schemas.openxmlformats.org/officeDocument/2006/relationships/officeDocument"
)
REL_TYPE_STYLES = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/styles"
REL_TYPE_SLIDE = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/slide"
REL_TYPE_SLIDE_LAYOUT = (
    "http://schemas.openxmlformats.org/officeDocument/2006/relationships/slideLayout"
)
REL_TYPE_SLIDE_MASTER = (
    "http://schemas.openxmlformats.org/officeDocument/2006/relationships/slideMaster"
)
REL_TYPE_THEME = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/theme"


# =============================================================================
# Well-known Part Names
# =============================================================================

CONTENT_TYPES_PART = "[Content_Types].xml"
ROOT_RELS_PART = "_rels/.rels"

WORD_DOCUMENT_PART = "word/document.xml"
WORD_STYLES_PART = "word/styles.xml"

PRESENTATION_PART = "ppt/presentation.xml"
SLIDE_PART_PREFIX = "ppt/slides/slide"


# =============================================================================
# Package Conventions
# =============================================================================

# Extensions whose payload is XML markup; everything else is opaque
STRUCTURED_EXTENSIONS = (".xml", ".rels")

# Default XML declaration for newly serialized parts
DEFAULT_ENCODING = "UTF-8"
