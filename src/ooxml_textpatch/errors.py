"""
Custom exception classes for the ooxml_textpatch package.

Errors fall into three families that mirror the layers of the package:
container problems (PackageError), markup problems (MarkupError) and
document-level problems (DocumentError). Each one carries enough context to
explain what went wrong with a specific package.
"""


class TextPatchError(Exception):
    """Base exception for all ooxml_textpatch errors."""

    pass


# =============================================================================
# Container errors
# =============================================================================


class PackageError(TextPatchError):
    """Raised for container-level problems with an OOXML package."""

    pass


class NotAContainerError(PackageError):
    """Raised when the input bytes are not a ZIP container."""

    def __init__(self, message: str = "Source is not a valid OOXML (ZIP) package") -> None:
        super().__init__(message)


class CorruptEntryError(PackageError):
    """Raised when one or more entries of a package cannot be read.

    Attributes:
        entries: Mapping of entry name to the reason it failed
    """

    def __init__(self, entries: dict[str, str]) -> None:
        self.entries = entries
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format an error message listing every failed entry."""
        msg = f"Package has {len(self.entries)} unreadable entr"
        msg += "y" if len(self.entries) == 1 else "ies"
        for name, reason in self.entries.items():
            msg += f"\n  • {name}: {reason}"
        return msg


class PartNotFoundError(PackageError):
    """Raised when a part is not present in the package.

    Attributes:
        part: The part name that was requested
    """

    def __init__(self, part: str) -> None:
        self.part = part
        super().__init__(f"Part '{part}' not found in package")


class EmitError(PackageError):
    """Raised when a package cannot be written back to bytes."""

    pass


# =============================================================================
# Markup errors
# =============================================================================


class MarkupError(TextPatchError):
    """Raised for problems with the XML markup of a structured part."""

    pass


class MalformedMarkupError(MarkupError):
    """Raised when a structured part is not well-formed XML.

    Attributes:
        part: Name of the offending part, if known
        reason: Parser message
    """

    def __init__(self, reason: str, part: str | None = None) -> None:
        self.part = part
        self.reason = reason
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format an error message with the part name when available."""
        if self.part:
            return f"Malformed markup in '{self.part}': {self.reason}"
        return f"Malformed markup: {self.reason}"


# =============================================================================
# Document errors
# =============================================================================


class DocumentError(TextPatchError):
    """Raised for document-level problems (flavor, parts, slot alignment)."""

    pass


class UnsupportedFlavorError(DocumentError):
    """Raised when a package lacks the parts its flavor requires.

    Attributes:
        flavor: The requested flavor (string form)
        missing: Required part names that were not found
    """

    def __init__(self, flavor: str, missing: list[str] | None = None) -> None:
        self.flavor = flavor
        self.missing = missing or []
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format an error message listing the missing parts."""
        msg = f"Package is not a supported '{self.flavor}' document"
        if self.missing:
            msg += "\n\nMissing required parts:\n"
            for part in self.missing:
                msg += f"  • {part}\n"
        return msg


class SlotCountMismatchError(DocumentError):
    """Raised when the number of replacement texts does not match the slots.

    Attributes:
        expected: Number of text slots in the session
        actual: Number of replacement texts supplied
    """

    def __init__(self, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format an error message with both counts."""
        return (
            f"Expected {self.expected} replacement texts but got {self.actual}\n\n"
            "Replacements are paired with text slots by position, so the counts "
            "must match exactly. Use apply_plain_text() to fall back to a "
            "single-slot replacement."
        )


class StaleSlotError(DocumentError):
    """Raised when a slot address no longer resolves to a text leaf.

    Attributes:
        part: Part the slot belongs to
        address: Child-index path of the slot
    """

    def __init__(self, part: str, address: tuple[int, ...], reason: str | None = None) -> None:
        self.part = part
        self.address = address
        self.reason = reason
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format an error message with the slot location."""
        path = "/".join(str(i) for i in self.address)
        msg = f"Stale text slot {self.part}#{path}"
        if self.reason:
            msg += f": {self.reason}"
        return msg
