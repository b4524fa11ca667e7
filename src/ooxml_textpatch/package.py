"""
OOXMLPackage class for managing the ZIP structure of Word and PowerPoint files.

This module provides a clean abstraction for the OOXML package format,
separating ZIP handling from XML manipulation concerns. The whole package is
read into memory when it is opened, so no file handle is held while a
document is being edited.

Emitting writes every entry afresh: parts that were not replaced keep their
name, order, timestamp, attributes and payload bytes, but are compressed
again, so their compressed bytes may differ from the source archive.
"""

import io
import logging
import os
import struct
import tempfile
import zipfile
import zlib
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from .constants import STRUCTURED_EXTENSIONS
from .errors import (
    CorruptEntryError,
    EmitError,
    NotAContainerError,
    PackageError,
    PartNotFoundError,
)

logger = logging.getLogger(__name__)

# Timestamp used for parts that did not come from a source archive
DEFAULT_DATE_TIME = (1980, 1, 1, 0, 0, 0)

# Extra-field header id of the ZIP64 extended information record
ZIP64_EXTRA_ID = 0x0001

# Errors zipfile can raise while decompressing a single entry
_ENTRY_ERRORS = (
    zipfile.BadZipFile,
    zlib.error,
    EOFError,
    NotImplementedError,
    RuntimeError,
    OSError,
)


def is_structured(part_name: str) -> bool:
    """Check whether a part holds XML markup (as opposed to an opaque payload)."""
    return part_name.lower().endswith(STRUCTURED_EXTENSIONS)


@dataclass
class Part:
    """One named entry of a package.

    Attributes:
        name: Path of the entry inside the package (e.g., "word/document.xml")
        data: Uncompressed payload
        info: ZipInfo of the source entry, or None for synthesized parts
    """

    name: str
    data: bytes
    info: zipfile.ZipInfo | None = None

    @property
    def is_structured(self) -> bool:
        """True if the part holds XML markup."""
        return is_structured(self.name)


class OOXMLPackage:
    """Manages the OOXML ZIP package structure.

    This class handles the low-level operations of:
    - Reading every entry of a .docx/.pptx archive into memory
    - Providing access to package parts as bytes
    - Re-emitting the archive with selected parts replaced and every other
      part copied through with its original metadata

    Example:
        >>> pkg = OOXMLPackage.open("slides.pptx")
        >>> slide = pkg.get_part("ppt/slides/slide1.xml")
        >>> # Modify slide...
        >>> data = pkg.emit({"ppt/slides/slide1.xml": new_slide})
    """

    def __init__(self, parts: list[Part]) -> None:
        """Initialize package with already-loaded parts.

        Use the class methods `open()`, `from_bytes()` or `new()` instead of
        calling this constructor directly.

        Args:
            parts: Parts in archive order
        """
        self._parts = parts
        self._index: dict[str, Part] = {}
        for part in parts:
            self._index.setdefault(part.name, part)

    @classmethod
    def open(cls, source: bytes | str | Path | BinaryIO) -> "OOXMLPackage":
        """Open an OOXML package from bytes, a file path or a file-like object.

        Args:
            source: Package bytes, path to a .docx/.pptx file, or binary stream

        Returns:
            OOXMLPackage instance holding every entry in memory

        Raises:
            PackageError: If the path does not exist
            NotAContainerError: If the source is not a ZIP file
            CorruptEntryError: If any entry cannot be decompressed
        """
        if isinstance(source, bytes | bytearray | memoryview):
            data = bytes(source)
        elif isinstance(source, str | Path):
            source_path = Path(source)
            if not source_path.exists():
                raise PackageError(f"Package not found: {source_path}")
            data = source_path.read_bytes()
        else:
            data = source.read()

        return cls.from_bytes(data)

    @classmethod
    def from_bytes(cls, data: bytes) -> "OOXMLPackage":
        """Open an OOXML package from bytes.

        Every entry is read, even after one fails, so that the error names all
        unreadable entries. A single bad entry still fails the whole open.

        Args:
            data: Bytes containing a .docx or .pptx file

        Returns:
            OOXMLPackage instance
        """
        buffer = io.BytesIO(data)
        if not zipfile.is_zipfile(buffer):
            raise NotAContainerError()
        buffer.seek(0)

        try:
            archive = zipfile.ZipFile(buffer, "r")
        except (zipfile.BadZipFile, OSError, ValueError) as e:
            raise NotAContainerError(f"Failed to open package: {e}") from e

        parts: list[Part] = []
        failures: dict[str, str] = {}
        with archive:
            for info in archive.infolist():
                try:
                    payload = archive.read(info)
                except _ENTRY_ERRORS as e:
                    failures[info.filename] = str(e) or type(e).__name__
                    continue
                parts.append(Part(info.filename, payload, info))

        if failures:
            raise CorruptEntryError(failures)

        logger.debug(f"Opened package with {len(parts)} parts")
        return cls(parts)

    @classmethod
    def new(cls, parts: Mapping[str, bytes]) -> "OOXMLPackage":
        """Create a package from scratch.

        Args:
            parts: Mapping of part name to payload, in the order to emit them

        Returns:
            OOXMLPackage instance
        """
        return cls([Part(name, data) for name, data in parts.items()])

    @property
    def part_names(self) -> list[str]:
        """Get the part names in archive order."""
        return [part.name for part in self._parts]

    def iter_parts(self) -> Iterator[Part]:
        """Iterate over parts in archive order."""
        return iter(self._parts)

    def has_part(self, part_name: str) -> bool:
        """Check if a package part exists.

        Args:
            part_name: Path within the package

        Returns:
            True if the part exists
        """
        return part_name in self._index

    def get_part(self, part_name: str) -> bytes:
        """Get the payload of a package part.

        Args:
            part_name: Path within the package (e.g., "word/document.xml")

        Returns:
            The uncompressed part bytes

        Raises:
            PartNotFoundError: If the part does not exist
        """
        part = self._index.get(part_name)
        if part is None:
            raise PartNotFoundError(part_name)
        return part.data

    def emit(self, replacements: Mapping[str, bytes] | None = None) -> bytes:
        """Write the package to bytes.

        Entries are written in their original order. Replaced entries are
        deflated; every other entry keeps its payload, compression method,
        timestamp and attributes.

        Args:
            replacements: Mapping of part name to its new payload

        Returns:
            The complete package as bytes

        Raises:
            PartNotFoundError: If a replacement names a part not in the package
            EmitError: If any entry cannot be written
        """
        replacements = dict(replacements or {})
        for name in replacements:
            if name not in self._index:
                raise PartNotFoundError(name)

        buffer = io.BytesIO()
        try:
            with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
                for part in self._parts:
                    if part.name in replacements:
                        info = _copy_info(part, zipfile.ZIP_DEFLATED)
                        archive.writestr(info, replacements[part.name])
                        logger.debug(f"Replaced part {part.name}")
                    else:
                        archive.writestr(_copy_info(part), part.data)
        except (zipfile.BadZipFile, zlib.error, OSError, ValueError, struct.error) as e:
            raise EmitError(f"Failed to write package: {e}") from e

        return buffer.getvalue()

    def save(self, output_path: str | Path, replacements: Mapping[str, bytes] | None = None) -> None:
        """Save the package to a file.

        The archive is written to a temporary file next to the target and then
        moved into place, so a failed save never leaves a partial package.

        Args:
            output_path: Path to save the package to
            replacements: Mapping of part name to its new payload
        """
        write_atomic(Path(output_path), self.emit(replacements))


def write_atomic(output_path: Path, data: bytes) -> None:
    """Write bytes to a file via a temporary file and an atomic rename."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    fd, temp_name = tempfile.mkstemp(
        prefix=f".{output_path.name}.", suffix=".tmp", dir=output_path.parent
    )
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(temp_name, output_path)
    except BaseException:
        Path(temp_name).unlink(missing_ok=True)
        raise


def _copy_info(part: Part, compress_type: int | None = None) -> zipfile.ZipInfo:
    """Build a fresh ZipInfo carrying the metadata of a source entry.

    Sizes, CRC and offsets are recomputed by zipfile when the entry is
    written, so only the descriptive fields are copied.
    """
    source = part.info
    if source is None:
        info = zipfile.ZipInfo(part.name, date_time=DEFAULT_DATE_TIME)
        info.compress_type = zipfile.ZIP_DEFLATED
        return info

    info = zipfile.ZipInfo(part.name, date_time=source.date_time)
    info.compress_type = source.compress_type if compress_type is None else compress_type
    info.comment = source.comment
    info.extra = _strip_zip64_extra(source.extra)
    info.create_system = source.create_system
    info.create_version = source.create_version
    info.external_attr = source.external_attr
    info.internal_attr = source.internal_attr
    return info


def _strip_zip64_extra(extra: bytes) -> bytes:
    """Remove ZIP64 records from an extra field; zipfile writes its own."""
    kept = b""
    pos = 0
    while pos + 4 <= len(extra):
        header_id, size = struct.unpack("<HH", extra[pos : pos + 4])
        record = extra[pos : pos + 4 + size]
        if header_id != ZIP64_EXTRA_ID:
            kept += record
        pos += 4 + size
    return kept
