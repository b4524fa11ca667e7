"""
RelationshipMap class for reading .rels files in OOXML packages.

A relationship links one part to another using a unique ID (rId), a
relationship type URI and a target path relative to the source part. The
session uses relationships to find slides in presentation order.
"""

import logging
import posixpath
from dataclasses import dataclass

from .markup import parse
from .package import OOXMLPackage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Relationship:
    """One entry of a .rels part."""

    rel_id: str
    rel_type: str
    target: str
    external: bool = False


def rels_part_name(part_name: str) -> str:
    """Compute the .rels part name for a given part.

    For example:
    - "ppt/presentation.xml" -> "ppt/_rels/presentation.xml.rels"
    - "" (the package itself) -> "_rels/.rels"
    """
    parent, _, filename = part_name.rpartition("/")
    rels = f"_rels/{filename}.rels"
    return f"{parent}/{rels}" if parent else rels


class RelationshipMap:
    """Read-only view of the relationships of one part.

    Example:
        >>> rels = RelationshipMap(package, "ppt/presentation.xml")
        >>> rels.resolve("rId2")
        'ppt/slides/slide1.xml'

    Attributes:
        package: The OOXMLPackage containing the relationship part
        part_name: The source part (e.g., "ppt/presentation.xml")
    """

    def __init__(self, package: OOXMLPackage, part_name: str) -> None:
        """Initialize a RelationshipMap for a specific part.

        Args:
            package: The OOXMLPackage containing the relationship part
            part_name: The part whose relationships to read; "" for package-level
        """
        self._package = package
        self._part_name = part_name
        self._rels_name = rels_part_name(part_name)
        self._relationships: dict[str, Relationship] | None = None

    def _ensure_loaded(self) -> dict[str, Relationship]:
        """Parse the relationship part on first use."""
        if self._relationships is not None:
            return self._relationships

        self._relationships = {}
        if not self._package.has_part(self._rels_name):
            logger.debug(f"No relationships part {self._rels_name}")
            return self._relationships

        root = parse(self._package.get_part(self._rels_name), self._rels_name).root
        for rel in root.elements():
            rel_id = rel.attributes.get("Id")
            target = rel.attributes.get("Target")
            if rel.local_name != "Relationship" or not rel_id or target is None:
                continue
            self._relationships[rel_id] = Relationship(
                rel_id=rel_id,
                rel_type=rel.attributes.get("Type", ""),
                target=target,
                external=rel.attributes.get("TargetMode") == "External",
            )

        return self._relationships

    def get(self, rel_id: str) -> Relationship | None:
        """Get a relationship by ID."""
        return self._ensure_loaded().get(rel_id)

    def resolve(self, rel_id: str) -> str | None:
        """Resolve a relationship ID to a part name inside the package.

        Returns:
            Normalized part name, or None if the ID is unknown or external
        """
        rel = self.get(rel_id)
        if rel is None or rel.external:
            return None
        return self.resolve_target(rel.target)

    def resolve_target(self, target: str) -> str:
        """Resolve a target path relative to the source part's directory."""
        if target.startswith("/"):
            return posixpath.normpath(target).lstrip("/")
        base = posixpath.dirname(self._part_name)
        return posixpath.normpath(posixpath.join(base, target))
