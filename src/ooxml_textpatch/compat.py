"""
Compatibility helpers for integrating with python-docx.

These functions move Word documents between python-docx and a
DocumentSession in memory, without saving to disk in between.
"""

from __future__ import annotations

import io
from typing import Any

from .errors import DocumentError
from .flavors import Flavor
from .session import DocumentSession


def from_python_docx(python_docx_doc: Any) -> DocumentSession:
    """Open a DocumentSession on a python-docx Document.

    Args:
        python_docx_doc: A python-docx Document object

    Returns:
        A word-processing DocumentSession

    Raises:
        ImportError: If python-docx is not installed (with helpful message)
        TypeError: If the input is not a python-docx Document

    Example:
        >>> from docx import Document as PythonDocxDocument
        >>> from ooxml_textpatch.compat import from_python_docx
        >>>
        >>> py_doc = PythonDocxDocument()
        >>> py_doc.add_paragraph("Payment terms: 30 days")
        >>> session = from_python_docx(py_doc)
        >>> session.apply_replacements(["Payment terms: 45 days"])
    """
    try:
        from docx.document import Document as PythonDocxDocType
    except ImportError as e:
        raise ImportError(
            "python-docx is required for from_python_docx(). "
            "Install it with: pip install python-docx"
        ) from e

    if not isinstance(python_docx_doc, PythonDocxDocType):
        raise TypeError(
            f"Expected python-docx Document, got {type(python_docx_doc).__name__}. "
            "Pass a Document object created with: from docx import Document"
        )

    buffer = io.BytesIO()
    python_docx_doc.save(buffer)
    return DocumentSession.open(buffer.getvalue(), Flavor.WORD_PROCESSING)


def to_python_docx(session: DocumentSession) -> Any:
    """Load the emitted package of a word-processing session into python-docx.

    Args:
        session: A word-processing DocumentSession

    Returns:
        A python-docx Document object

    Raises:
        ImportError: If python-docx is not installed
        DocumentError: If the session is not a word-processing session
    """
    try:
        from docx import Document as PythonDocxDoc
    except ImportError as e:
        raise ImportError(
            "python-docx is required for to_python_docx(). Install it with: pip install python-docx"
        ) from e

    if session.flavor is not Flavor.WORD_PROCESSING:
        raise DocumentError(f"Cannot load a {session.flavor.value} session into python-docx")

    return PythonDocxDoc(io.BytesIO(session.emit()))
