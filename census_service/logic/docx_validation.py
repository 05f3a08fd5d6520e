"""DOCX content validation helpers.

Confirms that writer output is a ZIP container carrying the parts Word needs
before it leaves the export pipeline.
"""

from __future__ import annotations

import io
import zipfile

ZIP_SIGNATURE = b"PK\x03\x04"
REQUIRED_PARTS = ("[Content_Types].xml", "word/document.xml")


def docx_part_names(content: bytes) -> list[str]:
    """List the package parts of a DOCX payload; empty for non-ZIP input."""
    if not isinstance(content, (bytes, bytearray)):
        return []
    if bytes(content[:4]) != ZIP_SIGNATURE:
        return []
    try:
        with zipfile.ZipFile(io.BytesIO(bytes(content))) as zf:
            return zf.namelist()
    except zipfile.BadZipFile:
        return []


def is_valid_docx(content: bytes) -> bool:
    """Return True if `content` is a ZIP package holding the main document part.

    A bare signature is not enough: the container must open and list both
    `[Content_Types].xml` and `word/document.xml`.
    """
    parts = set(docx_part_names(content))
    return all(name in parts for name in REQUIRED_PARTS)


__all__ = ["is_valid_docx", "docx_part_names", "REQUIRED_PARTS"]
