"""Zip packer for batch questionnaire exports.

Entries are written in the given order with DEFLATE compression. A fixed
member timestamp keeps the archive bytes stable for identical input.
"""

from __future__ import annotations

import io
import logging
import zipfile
from typing import Sequence, Tuple

from census_service.logic.errors import PackError

ZIP_MEDIA_TYPE = "application/zip"
# 1980-01-01 is the earliest timestamp the zip format can store
FIXED_DATE_TIME = (1980, 1, 1, 0, 0, 0)

logger = logging.getLogger(__name__)


def pack(entries: Sequence[Tuple[str, bytes]]) -> bytes:
    """Pack `(name, content)` pairs into a zip archive.

    Raises PackError on duplicate or empty entry names and on any zipfile
    failure.
    """
    seen: set[str] = set()
    for name, _ in entries:
        if not name:
            raise PackError("archive entry name must be non-empty")
        if name in seen:
            raise PackError(f"duplicate archive entry: {name}")
        seen.add(name)

    buf = io.BytesIO()
    try:
        with zipfile.ZipFile(buf, mode="w", compression=zipfile.ZIP_DEFLATED) as zf:
            for name, content in entries:
                info = zipfile.ZipInfo(name, date_time=FIXED_DATE_TIME)
                info.compress_type = zipfile.ZIP_DEFLATED
                info.external_attr = 0o644 << 16
                zf.writestr(info, bytes(content))
    except (zipfile.BadZipFile, zipfile.LargeZipFile, OSError, ValueError) as exc:
        logger.error("archive.pack_failed entries=%s", len(entries), exc_info=True)
        raise PackError(f"archive packing failed: {exc}") from exc
    return buf.getvalue()


__all__ = ["ZIP_MEDIA_TYPE", "pack"]
