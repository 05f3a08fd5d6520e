"""Single-record and batch questionnaire exports.

Both exporters render every record from scratch: build the document model,
serialize it, and (for batches) pack the documents into one zip archive.
The response store, writer and packer are passed in by the caller. A failure
at any step fails the whole call; batches are all-or-nothing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Callable, List, Optional, Protocol, Sequence, Tuple

from census_service.config import FormConfig
from census_service.logic.archive import ZIP_MEDIA_TYPE, pack
from census_service.logic.docx_writer import DOCX_MEDIA_TYPE, serialize
from census_service.logic.errors import NotFoundError, ValidationError
from census_service.logic.questionnaire_builder import build
from census_service.models.document import Document
from census_service.models.response import ResponseRecord

logger = logging.getLogger(__name__)

Writer = Callable[[Document], bytes]
Packer = Callable[[Sequence[Tuple[str, bytes]]], bytes]


class ResponseReader(Protocol):
    def get(self, response_id: int) -> Optional[ResponseRecord]: ...

    def list_all(self) -> List[ResponseRecord]: ...

    def list_by_ids(self, ids: Sequence[int]) -> List[ResponseRecord]: ...


@dataclass(frozen=True)
class ExportedFile:
    filename: str
    content: bytes
    media_type: str


@dataclass(frozen=True)
class Selector:
    """Which records a batch export includes; `ids=None` means all of them."""

    ids: Optional[Tuple[int, ...]] = None

    @classmethod
    def all(cls) -> "Selector":
        return cls()

    @classmethod
    def of(cls, ids: Sequence[int]) -> "Selector":
        return cls(ids=tuple(ids))


# Ids are stored as signed 64-bit integers
MIN_ID = -(2**63)
MAX_ID = 2**63 - 1


def _to_id(token: str) -> int:
    value = int(token)
    if not MIN_ID <= value <= MAX_ID:
        raise ValueError(f"id out of range: {token}")
    return value


def parse_id(raw: str) -> int:
    try:
        return _to_id(str(raw).strip())
    except (TypeError, ValueError):
        raise ValidationError(f"invalid id: {raw!r}") from None


def parse_ids(raw: str) -> List[int]:
    """Parse a comma-separated id list, skipping tokens that are not storable integers.

    Raises ValidationError when nothing parseable remains.
    """
    ids: List[int] = []
    for token in str(raw or "").split(","):
        token = token.strip()
        if not token:
            continue
        try:
            ids.append(_to_id(token))
        except ValueError:
            logger.debug("export.ids_token_skipped token=%s", token)
    if not ids:
        raise ValidationError("ids must contain at least one integer id")
    return ids


def document_filename(record: ResponseRecord) -> str:
    return f"kwestionariusz_{record.id:04d}_{record.date_label()}.docx"


def archive_filename(today: date) -> str:
    return f"kwestionariusze_{today.isoformat()}.zip"


def export_one(
    record: ResponseRecord,
    *,
    writer: Writer = serialize,
    form: FormConfig | None = None,
) -> ExportedFile:
    """Render one record to a `.docx` attachment."""
    content = writer(build(record, form))
    exported = ExportedFile(document_filename(record), content, DOCX_MEDIA_TYPE)
    logger.info("export_one.success id=%s bytes=%s", record.id, len(content))
    return exported


def export_by_id(
    store: ResponseReader,
    response_id: int,
    *,
    writer: Writer = serialize,
    form: FormConfig | None = None,
) -> ExportedFile:
    record = store.get(response_id)
    if record is None:
        raise NotFoundError(f"response {response_id} not found")
    return export_one(record, writer=writer, form=form)


def export_many(
    store: ResponseReader,
    selector: Selector,
    *,
    today: date | None = None,
    writer: Writer = serialize,
    packer: Packer = pack,
    form: FormConfig | None = None,
) -> ExportedFile:
    """Render the selected records, ascending by id, into one zip archive.

    Raises ValidationError for an empty id selection and NotFoundError when
    no record matches.
    """
    if selector.ids is None:
        records = store.list_all()
    else:
        if not selector.ids:
            raise ValidationError("ids must contain at least one integer id")
        records = store.list_by_ids(selector.ids)
    if not records:
        raise NotFoundError("no responses matched the export selection")

    records = sorted(records, key=lambda r: r.id)
    entries = [(f.filename, f.content) for f in (export_one(r, writer=writer, form=form) for r in records)]
    content = packer(entries)
    day = today or datetime.now(timezone.utc).date()
    logger.info("export_many.success count=%s bytes=%s", len(entries), len(content))
    return ExportedFile(archive_filename(day), content, ZIP_MEDIA_TYPE)


__all__ = [
    "ExportedFile",
    "ResponseReader",
    "Selector",
    "archive_filename",
    "document_filename",
    "export_by_id",
    "export_many",
    "export_one",
    "parse_id",
    "parse_ids",
]
