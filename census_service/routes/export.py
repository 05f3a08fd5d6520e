"""Questionnaire export endpoint: one `.docx` or a `.zip` of many."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response

from census_service.config import FormConfig
from census_service.logic.exporter import (
    ExportedFile,
    Selector,
    export_by_id,
    export_many,
    parse_id,
    parse_ids,
)
from census_service.logic.repository_responses import ResponseStore
from census_service.routes.deps import get_form_config, get_store

router = APIRouter()
logger = logging.getLogger(__name__)


def attachment(exported: ExportedFile) -> Response:
    return Response(
        content=exported.content,
        media_type=exported.media_type,
        headers={"Content-Disposition": f'attachment; filename="{exported.filename}"'},
    )


@router.get(
    "/export",
    summary="Export one questionnaire as DOCX, or several as a ZIP archive",
    operation_id="exportQuestionnaires",
    tags=["Export"],
)
def export_questionnaires(
    id: Optional[str] = Query(None, description="Single response id; returns a .docx"),
    ids: Optional[str] = Query(None, description="Comma-separated response ids; returns a .zip"),
    store: ResponseStore = Depends(get_store),
    form: FormConfig = Depends(get_form_config),
) -> Response:
    if id is not None:
        logger.info("export_request mode=single id=%s", id)
        return attachment(export_by_id(store, parse_id(id), form=form))
    if ids is not None:
        selector = Selector.of(parse_ids(ids))
        logger.info("export_request mode=ids count=%s", len(selector.ids or ()))
    else:
        selector = Selector.all()
        logger.info("export_request mode=all")
    return attachment(export_many(store, selector, form=form))


__all__ = ["router", "attachment"]
