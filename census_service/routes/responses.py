"""Survey response submission, listing, lookup and deletion."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response

from census_service.logic.answers import serialize_answers
from census_service.logic.errors import NotFoundError
from census_service.logic.exporter import parse_id
from census_service.logic.repository_responses import ResponseStore
from census_service.models.response import ResponseList, Submission, SubmissionResult
from census_service.routes.deps import get_store

router = APIRouter()
logger = logging.getLogger(__name__)

_TRUTHY = {"1", "true"}


def utc_timestamp() -> str:
    """Current UTC time as ISO-8601 with milliseconds and a `Z` suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@router.get(
    "/responses",
    summary="List stored responses",
    operation_id="listResponses",
    tags=["Responses"],
    response_model=ResponseList,
)
def list_responses(
    full: Optional[str] = Query(None, description="1 or true to include parsed answers"),
    store: ResponseStore = Depends(get_store),
):
    if (full or "").strip().lower() in _TRUTHY:
        items = []
        for record in store.list_all():
            item = record.model_dump()
            item["ts"] = record.ts or record.created
            items.append(item)
    else:
        items = [
            {**s.model_dump(), "ts": s.ts or s.created}
            for s in store.list_summaries()
        ]
    return ResponseList(total=len(items), items=items)


@router.post(
    "/responses",
    summary="Store one survey submission",
    operation_id="createResponse",
    tags=["Responses"],
    response_model=SubmissionResult,
)
def create_response(body: Submission, store: ResponseStore = Depends(get_store)):
    ext_id = str(body.id) if body.id not in (None, "") else None
    ts = body.ts or utc_timestamp()
    answers = body.answers if body.answers not in (None, "") else {}
    db_id = store.insert(ext_id, ts, serialize_answers(answers))
    return SubmissionResult(ok=True, db_id=db_id)


@router.get(
    "/responses/{response_id}",
    summary="Get one stored response with its answers",
    operation_id="getResponse",
    tags=["Responses"],
)
def get_response(response_id: str, store: ResponseStore = Depends(get_store)):
    record = store.get(parse_id(response_id))
    if record is None:
        raise NotFoundError(f"response {response_id} not found")
    return record.model_dump()


@router.delete(
    "/responses/{response_id}",
    summary="Delete one stored response",
    operation_id="deleteResponse",
    tags=["Responses"],
    status_code=204,
)
def delete_response(response_id: str, store: ResponseStore = Depends(get_store)) -> Response:
    if not store.delete(parse_id(response_id)):
        raise NotFoundError(f"response {response_id} not found")
    return Response(status_code=204)


__all__ = ["router", "utc_timestamp"]
