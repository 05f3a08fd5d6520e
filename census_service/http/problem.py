"""Problem+JSON utilities and global exception handlers.

Every failure leaves the service as `{"error", "title", "status"}` with the
application/problem+json media type. Domain errors carry their own status;
routing errors keep Starlette's; body validation errors become 400.
"""

from __future__ import annotations

import logging
from http import HTTPStatus

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from census_service.logic.errors import CensusError

PROBLEM_MEDIA_TYPE = "application/problem+json"

logger = logging.getLogger(__name__)


def _reason(status: int) -> str:
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return "Error"


def problem_response(message: str, status: int, title: str | None = None, headers: dict | None = None) -> JSONResponse:
    body = {"error": message, "title": title or _reason(status), "status": status}
    return JSONResponse(body, status_code=status, media_type=PROBLEM_MEDIA_TYPE, headers=headers)


async def handle_census_error(request: Request, exc: CensusError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "request_failed path=%s error=%s", request.url.path, type(exc).__name__, exc_info=exc
        )
    else:
        logger.info("request_rejected path=%s status=%s error=%s", request.url.path, exc.status_code, exc.message)
    return problem_response(exc.message, exc.status_code, exc.title)


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:  # noqa: D401
    status = int(getattr(exc, "status_code", 500) or 500)
    detail = getattr(exc, "detail", None)
    message = detail if isinstance(detail, str) and detail else _reason(status)
    # Keep upstream headers such as Allow on 405
    headers = dict(exc.headers) if isinstance(getattr(exc, "headers", None), dict) else None
    return problem_response(message, status, headers=headers)


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:  # noqa: D401
    errors = list(exc.errors())
    first = errors[0] if errors else {}
    loc = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = f"{loc}: {first.get('msg')}" if loc else str(first.get("msg") or "Request validation failed")
    return problem_response(message, 400, "Invalid Request")


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:  # noqa: D401
    logger.error("unexpected_error path=%s", request.url.path, exc_info=exc)
    return problem_response(str(exc) or "Internal Server Error", 500)


__all__ = [
    "PROBLEM_MEDIA_TYPE",
    "problem_response",
    "handle_census_error",
    "handle_http_exception",
    "handle_request_validation_error",
    "handle_unexpected_error",
]
