"""CORS configuration helpers.

Browsers may only read the attachment filename of an export when
Content-Disposition is listed as an exposed header.
"""

from __future__ import annotations

from typing import Iterable

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware


EXPOSE_HEADERS: list[str] = ["Content-Disposition", "X-Request-Id"]
ALLOW_METHODS: list[str] = ["GET", "POST", "DELETE", "OPTIONS"]


def apply_cors(app: FastAPI, *, origins: Iterable[str] | None = None) -> None:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(origins or ["*"]),
        allow_credentials=False,
        allow_methods=ALLOW_METHODS,
        allow_headers=["Content-Type", "X-Request-Id"],
        expose_headers=EXPOSE_HEADERS,
    )


__all__ = ["apply_cors", "EXPOSE_HEADERS", "ALLOW_METHODS"]
