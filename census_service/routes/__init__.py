"""APIRouter registration for the census questionnaire service."""

from __future__ import annotations

from fastapi import APIRouter

from census_service.routes.export import router as export_router
from census_service.routes.responses import router as responses_router

api_router = APIRouter()
api_router.include_router(export_router, tags=["Export"])
api_router.include_router(responses_router, tags=["Responses"])

__all__ = ["api_router"]
