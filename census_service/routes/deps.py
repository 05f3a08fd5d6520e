"""FastAPI dependencies resolving per-app collaborators from `app.state`."""

from __future__ import annotations

from fastapi import Request

from census_service.config import FormConfig
from census_service.logic.repository_responses import ResponseStore


def get_store(request: Request) -> ResponseStore:
    return request.app.state.store


def get_form_config(request: Request) -> FormConfig:
    return request.app.state.config.form


__all__ = ["get_store", "get_form_config"]
