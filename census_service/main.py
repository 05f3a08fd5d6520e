"""Application factory for the census questionnaire service.

Run with `uvicorn census_service.main:create_app --factory`.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from census_service.config import AppConfig, load_config
from census_service.db.base import get_engine, ping
from census_service.db.migrations_runner import apply_migrations
from census_service.http.problem import (
    handle_census_error,
    handle_http_exception,
    handle_request_validation_error,
    handle_unexpected_error,
)
from census_service.http.request_id import RequestIdMiddleware
from census_service.logging_setup import configure_logging
from census_service.logic.errors import CensusError
from census_service.logic.repository_responses import ResponseStore
from census_service.middleware.cors import apply_cors
from census_service.routes import api_router

logger = logging.getLogger(__name__)


def create_app(config: AppConfig | None = None) -> FastAPI:
    # Configure global logging before app instantiation so all modules emit
    try:
        configure_logging()
    except (ValueError, TypeError, AttributeError, ImportError):
        logging.getLogger(__name__).error("global_logging_configuration_failed", exc_info=True)

    config = config or load_config()
    engine = get_engine(config.database.dsn)
    if config.database.auto_migrate:
        try:
            apply_migrations(engine)
        except Exception:
            logger.error("Failed to apply migrations at startup", exc_info=True)
            raise
    else:
        logger.info("AUTO_APPLY_MIGRATIONS disabled; skipping migrations at startup")

    app = FastAPI(title="Census Questionnaire Service")
    app.state.config = config
    app.state.engine = engine
    app.state.store = ResponseStore(engine)

    app.add_exception_handler(CensusError, handle_census_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
    app.add_middleware(RequestIdMiddleware)
    # CORS is added last so it wraps the request id layer and answers preflights first
    apply_cors(app, origins=config.cors.origins)

    app.include_router(api_router, prefix="/api")

    @app.get("/health")
    def health():
        db_ok = ping(app.state.engine)
        return {"status": "ok" if db_ok else "degraded", "db": db_ok}

    logger.info("app_created dialect=%s origins=%s", engine.dialect.name, ",".join(config.cors.origins))
    return app


# Intentionally do not instantiate the app at import time to prevent side effects.
