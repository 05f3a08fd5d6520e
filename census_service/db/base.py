"""SQLAlchemy engine factory.

The service targets PostgreSQL in production but supports SQLite for local
development and CI. No declarative models are defined here; this module only
manages engine construction. Callers pass the engine to
`census_service.logic.repository_responses.ResponseStore` explicitly.
"""

from __future__ import annotations

import logging

from sqlalchemy import create_engine, text as sql_text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)


# Engines are cached per URL so repeated app construction reuses one pool
_ENGINES: dict[str, Engine] = {}


def get_engine(url: str) -> Engine:
    """Return a cached SQLAlchemy Engine for the given URL.

    For SQLite in-memory URLs, use a StaticPool to keep a single connection
    alive across sessions and threads during tests.
    """
    engine = _ENGINES.get(url)
    if engine is None:
        kwargs: dict = {"future": True, "pool_pre_ping": True}
        if url.startswith("sqlite") and ":memory:" in url:
            # Keep a single in-memory DB connection shared across the process
            kwargs.update({
                "poolclass": StaticPool,
                "connect_args": {"check_same_thread": False},
            })
        elif url.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False}
        engine = create_engine(url, **kwargs)
        _ENGINES[url] = engine
        logger.info("db.engine_created dialect=%s", engine.dialect.name)
    return engine


def ping(engine: Engine) -> bool:
    """Run `SELECT 1`; False when the database is unreachable."""
    try:
        with engine.connect() as conn:
            conn.execute(sql_text("SELECT 1")).scalar()
        return True
    except SQLAlchemyError:
        logger.error("db.ping_failed", exc_info=True)
        return False


__all__ = ["get_engine", "ping"]
