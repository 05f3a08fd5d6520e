"""Data access for stored survey responses.

`ResponseStore` wraps an Engine handed to it by the caller; it holds no other
state. Reads return pydantic records with answers decoded, and every driver
failure surfaces as `StoreError`.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Optional

from sqlalchemy import bindparam, text as sql_text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from census_service.logic.errors import StoreError
from census_service.models.response import ResponseRecord, ResponseSummary

logger = logging.getLogger(__name__)

_COLUMNS = "id, ext_id, ts, created, answers"


class ResponseStore:
    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def _fetch(self, query, params: dict[str, Any] | None = None) -> list[dict]:
        try:
            with self.engine.connect() as conn:
                return [dict(r) for r in conn.execute(query, params or {}).mappings().all()]
        except SQLAlchemyError as exc:
            logger.error("responses.read_failed", exc_info=True)
            raise StoreError(f"response store read failed: {exc}") from exc

    def get(self, response_id: int) -> Optional[ResponseRecord]:
        rows = self._fetch(
            sql_text(f"SELECT {_COLUMNS} FROM responses WHERE id = :id"),
            {"id": int(response_id)},
        )
        return ResponseRecord(**rows[0]) if rows else None

    def list_all(self) -> List[ResponseRecord]:
        rows = self._fetch(sql_text(f"SELECT {_COLUMNS} FROM responses ORDER BY id"))
        return [ResponseRecord(**r) for r in rows]

    def list_by_ids(self, ids: Iterable[int]) -> List[ResponseRecord]:
        wanted = sorted({int(i) for i in ids})
        if not wanted:
            return []
        query = sql_text(
            f"SELECT {_COLUMNS} FROM responses WHERE id IN :ids ORDER BY id"
        ).bindparams(bindparam("ids", expanding=True))
        return [ResponseRecord(**r) for r in self._fetch(query, {"ids": wanted})]

    def list_summaries(self) -> List[ResponseSummary]:
        rows = self._fetch(sql_text("SELECT id, ext_id, ts, created FROM responses ORDER BY id"))
        return [ResponseSummary(**r) for r in rows]

    def insert(self, ext_id: Optional[str], ts: Optional[str], answers_json: str) -> int:
        """Insert one submission and return its new integer id."""
        params = {"ext_id": ext_id, "ts": ts, "answers": answers_json}
        try:
            with self.engine.begin() as conn:
                if conn.dialect.name == "sqlite":
                    result = conn.execute(
                        sql_text("INSERT INTO responses (ext_id, ts, answers) VALUES (:ext_id, :ts, :answers)"),
                        params,
                    )
                    new_id = int(result.lastrowid)
                else:
                    new_id = int(
                        conn.execute(
                            sql_text(
                                "INSERT INTO responses (ext_id, ts, answers) "
                                "VALUES (:ext_id, :ts, :answers) RETURNING id"
                            ),
                            params,
                        ).scalar_one()
                    )
        except SQLAlchemyError as exc:
            logger.error("responses.insert_failed ext_id=%s", ext_id, exc_info=True)
            raise StoreError(f"response store write failed: {exc}") from exc
        logger.info("responses.insert id=%s ext_id=%s", new_id, ext_id)
        return new_id

    def delete(self, response_id: int) -> bool:
        """Delete one submission; False when no row had that id."""
        try:
            with self.engine.begin() as conn:
                result = conn.execute(
                    sql_text("DELETE FROM responses WHERE id = :id"),
                    {"id": int(response_id)},
                )
        except SQLAlchemyError as exc:
            logger.error("responses.delete_failed id=%s", response_id, exc_info=True)
            raise StoreError(f"response store delete failed: {exc}") from exc
        deleted = (result.rowcount or 0) > 0
        logger.info("responses.delete id=%s deleted=%s", response_id, deleted)
        return deleted


__all__ = ["ResponseStore"]
