"""Lightweight SQL migrations runner.

Applies .sql files in lexical order from the dialect's migrations directory
(`migrations/` for PostgreSQL, `sqlite_migrations/` for SQLite). Skips
rollback files and records applied filenames in a `schema_migrations` table
so the same migration is never reapplied. Intended for local development and
CI; production environments may run the SQL files with their own tooling.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable

from sqlalchemy import text as sql_text
from sqlalchemy.engine import Connection, Engine

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[2]

_JOURNAL_DDL = (
    "CREATE TABLE IF NOT EXISTS schema_migrations ("
    " filename VARCHAR(255) PRIMARY KEY,"
    " applied_at VARCHAR(32) NOT NULL)"
)


def migrations_dir_for(engine: Engine) -> Path:
    name = (engine.dialect.name or "").lower()
    folder = "sqlite_migrations" if "sqlite" in name else "migrations"
    return PROJECT_ROOT / folder


def _iter_sql_files(root: Path) -> Iterable[Path]:
    for p in sorted(root.glob("*.sql")):
        # Skip rollback scripts in forward runs
        if "rollback" in p.name.lower():
            continue
        yield p


def _strip_comments(sql: str) -> str:
    """Drop `--` comments so their text never reaches the statement splitter."""
    kept = []
    for line in sql.splitlines():
        head, sep, _ = line.partition("--")
        # A `--` inside a string literal leaves an odd quote count before it
        kept.append(head if sep and head.count("'") % 2 == 0 else line)
    return "\n".join(kept)


def _split_statements(sql: str) -> list[str]:
    statements = []
    for stmt in _strip_comments(sql).split(";"):
        s = stmt.strip()
        if s and s.upper() not in {"BEGIN", "COMMIT", "END"}:
            statements.append(s)
    return statements


def _exec_sql_compat(conn: Connection, sql: str) -> None:
    """Execute SQL text, tolerating multi-statement files on SQLite.

    SQLite's DB-API (pysqlite) does not allow multiple statements in a single
    execute() call, so statements are split on ';' for SQLite only. Other
    dialects receive the full script as-is.
    """
    name = (getattr(conn.dialect, "name", "") or "").lower()
    if "sqlite" in name:
        for stmt in _split_statements(sql):
            conn.exec_driver_sql(stmt)
        return
    conn.exec_driver_sql(sql)


def _applied(conn: Connection) -> set[str]:
    rows = conn.execute(sql_text("SELECT filename FROM schema_migrations")).fetchall()
    return {str(r[0]) for r in rows}


def apply_migrations(engine: Engine, migrations_dir: str | os.PathLike[str] | None = None) -> list[str]:
    """Apply pending migrations and return the filenames applied by this call."""
    root = Path(migrations_dir) if migrations_dir is not None else migrations_dir_for(engine)
    if not root.exists():  # pragma: no cover - optional
        logger.warning("migrations_dir_missing path=%s", str(root))
        return []

    newly_applied: list[str] = []
    with engine.begin() as conn:
        conn.exec_driver_sql(_JOURNAL_DDL)
        applied = _applied(conn)
        for sql_path in _iter_sql_files(root):
            fname = sql_path.name
            if fname in applied:
                continue
            sql = sql_path.read_text(encoding="utf-8")
            if not sql.strip():
                continue
            _exec_sql_compat(conn, sql)
            conn.execute(
                sql_text("INSERT INTO schema_migrations (filename, applied_at) VALUES (:f, :at)"),
                {
                    "f": fname,
                    # ISO-8601 UTC without fractional seconds (e.g., 2024-01-01T00:00:00Z)
                    "at": datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z"),
                },
            )
            newly_applied.append(fname)
            logger.info("migration_applied file=%s", fname)
    return newly_applied


__all__ = ["apply_migrations", "migrations_dir_for"]
