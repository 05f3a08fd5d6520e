"""Configuration utilities for the census questionnaire service.

This module loads application configuration with the following rules:
- Primary source: `census_config.json` at the project root.
- Overrides: environment variables, then optional text files under `config/`.
- Validation: Pydantic models enforce required fields and value constraints.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator


CONFIG_DIR = Path("config")
ROOT_CONFIG = Path("census_config.json")
DEFAULT_DSN = "sqlite+pysqlite:///:memory:"
logger = logging.getLogger(__name__)


def _read_config_file(rel_path: str) -> Optional[str]:
    path = CONFIG_DIR / rel_path
    try:
        if path.exists():
            return path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError) as e:
        # Recoverable: log and ignore unreadable override
        logger.warning("Failed to read override %s: %s", path, e)
        return None
    return None


def _env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(key, default)


class DatabaseConfig(BaseModel):
    dsn: str
    auto_migrate: bool = Field(default=True)

    @field_validator("dsn")
    @classmethod
    def dsn_must_be_non_empty(cls, v: str) -> str:
        if not isinstance(v, str) or not v.strip():
            raise ValueError("database.dsn must be a non-empty string")
        return v


class CorsConfig(BaseModel):
    origins: List[str] = Field(default_factory=lambda: ["*"])


class FormConfig(BaseModel):
    """Fixed header values printed on every rendered questionnaire."""

    year: int = Field(default=2026, ge=2000, le=2100)
    voivodeship: str = "Pomorskie"
    county: str = "Gdynia"
    commune: str = "Gdynia"
    locality: str = "Gdynia"


class AppConfig(BaseModel):
    database: DatabaseConfig
    cors: CorsConfig = Field(default_factory=CorsConfig)
    form: FormConfig = Field(default_factory=FormConfig)


def _read_json_file(path: Path) -> dict:
    try:
        if path.exists():
            return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.error("Failed to read JSON config %s: %s", path, e)
    return {}


def load_config() -> AppConfig:
    """Load configuration with validation.

    Precedence (highest first):
    1) Environment variables
    2) Text files in `config/` (optional)
    3) census_config.json at project root (primary base)
    4) Safe defaults for development
    """

    base = _read_json_file(ROOT_CONFIG)

    def _base(path: str, default: Optional[str] = None) -> Optional[str]:
        cur: object = base
        for key in path.split("."):
            if not isinstance(cur, dict) or key not in cur:
                return default
            cur = cur[key]
        if isinstance(cur, list):
            return ",".join(str(x) for x in cur)
        return str(cur) if cur is not None else default

    def _setting(env_key: str, file_key: str, base_path: str, default: Optional[str] = None) -> Optional[str]:
        return _env(env_key) or _read_config_file(file_key) or _base(base_path, default)

    # Database; TEST_DATABASE_URL wins so test runs never touch a real store
    dsn = _env("TEST_DATABASE_URL") or _setting("DATABASE_URL", "database.url", "database.dsn", DEFAULT_DSN)
    auto_migrate_text = _setting("AUTO_APPLY_MIGRATIONS", "database.auto_migrate", "database.auto_migrate", "true")
    auto_migrate = str(auto_migrate_text).strip().lower() in {"1", "true", "yes"}

    origins_text = _setting("CORS_ORIGINS", "cors.origins", "cors.origins", "*")
    origins = [o.strip() for o in str(origins_text).split(",") if o.strip()] or ["*"]

    form_fields = {
        name: _setting(f"FORM_{name.upper()}", f"form.{name}", f"form.{name}")
        for name in ("year", "voivodeship", "county", "commune", "locality")
    }

    try:
        cfg = AppConfig(
            database=DatabaseConfig(dsn=dsn, auto_migrate=auto_migrate),
            cors=CorsConfig(origins=origins),
            form=FormConfig(**{k: v for k, v in form_fields.items() if v is not None}),
        )
        return cfg
    except PydanticValidationError as e:
        # Surface actionable message
        logger.error("Invalid application configuration: %s", e)
        raise


__all__ = [
    "AppConfig",
    "DatabaseConfig",
    "CorsConfig",
    "FormConfig",
    "DEFAULT_DSN",
    "load_config",
]
