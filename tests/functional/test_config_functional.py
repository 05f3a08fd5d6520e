"""Functional tests for configuration loading and precedence."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError as PydanticValidationError

from census_service import config as config_module
from census_service.config import DEFAULT_DSN, load_config


@pytest.fixture()
def isolated(tmp_path, monkeypatch):
    """Run load_config against an empty working directory and clean env."""
    monkeypatch.chdir(tmp_path)
    for key in (
        "TEST_DATABASE_URL",
        "DATABASE_URL",
        "AUTO_APPLY_MIGRATIONS",
        "CORS_ORIGINS",
        "FORM_YEAR",
        "FORM_VOIVODESHIP",
        "FORM_COUNTY",
        "FORM_COMMUNE",
        "FORM_LOCALITY",
    ):
        monkeypatch.delenv(key, raising=False)
    return tmp_path


def test_defaults(isolated):
    """Verifies defaults apply when no source provides a value."""
    cfg = load_config()
    assert cfg.database.dsn == DEFAULT_DSN
    assert cfg.database.auto_migrate is True
    assert cfg.cors.origins == ["*"]
    assert cfg.form.year == 2026
    assert cfg.form.voivodeship == "Pomorskie"
    assert cfg.form.locality == "Gdynia"


def test_json_base_file(isolated):
    """Verifies the project JSON file provides base values."""
    (isolated / config_module.ROOT_CONFIG).write_text(
        json.dumps({"database": {"dsn": "sqlite:///base.db"}, "form": {"year": 2027}, "cors": {"origins": ["https://a.pl", "https://b.pl"]}}),
        encoding="utf-8",
    )
    cfg = load_config()
    assert cfg.database.dsn == "sqlite:///base.db"
    assert cfg.form.year == 2027
    assert cfg.cors.origins == ["https://a.pl", "https://b.pl"]


def test_precedence_env_over_file_over_json(isolated, monkeypatch):
    """Verifies environment beats config/ files, which beat the JSON base."""
    (isolated / config_module.ROOT_CONFIG).write_text(json.dumps({"form": {"county": "Json"}}), encoding="utf-8")
    (isolated / "config").mkdir()
    (isolated / "config" / "form.county").write_text("Plik\n", encoding="utf-8")
    assert load_config().form.county == "Plik"
    monkeypatch.setenv("FORM_COUNTY", "Env")
    assert load_config().form.county == "Env"


def test_test_database_url_wins(isolated, monkeypatch):
    """Verifies TEST_DATABASE_URL overrides DATABASE_URL."""
    monkeypatch.setenv("DATABASE_URL", "sqlite:///prod.db")
    monkeypatch.setenv("TEST_DATABASE_URL", "sqlite:///test.db")
    assert load_config().database.dsn == "sqlite:///test.db"


@pytest.mark.parametrize("text,expected", [("0", False), ("false", False), ("1", True), ("yes", True)])
def test_auto_migrate_flag(isolated, monkeypatch, text, expected):
    """Verifies AUTO_APPLY_MIGRATIONS parsing."""
    monkeypatch.setenv("AUTO_APPLY_MIGRATIONS", text)
    assert load_config().database.auto_migrate is expected


def test_cors_origins_split(isolated, monkeypatch):
    """Verifies comma-separated origins are trimmed and split."""
    monkeypatch.setenv("CORS_ORIGINS", " https://a.pl , https://b.pl ,")
    assert load_config().cors.origins == ["https://a.pl", "https://b.pl"]


@pytest.mark.parametrize("year", ["1999", "abc"])
def test_invalid_year_rejected(isolated, monkeypatch, year):
    """Verifies an out-of-range or non-numeric year fails validation."""
    monkeypatch.setenv("FORM_YEAR", year)
    with pytest.raises(PydanticValidationError):
        load_config()
