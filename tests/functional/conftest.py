from __future__ import annotations

"""Functional test bootstrap.

Points the service at a file-backed SQLite database under `tmp/` before any
service module reads configuration, applies the SQLite migrations once per
session, and empties the responses table around every test that touches the
store.
"""

import os
import pathlib
from typing import Any, Iterator

import pytest

_ROOT = pathlib.Path(__file__).resolve().parents[2]
_DB_FILE = _ROOT / "tmp" / "functional_tests.db"
_DB_FILE.parent.mkdir(parents=True, exist_ok=True)
if _DB_FILE.exists():
    _DB_FILE.unlink()

# Use a file-backed SQLite DB to ensure persistence across connections
os.environ["TEST_DATABASE_URL"] = f"sqlite:///{_DB_FILE}"
os.environ["DATABASE_URL"] = os.environ["TEST_DATABASE_URL"]
# Migrations are applied once by the session fixture below
os.environ["AUTO_APPLY_MIGRATIONS"] = "0"
os.environ.pop("CORS_ORIGINS", None)


@pytest.fixture(scope="session")
def engine():
    from census_service.db.base import get_engine
    from census_service.db.migrations_runner import apply_migrations

    eng = get_engine(os.environ["TEST_DATABASE_URL"])
    apply_migrations(eng, migrations_dir=_ROOT / "sqlite_migrations")
    return eng


@pytest.fixture()
def store(engine) -> Iterator[Any]:
    """A ResponseStore over an empty responses table."""
    from sqlalchemy import text

    from census_service.logic.repository_responses import ResponseStore

    with engine.begin() as conn:
        conn.execute(text("DELETE FROM responses"))
    yield ResponseStore(engine)
    with engine.begin() as conn:
        conn.execute(text("DELETE FROM responses"))


@pytest.fixture()
def client(store):
    from fastapi.testclient import TestClient

    from census_service.main import create_app

    app = create_app()
    # Unhandled errors are asserted on as 500 payloads rather than re-raised
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c


@pytest.fixture()
def sample_answers() -> dict[str, Any]:
    """A complete submission as the survey client stores it."""
    return {
        "wywiad_dzisiaj": "NIE",
        "zgoda_udzial": "TAK",
        "duplikat": "NIE",
        "sposob_wypelnienia": "Pełny",
        "miasto_powyzej_100k": "TAK",
        "miejsce_pobytu": "15",
        "miejsce_nazwa": "Pustostan przy ul. Portowej",
        "p1_plec": "1.2",
        "p2_wiek_liczba": 54,
        "p2_wiek_typ": "Wiek deklarowany",
        "p2_wiek_kategoria": "Osoba dorosła (pow. 18 lat)",
        "p3_obywatelstwo": "Polskie",
        "p4_zameldowanie": "4.2. Tak, poza gminą obecnego pobytu",
        "p5_czas_bezdomnosci": "5.5",
        "p6_stan_cywilny": "6.3",
        "p7_wyksztalcenie": "7.4",
        "p8_gospodarstwo": "8.1",
        "p9_dochody": ["9.4", "9.5"],
        "p10_przyczyny": ["10.1", "10.5", "10.10"],
        "p11_pomoc": ["11.2", "11.3"],
        "p12_oczekiwane_wsparcie": ["12.4", "12.10"],
        "p13_1_czy_pomieszkuje": "NIE",
        "p13_2_czy_pomieszkiwal": "TAK",
        "p13_2_jak_dlugo": "Od 3 do 12 miesięcy",
        "p13_3_czy_zna": "TAK",
        "p13_3_ile_osob": "3–5",
        "funkcja_ankietera": "Streetworker",
    }
