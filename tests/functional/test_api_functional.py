"""Functional HTTP tests for the responses and export endpoints."""

from __future__ import annotations

import io
import json
import re
import zipfile
from datetime import datetime, timezone

import docx
import pytest

from census_service.logic.docx_writer import DOCX_MEDIA_TYPE

PROBLEM = "application/problem+json"


def _submit(client, answers, **extra) -> int:
    resp = client.post("/api/responses", json={"answers": answers, **extra})
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["ok"] is True
    return body["db_id"]


def _assert_problem(resp, status: int) -> dict:
    assert resp.status_code == status
    assert resp.headers["content-type"].startswith(PROBLEM)
    body = resp.json()
    assert body["status"] == status
    assert isinstance(body["error"], str) and body["error"]
    assert isinstance(body["title"], str)
    return body


def _filename(resp) -> str:
    m = re.fullmatch(r'attachment; filename="([^"]+)"', resp.headers["content-disposition"])
    assert m, resp.headers["content-disposition"]
    return m.group(1)


# --------------------
# Responses
# --------------------


def test_submit_then_fetch_roundtrip(client, sample_answers):
    """Verifies a submission is stored and returned with parsed answers."""
    db_id = _submit(client, sample_answers, id="client-7", ts="2026-03-01T10:00:00.000Z")
    resp = client.get(f"/api/responses/{db_id}")
    assert resp.status_code == 200
    body = resp.json()
    assert body["id"] == db_id
    assert body["ext_id"] == "client-7"
    assert body["ts"] == "2026-03-01T10:00:00.000Z"
    assert body["answers"] == sample_answers
    assert body["created"]


def test_submit_defaults_ts_to_receipt_time(client):
    """Verifies a missing ts is filled with the UTC receipt time."""
    before = datetime.now(timezone.utc).replace(microsecond=0)
    db_id = _submit(client, {"p1_plec": "1.1"})
    ts = client.get(f"/api/responses/{db_id}").json()["ts"]
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z", ts)
    assert datetime.fromisoformat(ts.replace("Z", "+00:00")) >= before


def test_submit_accepts_answers_as_json_text(client):
    """Verifies answers posted as JSON text are stored verbatim and parsed on read."""
    db_id = _submit(client, json.dumps({"p3_obywatelstwo": "Polskie"}))
    assert client.get(f"/api/responses/{db_id}").json()["answers"] == {"p3_obywatelstwo": "Polskie"}


def test_submit_integer_client_id_stored_as_text(client):
    """Verifies a numeric client id is kept as text."""
    db_id = _submit(client, {}, id=99)
    assert client.get(f"/api/responses/{db_id}").json()["ext_id"] == "99"


def test_submit_rejects_malformed_body(client):
    """Verifies an unparseable JSON body is a 400 error payload."""
    resp = client.post("/api/responses", content=b"{not json", headers={"Content-Type": "application/json"})
    _assert_problem(resp, 400)


def test_list_summaries_and_full(client):
    """Verifies the list omits answers unless full=1 and orders by id."""
    first = _submit(client, {"a": "1"}, ts="2026-03-01T10:00:00.000Z")
    second = _submit(client, {"b": "2"}, ts="2026-03-02T10:00:00.000Z")

    summary = client.get("/api/responses").json()
    assert summary["total"] == 2
    assert [i["id"] for i in summary["items"]] == [first, second]
    assert all("answers" not in i for i in summary["items"])

    for flag in ("1", "true"):
        full = client.get(f"/api/responses?full={flag}").json()
        assert [i["answers"] for i in full["items"]] == [{"a": "1"}, {"b": "2"}]


def test_list_ts_falls_back_to_created(client, store):
    """Verifies list items report created time when ts is empty."""
    db_id = store.insert(None, None, "{}")
    item = client.get("/api/responses").json()["items"][0]
    assert item["id"] == db_id
    assert item["ts"] == item["created"]
    assert item["ts"]


def test_corrupt_stored_answers_read_as_empty(client, store):
    """Verifies undecodable stored answers are served as an empty object."""
    db_id = store.insert("x", "2026-03-01T10:00:00Z", "{broken")
    assert client.get(f"/api/responses/{db_id}").json()["answers"] == {}


def test_get_unknown_and_invalid_ids(client):
    """Verifies unknown ids are 404 and non-integer ids are 400."""
    _assert_problem(client.get("/api/responses/424242"), 404)
    _assert_problem(client.get("/api/responses/abc"), 400)


def test_delete(client):
    """Verifies delete removes the record and repeats are 404."""
    db_id = _submit(client, {})
    resp = client.delete(f"/api/responses/{db_id}")
    assert resp.status_code == 204
    assert resp.content == b""
    _assert_problem(client.get(f"/api/responses/{db_id}"), 404)
    _assert_problem(client.delete(f"/api/responses/{db_id}"), 404)


# --------------------
# Export
# --------------------


def test_export_single_docx(client, sample_answers):
    """Verifies ?id= returns a DOCX attachment named after the record."""
    db_id = _submit(client, sample_answers, ts="2026-03-01T10:00:00.000Z")
    resp = client.get(f"/api/export?id={db_id}")
    assert resp.status_code == 200
    assert resp.headers["content-type"] == DOCX_MEDIA_TYPE
    assert _filename(resp) == f"kwestionariusz_{db_id:04d}_2026-03-01.docx"
    assert resp.content[:4] == b"PK\x03\x04"


def test_export_single_errors(client):
    """Verifies unknown ids are 404 and unparseable ids are 400."""
    _assert_problem(client.get("/api/export?id=999999"), 404)
    _assert_problem(client.get("/api/export?id=abc"), 400)


def test_oversized_ids_are_400(client):
    """Verifies ids beyond the 64-bit column range are client errors, not 500s."""
    huge = "99999999999999999999"
    _assert_problem(client.get(f"/api/export?id={huge}"), 400)
    _assert_problem(client.get(f"/api/export?ids={huge}"), 400)
    _assert_problem(client.get(f"/api/responses/{huge}"), 400)
    _assert_problem(client.delete(f"/api/responses/{huge}"), 400)


def test_export_answer_with_control_character(client):
    """Verifies a stored answer carrying a vertical tab still exports as DOCX."""
    db_id = _submit(client, {"miejsce_nazwa": "Dworzec\x0bPKP"})
    resp = client.get(f"/api/export?id={db_id}")
    assert resp.status_code == 200
    assert resp.headers["content-type"] == DOCX_MEDIA_TYPE
    text = "\n".join(p.text for p in docx.Document(io.BytesIO(resp.content)).paragraphs)
    assert "DworzecPKP" in text


def test_export_ids_zip_in_ascending_order(client):
    """Verifies ?ids= packs exactly those records ordered by id."""
    ids = [_submit(client, {"p1_plec": "1.1"}, ts="2026-03-01T10:00:00.000Z") for _ in range(3)]
    resp = client.get(f"/api/export?ids={ids[2]},{ids[0]}")
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/zip"
    today = datetime.now(timezone.utc).date().isoformat()
    assert _filename(resp) == f"kwestionariusze_{today}.zip"
    with zipfile.ZipFile(io.BytesIO(resp.content)) as zf:
        assert zf.namelist() == [
            f"kwestionariusz_{ids[0]:04d}_2026-03-01.docx",
            f"kwestionariusz_{ids[2]:04d}_2026-03-01.docx",
        ]


@pytest.mark.parametrize("query", ["ids=", "ids=,", "ids=a,b"])
def test_export_ids_invalid_is_400(client, query):
    """Verifies empty or non-integer id lists are rejected."""
    _assert_problem(client.get(f"/api/export?{query}"), 400)


def test_export_ids_none_found_is_404(client):
    """Verifies an id list matching nothing is 404."""
    _assert_problem(client.get("/api/export?ids=999998,999999"), 404)


def test_export_all(client):
    """Verifies no parameters exports every stored record, and 404 when empty."""
    _assert_problem(client.get("/api/export"), 404)
    ids = [_submit(client, {}, ts="2026-03-0%dT00:00:00.000Z" % n) for n in (1, 2)]
    resp = client.get("/api/export")
    assert resp.status_code == 200
    with zipfile.ZipFile(io.BytesIO(resp.content)) as zf:
        assert zf.namelist() == [
            f"kwestionariusz_{ids[0]:04d}_2026-03-01.docx",
            f"kwestionariusz_{ids[1]:04d}_2026-03-02.docx",
        ]


# --------------------
# Cross-cutting
# --------------------


def test_unsupported_method_is_405(client):
    """Verifies methods outside the route table are rejected with 405."""
    _assert_problem(client.put("/api/export"), 405)
    _assert_problem(client.patch("/api/responses/1"), 405)


def test_unknown_route_is_404(client):
    """Verifies unknown paths return the error payload."""
    _assert_problem(client.get("/api/nope"), 404)


def test_cors_exposes_content_disposition(client):
    """Verifies browsers may read the attachment filename."""
    resp = client.get("/api/responses", headers={"Origin": "https://ankieta.example"})
    assert resp.headers["access-control-allow-origin"] == "*"
    assert "Content-Disposition" in resp.headers["access-control-expose-headers"]


def test_cors_preflight(client):
    """Verifies preflight requests for DELETE are allowed."""
    resp = client.options(
        "/api/responses/1",
        headers={"Origin": "https://ankieta.example", "Access-Control-Request-Method": "DELETE"},
    )
    assert resp.status_code == 200
    assert "DELETE" in resp.headers["access-control-allow-methods"]


def test_request_id_echoed_or_generated(client):
    """Verifies X-Request-Id is echoed when sent and generated otherwise."""
    assert client.get("/health", headers={"X-Request-Id": "abc-123"}).headers["x-request-id"] == "abc-123"
    assert client.get("/health").headers["x-request-id"]


def test_health(client):
    """Verifies health reports a reachable database."""
    assert client.get("/health").json() == {"status": "ok", "db": True}


def test_store_failure_is_500(client, engine):
    """Verifies a store failure surfaces as a 500 error payload."""
    from sqlalchemy import text

    with engine.begin() as conn:
        conn.execute(text("ALTER TABLE responses RENAME TO responses_hidden"))
    try:
        body = _assert_problem(client.get("/api/export"), 500)
        assert body["title"] == "Store Failure"
    finally:
        with engine.begin() as conn:
            conn.execute(text("ALTER TABLE responses_hidden RENAME TO responses"))
