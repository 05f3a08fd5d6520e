"""Architectural tests for the export pipeline.

Static, file/AST-based checks: they read files under the project root and do
not execute service code.
"""

from __future__ import annotations

import ast
from pathlib import Path
from typing import List, Set

import pytest


PROJECT_ROOT = Path(__file__).resolve().parents[2]
PKG_DIR = PROJECT_ROOT / "census_service"
LOGIC_DIR = PKG_DIR / "logic"

PURE_MODULES = [
    LOGIC_DIR / "checkbox.py",
    LOGIC_DIR / "answers.py",
    LOGIC_DIR / "layout.py",
    LOGIC_DIR / "questionnaire_builder.py",
    PKG_DIR / "models" / "document.py",
]
FORBIDDEN_PREFIXES = ("sqlalchemy", "census_service.db", "census_service.logic.repository_", "fastapi", "httpx", "requests", "socket")


def _parse(path: Path) -> ast.Module:
    try:
        return ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
    except FileNotFoundError:
        pytest.fail(f"Expected file is missing: {path}")
    except SyntaxError as exc:
        pytest.fail(f"Invalid Python in {path}: {exc}")


def _imports(tree: ast.Module) -> Set[str]:
    names: Set[str] = set()
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            names.update(a.name for a in node.names)
        elif isinstance(node, ast.ImportFrom) and node.module:
            names.add(node.module)
    return names


def _function(tree: ast.Module, name: str) -> ast.FunctionDef:
    for node in tree.body:
        if isinstance(node, ast.FunctionDef) and node.name == name:
            return node
    pytest.fail(f"function {name} not found")


@pytest.mark.parametrize("path", PURE_MODULES, ids=lambda p: p.name)
def test_pure_modules_import_no_io_layers(path: Path):
    """Verifies resolver, answers and builder modules import no store or network layer."""
    offending = sorted(n for n in _imports(_parse(path)) if n.startswith(FORBIDDEN_PREFIXES))
    assert offending == []


@pytest.mark.parametrize("path", PURE_MODULES, ids=lambda p: p.name)
def test_pure_modules_do_not_open_files(path: Path):
    """Verifies pure modules never call open()."""
    calls = [
        n for n in ast.walk(_parse(path))
        if isinstance(n, ast.Call) and isinstance(n.func, ast.Name) and n.func.id == "open"
    ]
    assert calls == []


def test_exporters_receive_store_by_argument():
    """Verifies store-reading exporters take the store as their first parameter."""
    tree = _parse(LOGIC_DIR / "exporter.py")
    for name in ("export_many", "export_by_id"):
        args = [a.arg for a in _function(tree, name).args.args]
        assert args and args[0] == "store"


def test_exporter_has_no_engine_access():
    """Verifies exporters do not reach for an engine or the db package."""
    tree = _parse(LOGIC_DIR / "exporter.py")
    imported = _imports(tree)
    assert not any(n.startswith(("sqlalchemy", "census_service.db")) for n in imported)
    names = {n.id for n in ast.walk(tree) if isinstance(n, ast.Name)}
    assert "get_engine" not in names


def test_no_module_level_store_instances():
    """Verifies no module constructs a ResponseStore at import time."""
    offenders: List[str] = []
    for path in PKG_DIR.rglob("*.py"):
        for node in _parse(path).body:
            if isinstance(node, (ast.Assign, ast.AnnAssign)) and isinstance(node.value, ast.Call):
                func = node.value.func
                if isinstance(func, ast.Name) and func.id == "ResponseStore":
                    offenders.append(str(path.relative_to(PROJECT_ROOT)))
    assert offenders == []


def test_builder_exposes_single_entry_point():
    """Verifies the builder module exports only `build`."""
    tree = _parse(LOGIC_DIR / "questionnaire_builder.py")
    exported = None
    for node in tree.body:
        if isinstance(node, ast.Assign) and any(isinstance(t, ast.Name) and t.id == "__all__" for t in node.targets):
            exported = ast.literal_eval(node.value)
    assert exported == ["build"]


def test_migrations_exist_for_both_dialects():
    """Verifies the responses table is defined for PostgreSQL and SQLite."""
    for folder in ("migrations", "sqlite_migrations"):
        files = sorted((PROJECT_ROOT / folder).glob("*.sql"))
        assert files, f"no migrations in {folder}"
        assert "CREATE TABLE IF NOT EXISTS responses" in files[0].read_text(encoding="utf-8")
