"""Shared pytest fixtures for the Stackforge test suite.

Provides reusable fixtures for:
- Sample schemas in every input format
- A minimal single-endpoint schema
- A shared template renderer
- A checker for imports between generated files
"""

from __future__ import annotations

import json
import posixpath
import re
from pathlib import Path
from typing import Any

import pytest

from stackforge.parser.loader import parse
from stackforge.parser.models import NormalizedSchema
from stackforge.scaffolder.models import GeneratedFile
from stackforge.scaffolder.templates import TemplateRenderer

FIXTURES = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Raw schema text
# ---------------------------------------------------------------------------

@pytest.fixture
def shop_json_text() -> str:
    """Four-endpoint shop schema in JSON."""
    path = FIXTURES / "shop.json"
    assert path.exists(), f"Shop schema fixture not found at {path}"
    return path.read_text(encoding="utf-8")


@pytest.fixture
def shop_yaml_text() -> str:
    return (FIXTURES / "shop.yaml").read_text(encoding="utf-8")


@pytest.fixture
def shop_dsl_text() -> str:
    return (FIXTURES / "shop.dsl").read_text(encoding="utf-8")


@pytest.fixture
def user_schema_dict() -> dict[str, Any]:
    """The single GET /users endpoint used by the concrete scenarios."""
    return {
        "name": "User API",
        "endpoints": [
            {
                "name": "User",
                "path": "/users",
                "method": "GET",
                "properties": {"id": {"type": "string"}},
            }
        ],
    }


@pytest.fixture
def user_json_text(user_schema_dict: dict[str, Any]) -> str:
    return json.dumps(user_schema_dict)


# ---------------------------------------------------------------------------
# Parsed schemas
# ---------------------------------------------------------------------------

@pytest.fixture
def shop_schema(shop_json_text: str) -> NormalizedSchema:
    return parse(shop_json_text, "json")


@pytest.fixture
def user_schema(user_json_text: str) -> NormalizedSchema:
    return parse(user_json_text, "json")


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

@pytest.fixture(scope="session")
def renderer() -> TemplateRenderer:
    """One Jinja2 environment for the whole session; templates are cached."""
    return TemplateRenderer()


@pytest.fixture
def tmp_output_dir(tmp_path: Path) -> Path:
    """Temporary directory for exported projects (auto-cleanup)."""
    output_dir = tmp_path / "generated"
    output_dir.mkdir()
    yield output_dir


# ---------------------------------------------------------------------------
# Cross-file import checking
# ---------------------------------------------------------------------------

_TS_IMPORT = re.compile(r"""(?:\bfrom\s+|\bimport\(\s*)'(\.{1,2}/[^']*)'""")
_PY_RELATIVE = re.compile(r"^\s*from\s+(\.+)([\w.]*)\s+import\s", re.MULTILINE)
_PY_ABSOLUTE = re.compile(r"^\s*from\s+((?:src|lib|functions)(?:\.\w+)+)\s+import\s", re.MULTILINE)
_GO_IMPORT = re.compile(r'"github\.com/example/[^/"]+/([^"]+)"')
_SCRIPT_SUFFIXES = ("", ".ts", ".tsx", ".js", ".jsx", "/index.ts", "/index.js")


def _python_target_exists(module: str, paths: set[str], dirs: set[str]) -> bool:
    return f"{module}.py" in paths or module in dirs


def find_unresolved_imports(files: list[GeneratedFile]) -> list[str]:
    """Return ``"<file> -> <specifier>"`` for every project-local import with no target file."""
    paths = {f.path for f in files}
    dirs = {posixpath.dirname(p) for p in paths}
    for d in list(dirs):
        while d:
            d = posixpath.dirname(d)
            dirs.add(d)
    missing: list[str] = []
    for f in files:
        here = posixpath.dirname(f.path)
        if f.language in ("typescript", "javascript"):
            for spec in _TS_IMPORT.findall(f.content):
                target = posixpath.normpath(posixpath.join(here, spec))
                if not any(target + suffix in paths for suffix in _SCRIPT_SUFFIXES):
                    missing.append(f"{f.path} -> {spec}")
        elif f.language == "python":
            for dots, rest in _PY_RELATIVE.findall(f.content):
                base = here
                for _ in range(len(dots) - 1):
                    base = posixpath.dirname(base)
                module = posixpath.join(base, *rest.split(".")) if rest else base
                if not _python_target_exists(module, paths, dirs):
                    missing.append(f"{f.path} -> {dots}{rest}")
            parts = f.path.split("/")
            root = "/".join(parts[:2]) if parts[0] == "services" else ""
            for dotted in _PY_ABSOLUTE.findall(f.content):
                module = posixpath.join(root, *dotted.split("."))
                if not _python_target_exists(module, paths, dirs):
                    missing.append(f"{f.path} -> {dotted}")
        elif f.language == "go":
            for package_dir in _GO_IMPORT.findall(f.content):
                if not any(posixpath.dirname(p) == package_dir and p.endswith(".go") for p in paths):
                    missing.append(f"{f.path} -> {package_dir}")
    return missing


@pytest.fixture
def unresolved_imports():
    """Callable listing generated imports that point at files not in the list."""
    return find_unresolved_imports
