"""Tests for parity between imported libraries and package metadata."""

from __future__ import annotations

import ast
import re
import sys
import tomllib
from pathlib import Path

# Import name -> distribution name, where they differ
_DIST_NAMES = {
    "mpv": "python-mpv",
    "tomli_w": "tomli-w",
}


def _repo_root() -> Path:
    return Path(__file__).resolve().parents[2]


def _requirement_name(requirement: str) -> str:
    match = re.match(r"[A-Za-z0-9_.-]+", requirement)
    assert match is not None
    return match.group(0).lower().replace("_", "-")


def _imported_top_level_names() -> set[str]:
    names: set[str] = set()
    for path in (_repo_root() / "offline_player").rglob("*.py"):
        tree = ast.parse(path.read_text(encoding="utf-8"))
        for node in ast.walk(tree):
            if isinstance(node, ast.Import):
                names.update(alias.name.split(".")[0] for alias in node.names)
            elif isinstance(node, ast.ImportFrom) and node.level == 0 and node.module:
                names.add(node.module.split(".")[0])
    return names


def test_third_party_imports_are_declared() -> None:
    """Every non-stdlib import should be a declared dependency or extra."""
    pyproject = tomllib.loads((_repo_root() / "pyproject.toml").read_text(encoding="utf-8"))
    project = pyproject["project"]
    declared = {_requirement_name(r) for r in project["dependencies"]}
    for extra in project.get("optional-dependencies", {}).values():
        declared.update(_requirement_name(r) for r in extra)

    third_party = {
        name
        for name in _imported_top_level_names()
        if name not in sys.stdlib_module_names and name not in ("offline_player", "__future__")
    }

    for name in sorted(third_party):
        dist = _DIST_NAMES.get(name, name).lower()
        assert dist in declared, f"'{name}' is imported but '{dist}' is not in pyproject.toml"


def test_mpv_is_optional() -> None:
    """libmpv bindings must stay out of the core dependency list."""
    pyproject = tomllib.loads((_repo_root() / "pyproject.toml").read_text(encoding="utf-8"))
    core = {_requirement_name(r) for r in pyproject["project"]["dependencies"]}
    assert "python-mpv" not in core
