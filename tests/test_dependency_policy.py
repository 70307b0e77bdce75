"""Tests keeping pyproject.toml in step with the modules refhash imports."""

from __future__ import annotations

import ast
import re
from pathlib import Path

import tomllib

ROOT = Path(__file__).resolve().parents[1]

# import name -> distribution name on the index
_DISTRIBUTIONS = {
    "pydantic": "pydantic",
    "pydantic_settings": "pydantic-settings",
    "hypothesis": "hypothesis",
    "pytest": "pytest",
    "pytest_benchmark": "pytest-benchmark",
}


def _project() -> dict[str, object]:
    data = tomllib.loads((ROOT / "pyproject.toml").read_text(encoding="utf-8"))
    return data["project"]


def _names(requirements: list[str]) -> set[str]:
    return {re.split(r"[=<>!~\[ ]", requirement, maxsplit=1)[0] for requirement in requirements}


def _third_party_imports(directory: Path) -> set[str]:
    found: set[str] = set()
    for path in directory.rglob("*.py"):
        tree = ast.parse(path.read_text(encoding="utf-8"))
        for node in ast.walk(tree):
            if isinstance(node, ast.Import):
                roots = [alias.name.split(".")[0] for alias in node.names]
            elif isinstance(node, ast.ImportFrom) and node.level == 0 and node.module:
                roots = [node.module.split(".")[0]]
            else:
                continue
            found.update(root for root in roots if root in _DISTRIBUTIONS)
    return found


def test_all_dependencies_are_pinned() -> None:
    """Every declared requirement uses an exact version."""

    project = _project()
    requirements = list(project["dependencies"])
    for group in project.get("optional-dependencies", {}).values():
        requirements.extend(group)

    unpinned = [requirement for requirement in requirements if "==" not in requirement]
    assert not unpinned, f"Unpinned requirements: {unpinned}"


def test_library_imports_are_runtime_dependencies() -> None:
    declared = _names(list(_project()["dependencies"]))
    for module in _third_party_imports(ROOT / "src" / "refhash"):
        assert _DISTRIBUTIONS[module] in declared, f"{module} missing from dependencies"


def test_test_imports_are_in_test_extra() -> None:
    project = _project()
    declared = _names(list(project["dependencies"]))
    declared |= _names(list(project.get("optional-dependencies", {}).get("test", [])))
    for module in _third_party_imports(ROOT / "tests"):
        assert _DISTRIBUTIONS[module] in declared, f"{module} missing from test extra"
