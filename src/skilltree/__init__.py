"""Declarative skill trees: compile, check, evaluate, and project to graphs."""

from __future__ import annotations

import tomllib
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

__all__ = [
    "CycleError",
    "SkillTreeSession",
    "__version__",
    "build_dependency_graph",
    "compile_requirements",
    "compile_tree",
    "evaluate_all",
    "has_cycle",
    "project",
]


def _version_from_pyproject() -> str | None:
    """Read the version from a source checkout's pyproject.toml, if there is one."""
    for base in Path(__file__).resolve().parents:
        pyproject = base / "pyproject.toml"
        if pyproject.exists():
            project = tomllib.loads(pyproject.read_text(encoding="utf-8")).get("project", {})
            if project.get("name") == "skilltree":
                return project.get("version")
    return None


_project_version = _version_from_pyproject()
if _project_version is not None:
    __version__ = _project_version
else:
    try:
        __version__ = version("skilltree")
    except PackageNotFoundError:
        __version__ = "0+unknown"

from .compiler import compile_requirements, compile_tree  # noqa: E402
from .cycles import CycleError, build_dependency_graph, has_cycle  # noqa: E402
from .evaluator import evaluate_all  # noqa: E402
from .graph import project  # noqa: E402
from .service import SkillTreeSession  # noqa: E402
