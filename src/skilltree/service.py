"""Editing session that keeps a raw configuration and its derived skill tree in sync."""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from typing import Any

from .compiler import compile_positions, compile_progress, compile_tree
from .config_loader import default_config
from .cycles import CycleError, build_dependency_graph, find_cycle
from .evaluator import evaluate_all, requirement_progress
from .graph import project
from .models import EvaluationResult, GraphData, Position, Progress, SkillTree

logger = logging.getLogger(__name__)

UNTITLED = "(Untitled)"


class SkillTreeSession:
    """Coordinates configuration edits, progress updates, and evaluation."""

    def __init__(self, config: Mapping[str, Any] | None = None) -> None:
        """Initialize with a configuration, or the sample tree when none is given."""
        initial = copy.deepcopy(dict(config)) if config is not None else default_config()
        tree = compile_tree(initial)
        cycle = find_cycle(build_dependency_graph(tree))
        if cycle is not None:
            raise CycleError(cycle)
        self._config: dict[str, Any] = initial
        self._tree = tree

    @property
    def tree(self) -> SkillTree:
        return self._tree

    @property
    def title(self) -> str:
        title = self._config.get("title")
        return str(title) if title else UNTITLED

    @property
    def layout(self) -> dict[str, Any]:
        layout = self._config.get("layout")
        return dict(layout) if isinstance(layout, Mapping) else {}

    @property
    def progress(self) -> Progress:
        return compile_progress(self._config)

    @property
    def positions(self) -> dict[str, Position]:
        return compile_positions(self._config)

    def apply_config(self, config: Mapping[str, Any]) -> bool:
        """Replace the configuration unless its skills form a cycle.

        Returns False and keeps the current configuration when the edit is rejected.
        """
        candidate = copy.deepcopy(dict(config))
        tree = compile_tree(candidate)
        cycle = find_cycle(build_dependency_graph(tree))
        if cycle is not None:
            logger.warning("Rejected configuration edit with cycle: %s", " -> ".join(cycle))
            return False
        self._config = candidate
        self._tree = tree
        logger.debug("Applied configuration with %d skills", len(tree.skills))
        return True

    def set_experience(self, skill_id: str, points: int) -> None:
        """Record experience invested in one skill."""
        if points < 0:
            raise ValueError(f"Experience for '{skill_id}' must be non-negative, got {points}.")
        progress = self._section("progress")
        experience = progress.get("experience")
        if not isinstance(experience, dict):
            experience = {}
            progress["experience"] = experience
        experience[skill_id] = int(points)

    def set_position(self, skill_id: str, x: float, y: float) -> None:
        """Save one node position."""
        self._section("positions")[skill_id] = {"x": x, "y": y}

    def set_positions(self, positions: Mapping[str, Position]) -> None:
        """Replace all saved node positions."""
        self._config["positions"] = {skill_id: position.as_dict() for skill_id, position in positions.items()}

    def evaluate(self) -> EvaluationResult:
        """Evaluate the current tree against the current progress."""
        return evaluate_all(self._tree, self.progress)

    def graph(self) -> GraphData:
        """Return graph data for the current evaluation."""
        return project(self.evaluate(), self.positions)

    def requirement_progress(self, skill_id: str) -> tuple[int, int]:
        """Return ``(done, total)`` top-level conditions for one skill."""
        result = self.evaluate()
        if skill_id not in result.skills:
            raise KeyError(skill_id)
        return requirement_progress(result.skills[skill_id].result)

    def to_config(self) -> dict[str, Any]:
        """Return a copy of the raw configuration including progress and positions."""
        return copy.deepcopy(self._config)

    def _section(self, key: str) -> dict[str, Any]:
        """Return a mutable top-level mapping, creating it when absent."""
        section = self._config.get(key)
        if not isinstance(section, dict):
            section = {}
            self._config[key] = section
        return section
