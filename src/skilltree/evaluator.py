"""Evaluate skill requirement trees against a progress snapshot."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Mapping

from .compiler import extract_skill_references
from .cycles import build_dependency_graph, topological_order
from .models import (
    AndRequirement,
    Contribution,
    EvaluatedSkill,
    EvaluationResult,
    ExperienceRequirement,
    OrRequirement,
    Progress,
    Requirement,
    RequirementResult,
    SkillRequirement,
    SkillTree,
    SomeRequirement,
    TotalExperienceRequirement,
)

logger = logging.getLogger(__name__)


def evaluate_node(
    owner_id: str,
    node: Requirement,
    progress: Progress,
    results: Mapping[str, EvaluatedSkill],
    tree: SkillTree,
) -> RequirementResult:
    """Evaluate one requirement node for the skill that owns it.

    Skill references read ``results``, so every referenced skill must already be
    evaluated; references to skills that are not there count as unsatisfied.
    """
    if isinstance(node, SkillRequirement):
        referenced = results.get(node.skill_id)
        return RequirementResult(requirement=node, satisfied=referenced is not None and referenced.satisfied)

    if isinstance(node, ExperienceRequirement):
        invested = progress.invested(owner_id)
        return RequirementResult(requirement=node, satisfied=invested >= node.required, invested=invested)

    if isinstance(node, TotalExperienceRequirement):
        details = accumulate(owner_id, progress, tree, node.max_depth)
        accumulated = sum(item.invested for item in details)
        return RequirementResult(
            requirement=node,
            satisfied=accumulated >= node.required,
            accumulated=accumulated,
            details=details,
        )

    if isinstance(node, AndRequirement | OrRequirement | SomeRequirement):
        conditions = tuple(evaluate_node(owner_id, child, progress, results, tree) for child in node.conditions)
        completed = len([child for child in conditions if child.satisfied])
        if isinstance(node, AndRequirement):
            return RequirementResult(requirement=node, satisfied=completed == len(conditions), conditions=conditions)
        if isinstance(node, OrRequirement):
            return RequirementResult(requirement=node, satisfied=completed > 0, conditions=conditions)
        return RequirementResult(
            requirement=node,
            satisfied=completed >= node.required,
            conditions=conditions,
            completed=completed,
        )

    return RequirementResult(requirement=node, satisfied=False)


def accumulate(owner_id: str, progress: Progress, tree: SkillTree, max_depth: int = -1) -> tuple[Contribution, ...]:
    """Collect experience invested across a skill's dependencies, breadth first.

    Direct dependencies are at depth 1. With ``max_depth > 0`` deeper skills are
    skipped. Each skill contributes once no matter how many paths reach it;
    ids missing from the tree still contribute but are not expanded.
    """
    owner = tree.get(owner_id)
    if owner is None:
        return ()

    frontier = deque((skill_id, 1) for skill_id in extract_skill_references(owner.requirements))
    visited: set[str] = set()
    details: list[Contribution] = []
    while frontier:
        skill_id, depth = frontier.popleft()
        if skill_id in visited:
            continue
        if max_depth > 0 and depth > max_depth:
            continue
        visited.add(skill_id)
        details.append(Contribution(skill_id=skill_id, invested=progress.invested(skill_id)))
        skill = tree.get(skill_id)
        if skill is None:
            continue
        frontier.extend((dep_id, depth + 1) for dep_id in extract_skill_references(skill.requirements))
    return tuple(details)


def evaluate_all(tree: SkillTree, progress: Progress) -> EvaluationResult:
    """Evaluate every skill once, dependencies first.

    Raises ``CycleError`` when skill references form a cycle.
    """
    order = topological_order(build_dependency_graph(tree))
    logger.debug("Evaluation order: %s", order)

    evaluated: dict[str, EvaluatedSkill] = {}
    for skill_id in order:
        skill = tree.skills[skill_id]
        result = evaluate_node(skill_id, skill.requirements, progress, evaluated, tree)
        evaluated[skill_id] = EvaluatedSkill(skill=skill, result=result)

    skills = {skill_id: evaluated[skill_id] for skill_id in tree.skills}
    return EvaluationResult(skills=skills, progress=progress)


def requirement_progress(result: RequirementResult) -> tuple[int, int]:
    """Return ``(done, total)`` top-level conditions for a requirement summary."""
    if isinstance(result.requirement, AndRequirement):
        return len([child for child in result.conditions if child.satisfied]), len(result.conditions)
    return (1 if result.satisfied else 0), 1
