"""Compile declarative skill tree configuration into requirement trees."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from .models import (
    AndRequirement,
    ExperienceRequirement,
    OrRequirement,
    Position,
    Progress,
    Requirement,
    RequirementResult,
    Skill,
    SkillRequirement,
    SkillTree,
    SomeRequirement,
    TotalExperienceRequirement,
    UnknownRequirement,
)

logger = logging.getLogger(__name__)

UNLIMITED_DEPTH = -1


def extract_skill_references(node: Requirement | RequirementResult) -> list[str]:
    """Collect skill ids referenced anywhere under a requirement, in order of appearance."""
    if isinstance(node, RequirementResult):
        node = node.requirement
    if isinstance(node, SkillRequirement):
        return [node.skill_id] if node.skill_id else []
    if isinstance(node, AndRequirement | OrRequirement | SomeRequirement):
        references: list[str] = []
        for condition in node.conditions:
            references.extend(extract_skill_references(condition))
        return references
    return []


def humanize_identifier(identifier: str) -> str:
    """Turn ``total_exp`` into ``Total Exp``."""
    parts = [part for part in identifier.split("_") if part]
    return " ".join(part[0].upper() + part[1:] for part in parts)


def compile_requirements(configs: object) -> Requirement:
    """Compile a list of condition entries into one requirement node.

    One entry is returned as is, several are combined with AND, and an empty
    list compiles to an unknown (never satisfied) requirement.
    """
    if not isinstance(configs, list):
        configs = []
    compiled = [_compile_condition(entry) for entry in configs]
    if not compiled:
        return UnknownRequirement()
    if len(compiled) == 1:
        return compiled[0]
    return AndRequirement(conditions=tuple(compiled))


def _compile_condition(entry: object) -> Requirement:
    """Compile one condition entry by its recognized key."""
    if not isinstance(entry, Mapping):
        logger.debug("Ignoring non-mapping condition %r", entry)
        return UnknownRequirement()

    if "exp" in entry:
        return ExperienceRequirement(required=_coerce_int(entry["exp"]))
    if "total_exp" in entry:
        max_depth = _coerce_int(entry.get("max_depth")) or UNLIMITED_DEPTH
        return TotalExperienceRequirement(required=_coerce_int(entry["total_exp"]), max_depth=max_depth)
    if "skill" in entry:
        skill_id = entry["skill"]
        if skill_id is None:
            return UnknownRequirement()
        return SkillRequirement(skill_id=str(skill_id))
    if "or" in entry:
        return OrRequirement(conditions=_children(compile_requirements(entry["or"])))
    if "and" in entry:
        return compile_requirements(entry["and"])
    if "some" in entry:
        some = entry["some"]
        # Older configs put `of`/`required` next to `some` instead of under it.
        options = some if isinstance(some, Mapping) else entry
        children = _children(compile_requirements(options.get("of")))
        return SomeRequirement(conditions=children, required=_coerce_int(options.get("required")))

    logger.debug("Unrecognized condition shape with keys %s", sorted(str(key) for key in entry))
    return UnknownRequirement()


def _children(node: Requirement) -> tuple[Requirement, ...]:
    """Return the conditions a compiled list contributes to a forced group variant."""
    if isinstance(node, AndRequirement):
        return node.conditions
    if isinstance(node, UnknownRequirement):
        return ()
    return (node,)


def compile_tree(config: Mapping[str, Any] | None) -> SkillTree:
    """Build a skill tree from a raw configuration mapping."""
    raw_skills = (config or {}).get("skills") or {}
    if not isinstance(raw_skills, Mapping):
        raw_skills = {}

    skills: dict[str, Skill] = {}
    for raw_id, raw_skill in raw_skills.items():
        skill_id = str(raw_id)
        if not skill_id:
            continue
        if not isinstance(raw_skill, Mapping):
            raw_skill = {}
        title = raw_skill.get("title")
        description = raw_skill.get("description")
        skills[skill_id] = Skill(
            id=skill_id,
            title=str(title) if title else humanize_identifier(skill_id),
            description=None if description is None else str(description),
            requirements=compile_requirements(raw_skill.get("requires") or []),
        )
    logger.debug("Compiled %d skills", len(skills))
    return SkillTree(skills=skills)


def compile_progress(config: Mapping[str, Any] | None) -> Progress:
    """Read the experience map from a raw configuration mapping."""
    raw_progress = (config or {}).get("progress") or {}
    raw_experience = raw_progress.get("experience") if isinstance(raw_progress, Mapping) else None
    if not isinstance(raw_experience, Mapping):
        return Progress()

    experience: dict[str, int] = {}
    for skill_id, points in raw_experience.items():
        value = _coerce_int(points, default=None)
        if value is None:
            continue
        experience[str(skill_id)] = max(0, value)
    return Progress(experience=experience)


def compile_positions(config: Mapping[str, Any] | None) -> dict[str, Position]:
    """Read saved node positions from a raw configuration mapping."""
    raw_positions = (config or {}).get("positions") or {}
    if not isinstance(raw_positions, Mapping):
        return {}

    positions: dict[str, Position] = {}
    for skill_id, raw in raw_positions.items():
        if not isinstance(raw, Mapping):
            continue
        x = _coerce_float(raw.get("x"))
        y = _coerce_float(raw.get("y"))
        if x is None or y is None:
            continue
        positions[str(skill_id)] = Position(x=x, y=y)
    return positions


def _coerce_int(value: object, default: int | None = 0) -> int | None:
    """Coerce a config number to int."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return default
    return default


def _coerce_float(value: object) -> float | None:
    """Coerce a config coordinate to float."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None
