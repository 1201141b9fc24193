"""Core domain models for skill trees, requirements, and evaluation results."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, ClassVar

SATISFIED = "Satisfied"
UNSATISFIED = "Unsatisfied"


@dataclass(frozen=True)
class SkillRequirement:
    """Satisfied when the referenced skill is satisfied."""

    kind: ClassVar[str] = "skill"

    skill_id: str


@dataclass(frozen=True)
class ExperienceRequirement:
    """Satisfied when enough experience is invested in the owning skill."""

    kind: ClassVar[str] = "experience"

    required: int


@dataclass(frozen=True)
class TotalExperienceRequirement:
    """Satisfied when experience across the dependency closure reaches a threshold.

    A ``max_depth`` of zero or less means the whole closure is counted.
    """

    kind: ClassVar[str] = "total_experience"

    required: int
    max_depth: int = -1


@dataclass(frozen=True)
class AndRequirement:
    """All conditions must be satisfied."""

    kind: ClassVar[str] = "and"

    conditions: tuple[Requirement, ...]


@dataclass(frozen=True)
class OrRequirement:
    """At least one condition must be satisfied."""

    kind: ClassVar[str] = "or"

    conditions: tuple[Requirement, ...]


@dataclass(frozen=True)
class SomeRequirement:
    """At least ``required`` conditions must be satisfied."""

    kind: ClassVar[str] = "some"

    conditions: tuple[Requirement, ...]
    required: int


@dataclass(frozen=True)
class UnknownRequirement:
    """Unrecognized condition; never satisfied."""

    kind: ClassVar[str] = "unknown"


Requirement = (
    SkillRequirement
    | ExperienceRequirement
    | TotalExperienceRequirement
    | AndRequirement
    | OrRequirement
    | SomeRequirement
    | UnknownRequirement
)


@dataclass(frozen=True)
class Skill:
    """One named skill with its compiled requirement tree."""

    id: str
    title: str
    description: str | None
    requirements: Requirement


@dataclass(frozen=True)
class SkillTree:
    """Skills keyed by id, in configuration order."""

    skills: Mapping[str, Skill] = field(default_factory=dict)

    def __contains__(self, skill_id: object) -> bool:
        return skill_id in self.skills

    def get(self, skill_id: str) -> Skill | None:
        """Get one skill by id."""
        return self.skills.get(skill_id)


@dataclass(frozen=True)
class Progress:
    """Snapshot of experience points invested per skill."""

    experience: Mapping[str, int] = field(default_factory=dict)

    def invested(self, skill_id: str) -> int:
        """Return points invested in a skill, zero when absent."""
        return self.experience.get(skill_id, 0)


@dataclass(frozen=True)
class Contribution:
    """Experience one dependency contributes to a total experience condition."""

    skill_id: str
    invested: int


@dataclass(frozen=True)
class RequirementResult:
    """Evaluated counterpart of a requirement node."""

    requirement: Requirement
    satisfied: bool
    conditions: tuple[RequirementResult, ...] = ()
    invested: int | None = None
    accumulated: int | None = None
    completed: int | None = None
    details: tuple[Contribution, ...] = ()

    @property
    def kind(self) -> str:
        return self.requirement.kind


@dataclass(frozen=True)
class EvaluatedSkill:
    """Skill paired with its evaluated requirement tree."""

    skill: Skill
    result: RequirementResult

    @property
    def title(self) -> str:
        return self.skill.title

    @property
    def satisfied(self) -> bool:
        return self.result.satisfied


@dataclass(frozen=True)
class EvaluationResult:
    """Evaluated skills keyed by id plus the progress they were evaluated against."""

    skills: Mapping[str, EvaluatedSkill]
    progress: Progress

    def is_satisfied(self, skill_id: str) -> bool:
        """Return satisfaction for one skill, False for unknown ids."""
        evaluated = self.skills.get(skill_id)
        return evaluated is not None and evaluated.satisfied


@dataclass(frozen=True)
class Position:
    """Saved 2D node position."""

    x: float
    y: float

    def as_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y}


@dataclass(frozen=True)
class GraphNode:
    """One skill node for the rendering layer."""

    id: str
    label: str
    classes: str
    position: Position | None = None

    def to_element(self) -> dict[str, Any]:
        element: dict[str, Any] = {"data": {"id": self.id, "label": self.label}, "classes": self.classes}
        if self.position is not None:
            element["position"] = self.position.as_dict()
        return element


@dataclass(frozen=True)
class GraphEdge:
    """Dependency edge from a required skill to the skill requiring it."""

    source: str
    target: str
    classes: str

    def to_element(self) -> dict[str, Any]:
        return {"data": {"source": self.source, "target": self.target}, "classes": self.classes}


@dataclass(frozen=True)
class GraphData:
    """Node/edge graph annotated with satisfaction classes."""

    nodes: tuple[GraphNode, ...]
    edges: tuple[GraphEdge, ...]

    def to_elements(self) -> list[dict[str, Any]]:
        """Export nodes then edges as element dictionaries."""
        return [node.to_element() for node in self.nodes] + [edge.to_element() for edge in self.edges]
