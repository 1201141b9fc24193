"""Project evaluation results into node/edge graph data for rendering."""

from __future__ import annotations

from collections.abc import Mapping

from .compiler import extract_skill_references
from .models import SATISFIED, UNSATISFIED, EvaluationResult, GraphData, GraphEdge, GraphNode, Position


def satisfaction_class(satisfied: bool) -> str:
    """Return the CSS-style class name for a satisfaction state."""
    return SATISFIED if satisfied else UNSATISFIED


def project(result: EvaluationResult, positions: Mapping[str, Position] | None = None) -> GraphData:
    """Build graph nodes for evaluated skills and edges from each dependency to its dependent.

    Edges are classed by the dependency's satisfaction, since that is what the
    dependent is waiting on.
    """
    saved = positions or {}
    nodes: list[GraphNode] = []
    for skill_id, evaluated in result.skills.items():
        nodes.append(
            GraphNode(
                id=skill_id,
                label=evaluated.title or skill_id,
                classes=satisfaction_class(evaluated.satisfied),
                position=saved.get(skill_id),
            )
        )

    node_ids = {node.id for node in nodes}
    edges: list[GraphEdge] = []
    for node in nodes:
        evaluated = result.skills[node.id]
        dependencies = dict.fromkeys(extract_skill_references(evaluated.result))
        for dependency_id in dependencies:
            if dependency_id not in node_ids:
                continue
            edges.append(
                GraphEdge(
                    source=dependency_id,
                    target=node.id,
                    classes=satisfaction_class(result.is_satisfied(dependency_id)),
                )
            )
    return GraphData(nodes=tuple(nodes), edges=tuple(edges))
