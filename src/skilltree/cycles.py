"""Dependency graph construction, cycle detection, and dependency ordering."""

from __future__ import annotations

from collections import deque
from collections.abc import Mapping, Sequence

from .compiler import extract_skill_references
from .models import SkillTree

DependencyGraph = Mapping[str, Sequence[str]]

_UNVISITED = 0
_VISITING = 1
_DONE = 2


class CycleError(ValueError):
    """Raised when skill dependencies form a cycle."""

    def __init__(self, cycle: list[str]) -> None:
        self.cycle = cycle
        super().__init__(f"Circular skill dependency detected: {' -> '.join(cycle)}")


def build_dependency_graph(tree: SkillTree) -> dict[str, list[str]]:
    """Map each skill id to the skill ids its requirements reference."""
    return {skill_id: extract_skill_references(skill.requirements) for skill_id, skill in tree.skills.items()}


def has_cycle(graph: DependencyGraph) -> bool:
    """Return whether the dependency graph contains a directed cycle."""
    return find_cycle(graph) is not None


def find_cycle(graph: DependencyGraph) -> list[str] | None:
    """Return the first cycle found as a closed path, or None for an acyclic graph."""
    state: dict[str, int] = {}
    path: list[str] = []

    for root in graph:
        if state.get(root, _UNVISITED) != _UNVISITED:
            continue
        state[root] = _VISITING
        path.append(root)
        stack = [(root, iter(graph.get(root, ())))]
        while stack:
            node, neighbors = stack[-1]
            for neighbor in neighbors:
                neighbor_state = state.get(neighbor, _UNVISITED)
                if neighbor_state == _VISITING:
                    return path[path.index(neighbor) :] + [neighbor]
                if neighbor_state == _UNVISITED:
                    state[neighbor] = _VISITING
                    path.append(neighbor)
                    stack.append((neighbor, iter(graph.get(neighbor, ()))))
                    break
            else:
                stack.pop()
                path.pop()
                state[node] = _DONE
    return None


def topological_order(graph: DependencyGraph) -> list[str]:
    """Order graph nodes so every dependency comes before its dependents.

    References to ids missing from the graph are ignored. Among nodes that are
    ready at the same time the graph's own order is kept.
    """
    dependencies = {node: list(dict.fromkeys(dep for dep in deps if dep in graph)) for node, deps in graph.items()}
    remaining = {node: len(deps) for node, deps in dependencies.items()}
    dependents: dict[str, list[str]] = {node: [] for node in graph}
    for node, deps in dependencies.items():
        for dep in deps:
            dependents[dep].append(node)

    position = {node: index for index, node in enumerate(graph)}
    ready = deque(node for node in graph if remaining[node] == 0)
    order: list[str] = []
    while ready:
        node = ready.popleft()
        order.append(node)
        unlocked = []
        for dependent in dependents[node]:
            remaining[dependent] -= 1
            if remaining[dependent] == 0:
                unlocked.append(dependent)
        ready.extend(sorted(unlocked, key=position.__getitem__))

    if len(order) < len(dependencies):
        blocked = {node: deps for node, deps in dependencies.items() if remaining[node] > 0}
        cycle = find_cycle(blocked)
        raise CycleError(cycle or sorted(blocked))
    return order
