from skilltree.compiler import compile_tree
from skilltree.evaluator import evaluate_all
from skilltree.graph import project
from skilltree.models import GraphEdge, Position, Progress


def test_edges_follow_dependency_satisfaction(abc_config) -> None:
    result = evaluate_all(compile_tree(abc_config), Progress(experience={"a": 10, "b": 10}))
    graph = project(result)
    assert [node.id for node in graph.nodes] == ["a", "b", "c"]
    assert all(node.classes == "Satisfied" for node in graph.nodes)
    assert graph.edges == (
        GraphEdge(source="a", target="c", classes="Satisfied"),
        GraphEdge(source="b", target="c", classes="Satisfied"),
    )


def test_edge_class_uses_dependency_not_dependent(abc_config) -> None:
    result = evaluate_all(compile_tree(abc_config), Progress(experience={"a": 10, "b": 5}))
    graph = project(result)
    classes = {(edge.source, edge.target): edge.classes for edge in graph.edges}
    assert classes == {("a", "c"): "Satisfied", ("b", "c"): "Unsatisfied"}
    assert {node.id: node.classes for node in graph.nodes}["c"] == "Unsatisfied"


def test_labels_positions_and_unknown_references() -> None:
    config = {
        "skills": {
            "fire_bolt": {"requires": [{"exp": 1}]},
            "meteor": {"title": "Meteor", "requires": [{"skill": "fire_bolt"}, {"skill": "ghost"}]},
        }
    }
    result = evaluate_all(compile_tree(config), Progress())
    graph = project(result, {"meteor": Position(x=10, y=20)})

    nodes = {node.id: node for node in graph.nodes}
    assert nodes["fire_bolt"].label == "Fire Bolt"
    assert nodes["fire_bolt"].position is None
    assert nodes["meteor"].label == "Meteor"
    assert nodes["meteor"].position == Position(x=10, y=20)
    assert [(edge.source, edge.target) for edge in graph.edges] == [("fire_bolt", "meteor")]


def test_repeated_reference_yields_one_edge() -> None:
    config = {
        "skills": {
            "a": {"requires": [{"exp": 1}]},
            "b": {"requires": [{"skill": "a"}, {"some": {"of": [{"skill": "a"}, {"exp": 2}], "required": 1}}]},
        }
    }
    graph = project(evaluate_all(compile_tree(config), Progress()))
    assert [(edge.source, edge.target) for edge in graph.edges] == [("a", "b")]


def test_to_elements_export(abc_config) -> None:
    result = evaluate_all(compile_tree(abc_config), Progress(experience={"a": 10}))
    elements = project(result, {"a": Position(x=1.5, y=2)}).to_elements()
    assert elements[0] == {
        "data": {"id": "a", "label": "A"},
        "classes": "Satisfied",
        "position": {"x": 1.5, "y": 2.0},
    }
    assert "position" not in elements[1]
    assert elements[3] == {"data": {"source": "a", "target": "c"}, "classes": "Satisfied"}
    assert elements[4] == {"data": {"source": "b", "target": "c"}, "classes": "Unsatisfied"}
    assert len(elements) == 5
