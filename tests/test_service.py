import logging
from typing import Any

import pytest

from skilltree.cycles import CycleError
from skilltree.models import Position
from skilltree.service import SkillTreeSession


def _cyclic_config() -> dict[str, Any]:
    return {"skills": {"a": {"requires": [{"skill": "b"}]}, "b": {"requires": [{"skill": "a"}]}}}


def test_default_session_uses_sample_tree() -> None:
    session = SkillTreeSession()
    assert session.title == "Skill Tree Editor"
    assert list(session.tree.skills) == ["a", "b", "c"]
    assert session.layout == {}
    assert dict(session.progress.experience) == {}


def test_untitled_and_layout(abc_config) -> None:
    abc_config.pop("title")
    abc_config["layout"] = {"name": "grid"}
    session = SkillTreeSession(abc_config)
    assert session.title == "(Untitled)"
    assert session.layout == {"name": "grid"}


def test_cyclic_initial_config_raises() -> None:
    with pytest.raises(CycleError):
        SkillTreeSession(_cyclic_config())


def test_apply_config_rejects_cycle_and_keeps_state(abc_config, caplog) -> None:
    session = SkillTreeSession(abc_config)
    with caplog.at_level(logging.WARNING, logger="skilltree.service"):
        accepted = session.apply_config(_cyclic_config())
    assert accepted is False
    assert list(session.tree.skills) == ["a", "b", "c"]
    assert session.to_config() == abc_config
    assert "Rejected configuration edit" in caplog.text


def test_apply_config_accepts_acyclic_edit(abc_config) -> None:
    session = SkillTreeSession(abc_config)
    edited = dict(abc_config)
    edited["skills"] = {"solo": {"requires": [{"exp": 1}]}}
    assert session.apply_config(edited) is True
    assert list(session.tree.skills) == ["solo"]


def test_set_experience_updates_evaluation(abc_config) -> None:
    session = SkillTreeSession(abc_config)
    session.set_experience("a", 10)
    session.set_experience("b", 10)
    result = session.evaluate()
    assert result.is_satisfied("c") is True
    assert session.to_config()["progress"] == {"experience": {"a": 10, "b": 10}}
    assert session.requirement_progress("c") == (2, 2)


def test_set_experience_rejects_negative(abc_config) -> None:
    session = SkillTreeSession(abc_config)
    with pytest.raises(ValueError, match="non-negative"):
        session.set_experience("a", -1)


def test_session_does_not_share_caller_config(abc_config) -> None:
    session = SkillTreeSession(abc_config)
    session.set_experience("a", 3)
    assert "progress" not in abc_config
    exported = session.to_config()
    exported["progress"]["experience"]["a"] = 99
    assert session.progress.invested("a") == 3


def test_positions_flow_into_graph(abc_config) -> None:
    session = SkillTreeSession(abc_config)
    session.set_position("a", 5, 6)
    graph = session.graph()
    assert {node.id: node.position for node in graph.nodes}["a"] == Position(x=5, y=6)

    session.set_positions({"b": Position(x=1, y=2)})
    assert session.positions == {"b": Position(x=1.0, y=2.0)}
    assert session.to_config()["positions"] == {"b": {"x": 1, "y": 2}}


def test_requirement_progress_unknown_skill(abc_config) -> None:
    session = SkillTreeSession(abc_config)
    with pytest.raises(KeyError):
        session.requirement_progress("ghost")


def test_session_accepts_long_acyclic_chain() -> None:
    skills = {f"s{index}": {"requires": [{"skill": f"s{index - 1}"}]} for index in range(1499, 0, -1)}
    skills["s0"] = {"requires": [{"exp": 1}]}
    session = SkillTreeSession({"skills": skills, "progress": {"experience": {"s0": 1}}})
    assert session.evaluate().is_satisfied("s1499") is True
    assert session.apply_config({"skills": skills}) is True
