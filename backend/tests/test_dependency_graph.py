"""Tests for dependency graph validation"""
import pytest

from hrflow.domain.errors import DependencyCycleError, ValidationError
from hrflow.engine.dependency_graph import find_cycle, find_dependency_issues, validate_dependency_graph

from tests.factories import make_task


def _types(issues):
    return [issue["type"] for issue in issues]


def test_valid_graph_has_no_issues():
    tasks = [make_task("a"), make_task("b", dependent_on=["a"]), make_task("c", dependent_on=["a", "b"])]
    assert find_dependency_issues(tasks) == []
    assert find_cycle(tasks) is None
    validate_dependency_graph(tasks)


def test_two_node_cycle_is_reported_with_path():
    tasks = [make_task("a", dependent_on=["b"]), make_task("b", dependent_on=["a"])]
    assert find_cycle(tasks) == ["a", "b", "a"]


def test_longer_cycle_path_starts_and_ends_on_same_task():
    tasks = [
        make_task("root"),
        make_task("x", dependent_on=["root", "z"]),
        make_task("y", dependent_on=["x"]),
        make_task("z", dependent_on=["y"]),
    ]
    cycle = find_cycle(tasks)
    assert cycle[0] == cycle[-1]
    assert set(cycle) == {"x", "y", "z"}


def test_validate_raises_dependency_cycle_error():
    tasks = [make_task("a", dependent_on=["b"]), make_task("b", dependent_on=["a"])]
    with pytest.raises(DependencyCycleError) as exc_info:
        validate_dependency_graph(tasks)
    assert exc_info.value.cycle == ["a", "b", "a"]
    assert exc_info.value.to_dict()["error"]["code"] == "DEPENDENCY_CYCLE"


def test_self_dependency_is_rejected():
    tasks = [make_task("a", dependent_on=["a"])]
    assert _types(find_dependency_issues(tasks)) == ["SELF_DEPENDENCY"]
    with pytest.raises(ValidationError):
        validate_dependency_graph(tasks)


def test_unknown_dependency_is_rejected():
    tasks = [make_task("a", dependent_on=["missing"])]
    issues = find_dependency_issues(tasks)
    assert _types(issues) == ["UNKNOWN_DEPENDENCY"]
    assert issues[0]["dependency_id"] == "missing"


def test_duplicate_task_ids_are_rejected():
    tasks = [make_task("a"), make_task("a")]
    assert "DUPLICATE_TASK_ID" in _types(find_dependency_issues(tasks))


def test_cycle_behind_a_self_loop_is_still_found():
    tasks = [make_task("a", dependent_on=["a", "b"]), make_task("b", dependent_on=["a"])]
    types = _types(find_dependency_issues(tasks))
    assert "SELF_DEPENDENCY" in types
    assert "CYCLE" in types
