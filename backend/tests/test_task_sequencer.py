"""Tests for task ordering and next-task lookup"""
from hrflow.domain.enums import TaskStatus, WorkflowStatus
from hrflow.engine.task_sequencer import TaskSequencer

from tests.factories import make_task, make_workflow

sequencer = TaskSequencer()


def _ids(tasks):
    return [t.task_id for t in tasks]


def test_flatten_sorts_stages_by_order():
    workflow = make_workflow(
        [[make_task("c1")], [make_task("a1"), make_task("a2")], [make_task("b1")]],
        orders=[3, 1, 2]
    )
    assert _ids(sequencer.flatten_tasks(workflow)) == ["a1", "a2", "b1", "c1"]


def test_flatten_keeps_stored_position_for_equal_orders():
    workflow = make_workflow([[make_task("x")], [make_task("y")]], orders=[1, 1])
    assert _ids(sequencer.flatten_tasks(workflow)) == ["x", "y"]


def test_next_task_crosses_stage_boundary():
    workflow = make_workflow([[make_task("t1"), make_task("t2")], [make_task("t3")]])
    assert sequencer.next_task(workflow, "t1").task_id == "t2"
    assert sequencer.next_task(workflow, "t2").task_id == "t3"


def test_next_task_is_none_for_last_or_unknown():
    workflow = make_workflow([[make_task("t1"), make_task("t2")]])
    assert sequencer.next_task(workflow, "t2") is None
    assert sequencer.next_task(workflow, "missing") is None


def test_next_positional_ignores_dependencies():
    workflow = make_workflow([[
        make_task("t1"),
        make_task("t2", dependent_on=["t1"]),
        make_task("t3"),
    ]])
    assert sequencer.next_positional_task(workflow, "t1").task_id == "t2"
    # t2 is still locked by t1, t3 is free
    assert sequencer.next_available_task(workflow, "t1").task_id == "t3"


def test_next_available_skips_done_tasks():
    workflow = make_workflow([[
        make_task("t1"), make_task("t2", status=TaskStatus.DONE), make_task("t3"),
    ]])
    assert sequencer.next_available_task(workflow, "t1").task_id == "t3"
    assert sequencer.next_available_task(workflow, "t3") is None


def test_terminal_workflow_has_no_next_task():
    workflow = make_workflow([[make_task("t1"), make_task("t2")]], status=WorkflowStatus.CANCELLED)
    assert sequencer.next_task(workflow, "t1") is None
    assert sequencer.next_available_task(workflow, "t1") is None


def test_find_task_and_stage():
    workflow = make_workflow([[make_task("t1")], [make_task("t2")]])
    assert sequencer.find_task(workflow, "t2").task_id == "t2"
    assert sequencer.find_stage_for_task(workflow, "t2").stage_id == "s2"
    assert sequencer.find_task(workflow, "zzz") is None


def test_all_tasks_done():
    workflow = make_workflow([[make_task("t1", status=TaskStatus.DONE)], [make_task("t2")]])
    assert sequencer.all_tasks_done(workflow) is False
    workflow.stages[1].tasks[0].status = TaskStatus.DONE
    assert sequencer.all_tasks_done(workflow) is True
    assert sequencer.all_tasks_done(make_workflow([])) is True
