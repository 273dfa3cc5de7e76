"""Tests for entity models and status normalization"""
import pytest
from pydantic import ValidationError

from hrflow.domain.enums import TaskStatus, normalize_task_status
from hrflow.domain.models import Task, Workflow

from tests.factories import make_task, make_workflow


@pytest.mark.parametrize("raw, expected", [
    ("Open", TaskStatus.OPEN),
    ("Pending", TaskStatus.OPEN),
    ("not started", TaskStatus.OPEN),
    ("NOT_STARTED", TaskStatus.OPEN),
    ("Completed", TaskStatus.DONE),
    ("DONE", TaskStatus.DONE),
    ("Need Information", TaskStatus.NEED_INFO),
    ("need_info", TaskStatus.NEED_INFO),
    ("IN_PROGRESS", TaskStatus.IN_PROGRESS),
])
def test_legacy_statuses_normalize(raw, expected):
    assert normalize_task_status(raw) is expected


def test_unknown_status_is_rejected():
    with pytest.raises(ValueError):
        normalize_task_status("Archived")
    with pytest.raises(ValidationError):
        Task(task_id="t1", name="x", department="HR", status="Archived")


def test_stored_legacy_status_is_normalized_on_read():
    task = Task.model_validate({"task_id": "t1", "name": "x", "department": "IT", "status": "Pending"})
    assert task.status == TaskStatus.OPEN


def test_null_dependencies_become_empty_list():
    task = Task.model_validate({"task_id": "t1", "name": "x", "department": "IT", "dependent_on": None})
    assert task.dependent_on == []


def test_indent_is_bounded():
    with pytest.raises(ValidationError):
        Task(task_id="t1", name="x", department="HR", indent=4)


def test_workflow_survives_json_round_trip():
    workflow = make_workflow([[make_task("t1"), make_task("t2", dependent_on=["t1"])]])
    restored = Workflow.model_validate(workflow.model_dump(mode="json"))
    assert restored.model_dump() == workflow.model_dump()


def test_timestamp_strings_are_accepted_for_calendar_dates():
    workflow = make_workflow([[make_task("t1")]])
    data = workflow.model_dump(mode="json")
    data["employee"]["start_date"] = "2026-11-02T04:30:00.000Z"

    restored = Workflow.model_validate(data)
    assert restored.employee.start_date.isoformat() == "2026-11-02"
