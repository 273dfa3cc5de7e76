"""Tests for task status changes, assignment and availability"""
from datetime import date

import pytest
from pydantic import ValidationError as PydanticValidationError

from hrflow.domain.enums import AccountStatus, NotificationType, TaskStatus, WorkflowStatus
from hrflow.domain.errors import (
    InvalidStateTransitionError, TaskLockedError, TaskNotFoundError, UserNotFoundError,
    ValidationError, WorkflowNotFoundError
)
from hrflow.domain.models import TaskOutput
from hrflow.services.task_service import TaskService

DONE = TaskStatus.DONE
OPEN = TaskStatus.OPEN


def _of_type(notification_repo, notification_type):
    return [n for n in notification_repo.list_notifications() if n.type == notification_type]


def _task(workflow, task_id):
    return next(t for s in workflow.stages for t in s.tasks if t.task_id == task_id)


def test_starting_a_locked_task_is_rejected(task_service, workflow_repo, saved_workflow, actor):
    with pytest.raises(TaskLockedError) as exc_info:
        task_service.update_status("WF-test", "t2", TaskStatus.IN_PROGRESS, actor)

    assert exc_info.value.details["blocked_by"] == ["t1"]
    assert exc_info.value.http_status == 409
    stored = workflow_repo.get_workflow("WF-test")
    assert _task(stored, "t2").status == OPEN
    assert stored.version == 1


def test_need_info_is_allowed_on_a_locked_task(task_service, saved_workflow, actor):
    workflow = task_service.update_status("WF-test", "t3", TaskStatus.NEED_INFO, actor, note="Which laptop model?")
    task = _task(workflow, "t3")
    assert task.status == TaskStatus.NEED_INFO
    assert task.notes == "Which laptop model?"


def test_done_sets_completed_at_and_reopen_clears_it(task_service, workflow_repo, saved_workflow, actor):
    task_service.update_status("WF-test", "t1", DONE, actor)
    stored = workflow_repo.get_workflow("WF-test")
    assert _task(stored, "t1").completed_at is not None
    assert stored.version == 2

    task_service.update_status("WF-test", "t1", OPEN, actor)
    stored = workflow_repo.get_workflow("WF-test")
    assert _task(stored, "t1").completed_at is None
    with pytest.raises(TaskLockedError):
        task_service.update_status("WF-test", "t2", DONE, actor)


def test_completion_notifies_and_hands_off_to_next_assignee(
    task_service, notification_repo, saved_workflow, actor, bob
):
    task_service.assign_task("WF-test", "t2", bob.user_id, actor)
    task_service.update_status("WF-test", "t1", DONE, actor)

    [completed] = _of_type(notification_repo, NotificationType.TASK_COMPLETED)
    assert completed.message == 'Task "Task t1" for Nimal Fernando is done'
    assert completed.recipient_email is None

    handoff = [
        n for n in _of_type(notification_repo, NotificationType.TASK_ASSIGNED)
        if n.message.startswith("It's time")
    ]
    assert len(handoff) == 1
    assert handoff[0].recipient_email == bob.email
    assert handoff[0].task_id == "t2"


def test_repeating_done_does_not_notify_twice(task_service, notification_repo, saved_workflow, actor):
    task_service.update_status("WF-test", "t1", DONE, actor)
    task_service.update_status("WF-test", "t1", DONE, actor, note="double-checked")
    assert len(_of_type(notification_repo, NotificationType.TASK_COMPLETED)) == 1


def test_finishing_last_task_completes_workflow(task_service, workflow_repo, account_repo, saved_workflow, actor):
    task_service.update_status("WF-test", "t1", DONE, actor)
    task_service.update_status("WF-test", "t2", DONE, actor)
    workflow = task_service.update_status("WF-test", "t3", DONE, actor)

    assert workflow.status == WorkflowStatus.COMPLETED
    assert workflow_repo.get_workflow("WF-test").status == WorkflowStatus.COMPLETED
    assert account_repo.get_account_by_email("nimal@company.com").status == AccountStatus.ACTIVE

    with pytest.raises(InvalidStateTransitionError):
        task_service.update_status("WF-test", "t3", OPEN, actor)


def test_auto_complete_can_be_switched_off(
    workflow_repo, notification_repo, user_repo, lifecycle, saved_workflow, actor
):
    service = TaskService(
        workflow_repo=workflow_repo,
        notification_repo=notification_repo,
        user_repo=user_repo,
        lifecycle=lifecycle,
        auto_complete=False
    )
    for task_id in ("t1", "t2", "t3"):
        workflow = service.update_status("WF-test", task_id, DONE, actor)
    assert workflow.status == WorkflowStatus.IN_PROGRESS


def test_output_email_updates_employee_snapshot(task_service, workflow_repo, saved_workflow, actor):
    output = TaskOutput(email="nimal.fernando@company.com", password="Temp#1234")
    task_service.update_status("WF-test", "t1", DONE, actor, output=output)

    stored = workflow_repo.get_workflow("WF-test")
    assert stored.employee.email == "nimal.fernando@company.com"
    assert _task(stored, "t1").output_value.password == "Temp#1234"


def test_invalid_output_email_is_rejected_and_workflow_stays_readable(
    task_service, workflow_repo, saved_workflow, actor
):
    with pytest.raises(PydanticValidationError):
        TaskOutput(email="jdoe")

    # model_construct skips field validation
    output = TaskOutput.model_construct(email="jdoe", password=None, documents=[])
    with pytest.raises(ValidationError) as exc_info:
        task_service.update_status("WF-test", "t1", DONE, actor, output=output)
    assert exc_info.value.http_status == 400

    stored = workflow_repo.get_workflow("WF-test")
    assert stored.version == 1
    assert stored.employee.email == "nimal@company.com"
    assert _task(stored, "t1").status == OPEN
    assert [w.workflow_id for w in workflow_repo.list_workflows()] == ["WF-test"]


def test_assign_and_unassign(task_service, workflow_repo, notification_repo, saved_workflow, actor, alice):
    task_service.assign_task("WF-test", "t1", alice.user_id, actor)
    assert _task(workflow_repo.get_workflow("WF-test"), "t1").assigned_to.email == alice.email

    [assigned] = _of_type(notification_repo, NotificationType.TASK_ASSIGNED)
    assert assigned.recipient_email == alice.email
    assert assigned.message == 'You have been assigned "Task t1" for Nimal Fernando'

    task_service.assign_task("WF-test", "t1", None, actor)
    assert _task(workflow_repo.get_workflow("WF-test"), "t1").assigned_to is None
    assert len(_of_type(notification_repo, NotificationType.TASK_ASSIGNED)) == 1


def test_assign_unknown_user_raises(task_service, workflow_repo, saved_workflow, actor):
    with pytest.raises(UserNotFoundError):
        task_service.assign_task("WF-test", "t1", "u-ghost", actor)
    assert workflow_repo.get_workflow("WF-test").version == 1


def test_unknown_workflow_and_task(task_service, saved_workflow, actor):
    with pytest.raises(WorkflowNotFoundError):
        task_service.update_status("WF-missing", "t1", DONE, actor)
    with pytest.raises(TaskNotFoundError):
        task_service.update_status("WF-test", "t9", DONE, actor)


def test_list_tasks_reports_gating(task_service, saved_workflow):
    items = task_service.list_tasks("WF-test")

    assert [item["task"]["task_id"] for item in items] == ["t1", "t2", "t3"]
    assert [item["is_available"] for item in items] == [True, False, False]
    assert items[2]["blocked_by"] == ["t2"]
    assert items[2]["stage_name"] == "Stage 2"
    assert items[0]["comment_count"] == 0


def test_availability_includes_next_tasks(task_service, saved_workflow, actor):
    before = task_service.get_availability("WF-test", "t1")
    assert before["is_available"] is True
    assert before["next_task_id"] == "t2"
    assert before["next_available_task_id"] is None

    task_service.update_status("WF-test", "t1", DONE, actor)
    after = task_service.get_availability("WF-test", "t1")
    assert after["next_available_task_id"] == "t2"

    with pytest.raises(TaskNotFoundError):
        task_service.get_availability("WF-test", "t9")


def test_list_tasks_for_user(task_service, saved_workflow, actor, alice):
    task_service.assign_task("WF-test", "t3", alice.user_id, actor)

    [item] = task_service.list_tasks_for_user(alice.user_id)
    assert item["workflow_id"] == "WF-test"
    assert item["task"]["task_id"] == "t3"
    assert item["employee_name"] == "Nimal Fernando"
    assert item["is_available"] is False
    assert task_service.list_tasks_for_user("u-bob") == []


def test_past_due_open_task_is_overdue(task_service, workflow_repo, saved_workflow, actor):
    workflow = workflow_repo.get_workflow("WF-test")
    _task(workflow, "t1").due_date = date(2020, 1, 1)
    _task(workflow, "t2").due_date = date(2999, 1, 1)
    workflow_repo.save_workflow(workflow)

    items = task_service.list_tasks("WF-test")
    assert [item["is_overdue"] for item in items] == [True, False, False]

    task_service.update_status("WF-test", "t1", DONE, actor)
    assert task_service.list_tasks("WF-test")[0]["is_overdue"] is False
