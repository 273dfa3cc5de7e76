"""Task Service - Task status changes, assignment and availability views"""
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from ..config.settings import settings
from ..domain.models import ActorContext, EmployeeSnapshot, Task, TaskOutput, Workflow
from ..domain.enums import TaskStatus, NotificationType
from ..domain.errors import (
    InvalidStateTransitionError, TaskLockedError, TaskNotFoundError, UserNotFoundError,
    ValidationError
)
from ..engine.comment_thread import count_comments
from ..engine.dependency_resolver import DependencyResolver
from ..engine.task_sequencer import TaskSequencer
from ..engine.lifecycle import WorkflowLifecycleController
from ..repositories.workflow_repo import WorkflowRepository
from ..repositories.account_repo import AccountRepository
from ..repositories.notification_repo import NotificationRepository
from ..repositories.user_repo import UserRepository
from ..utils.time import utc_now, is_overdue
from ..utils.logger import get_logger

logger = get_logger(__name__)

# Statuses that mean work has started and therefore need an unlocked task
GATED_STATUSES = (TaskStatus.IN_PROGRESS, TaskStatus.DONE)


class TaskService:
    """Service for task operations inside a workflow"""

    def __init__(
        self,
        workflow_repo: Optional[WorkflowRepository] = None,
        notification_repo: Optional[NotificationRepository] = None,
        user_repo: Optional[UserRepository] = None,
        lifecycle: Optional[WorkflowLifecycleController] = None,
        auto_complete: Optional[bool] = None
    ):
        self.workflow_repo = workflow_repo or WorkflowRepository()
        self.notification_repo = notification_repo or NotificationRepository()
        self.user_repo = user_repo or UserRepository()
        self.resolver = DependencyResolver()
        self.sequencer = TaskSequencer(self.resolver)
        self.lifecycle = lifecycle or WorkflowLifecycleController(
            workflow_repo=self.workflow_repo,
            account_repo=AccountRepository(),
            notification_repo=self.notification_repo,
            user_repo=self.user_repo,
            sequencer=self.sequencer
        )
        self.auto_complete = settings.auto_complete_workflows if auto_complete is None else auto_complete

    def _get_task_or_raise(self, workflow: Workflow, task_id: str) -> Task:
        task = self.sequencer.find_task(workflow, task_id)
        if task is None:
            raise TaskNotFoundError(
                f"Task {task_id} not found in workflow {workflow.workflow_id}",
                details={"workflow_id": workflow.workflow_id, "task_id": task_id}
            )
        return task

    def _require_active(self, workflow: Workflow) -> None:
        if workflow.is_terminal:
            raise InvalidStateTransitionError(
                f"Workflow {workflow.workflow_id} is {workflow.status.value}; tasks can no longer change",
                details={"workflow_id": workflow.workflow_id, "status": workflow.status.value}
            )

    # =========================================================================
    # Queries
    # =========================================================================

    def describe_task(self, workflow: Workflow, task: Task) -> Dict[str, Any]:
        """Task plus its gating state, as returned by the API"""
        stage = self.sequencer.find_stage_for_task(workflow, task.task_id)
        return {
            "task": task.model_dump(mode="json"),
            "stage_id": stage.stage_id if stage else None,
            "stage_name": stage.name if stage else None,
            "is_available": self.resolver.is_available(workflow, task.task_id),
            "blocked_by": self.resolver.blocking_dependencies(workflow, task.task_id),
            "comment_count": count_comments(task.comments),
            "is_overdue": task.status != TaskStatus.DONE and is_overdue(task.due_date),
        }

    def list_tasks(self, workflow_id: str) -> List[Dict[str, Any]]:
        """Flattened task sequence of a workflow with availability"""
        workflow = self.workflow_repo.get_workflow_or_raise(workflow_id)
        return [self.describe_task(workflow, task) for task in self.sequencer.flatten_tasks(workflow)]

    def get_availability(self, workflow_id: str, task_id: str) -> Dict[str, Any]:
        workflow = self.workflow_repo.get_workflow_or_raise(workflow_id)
        self._get_task_or_raise(workflow, task_id)
        next_positional = self.sequencer.next_positional_task(workflow, task_id)
        next_available = self.sequencer.next_available_task(workflow, task_id)
        return {
            "workflow_id": workflow_id,
            "task_id": task_id,
            "is_available": self.resolver.is_available(workflow, task_id),
            "blocked_by": self.resolver.blocking_dependencies(workflow, task_id),
            "next_task_id": next_positional.task_id if next_positional else None,
            "next_available_task_id": next_available.task_id if next_available else None,
        }

    def list_tasks_for_user(self, user_id: str) -> List[Dict[str, Any]]:
        """Every task assigned to a user across workflows, with context"""
        results = []
        for workflow in self.workflow_repo.list_workflows(assignee_id=user_id, limit=0):
            for task in self.sequencer.flatten_tasks(workflow):
                if task.assigned_to and task.assigned_to.user_id == user_id:
                    item = self.describe_task(workflow, task)
                    item["workflow_id"] = workflow.workflow_id
                    item["workflow_type"] = workflow.type.value
                    item["workflow_status"] = workflow.status.value
                    item["employee_name"] = workflow.employee.name
                    results.append(item)
        return results

    # =========================================================================
    # Commands
    # =========================================================================

    def update_status(
        self,
        workflow_id: str,
        task_id: str,
        new_status: TaskStatus,
        actor: ActorContext,
        note: Optional[str] = None,
        output: Optional[TaskOutput] = None
    ) -> Workflow:
        """
        Change a task's status

        Starting or finishing a task requires it to be unlocked. Finishing
        a task notifies the assignee of the next task in sequence; when it
        was the last open task and auto-completion is on, the workflow is
        completed through the lifecycle controller.

        Raises:
            InvalidStateTransitionError: If the workflow is terminal
            TaskLockedError: If dependencies are not Done yet
        """
        workflow = self.workflow_repo.get_workflow_or_raise(workflow_id)
        self._require_active(workflow)
        task = self._get_task_or_raise(workflow, task_id)

        if new_status in GATED_STATUSES and not self.resolver.is_available(workflow, task_id):
            blocked_by = self.resolver.blocking_dependencies(workflow, task_id)
            raise TaskLockedError(
                f"Task {task_id} is waiting on {', '.join(blocked_by)}",
                details={"task_id": task_id, "blocked_by": blocked_by}
            )

        employee = None
        if output is not None and output.email:
            employee = self._employee_with_email(workflow, output.email)

        previous = task.status
        task.status = new_status
        if note:
            task.notes = note
        if output is not None:
            task.output_value = output
            if employee is not None:
                workflow.employee = employee

        if new_status == TaskStatus.DONE and previous != TaskStatus.DONE:
            task.completed_at = utc_now()
        elif new_status != TaskStatus.DONE:
            task.completed_at = None

        logger.info(
            f"Task {task_id}: {previous.value} -> {new_status.value}",
            extra={"workflow_id": workflow_id, "task_id": task_id, "actor_email": actor.email}
        )

        if self.auto_complete and self.lifecycle.is_all_tasks_done(workflow):
            workflow = self.lifecycle.complete(workflow, actor)
        else:
            workflow = self.workflow_repo.save_workflow(workflow)

        if new_status == TaskStatus.DONE and previous != TaskStatus.DONE:
            self._notify_completion(workflow, task)

        return workflow

    @staticmethod
    def _employee_with_email(workflow: Workflow, email: str) -> EmployeeSnapshot:
        """Employee snapshot carrying a new office email, validated before it is stored"""
        try:
            return EmployeeSnapshot.model_validate({**workflow.employee.model_dump(), "email": email})
        except PydanticValidationError as e:
            raise ValidationError(
                f"Task output email {email!r} is not a valid email address",
                details={"errors": [
                    {"path": "output.email", "message": err["msg"]} for err in e.errors()
                ]}
            )

    def _notify_completion(self, workflow: Workflow, task: Task) -> None:
        self.notification_repo.create_notification(
            NotificationType.TASK_COMPLETED,
            f'Task "{task.name}" for {workflow.employee.name} is done',
            workflow_id=workflow.workflow_id,
            task_id=task.task_id
        )

        # Positional hand-off; the next task may still be dependency-gated
        next_task = self.sequencer.next_positional_task(workflow, task.task_id)
        if next_task and next_task.assigned_to:
            self.notification_repo.create_notification(
                NotificationType.TASK_ASSIGNED,
                f'It\'s time to start your task: "{next_task.name}" for {workflow.employee.name}',
                workflow_id=workflow.workflow_id,
                task_id=next_task.task_id,
                recipient_email=next_task.assigned_to.email
            )

    def assign_task(
        self,
        workflow_id: str,
        task_id: str,
        user_id: Optional[str],
        actor: ActorContext
    ) -> Workflow:
        """Assign a task to a directory user, or clear the assignee with None"""
        workflow = self.workflow_repo.get_workflow_or_raise(workflow_id)
        self._require_active(workflow)
        task = self._get_task_or_raise(workflow, task_id)

        assignee = None
        if user_id:
            assignee = self.user_repo.get_user(user_id)
            if assignee is None:
                raise UserNotFoundError(f"User {user_id} not found")

        task.assigned_to = assignee
        workflow = self.workflow_repo.save_workflow(workflow)

        logger.info(
            f"Task {task_id} assigned to {user_id or 'nobody'}",
            extra={"workflow_id": workflow_id, "task_id": task_id, "actor_email": actor.email}
        )

        if assignee:
            self.notification_repo.create_notification(
                NotificationType.TASK_ASSIGNED,
                f'You have been assigned "{task.name}" for {workflow.employee.name}',
                workflow_id=workflow_id,
                task_id=task_id,
                recipient_email=assignee.email
            )
        return workflow
