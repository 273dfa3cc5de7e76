"""Workflow Service - Workflow instance management business logic"""
from typing import Any, Dict, List, Optional, Union

from ..domain.models import ActorContext, Workflow, WorkflowOverrides
from ..domain.enums import WorkflowStatus, WorkflowType, TaskStatus
from ..domain.errors import InvalidStateTransitionError
from ..engine.dependency_resolver import DependencyResolver
from ..engine.lifecycle import WorkflowLifecycleController
from ..engine.task_sequencer import TaskSequencer
from ..engine.template_instantiator import TemplateInstantiator
from ..repositories.workflow_repo import WorkflowRepository
from ..repositories.template_repo import TemplateRepository
from ..repositories.account_repo import AccountRepository
from ..repositories.notification_repo import NotificationRepository
from ..repositories.user_repo import UserRepository
from ..utils.logger import get_logger

logger = get_logger(__name__)


class WorkflowService:
    """Service for workflow operations"""

    def __init__(
        self,
        workflow_repo: Optional[WorkflowRepository] = None,
        template_repo: Optional[TemplateRepository] = None,
        account_repo: Optional[AccountRepository] = None,
        notification_repo: Optional[NotificationRepository] = None,
        user_repo: Optional[UserRepository] = None,
        instantiator: Optional[TemplateInstantiator] = None
    ):
        self.repo = workflow_repo or WorkflowRepository()
        self.template_repo = template_repo or TemplateRepository()
        self.account_repo = account_repo or AccountRepository()
        self.notification_repo = notification_repo or NotificationRepository()
        self.user_repo = user_repo or UserRepository()
        self.sequencer = TaskSequencer(DependencyResolver())
        self.instantiator = instantiator or TemplateInstantiator(user_repo=self.user_repo)
        self.lifecycle = WorkflowLifecycleController(
            workflow_repo=self.repo,
            account_repo=self.account_repo,
            notification_repo=self.notification_repo,
            user_repo=self.user_repo,
            sequencer=self.sequencer
        )

    def start_workflow(
        self,
        template_id: str,
        overrides: Union[WorkflowOverrides, Dict[str, Any]],
        actor: Optional[ActorContext] = None
    ) -> Workflow:
        """Instantiate a stored template and persist the new workflow"""
        template = self.template_repo.get_template_or_raise(template_id)
        workflow = self.instantiator.instantiate(template, overrides)
        workflow = self.repo.save_workflow(workflow)

        logger.info(
            f"Started {workflow.type.value} workflow for {workflow.employee.name}",
            extra={
                "workflow_id": workflow.workflow_id,
                "template_id": template_id,
                "actor_email": actor.email if actor else None
            }
        )
        return workflow

    def get_workflow(self, workflow_id: str) -> Workflow:
        """Get workflow by ID"""
        return self.repo.get_workflow_or_raise(workflow_id)

    def list_workflows(
        self,
        status: Optional[WorkflowStatus] = None,
        workflow_type: Optional[WorkflowType] = None,
        assignee_id: Optional[str] = None,
        skip: int = 0,
        limit: int = 50
    ) -> List[Workflow]:
        """List workflows"""
        return self.repo.list_workflows(
            status=status,
            workflow_type=workflow_type,
            assignee_id=assignee_id,
            skip=skip,
            limit=limit
        )

    def count_workflows(
        self,
        status: Optional[WorkflowStatus] = None,
        workflow_type: Optional[WorkflowType] = None
    ) -> int:
        """Count workflows"""
        return self.repo.count_workflows(status=status, workflow_type=workflow_type)

    def summarize(self, workflow: Workflow) -> Dict[str, Any]:
        """Progress counters shown on workflow cards"""
        tasks = self.sequencer.flatten_tasks(workflow)
        done = sum(1 for task in tasks if task.status == TaskStatus.DONE)
        return {
            "total_tasks": len(tasks),
            "done_tasks": done,
            "progress": round(done * 100 / len(tasks)) if tasks else 100,
        }

    def delete_workflow(self, workflow_id: str, actor: ActorContext) -> bool:
        """Delete a workflow instance"""
        self.repo.get_workflow_or_raise(workflow_id)
        deleted = self.repo.delete_workflow(workflow_id)
        logger.info(
            f"Deleted workflow {workflow_id}",
            extra={"workflow_id": workflow_id, "actor_email": actor.email}
        )
        return deleted

    def complete_workflow(self, workflow_id: str, actor: ActorContext, force: bool = False) -> Workflow:
        """
        Complete a workflow

        Without ``force`` every task must already be Done.

        Raises:
            InvalidStateTransitionError: If tasks remain open or the
                workflow is already terminal
        """
        workflow = self.repo.get_workflow_or_raise(workflow_id)
        if not force and not self.lifecycle.is_all_tasks_done(workflow):
            remaining = [
                task.task_id for task in self.sequencer.flatten_tasks(workflow)
                if task.status != TaskStatus.DONE
            ]
            raise InvalidStateTransitionError(
                f"Workflow {workflow_id} still has {len(remaining)} unfinished task(s)",
                details={"workflow_id": workflow_id, "remaining": remaining}
            )
        return self.lifecycle.complete(workflow, actor)

    def cancel_workflow(self, workflow_id: str, reason: str, actor: ActorContext) -> Workflow:
        """Cancel an In Progress workflow with a reason"""
        workflow = self.repo.get_workflow_or_raise(workflow_id)
        return self.lifecycle.cancel(workflow, reason, actor)
