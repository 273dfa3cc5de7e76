"""Workflow Lifecycle Controller - Completion and cancellation"""
from typing import List, Optional

from ..domain.models import (
    Workflow, EmployeeAccount, EmployeeDocument, TaskDocument, ActorContext
)
from ..domain.enums import (
    WorkflowStatus, WorkflowType, AccountStatus, NotificationType
)
from ..domain.errors import InvalidStateTransitionError
from ..repositories.workflow_repo import WorkflowRepository
from ..repositories.account_repo import AccountRepository
from ..repositories.notification_repo import NotificationRepository
from ..repositories.user_repo import UserRepository
from ..utils.idgen import generate_account_id
from ..utils.time import utc_now
from ..utils.logger import get_logger
from .task_sequencer import TaskSequencer

logger = get_logger(__name__)


class WorkflowLifecycleController:
    """
    Drive a workflow from In Progress to Completed or Cancelled

    Both target states are terminal. Completing a workflow also updates
    the employee directory:

    - Offboarding: the account matching the employee email is marked
      Inactive and receives the offboarding details and every document
      produced by the workflow's tasks. No account means nothing to do.
    - Onboarding: an account is created for the employee email, or the
      existing one is re-activated, with task documents merged by name.

    The controller never completes a workflow by itself; callers decide
    when to call complete(), typically after is_all_tasks_done().
    """

    def __init__(
        self,
        workflow_repo: WorkflowRepository,
        account_repo: AccountRepository,
        notification_repo: NotificationRepository,
        user_repo: Optional[UserRepository] = None,
        sequencer: Optional[TaskSequencer] = None
    ):
        self.workflow_repo = workflow_repo
        self.account_repo = account_repo
        self.notification_repo = notification_repo
        self.user_repo = user_repo
        self.sequencer = sequencer or TaskSequencer()

    def is_all_tasks_done(self, workflow: Workflow) -> bool:
        """True iff every task in every stage is Done"""
        return self.sequencer.all_tasks_done(workflow)

    def _save_or_restore(self, workflow: Workflow, snapshot: Workflow) -> Workflow:
        """Persist a transition; on failure put the in-memory fields back and re-raise"""
        try:
            return self.workflow_repo.save_workflow(workflow)
        except Exception:
            for field in ("status", "completed_at", "cancellation_reason", "cancelled_by", "cancelled_at"):
                setattr(workflow, field, getattr(snapshot, field))
            raise

    def _require_in_progress(self, workflow: Workflow, action: str) -> None:
        if workflow.status != WorkflowStatus.IN_PROGRESS:
            raise InvalidStateTransitionError(
                f"Cannot {action} workflow {workflow.workflow_id} in status {workflow.status.value}",
                details={"workflow_id": workflow.workflow_id, "status": workflow.status.value}
            )

    # =========================================================================
    # Complete
    # =========================================================================

    def complete(self, workflow: Workflow, actor: Optional[ActorContext] = None) -> Workflow:
        """
        Mark a workflow Completed and apply directory side effects

        Raises:
            InvalidStateTransitionError: If the workflow is not In Progress
        """
        self._require_in_progress(workflow, "complete")

        snapshot = workflow.model_copy(deep=True)
        workflow.status = WorkflowStatus.COMPLETED
        workflow.completed_at = utc_now()
        workflow = self._save_or_restore(workflow, snapshot)

        logger.info(
            f"Workflow {workflow.workflow_id} completed",
            extra={
                "workflow_id": workflow.workflow_id,
                "status": workflow.status.value,
                "actor_email": actor.email if actor else None
            }
        )

        if workflow.type == WorkflowType.OFFBOARDING:
            self._deactivate_account(workflow)
        elif workflow.type == WorkflowType.ONBOARDING:
            self._provision_account(workflow)

        self.notification_repo.create_notification(
            NotificationType.WORKFLOW_COMPLETED,
            f"{workflow.type.value} workflow for {workflow.employee.name} has been completed!",
            workflow_id=workflow.workflow_id
        )
        return workflow

    def collect_task_documents(self, workflow: Workflow) -> List[TaskDocument]:
        """Every document in any task's output value, in stage/task order"""
        documents: List[TaskDocument] = []
        for stage in workflow.stages:
            for task in stage.tasks:
                if task.output_value:
                    documents.extend(task.output_value.documents)
        return documents

    def _deactivate_account(self, workflow: Workflow) -> Optional[EmployeeAccount]:
        email = workflow.employee.email
        account = self.account_repo.get_account_by_email(email) if email else None
        if account is None:
            logger.info(
                "No employee account to deactivate",
                extra={"workflow_id": workflow.workflow_id, "account_email": email}
            )
            return None

        details = workflow.offboarding_details
        account.status = AccountStatus.INACTIVE
        account.offboarded_at = utc_now()
        account.offboarding_type = details.type if details else None
        account.exit_reason = details.exit_reason if details else None
        account.last_working_day = details.last_working_day if details else None
        account.offboarding_documents = [
            doc.url or doc.name for doc in self.collect_task_documents(workflow)
        ]

        logger.info(
            f"Deactivated employee account {account.account_id}",
            extra={"workflow_id": workflow.workflow_id, "account_email": account.email}
        )
        return self.account_repo.save_account(account)

    def _provision_account(self, workflow: Workflow) -> Optional[EmployeeAccount]:
        employee = workflow.employee
        if not employee.email:
            logger.warning(
                "Onboarding completed without an employee email; no account provisioned",
                extra={"workflow_id": workflow.workflow_id}
            )
            return None

        supervisor = None
        if employee.supervisor_id and self.user_repo is not None:
            supervisor = self.user_repo.get_user(employee.supervisor_id)

        now = utc_now()
        produced = [
            EmployeeDocument(name=doc.name, url=doc.url, uploaded_at=doc.uploaded_at)
            for doc in self.collect_task_documents(workflow)
        ]

        account = self.account_repo.get_account_by_email(employee.email)
        if account is None:
            account = EmployeeAccount(
                account_id=generate_account_id(),
                name=employee.name,
                email=employee.email,
                position=employee.position,
                department=employee.department,
                client=workflow.client,
                employment_type=employee.employment_type,
                supervisor=supervisor,
                joined_date=employee.start_date,
                status=AccountStatus.ACTIVE,
                documents=self._merge_documents([], produced),
                onboarded_at=now
            )
            logger.info(
                f"Provisioned employee account {account.account_id}",
                extra={"workflow_id": workflow.workflow_id, "account_email": account.email}
            )
        else:
            account.name = employee.name
            account.position = employee.position
            account.department = employee.department
            account.client = workflow.client
            account.employment_type = employee.employment_type
            account.supervisor = supervisor or account.supervisor
            account.joined_date = employee.start_date or account.joined_date
            account.status = AccountStatus.ACTIVE
            account.onboarded_at = account.onboarded_at or now
            account.documents = self._merge_documents(account.documents, produced)
            # Rehire: an Active account carries no exit record
            account.offboarded_at = None
            account.offboarding_type = None
            account.exit_reason = None
            account.last_working_day = None
            account.offboarding_documents = []
            logger.info(
                f"Merged onboarding into existing account {account.account_id}",
                extra={"workflow_id": workflow.workflow_id, "account_email": account.email}
            )

        return self.account_repo.save_account(account)

    @staticmethod
    def _merge_documents(
        existing: List[EmployeeDocument],
        incoming: List[EmployeeDocument]
    ) -> List[EmployeeDocument]:
        """Append incoming documents whose name is not already present"""
        merged = list(existing)
        names = {doc.name for doc in merged}
        for doc in incoming:
            if doc.name not in names:
                merged.append(doc)
                names.add(doc.name)
        return merged

    # =========================================================================
    # Cancel
    # =========================================================================

    def cancel(self, workflow: Workflow, reason: str, actor: ActorContext) -> Workflow:
        """
        Mark a workflow Cancelled

        Raises:
            InvalidStateTransitionError: If the reason is blank or the
                workflow is not In Progress
        """
        if not reason or not reason.strip():
            raise InvalidStateTransitionError(
                "A cancellation reason is required",
                details={"workflow_id": workflow.workflow_id}
            )
        self._require_in_progress(workflow, "cancel")

        snapshot = workflow.model_copy(deep=True)
        workflow.status = WorkflowStatus.CANCELLED
        workflow.cancellation_reason = reason.strip()
        workflow.cancelled_by = actor.to_user_ref()
        workflow.cancelled_at = utc_now()
        workflow = self._save_or_restore(workflow, snapshot)

        logger.info(
            f"Workflow {workflow.workflow_id} cancelled",
            extra={"workflow_id": workflow.workflow_id, "actor_email": actor.email}
        )

        self.notification_repo.create_notification(
            NotificationType.WORKFLOW_CANCELLED,
            f"{workflow.type.value} workflow for {workflow.employee.name} was cancelled: {workflow.cancellation_reason}",
            workflow_id=workflow.workflow_id
        )
        return workflow
