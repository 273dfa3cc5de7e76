"""Template Instantiator - Build a workflow instance from a template"""
from typing import Any, Dict, List, Optional, Union
from pydantic import ValidationError as PydanticValidationError

from ..config.settings import settings
from ..domain.models import (
    WorkflowTemplate, WorkflowOverrides, Workflow, Stage, Task, TemplateTask, UserRef
)
from ..domain.enums import WorkflowStatus, WorkflowType, TaskStatus
from ..domain.errors import TemplateValidationError, ValidationError
from ..repositories.user_repo import UserRepository
from ..utils.idgen import generate_workflow_id, generate_stage_id, generate_task_id
from ..utils.time import utc_now
from ..utils.logger import get_logger
from .dependency_graph import validate_dependency_graph

logger = get_logger(__name__)


def _pydantic_errors(exc: PydanticValidationError) -> List[Dict[str, Any]]:
    return [
        {"path": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
        for err in exc.errors()
    ]


class TemplateInstantiator:
    """
    Deep-copy a template's stage/task graph into a new workflow

    Stages are re-numbered 1..N by their template order. Every task starts
    Open, unassigned unless a default or override assignee resolves, with
    no comments and no dates other than an explicit due date override.
    Dependency sets and indent levels are copied.

    Template IDs are preserved by default. With ``regenerate_ids`` every
    stage and task gets a fresh ID, and each ``dependent_on`` entry is
    rewritten through the same old -> new table so the copied graph keeps
    pointing at its own tasks.
    """

    def __init__(
        self,
        user_repo: Optional[UserRepository] = None,
        regenerate_ids: Optional[bool] = None
    ):
        self.user_repo = user_repo
        self.regenerate_ids = settings.regenerate_task_ids if regenerate_ids is None else regenerate_ids

    # =========================================================================
    # Validation
    # =========================================================================

    def coerce_template(self, template: Union[WorkflowTemplate, Dict[str, Any]]) -> WorkflowTemplate:
        """
        Parse raw template data

        Raises:
            TemplateValidationError: Missing names, bad enums, bad orders
        """
        if isinstance(template, WorkflowTemplate):
            return template
        try:
            return WorkflowTemplate.model_validate(template)
        except PydanticValidationError as e:
            raise TemplateValidationError(
                "Template data is invalid",
                details={"errors": _pydantic_errors(e)}
            )

    def find_stage_issues(self, template: WorkflowTemplate) -> List[Dict[str, Any]]:
        """Stage layout problems: duplicate order values or stage IDs"""
        issues: List[Dict[str, Any]] = []
        orders = [stage.order for stage in template.stages]
        if len(orders) != len(set(orders)):
            issues.append({
                "type": "DUPLICATE_STAGE_ORDER",
                "message": "Stage order values must be unique",
                "orders": orders
            })
        stage_ids = [stage.stage_id for stage in template.stages]
        if len(stage_ids) != len(set(stage_ids)):
            issues.append({
                "type": "DUPLICATE_STAGE_ID",
                "message": "Stage IDs must be unique"
            })
        return issues

    def validate_template(self, template: WorkflowTemplate) -> None:
        """
        Check structural invariants the model alone cannot express

        Raises:
            TemplateValidationError: Duplicate stage orders or stage IDs
            DependencyCycleError: If task dependencies form a cycle
            ValidationError: Self, unknown or duplicate task references
        """
        stage_issues = self.find_stage_issues(template)
        if stage_issues:
            raise TemplateValidationError(
                stage_issues[0]["message"],
                details={"template_id": template.template_id, "issues": stage_issues}
            )

        validate_dependency_graph([task for stage in template.stages for task in stage.tasks])

    # =========================================================================
    # Instantiation
    # =========================================================================

    def instantiate(
        self,
        template: Union[WorkflowTemplate, Dict[str, Any]],
        overrides: Union[WorkflowOverrides, Dict[str, Any]]
    ) -> Workflow:
        """
        Create a new In Progress workflow from a template

        Args:
            template: Template model or raw template data
            overrides: Employee snapshot and per-instance choices

        Returns:
            The new workflow (not yet persisted)
        """
        template = self.coerce_template(template)
        if not isinstance(overrides, WorkflowOverrides):
            try:
                overrides = WorkflowOverrides.model_validate(overrides)
            except PydanticValidationError as e:
                raise ValidationError("Workflow details are invalid", details={"errors": _pydantic_errors(e)})

        self.validate_template(template)

        client = overrides.client or template.client
        if client is None:
            raise TemplateValidationError(
                "A client is required when the template does not define one",
                details={"template_id": template.template_id}
            )

        offboarding_details = overrides.offboarding_details
        if offboarding_details and template.type != WorkflowType.OFFBOARDING:
            logger.warning(
                "Ignoring offboarding details for a non-offboarding template",
                extra={"template_id": template.template_id}
            )
            offboarding_details = None

        task_ids = self._build_id_table(
            [task.task_id for stage in template.stages for task in stage.tasks],
            generate_task_id
        )
        stage_ids = self._build_id_table([stage.stage_id for stage in template.stages], generate_stage_id)

        stages: List[Stage] = []
        for position, template_stage in enumerate(sorted(template.stages, key=lambda s: s.order), start=1):
            stages.append(Stage(
                stage_id=stage_ids[template_stage.stage_id],
                name=template_stage.name,
                description=template_stage.description,
                order=position,
                tasks=[
                    self._copy_task(task, task_ids, overrides)
                    for task in template_stage.tasks
                ]
            ))

        now = utc_now()
        workflow = Workflow(
            workflow_id=overrides.workflow_id or generate_workflow_id(),
            type=template.type,
            template_id=template.template_id,
            client=client.model_copy(),
            employee=overrides.employee.model_copy(),
            offboarding_details=offboarding_details,
            stages=stages,
            status=WorkflowStatus.IN_PROGRESS,
            created_at=now,
            updated_at=now,
            version=1
        )

        logger.info(
            f"Instantiated template {template.template_id} as workflow {workflow.workflow_id}",
            extra={"template_id": template.template_id, "workflow_id": workflow.workflow_id}
        )
        return workflow

    def _build_id_table(self, ids: List[str], generate) -> Dict[str, str]:
        if not self.regenerate_ids:
            return {old: old for old in ids}
        return {old: generate() for old in ids}

    def _copy_task(
        self,
        template_task: TemplateTask,
        task_ids: Dict[str, str],
        overrides: WorkflowOverrides
    ) -> Task:
        if template_task.task_id in overrides.assignments:
            assignee_id = overrides.assignments[template_task.task_id]
        else:
            assignee_id = template_task.default_assignee_id

        return Task(
            task_id=task_ids[template_task.task_id],
            name=template_task.name,
            description=template_task.description,
            department=template_task.department,
            assigned_to=self._resolve_assignee(assignee_id),
            status=TaskStatus.OPEN,
            priority=template_task.priority,
            required_date=template_task.required_date,
            due_date=overrides.due_dates.get(template_task.task_id),
            completed_at=None,
            action_type=template_task.action_type,
            comments=[],
            dependent_on=[task_ids[dep_id] for dep_id in template_task.dependent_on],
            indent=template_task.indent
        )

    def _resolve_assignee(self, user_id: Optional[str]) -> Optional[UserRef]:
        if not user_id or self.user_repo is None:
            return None
        user = self.user_repo.get_user(user_id)
        if user is None:
            logger.warning(f"Default assignee {user_id} not found; task left unassigned")
        return user
