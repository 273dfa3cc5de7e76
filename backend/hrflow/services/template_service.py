"""Template Service - Authoring of reusable onboarding/offboarding checklists"""
from typing import Any, Dict, List, Optional

from ..domain.models import ActorContext, WorkflowTemplate
from ..domain.enums import WorkflowType
from ..domain.errors import ConflictError
from ..engine.dependency_graph import find_dependency_issues
from ..engine.template_instantiator import TemplateInstantiator
from ..repositories.template_repo import TemplateRepository
from ..repositories.workflow_repo import WorkflowRepository
from ..utils.idgen import generate_template_id
from ..utils.time import utc_now
from ..utils.logger import get_logger

logger = get_logger(__name__)


class TemplateService:
    """Service for template operations"""

    def __init__(
        self,
        template_repo: Optional[TemplateRepository] = None,
        workflow_repo: Optional[WorkflowRepository] = None,
        instantiator: Optional[TemplateInstantiator] = None
    ):
        self.repo = template_repo or TemplateRepository()
        self.workflow_repo = workflow_repo or WorkflowRepository()
        self.instantiator = instantiator or TemplateInstantiator()

    def list_templates(self, workflow_type: Optional[WorkflowType] = None) -> List[WorkflowTemplate]:
        return self.repo.list_templates(workflow_type=workflow_type)

    def get_template(self, template_id: str) -> WorkflowTemplate:
        return self.repo.get_template_or_raise(template_id)

    def _build(self, data: Dict[str, Any], template_id: str, created_at=None) -> WorkflowTemplate:
        now = utc_now()
        payload = dict(data)
        payload["template_id"] = template_id
        payload["created_at"] = created_at or now
        payload["updated_at"] = now
        template = self.instantiator.coerce_template(payload)
        self.instantiator.validate_template(template)
        return template

    def create_template(self, data: Dict[str, Any], actor: ActorContext) -> WorkflowTemplate:
        """
        Validate and store a new template

        Raises:
            TemplateValidationError: Bad fields or stage layout
            DependencyCycleError: Circular task dependencies
        """
        template = self._build(data, data.get("template_id") or generate_template_id())
        template = self.repo.save_template(template)
        logger.info(
            f"Created template: {template.name}",
            extra={"template_id": template.template_id, "actor_email": actor.email}
        )
        return template

    def update_template(self, template_id: str, data: Dict[str, Any], actor: ActorContext) -> WorkflowTemplate:
        """Replace a template's content; running workflows keep their own copy"""
        existing = self.repo.get_template_or_raise(template_id)
        template = self._build(data, template_id, created_at=existing.created_at)
        template = self.repo.save_template(template)
        logger.info(
            f"Updated template: {template.name}",
            extra={"template_id": template_id, "actor_email": actor.email}
        )
        return template

    def delete_template(self, template_id: str, actor: ActorContext) -> bool:
        """
        Delete a template

        Raises:
            ConflictError: If In Progress workflows were created from it
        """
        self.repo.get_template_or_raise(template_id)
        active = self.workflow_repo.count_active_for_template(template_id)
        if active:
            raise ConflictError(
                f"Template {template_id} is used by {active} workflow(s) in progress",
                details={"template_id": template_id, "active_workflows": active}
            )
        deleted = self.repo.delete_template(template_id)
        logger.info(
            f"Deleted template {template_id}",
            extra={"template_id": template_id, "actor_email": actor.email}
        )
        return deleted

    def validate_template(self, template_id: str) -> Dict[str, Any]:
        """
        Report every problem in a stored template without raising

        Returns:
            {"is_valid": bool, "errors": [...]}
        """
        template = self.repo.get_template_or_raise(template_id)
        errors = self.instantiator.find_stage_issues(template)
        errors.extend(find_dependency_issues([task for stage in template.stages for task in stage.tasks]))
        return {"is_valid": not errors, "errors": errors}
