"""Template Repository - Data access for workflow templates"""
from typing import Any, Dict, List, Optional
from pymongo.collection import Collection
from pymongo import DESCENDING

from .mongo_client import get_collection, TEMPLATES
from ..domain.models import WorkflowTemplate
from ..domain.enums import WorkflowType
from ..domain.errors import TemplateNotFoundError
from ..utils.logger import get_logger

logger = get_logger(__name__)


class TemplateRepository:
    """Repository for workflow templates"""

    def __init__(self, collection: Optional[Collection] = None):
        self._templates: Collection = collection if collection is not None else get_collection(TEMPLATES)

    def list_templates(self, workflow_type: Optional[WorkflowType] = None) -> List[WorkflowTemplate]:
        query: Dict[str, Any] = {}
        if workflow_type:
            query["type"] = workflow_type.value
        templates = []
        for doc in self._templates.find(query).sort("updated_at", DESCENDING):
            doc.pop("_id", None)
            templates.append(WorkflowTemplate.model_validate(doc))
        return templates

    def get_template(self, template_id: str) -> Optional[WorkflowTemplate]:
        """Get template by ID"""
        doc = self._templates.find_one({"template_id": template_id})
        if not doc:
            return None
        doc.pop("_id", None)
        return WorkflowTemplate.model_validate(doc)

    def get_template_or_raise(self, template_id: str) -> WorkflowTemplate:
        template = self.get_template(template_id)
        if not template:
            raise TemplateNotFoundError(f"Template {template_id} not found")
        return template

    def save_template(self, template: WorkflowTemplate) -> WorkflowTemplate:
        """Insert or replace a template"""
        doc = template.model_dump(mode="json")
        doc["_id"] = template.template_id
        self._templates.replace_one({"template_id": template.template_id}, doc, upsert=True)
        logger.info(f"Saved template: {template.template_id}", extra={"template_id": template.template_id})
        return template

    def delete_template(self, template_id: str) -> bool:
        result = self._templates.delete_one({"template_id": template_id})
        if result.deleted_count:
            logger.info(f"Deleted template: {template_id}", extra={"template_id": template_id})
            return True
        return False
