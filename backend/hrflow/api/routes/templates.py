"""Template API Routes - Checklist authoring"""
from typing import Any, Dict, List, Optional
from fastapi import APIRouter, Depends, status, Query
from pydantic import BaseModel, Field

from ..deps import get_actor_dep, get_correlation_id_dep, get_template_service
from ...domain.models import ActorContext
from ...domain.enums import WorkflowType
from ...services.template_service import TemplateService

router = APIRouter()


class TemplateListResponse(BaseModel):
    """Response for template list"""
    items: List[Dict[str, Any]]
    total: int


class ValidationResult(BaseModel):
    """Validation result"""
    is_valid: bool
    errors: List[Dict[str, Any]] = Field(default_factory=list)


@router.get("", response_model=TemplateListResponse)
async def list_templates(
    type: Optional[WorkflowType] = Query(None),
    service: TemplateService = Depends(get_template_service),
    correlation_id: str = Depends(get_correlation_id_dep)
):
    templates = service.list_templates(workflow_type=type)
    return TemplateListResponse(
        items=[t.model_dump(mode="json") for t in templates],
        total=len(templates)
    )


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_template(
    payload: Dict[str, Any],
    actor: ActorContext = Depends(get_actor_dep),
    service: TemplateService = Depends(get_template_service),
    correlation_id: str = Depends(get_correlation_id_dep)
):
    """
    Create a template

    The body is validated as a whole: field errors come back as
    TEMPLATE_VALIDATION_ERROR, circular task dependencies as
    DEPENDENCY_CYCLE with the offending path.
    """
    return service.create_template(payload, actor).model_dump(mode="json")


@router.get("/{template_id}")
async def get_template(
    template_id: str,
    service: TemplateService = Depends(get_template_service),
    correlation_id: str = Depends(get_correlation_id_dep)
):
    return service.get_template(template_id).model_dump(mode="json")


@router.put("/{template_id}")
async def update_template(
    template_id: str,
    payload: Dict[str, Any],
    actor: ActorContext = Depends(get_actor_dep),
    service: TemplateService = Depends(get_template_service),
    correlation_id: str = Depends(get_correlation_id_dep)
):
    return service.update_template(template_id, payload, actor).model_dump(mode="json")


@router.delete("/{template_id}")
async def delete_template(
    template_id: str,
    actor: ActorContext = Depends(get_actor_dep),
    service: TemplateService = Depends(get_template_service),
    correlation_id: str = Depends(get_correlation_id_dep)
):
    return {"deleted": service.delete_template(template_id, actor)}


@router.post("/{template_id}/validate", response_model=ValidationResult)
async def validate_template(
    template_id: str,
    service: TemplateService = Depends(get_template_service),
    correlation_id: str = Depends(get_correlation_id_dep)
):
    """Report every structural and dependency problem without saving"""
    return ValidationResult(**service.validate_template(template_id))
