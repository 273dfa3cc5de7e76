"""Workflow API Routes - Instances, tasks, comments and lifecycle"""
from datetime import date
from typing import Any, Dict, List, Optional
from fastapi import APIRouter, Depends, status, Query
from pydantic import BaseModel, Field, field_validator

from ..deps import (
    get_actor_dep, get_correlation_id_dep, get_workflow_service, get_task_service, get_comment_service
)
from ...domain.models import (
    ActorContext, Client, EmployeeSnapshot, OffboardingDetails, TaskOutput, Workflow
)
from ...domain.enums import TaskStatus, WorkflowStatus, WorkflowType, normalize_task_status
from ...services.workflow_service import WorkflowService
from ...services.task_service import TaskService
from ...services.comment_service import CommentService
from ...utils.logger import get_logger

logger = get_logger(__name__)
router = APIRouter()


# ============================================================================
# Request/Response Models
# ============================================================================

class StartWorkflowRequest(BaseModel):
    """Request to start a workflow from a template"""
    template_id: str
    employee: EmployeeSnapshot
    client: Optional[Client] = None
    offboarding_details: Optional[OffboardingDetails] = None
    assignments: Dict[str, Optional[str]] = Field(default_factory=dict)
    due_dates: Dict[str, date] = Field(default_factory=dict)


class WorkflowListResponse(BaseModel):
    """Response for workflow list"""
    items: List[Dict[str, Any]]
    page: int
    page_size: int
    total: int


class UpdateTaskStatusRequest(BaseModel):
    """Request to move a task to another status"""
    status: TaskStatus
    note: Optional[str] = Field(None, max_length=2000)
    output: Optional[TaskOutput] = None

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, value):
        return normalize_task_status(value)


class AssignTaskRequest(BaseModel):
    """Request to (re)assign a task; null clears the assignee"""
    user_id: Optional[str] = None


class CommentRequest(BaseModel):
    """Request to add a comment or reply"""
    text: str = Field(..., min_length=1, max_length=5000)


class CancelWorkflowRequest(BaseModel):
    """Request to cancel a workflow"""
    reason: str = Field(..., min_length=1, max_length=2000)


def _workflow_body(service: WorkflowService, workflow: Workflow) -> Dict[str, Any]:
    body = workflow.model_dump(mode="json")
    body["summary"] = service.summarize(workflow)
    return body


# ============================================================================
# Workflows
# ============================================================================

@router.post("", status_code=status.HTTP_201_CREATED)
async def start_workflow(
    request: StartWorkflowRequest,
    actor: ActorContext = Depends(get_actor_dep),
    service: WorkflowService = Depends(get_workflow_service),
    correlation_id: str = Depends(get_correlation_id_dep)
):
    """
    Start a workflow

    Copies the template's stages and tasks into a new In Progress workflow
    for the given employee.
    """
    workflow = service.start_workflow(
        request.template_id,
        request.model_dump(exclude={"template_id"}),
        actor=actor
    )
    return _workflow_body(service, workflow)


@router.get("", response_model=WorkflowListResponse)
async def list_workflows(
    status: Optional[WorkflowStatus] = Query(None),
    type: Optional[WorkflowType] = Query(None),
    assignee_id: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    service: WorkflowService = Depends(get_workflow_service),
    correlation_id: str = Depends(get_correlation_id_dep)
):
    """List workflows, most recently updated first"""
    skip = (page - 1) * page_size
    workflows = service.list_workflows(
        status=status,
        workflow_type=type,
        assignee_id=assignee_id,
        skip=skip,
        limit=page_size
    )
    return WorkflowListResponse(
        items=[_workflow_body(service, w) for w in workflows],
        page=page,
        page_size=page_size,
        total=service.count_workflows(status=status, workflow_type=type)
    )


@router.get("/my-tasks")
async def list_my_tasks(
    actor: ActorContext = Depends(get_actor_dep),
    service: TaskService = Depends(get_task_service),
    correlation_id: str = Depends(get_correlation_id_dep)
):
    """Tasks assigned to the acting user across all workflows"""
    return {"items": service.list_tasks_for_user(actor.user_id)}


@router.get("/{workflow_id}")
async def get_workflow(
    workflow_id: str,
    service: WorkflowService = Depends(get_workflow_service),
    correlation_id: str = Depends(get_correlation_id_dep)
):
    return _workflow_body(service, service.get_workflow(workflow_id))


@router.delete("/{workflow_id}")
async def delete_workflow(
    workflow_id: str,
    actor: ActorContext = Depends(get_actor_dep),
    service: WorkflowService = Depends(get_workflow_service),
    correlation_id: str = Depends(get_correlation_id_dep)
):
    return {"deleted": service.delete_workflow(workflow_id, actor)}


@router.post("/{workflow_id}/complete")
async def complete_workflow(
    workflow_id: str,
    force: bool = Query(False, description="Complete even if tasks are still open"),
    actor: ActorContext = Depends(get_actor_dep),
    service: WorkflowService = Depends(get_workflow_service),
    correlation_id: str = Depends(get_correlation_id_dep)
):
    """
    Complete a workflow

    Offboarding deactivates the employee's account; onboarding creates or
    re-activates it.
    """
    workflow = service.complete_workflow(workflow_id, actor, force=force)
    return _workflow_body(service, workflow)


@router.post("/{workflow_id}/cancel")
async def cancel_workflow(
    workflow_id: str,
    request: CancelWorkflowRequest,
    actor: ActorContext = Depends(get_actor_dep),
    service: WorkflowService = Depends(get_workflow_service),
    correlation_id: str = Depends(get_correlation_id_dep)
):
    workflow = service.cancel_workflow(workflow_id, request.reason, actor)
    return _workflow_body(service, workflow)


# ============================================================================
# Tasks
# ============================================================================

@router.get("/{workflow_id}/tasks")
async def list_tasks(
    workflow_id: str,
    service: TaskService = Depends(get_task_service),
    correlation_id: str = Depends(get_correlation_id_dep)
):
    """Flattened task sequence with availability and blocking dependencies"""
    return {"items": service.list_tasks(workflow_id)}


@router.get("/{workflow_id}/tasks/{task_id}/availability")
async def get_task_availability(
    workflow_id: str,
    task_id: str,
    service: TaskService = Depends(get_task_service),
    correlation_id: str = Depends(get_correlation_id_dep)
):
    return service.get_availability(workflow_id, task_id)


@router.post("/{workflow_id}/tasks/{task_id}/status")
async def update_task_status(
    workflow_id: str,
    task_id: str,
    request: UpdateTaskStatusRequest,
    actor: ActorContext = Depends(get_actor_dep),
    service: TaskService = Depends(get_task_service),
    correlation_id: str = Depends(get_correlation_id_dep)
):
    """
    Change a task's status

    Starting or finishing a task whose dependencies are not Done returns
    409 TASK_LOCKED.
    """
    workflow = service.update_status(
        workflow_id,
        task_id,
        request.status,
        actor,
        note=request.note,
        output=request.output
    )
    task = service.sequencer.find_task(workflow, task_id)
    return {
        "workflow_status": workflow.status.value,
        "task": service.describe_task(workflow, task),
    }


@router.post("/{workflow_id}/tasks/{task_id}/assign")
async def assign_task(
    workflow_id: str,
    task_id: str,
    request: AssignTaskRequest,
    actor: ActorContext = Depends(get_actor_dep),
    service: TaskService = Depends(get_task_service),
    correlation_id: str = Depends(get_correlation_id_dep)
):
    workflow = service.assign_task(workflow_id, task_id, request.user_id, actor)
    task = service.sequencer.find_task(workflow, task_id)
    return {"task": service.describe_task(workflow, task)}


# ============================================================================
# Comments
# ============================================================================

@router.get("/{workflow_id}/tasks/{task_id}/comments")
async def list_comments(
    workflow_id: str,
    task_id: str,
    service: CommentService = Depends(get_comment_service),
    correlation_id: str = Depends(get_correlation_id_dep)
):
    comments = service.list_comments(workflow_id, task_id)
    return {"items": [c.model_dump(mode="json") for c in comments]}


@router.post("/{workflow_id}/tasks/{task_id}/comments", status_code=status.HTTP_201_CREATED)
async def add_comment(
    workflow_id: str,
    task_id: str,
    request: CommentRequest,
    actor: ActorContext = Depends(get_actor_dep),
    service: CommentService = Depends(get_comment_service),
    correlation_id: str = Depends(get_correlation_id_dep)
):
    comment = service.add_comment(workflow_id, task_id, request.text, actor.to_comment_author())
    return comment.model_dump(mode="json")


@router.post(
    "/{workflow_id}/tasks/{task_id}/comments/{comment_id}/replies",
    status_code=status.HTTP_201_CREATED
)
async def add_reply(
    workflow_id: str,
    task_id: str,
    comment_id: str,
    request: CommentRequest,
    actor: ActorContext = Depends(get_actor_dep),
    service: CommentService = Depends(get_comment_service),
    correlation_id: str = Depends(get_correlation_id_dep)
):
    reply = service.add_reply(workflow_id, task_id, comment_id, request.text, actor.to_comment_author())
    return reply.model_dump(mode="json")
