"""API Dependencies - Common dependencies for routes"""
from typing import Optional
from fastapi import Header
from pydantic import ValidationError as PydanticValidationError

from ..domain.models import ActorContext
from ..domain.errors import ValidationError
from ..services.workflow_service import WorkflowService
from ..services.task_service import TaskService
from ..services.comment_service import CommentService
from ..services.template_service import TemplateService
from ..services.account_service import AccountService
from ..services.notification_service import NotificationService
from ..utils.logger import set_correlation_id
from ..utils.idgen import generate_correlation_id

# Used when a request carries no actor headers (scripts, health probes)
SYSTEM_ACTOR = ActorContext(user_id="system", name="System", email="system@hrflow.app", is_admin=True)


async def get_correlation_id_dep(
    x_correlation_id: Optional[str] = Header(None, alias="X-Correlation-Id")
) -> str:
    """
    Get or generate correlation ID for request tracing

    If client provides X-Correlation-Id, use it.
    Otherwise generate a new one.
    """
    correlation_id = x_correlation_id or generate_correlation_id()
    set_correlation_id(correlation_id)
    return correlation_id


async def get_actor_dep(
    x_actor_id: Optional[str] = Header(None, alias="X-Actor-Id"),
    x_actor_email: Optional[str] = Header(None, alias="X-Actor-Email"),
    x_actor_name: Optional[str] = Header(None, alias="X-Actor-Name"),
    x_actor_admin: Optional[str] = Header(None, alias="X-Actor-Admin")
) -> ActorContext:
    """
    Build the acting user from advisory X-Actor-* headers

    Nothing is authenticated: the headers only label who did what in
    comments, cancellations and logs.

    Raises:
        ValidationError: If the headers are present but malformed
    """
    if not x_actor_id and not x_actor_email:
        return SYSTEM_ACTOR

    try:
        return ActorContext(
            user_id=x_actor_id or x_actor_email,
            name=x_actor_name or x_actor_email or x_actor_id,
            email=x_actor_email,
            is_admin=(x_actor_admin or "").lower() in ("1", "true", "yes")
        )
    except PydanticValidationError as e:
        raise ValidationError(
            "Invalid actor headers",
            details={"errors": [err["msg"] for err in e.errors()]}
        )


# ============================================================================
# Service factories (overridden in tests)
# ============================================================================

def get_workflow_service() -> WorkflowService:
    return WorkflowService()


def get_task_service() -> TaskService:
    return TaskService()


def get_comment_service() -> CommentService:
    return CommentService()


def get_template_service() -> TemplateService:
    return TemplateService()


def get_account_service() -> AccountService:
    return AccountService()


def get_notification_service() -> NotificationService:
    return NotificationService()
