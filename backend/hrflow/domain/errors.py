"""Domain Errors - Centralized Exception Hierarchy"""
from typing import Any, Dict, List, Optional


class DomainError(Exception):
    """Base domain error - all errors extend this"""

    error_code: str = "DOMAIN_ERROR"
    http_status: int = 400

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        if error_code:
            self.error_code = error_code

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to API response dict"""
        return {
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details
            }
        }


# Validation Errors
class ValidationError(DomainError):
    """Input validation failed"""
    error_code = "VALIDATION_ERROR"
    http_status = 400


class TemplateValidationError(ValidationError):
    """Template stage/task data is malformed"""
    error_code = "TEMPLATE_VALIDATION_ERROR"


class DependencyCycleError(ValidationError):
    """Task dependencies form a cycle"""
    error_code = "DEPENDENCY_CYCLE"

    def __init__(self, message: str, cycle: List[str], details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details={"cycle": cycle, **(details or {})})
        self.cycle = cycle


# Not Found Errors
class NotFoundError(DomainError):
    """Resource not found"""
    error_code = "NOT_FOUND"
    http_status = 404


class WorkflowNotFoundError(NotFoundError):
    """Workflow not found"""
    error_code = "WORKFLOW_NOT_FOUND"


class TaskNotFoundError(NotFoundError):
    """Task not found in workflow"""
    error_code = "TASK_NOT_FOUND"


class CommentNotFoundError(NotFoundError):
    """Comment not found in task thread"""
    error_code = "COMMENT_NOT_FOUND"


class AccountNotFoundError(NotFoundError):
    """Employee account not found"""
    error_code = "ACCOUNT_NOT_FOUND"


class TemplateNotFoundError(NotFoundError):
    """Workflow template not found"""
    error_code = "TEMPLATE_NOT_FOUND"


class UserNotFoundError(NotFoundError):
    """Directory user not found"""
    error_code = "USER_NOT_FOUND"


# Conflict Errors
class ConflictError(DomainError):
    """Resource conflict (e.g., concurrent modification)"""
    error_code = "CONFLICT"
    http_status = 409


class ConcurrencyError(ConflictError):
    """Optimistic concurrency conflict"""
    error_code = "CONCURRENCY_CONFLICT"


class InvalidStateError(ConflictError):
    """Action not valid for current state"""
    error_code = "INVALID_STATE"


class InvalidStateTransitionError(InvalidStateError):
    """Lifecycle action on a terminal workflow, or cancel without a reason"""
    error_code = "INVALID_STATE_TRANSITION"


class TaskLockedError(InvalidStateError):
    """Task still has unfinished dependencies"""
    error_code = "TASK_LOCKED"


class AlreadyExistsError(ConflictError):
    """Resource already exists"""
    error_code = "ALREADY_EXISTS"
