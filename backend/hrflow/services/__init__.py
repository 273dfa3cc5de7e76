"""Service modules - Business logic layer"""
from .workflow_service import WorkflowService
from .task_service import TaskService
from .comment_service import CommentService
from .template_service import TemplateService
from .account_service import AccountService
from .notification_service import NotificationService

__all__ = [
    "WorkflowService",
    "TaskService",
    "CommentService",
    "TemplateService",
    "AccountService",
    "NotificationService",
]
