"""Repository modules - Data access layer"""
from .mongo_client import get_database, get_collection
from .workflow_repo import WorkflowRepository
from .template_repo import TemplateRepository
from .account_repo import AccountRepository
from .notification_repo import NotificationRepository
from .user_repo import UserRepository

__all__ = [
    "get_database",
    "get_collection",
    "WorkflowRepository",
    "TemplateRepository",
    "AccountRepository",
    "NotificationRepository",
    "UserRepository",
]
