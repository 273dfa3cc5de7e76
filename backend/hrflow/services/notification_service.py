"""Notification Service - In-app notification feed"""
from typing import Any, Dict, Optional

from ..config.settings import settings
from ..repositories.notification_repo import NotificationRepository
from ..utils.logger import get_logger

logger = get_logger(__name__)


class NotificationService:
    """Read side of the notifications emitted by tasks and workflows"""

    def __init__(self, notification_repo: Optional[NotificationRepository] = None):
        self.repo = notification_repo or NotificationRepository()

    def get_feed(
        self,
        recipient_email: Optional[str] = None,
        unread_only: bool = False,
        skip: int = 0,
        limit: Optional[int] = None
    ) -> Dict[str, Any]:
        """
        Get notifications visible to a user, newest first

        Broadcast notifications (no recipient) are included for everyone.
        """
        notifications = self.repo.list_notifications(
            recipient_email=recipient_email,
            unread_only=unread_only,
            skip=skip,
            limit=limit or settings.notification_page_size
        )
        return {
            "items": notifications,
            "unread_count": self.repo.count_unread(recipient_email),
        }

    def mark_read(self, notification_id: str) -> None:
        self.repo.mark_read(notification_id)

    def mark_all_read(self, recipient_email: Optional[str] = None) -> int:
        count = self.repo.mark_all_read(recipient_email)
        logger.info(f"Marked {count} notifications as read", extra={"actor_email": recipient_email})
        return count

    def delete(self, notification_id: str) -> bool:
        return self.repo.delete_notification(notification_id)
