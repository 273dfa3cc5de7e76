"""Notification Repository - Data access for the notification bell"""
from typing import Any, Dict, List, Optional
from pymongo.collection import Collection
from pymongo import DESCENDING

from .mongo_client import get_collection, NOTIFICATIONS
from ..domain.models import Notification
from ..domain.enums import NotificationType
from ..domain.errors import NotFoundError
from ..utils.logger import get_logger
from ..utils.time import utc_now
from ..utils.idgen import generate_notification_id

logger = get_logger(__name__)


class NotificationRepository:
    """Repository for in-app notification records"""

    def __init__(self, collection: Optional[Collection] = None):
        self._collection: Collection = collection if collection is not None else get_collection(NOTIFICATIONS)

    def create_notification(
        self,
        notification_type: NotificationType,
        message: str,
        workflow_id: str,
        task_id: Optional[str] = None,
        recipient_email: Optional[str] = None
    ) -> Notification:
        """Create a new unread notification"""
        notification = Notification(
            notification_id=generate_notification_id(),
            type=notification_type,
            message=message,
            workflow_id=workflow_id,
            task_id=task_id,
            recipient_email=recipient_email.lower() if recipient_email else None,
            read=False,
            created_at=utc_now()
        )

        doc = notification.model_dump(mode="json")
        doc["_id"] = notification.notification_id
        self._collection.insert_one(doc)

        logger.info(
            f"Created {notification_type.value} notification",
            extra={"workflow_id": workflow_id, "task_id": task_id}
        )
        return notification

    def _recipient_query(self, recipient_email: Optional[str]) -> Dict[str, Any]:
        if not recipient_email:
            return {}
        # Broadcast notifications (no recipient) are visible to everyone
        return {"recipient_email": {"$in": [recipient_email.lower(), None]}}

    def list_notifications(
        self,
        recipient_email: Optional[str] = None,
        unread_only: bool = False,
        skip: int = 0,
        limit: int = 50
    ) -> List[Notification]:
        """Get notifications, newest first"""
        query = self._recipient_query(recipient_email)
        if unread_only:
            query["read"] = False

        cursor = self._collection.find(query).sort("created_at", DESCENDING).skip(skip).limit(limit)
        notifications = []
        for doc in cursor:
            doc.pop("_id", None)
            notifications.append(Notification.model_validate(doc))
        return notifications

    def count_unread(self, recipient_email: Optional[str] = None) -> int:
        query = self._recipient_query(recipient_email)
        query["read"] = False
        return self._collection.count_documents(query)

    def mark_read(self, notification_id: str) -> None:
        result = self._collection.update_one(
            {"notification_id": notification_id},
            {"$set": {"read": True}}
        )
        if result.matched_count == 0:
            raise NotFoundError(f"Notification {notification_id} not found")

    def mark_all_read(self, recipient_email: Optional[str] = None) -> int:
        query = self._recipient_query(recipient_email)
        query["read"] = False
        result = self._collection.update_many(query, {"$set": {"read": True}})
        return result.modified_count

    def delete_notification(self, notification_id: str) -> bool:
        result = self._collection.delete_one({"notification_id": notification_id})
        return bool(result.deleted_count)
