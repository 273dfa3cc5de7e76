"""Notifications API - In-app notification bell endpoints"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from ..deps import get_actor_dep, get_notification_service
from ...domain.models import ActorContext
from ...services.notification_service import NotificationService

router = APIRouter()


# =============================================================================
# Response Models
# =============================================================================

class NotificationResponse(BaseModel):
    """Single notification response"""
    notification_id: str
    type: str
    message: str
    workflow_id: str
    task_id: Optional[str] = None
    recipient_email: Optional[str] = None
    read: bool
    created_at: str


class NotificationListResponse(BaseModel):
    """List of notifications with metadata"""
    items: List[NotificationResponse]
    unread_count: int


class MarkReadResponse(BaseModel):
    """Response after marking notifications read"""
    success: bool
    marked_count: int


# =============================================================================
# Endpoints
# =============================================================================

@router.get("", response_model=NotificationListResponse)
async def get_notifications(
    skip: int = Query(0, ge=0),
    limit: Optional[int] = Query(None, ge=1, le=200),
    unread_only: bool = Query(False),
    actor: ActorContext = Depends(get_actor_dep),
    service: NotificationService = Depends(get_notification_service)
):
    """
    Get notifications for the acting user, newest first.

    Broadcast workflow notifications are included for everyone.
    """
    feed = service.get_feed(
        recipient_email=actor.email,
        unread_only=unread_only,
        skip=skip,
        limit=limit
    )
    return NotificationListResponse(
        items=[
            NotificationResponse(**n.model_dump(mode="json"))
            for n in feed["items"]
        ],
        unread_count=feed["unread_count"]
    )


@router.post("/read-all", response_model=MarkReadResponse)
async def mark_all_read(
    actor: ActorContext = Depends(get_actor_dep),
    service: NotificationService = Depends(get_notification_service)
):
    count = service.mark_all_read(actor.email)
    return MarkReadResponse(success=True, marked_count=count)


@router.post("/{notification_id}/read", response_model=MarkReadResponse)
async def mark_notification_read(
    notification_id: str,
    service: NotificationService = Depends(get_notification_service)
):
    service.mark_read(notification_id)
    return MarkReadResponse(success=True, marked_count=1)


@router.delete("/{notification_id}")
async def delete_notification(
    notification_id: str,
    service: NotificationService = Depends(get_notification_service)
):
    return {"deleted": service.delete(notification_id)}
