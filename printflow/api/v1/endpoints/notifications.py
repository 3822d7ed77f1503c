"""Notification API: the caller's notifications and unread counter."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from printflow.api.v1.dependencies import CurrentActor, get_notification_service
from printflow.application.services import NotificationService
from printflow.schemas.notification import (
    MarkAllReadResponse,
    NotificationResponse,
    UnreadCountResponse,
)

router = APIRouter()

NotificationServiceDep = Annotated[NotificationService, Depends(get_notification_service)]


@router.get("", response_model=list[NotificationResponse])
async def list_notifications(
    actor: CurrentActor,
    service: NotificationServiceDep,
    unread_only: Annotated[bool, Query()] = False,
):
    """Caller's notifications, newest first."""
    notifications = await service.list_for_recipient(actor.uid, unread_only=unread_only)
    return [NotificationResponse.model_validate(n) for n in notifications]


@router.get("/unread-count", response_model=UnreadCountResponse)
async def unread_count(actor: CurrentActor, service: NotificationServiceDep):
    return UnreadCountResponse(unread_count=await service.unread_count(actor.uid))


@router.post("/read-all", response_model=MarkAllReadResponse)
async def mark_all_read(actor: CurrentActor, service: NotificationServiceDep):
    """Mark every currently-unread notification of the caller as read."""
    return MarkAllReadResponse(marked=await service.mark_all_as_read(actor.uid))


@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(notification_id: str, actor: CurrentActor, service: NotificationServiceDep):
    """Mark one notification read (idempotent). 403 if it belongs to someone else."""
    notification = await service.mark_as_read(notification_id, recipient_id=actor.uid)
    return NotificationResponse.model_validate(notification)
