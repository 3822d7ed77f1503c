"""Notifications: ad-hoc send, per-recipient listing and the unread counter."""

from __future__ import annotations

import asyncio
from dataclasses import replace

from printflow.application.interfaces.repositories import INotificationRepository
from printflow.application.services.live_query import (
    LiveQueryManager,
    Subscription,
    ViewCallback,
)
from printflow.domain.entities import NotificationEntity
from printflow.domain.exceptions import (
    PermissionDeniedException,
    ResourceNotFoundException,
)
from printflow.shared.telemetry.logging import get_logger
from printflow.shared.utils import generate_cuid, next_timestamp

logger = get_logger(__name__)


def notification_live_query() -> LiveQueryManager[NotificationEntity]:
    """Live query manager for notifications: keyed by id, newest first."""
    return LiveQueryManager(
        key=lambda notification: notification.id,
        sort_key=lambda notification: (notification.created_at, notification.id),
        descending=True,
        name="notifications",
    )


class NotificationService:
    """Creates notifications and tracks read state per recipient.

    read moves only from False to True; notifications are never deleted here.
    """

    def __init__(
        self,
        notification_repo: INotificationRepository,
        *,
        live: LiveQueryManager[NotificationEntity] | None = None,
    ) -> None:
        self.notification_repo = notification_repo
        self.live = live if live is not None else notification_live_query()

    async def send(
        self,
        title: str,
        message: str,
        recipient_id: str,
        task_id: str | None = None,
    ) -> NotificationEntity:
        """Persist one unread notification for recipient_id."""
        notification = NotificationEntity(
            id=generate_cuid(),
            title=title,
            message=message,
            recipient_id=recipient_id,
            created_at=next_timestamp(),
            read=False,
            task_id=task_id,
        )
        await self.notification_repo.insert(notification)
        self.live.publish(notification.id, notification)
        return notification

    async def list_for_recipient(
        self, recipient_id: str, *, unread_only: bool = False
    ) -> list[NotificationEntity]:
        return await self.notification_repo.list_for_recipient(
            recipient_id, unread_only=unread_only
        )

    async def unread_count(self, recipient_id: str) -> int:
        """Number of the recipient's notifications with read=False."""
        unread = await self.notification_repo.list_for_recipient(
            recipient_id, unread_only=True
        )
        return len(unread)

    async def mark_as_read(
        self, notification_id: str, *, recipient_id: str | None = None
    ) -> NotificationEntity:
        """Set read=True. Idempotent: an already-read notification is not rewritten.

        Raises:
            ResourceNotFoundException: No such notification.
            PermissionDeniedException: recipient_id given and the notification
                belongs to someone else.
        """
        notification = await self.notification_repo.get_by_id(notification_id)
        if notification is None:
            raise ResourceNotFoundException("notification", notification_id)
        if recipient_id is not None and not notification.belongs_to(recipient_id):
            raise PermissionDeniedException(
                "Notification belongs to another user",
                action="mark_read",
                notification_id=notification_id,
            )
        if notification.read:
            return notification
        await self.notification_repo.mark_read(notification_id)
        updated = replace(notification, read=True)
        self.live.publish(updated.id, updated)
        return updated

    async def mark_all_as_read(self, recipient_id: str) -> int:
        """Mark every currently-unread notification of recipient_id as read.

        Works on a snapshot: notifications created while this runs may stay
        unread. Returns the number marked.
        """
        unread = await self.notification_repo.list_for_recipient(
            recipient_id, unread_only=True
        )
        await asyncio.gather(
            *(
                self.mark_as_read(notification.id, recipient_id=recipient_id)
                for notification in unread
            )
        )
        logger.debug("Marked %d notifications read for %s", len(unread), recipient_id)
        return len(unread)

    async def subscribe(
        self, recipient_id: str, on_change: ViewCallback[NotificationEntity]
    ) -> Subscription[NotificationEntity]:
        """Live view of recipient_id's notifications, newest first."""
        return await self.live.subscribe(
            lambda notification: notification.belongs_to(recipient_id),
            on_change,
            loader=lambda: self.notification_repo.list_for_recipient(recipient_id),
        )
