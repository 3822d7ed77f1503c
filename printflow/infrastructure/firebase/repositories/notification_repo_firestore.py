"""Document-store notification repository (implements INotificationRepository)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from printflow.domain.entities import NotificationEntity
from printflow.domain.exceptions import ResourceNotFoundException
from printflow.infrastructure.firebase._rest_client import DESCENDING, DocumentMissingError
from printflow.infrastructure.firebase.collections import COLLECTION_NOTIFICATIONS
from printflow.shared.utils import ensure_utc

if TYPE_CHECKING:
    from printflow.infrastructure.store import DocumentClient


def notification_to_document(notification: NotificationEntity) -> dict[str, Any]:
    doc: dict[str, Any] = {
        "title": notification.title,
        "message": notification.message,
        "recipientId": notification.recipient_id,
        "createdAt": notification.created_at,
        "read": notification.read,
    }
    if notification.task_id is not None:
        doc["taskId"] = notification.task_id
    return doc


def notification_from_document(doc_id: str, data: dict[str, Any]) -> NotificationEntity:
    return NotificationEntity(
        id=doc_id,
        title=data.get("title", ""),
        message=data.get("message", ""),
        recipient_id=data["recipientId"],
        created_at=ensure_utc(data["createdAt"]),
        read=bool(data.get("read", False)),
        task_id=data.get("taskId"),
    )


class FirestoreNotificationRepository:
    """Notification repository over the document client (Firestore or in-memory)."""

    def __init__(self, client: DocumentClient) -> None:
        self._client = client
        self._coll = client.collection(COLLECTION_NOTIFICATIONS)

    async def insert(self, notification: NotificationEntity) -> None:
        await self._coll.create(notification.id, notification_to_document(notification))

    async def get_by_id(self, notification_id: str) -> NotificationEntity | None:
        doc = await self._coll.document(notification_id).get()
        if not doc:
            return None
        return notification_from_document(doc.id, doc.to_dict())

    async def mark_read(self, notification_id: str) -> None:
        try:
            await self._coll.document(notification_id).update({"read": True})
        except DocumentMissingError:
            raise ResourceNotFoundException("notification", notification_id) from None

    async def list_for_recipient(
        self, recipient_id: str, *, unread_only: bool = False
    ) -> list[NotificationEntity]:
        """Recipient's notifications, newest first."""
        query = self._coll.where("recipientId", "==", recipient_id)
        if unread_only:
            query = query.where("read", "==", False)
        query = query.order_by("createdAt", DESCENDING)
        return [
            notification_from_document(doc.id, doc.to_dict())
            async for doc in query.stream()
        ]
