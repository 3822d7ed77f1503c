"""Repository interfaces (ports) for the application layer.

Protocols define the contract the document-store backends implement. The
core issues only insert, partial merge-update, delete and filtered ordered
queries against two record kinds (task, notification), plus read-only
lookups in the user directory.
"""

from __future__ import annotations

from collections.abc import Collection, Iterable
from typing import Protocol

from printflow.domain.entities import DirectoryUser, NotificationEntity, TaskEntity
from printflow.domain.enums import Role, TaskStatus


class ITaskRepository(Protocol):
    """Protocol for task persistence (one document per task, comments and history embedded)."""

    async def insert(self, task: TaskEntity) -> None:
        """Persist a new task under task.id."""

    async def get_by_id(self, task_id: str) -> TaskEntity | None:
        """Return task by ID, or None if it does not exist."""

    async def save(self, task: TaskEntity, fields: Iterable[str]) -> None:
        """Merge-update only the named TaskEntity attributes (e.g. 'status', 'history')."""

    async def delete(self, task_id: str) -> None:
        """Delete the task document. Idempotent when already missing."""

    async def list_by_statuses(
        self, statuses: Collection[TaskStatus] | None = None
    ) -> list[TaskEntity]:
        """Return tasks whose status is in statuses (all when None), created_at descending."""


class INotificationRepository(Protocol):
    """Protocol for notification persistence."""

    async def insert(self, notification: NotificationEntity) -> None:
        """Persist a new notification under notification.id."""

    async def get_by_id(self, notification_id: str) -> NotificationEntity | None:
        """Return notification by ID, or None if it does not exist."""

    async def mark_read(self, notification_id: str) -> None:
        """Set read=true (merge-update of the single field)."""

    async def list_for_recipient(
        self, recipient_id: str, *, unread_only: bool = False
    ) -> list[NotificationEntity]:
        """Return the recipient's notifications, created_at descending."""


class IUserDirectory(Protocol):
    """Protocol for read access to the external user directory."""

    async def get_by_id(self, uid: str) -> DirectoryUser | None:
        """Return user by uid, or None."""

    async def list_active_by_role(self, role: Role) -> list[DirectoryUser]:
        """Return all active users holding role."""
