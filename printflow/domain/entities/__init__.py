"""Domain entities (frozen dataclasses; no infrastructure dependencies)."""

from printflow.domain.entities.notification import NotificationEntity
from printflow.domain.entities.task import CommentEntity, HistoryEntryEntity, TaskEntity
from printflow.domain.entities.user import Actor, DirectoryUser

__all__ = [
    "Actor",
    "CommentEntity",
    "DirectoryUser",
    "HistoryEntryEntity",
    "NotificationEntity",
    "TaskEntity",
]
