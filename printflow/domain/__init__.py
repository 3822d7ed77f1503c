"""Domain layer: entities, enums, transition table, and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from printflow.domain.entities import (
    Actor,
    CommentEntity,
    DirectoryUser,
    HistoryEntryEntity,
    NotificationEntity,
    TaskEntity,
)
from printflow.domain.enums import Priority, Role, TaskStatus
from printflow.domain.exceptions import (
    ConflictException,
    PermissionDeniedException,
    PrintflowException,
    ResourceNotFoundException,
    UnauthenticatedException,
    ValidationException,
)

__all__ = [
    # Entities
    "Actor",
    "CommentEntity",
    "DirectoryUser",
    "HistoryEntryEntity",
    "NotificationEntity",
    "TaskEntity",
    # Enums
    "Priority",
    "Role",
    "TaskStatus",
    # Exceptions
    "ConflictException",
    "PermissionDeniedException",
    "PrintflowException",
    "ResourceNotFoundException",
    "UnauthenticatedException",
    "ValidationException",
]
