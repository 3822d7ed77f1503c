"""Document-store repository implementations (Firestore REST or in-memory client)."""

from printflow.infrastructure.firebase.repositories.notification_repo_firestore import (
    FirestoreNotificationRepository,
)
from printflow.infrastructure.firebase.repositories.task_repo_firestore import (
    FirestoreTaskRepository,
)
from printflow.infrastructure.firebase.repositories.user_repo_firestore import (
    FirestoreUserDirectory,
)

__all__ = [
    "FirestoreNotificationRepository",
    "FirestoreTaskRepository",
    "FirestoreUserDirectory",
]
