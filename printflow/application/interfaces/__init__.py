"""Application ports (Protocols) implemented by infrastructure."""

from printflow.application.interfaces.repositories import (
    INotificationRepository,
    ITaskRepository,
    IUserDirectory,
)

__all__ = ["INotificationRepository", "ITaskRepository", "IUserDirectory"]
