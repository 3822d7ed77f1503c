"""WebSocket API schemas (status endpoint and pushed messages)."""

from typing import Literal

from pydantic import BaseModel, Field

from printflow.schemas.notification import NotificationResponse
from printflow.schemas.task import TaskResponse


class WebSocketStatusResponse(BaseModel):
    """Response for GET /ws/status (connection count)."""

    total_connections: int = Field(..., description="Number of active WebSocket connections")


class TaskViewMessage(BaseModel):
    """Pushed on every delivery of the caller's role-scoped task view."""

    type: Literal["tasks"] = "tasks"
    tasks: list[TaskResponse]


class NotificationViewMessage(BaseModel):
    """Pushed on every delivery of the caller's notification view."""

    type: Literal["notifications"] = "notifications"
    unread_count: int
    notifications: list[NotificationResponse]
