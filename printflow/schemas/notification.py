"""Request/response schemas for the notification API."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class NotificationResponse(BaseModel):
    """Single notification (read)."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    message: str
    recipient_id: str
    task_id: str | None = None
    created_at: datetime
    read: bool


class UnreadCountResponse(BaseModel):
    unread_count: int = Field(..., ge=0)


class MarkAllReadResponse(BaseModel):
    marked: int = Field(..., ge=0, description="Notifications marked read by this call")
