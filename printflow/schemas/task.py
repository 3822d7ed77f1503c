"""Request/response schemas for the task API."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from printflow.domain.enums import Priority, TaskStatus


class TaskCreateRequest(BaseModel):
    """Body for POST /tasks."""

    title: str = Field(..., min_length=1, max_length=200)
    client_name: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    priority: Priority = Priority.MEDIUM
    due_date: datetime | None = None
    assigned_to: str | None = None
    attachments: list[str] = Field(default_factory=list)


class TaskUpdateRequest(BaseModel):
    """Body for PATCH /tasks/{id}. Only the fields sent are changed.

    Unknown keys are passed through so the service can reject attempts to
    write status, history or other protected fields with a clear error.
    """

    model_config = ConfigDict(extra="allow")

    title: str | None = None
    description: str | None = None
    client_name: str | None = None
    priority: Priority | None = None
    due_date: datetime | None = None
    assigned_to: str | None = None
    attachments: list[str] | None = None
    expected_updated_at: datetime | None = Field(
        default=None,
        description="When set, the update fails with 409 if the task changed since this stamp",
    )


class TransitionRequest(BaseModel):
    """Body for POST /tasks/{id}/transitions."""

    status: str = Field(..., description="Requested status")
    comment: str | None = Field(default=None, max_length=2000)


class CommentCreateRequest(BaseModel):
    """Body for POST /tasks/{id}/comments."""

    text: str = Field(..., min_length=1, max_length=2000)


class CommentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    text: str
    created_by: str
    created_at: datetime


class HistoryEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    action: str
    performed_by: str
    timestamp: datetime
    from_status: TaskStatus | None = None
    to_status: TaskStatus | None = None
    comment: str | None = None


class TaskResponse(BaseModel):
    """Task (read), with its comments and full history."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: str
    client_name: str
    priority: Priority
    status: TaskStatus
    created_by: str
    created_at: datetime
    updated_at: datetime
    due_date: datetime | None = None
    assigned_to: str | None = None
    attachments: list[str] = Field(default_factory=list)
    comments: list[CommentResponse] = Field(default_factory=list)
    history: list[HistoryEntryResponse] = Field(default_factory=list)


class AllowedTransitionsResponse(BaseModel):
    """Statuses the caller may move the task to from its current status."""

    task_id: str
    status: TaskStatus
    allowed: list[TaskStatus]


class HistoryResponse(BaseModel):
    task_id: str
    order: Literal["insertion", "timestamp"]
    items: list[HistoryEntryResponse]
