"""DTOs for task use cases (no dependency on storage or presentation schemas)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from printflow.domain.entities import HistoryEntryEntity, TaskEntity
from printflow.domain.enums import Priority, TaskStatus


@dataclass(frozen=True)
class TaskCreate:
    """Input for creating a task. The service assigns id, status, timestamps and history."""

    title: str
    client_name: str
    description: str = ""
    priority: Priority = Priority.MEDIUM
    due_date: datetime | None = None
    assigned_to: str | None = None
    attachments: tuple[str, ...] = ()


@dataclass(frozen=True)
class TransitionResult:
    """Outcome of an accepted transition: the updated task and the entry appended to its history."""

    task: TaskEntity
    entry: HistoryEntryEntity
    previous_status: TaskStatus
