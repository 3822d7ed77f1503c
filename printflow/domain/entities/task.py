"""Task domain entity with its embedded comments and audit trail.

A task owns its comments and history (same lifetime, stored in the same
document). Both sequences are append-only: entities are frozen and every
mutation produces a new TaskEntity via dataclasses.replace.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from printflow.domain.enums import Priority, TaskStatus


@dataclass(frozen=True)
class CommentEntity:
    """A comment on a task. Immutable once created."""

    id: str
    text: str
    created_by: str
    created_at: datetime


@dataclass(frozen=True)
class HistoryEntryEntity:
    """One audit record of a task mutation. Immutable."""

    id: str
    action: str
    performed_by: str
    timestamp: datetime
    from_status: TaskStatus | None = None
    to_status: TaskStatus | None = None
    comment: str | None = None

    @property
    def is_transition(self) -> bool:
        """True when this entry records a status change."""
        return self.to_status is not None


@dataclass(frozen=True)
class TaskEntity:
    """A unit of print work progressing through organizational stages."""

    id: str
    title: str
    description: str
    client_name: str
    priority: Priority
    status: TaskStatus
    created_by: str
    created_at: datetime
    updated_at: datetime
    due_date: datetime | None
    assigned_to: str | None = None
    attachments: tuple[str, ...] = ()
    comments: tuple[CommentEntity, ...] = field(default=())
    history: tuple[HistoryEntryEntity, ...] = field(default=())

    @property
    def last_stamp(self) -> datetime:
        """Latest timestamp recorded on this task (updated_at or newest history entry).

        New stamps must be strictly later than this to keep updated_at and
        the history monotonic.
        """
        if self.history and self.history[-1].timestamp > self.updated_at:
            return self.history[-1].timestamp
        return self.updated_at

    def history_in_insertion_order(self) -> list[HistoryEntryEntity]:
        """History as appended (activity feed order)."""
        return list(self.history)

    def history_in_timestamp_order(self) -> list[HistoryEntryEntity]:
        """History sorted by timestamp; ties keep insertion order (stable sort)."""
        return sorted(self.history, key=lambda entry: entry.timestamp)

    def transitions(self) -> list[HistoryEntryEntity]:
        """Only the status-change entries, in insertion order."""
        return [entry for entry in self.history if entry.is_transition]
