"""Document-store task repository (implements ITaskRepository).

One document per task; comments and history are embedded arrays. Document
keys are camelCase.
"""

from __future__ import annotations

from collections.abc import Collection, Iterable
from typing import TYPE_CHECKING, Any

from printflow.domain.entities import CommentEntity, HistoryEntryEntity, TaskEntity
from printflow.domain.enums import Priority, TaskStatus
from printflow.domain.exceptions import ResourceNotFoundException
from printflow.infrastructure.firebase._rest_client import DESCENDING, DocumentMissingError
from printflow.infrastructure.firebase.collections import COLLECTION_TASKS
from printflow.shared.telemetry.tracing import traced
from printflow.shared.utils import ensure_utc

if TYPE_CHECKING:
    from printflow.infrastructure.store import DocumentClient

# TaskEntity attribute -> document key
TASK_FIELD_KEYS: dict[str, str] = {
    "title": "title",
    "description": "description",
    "client_name": "clientName",
    "priority": "priority",
    "status": "status",
    "created_by": "createdBy",
    "created_at": "createdAt",
    "updated_at": "updatedAt",
    "due_date": "dueDate",
    "assigned_to": "assignedTo",
    "attachments": "attachments",
    "comments": "comments",
    "history": "history",
}


def _comment_to_dict(comment: CommentEntity) -> dict[str, Any]:
    return {
        "id": comment.id,
        "text": comment.text,
        "createdBy": comment.created_by,
        "createdAt": comment.created_at,
    }


def _history_to_dict(entry: HistoryEntryEntity) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": entry.id,
        "action": entry.action,
        "performedBy": entry.performed_by,
        "timestamp": entry.timestamp,
    }
    if entry.from_status is not None:
        data["fromStatus"] = entry.from_status.value
    if entry.to_status is not None:
        data["toStatus"] = entry.to_status.value
    if entry.comment is not None:
        data["comment"] = entry.comment
    return data


def task_to_document(task: TaskEntity) -> dict[str, Any]:
    """Full document for task (without the id, which is the document name)."""
    doc: dict[str, Any] = {
        "title": task.title,
        "description": task.description,
        "clientName": task.client_name,
        "priority": task.priority.value,
        "status": task.status.value,
        "createdBy": task.created_by,
        "createdAt": task.created_at,
        "updatedAt": task.updated_at,
        "dueDate": task.due_date,
        "attachments": list(task.attachments),
        "comments": [_comment_to_dict(c) for c in task.comments],
        "history": [_history_to_dict(h) for h in task.history],
    }
    if task.assigned_to is not None:
        doc["assignedTo"] = task.assigned_to
    return doc


def _optional_status(raw: str | None) -> TaskStatus | None:
    return TaskStatus(raw) if raw else None


def task_from_document(doc_id: str, data: dict[str, Any]) -> TaskEntity:
    return TaskEntity(
        id=doc_id,
        title=data.get("title", ""),
        description=data.get("description") or "",
        client_name=data.get("clientName", ""),
        priority=Priority(data.get("priority") or Priority.MEDIUM.value),
        status=TaskStatus(data["status"]),
        created_by=data.get("createdBy", ""),
        created_at=ensure_utc(data["createdAt"]),
        updated_at=ensure_utc(data.get("updatedAt") or data["createdAt"]),
        due_date=ensure_utc(data.get("dueDate")),
        assigned_to=data.get("assignedTo"),
        attachments=tuple(data.get("attachments") or ()),
        comments=tuple(
            CommentEntity(
                id=c["id"],
                text=c.get("text", ""),
                created_by=c.get("createdBy", ""),
                created_at=ensure_utc(c["createdAt"]),
            )
            for c in data.get("comments") or ()
        ),
        history=tuple(
            HistoryEntryEntity(
                id=h["id"],
                action=h.get("action", ""),
                performed_by=h.get("performedBy", ""),
                timestamp=ensure_utc(h["timestamp"]),
                from_status=_optional_status(h.get("fromStatus")),
                to_status=_optional_status(h.get("toStatus")),
                comment=h.get("comment"),
            )
            for h in data.get("history") or ()
        ),
    )


class FirestoreTaskRepository:
    """Task repository over the document client (Firestore or in-memory)."""

    def __init__(self, client: DocumentClient) -> None:
        self._client = client
        self._coll = client.collection(COLLECTION_TASKS)

    async def insert(self, task: TaskEntity) -> None:
        await self._coll.create(task.id, task_to_document(task))

    async def get_by_id(self, task_id: str) -> TaskEntity | None:
        doc = await self._coll.document(task_id).get()
        if not doc:
            return None
        return task_from_document(doc.id, doc.to_dict())

    @traced("task_repo.save")
    async def save(self, task: TaskEntity, fields: Iterable[str]) -> None:
        """Merge-update only the named attributes (last writer wins per field)."""
        doc = task_to_document(task)
        keys = [TASK_FIELD_KEYS[name] for name in fields]
        try:
            await self._coll.document(task.id).update({key: doc.get(key) for key in keys})
        except DocumentMissingError:
            raise ResourceNotFoundException("task", task.id) from None

    async def delete(self, task_id: str) -> None:
        await self._coll.document(task_id).delete()

    async def list_by_statuses(
        self, statuses: Collection[TaskStatus] | None = None
    ) -> list[TaskEntity]:
        """Tasks with status in statuses (all when None), newest first."""
        if statuses is None:
            query = self._coll.order_by("createdAt", DESCENDING)
        else:
            if not statuses:
                return []
            values = sorted(TaskStatus(s).value for s in statuses)
            query = self._coll.where("status", "in", values).order_by(
                "createdAt", DESCENDING
            )
        return [task_from_document(doc.id, doc.to_dict()) async for doc in query.stream()]
