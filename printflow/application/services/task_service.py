"""Task use cases: create, update, delete, comment, transition, live subscribe.

Every mutation of one task runs under that task's keyed lock: read, apply,
persist, publish to live subscribers. Notification fan-out for a transition
runs after the lock is released and never fails the transition.
"""

from __future__ import annotations

from collections.abc import Collection, Mapping
from dataclasses import replace
from datetime import datetime
from typing import Any

from printflow.application.dtos.task import TaskCreate, TransitionResult
from printflow.application.interfaces.repositories import ITaskRepository
from printflow.application.services.live_query import (
    LiveQueryManager,
    Predicate,
    Subscription,
    ViewCallback,
)
from printflow.application.services.notification_dispatcher import NotificationDispatcher
from printflow.application.services.workflow_engine import WorkflowEngine
from printflow.domain.entities import Actor, CommentEntity, HistoryEntryEntity, TaskEntity
from printflow.domain.enums import Priority, Role, TaskStatus
from printflow.domain.exceptions import (
    ConflictException,
    PermissionDeniedException,
    ResourceNotFoundException,
    UnauthenticatedException,
    ValidationException,
)
from printflow.shared.keyed_lock import KeyedLock
from printflow.shared.telemetry.logging import get_logger
from printflow.shared.telemetry.tracing import add_span_attributes, traced
from printflow.shared.utils import ensure_utc, generate_cuid, next_timestamp

logger = get_logger(__name__)

EDITABLE_FIELDS = frozenset({
    "title", "description", "client_name", "priority",
    "due_date", "assigned_to", "attachments",
})
PROTECTED_FIELDS = frozenset({
    "id", "status", "history", "comments", "created_by", "created_at", "updated_at",
})
CREATE_ROLES = frozenset({Role.INTAKE})
DELETE_ROLES = frozenset({Role.INTAKE, Role.MANAGEMENT})


def task_live_query() -> LiveQueryManager[TaskEntity]:
    """Live query manager for tasks: keyed by id, newest created first."""
    return LiveQueryManager(
        key=lambda task: task.id,
        sort_key=lambda task: (task.created_at, task.id),
        descending=True,
        name="tasks",
    )


def _require_text(value: Any, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationException(f"{field} must be a non-empty string", field=field)
    return value.strip()


def _coerce_field(name: str, value: Any) -> Any:
    """Validate one editable field value and convert it to the entity type."""
    if name in ("title", "client_name"):
        return _require_text(value, name)
    if name == "description":
        if value is None:
            return ""
        if not isinstance(value, str):
            raise ValidationException("description must be a string", field=name)
        return value
    if name == "priority":
        try:
            return Priority(value)
        except ValueError:
            raise ValidationException(
                f"priority must be one of {[p.value for p in Priority]}", field=name
            ) from None
    if name == "due_date":
        if value is not None and not isinstance(value, datetime):
            raise ValidationException("due_date must be a datetime", field=name)
        return ensure_utc(value)
    if name == "assigned_to":
        if value is not None and not isinstance(value, str):
            raise ValidationException("assigned_to must be a user id", field=name)
        return value or None
    if name == "attachments":
        if value is None:
            return ()
        if isinstance(value, str) or not all(isinstance(ref, str) for ref in value):
            raise ValidationException("attachments must be a list of strings", field=name)
        return tuple(value)
    raise ValidationException(f"Field cannot be updated: {name}", field=name)


class TaskService:
    """Owns task lifecycle and the task live views."""

    def __init__(
        self,
        task_repo: ITaskRepository,
        engine: WorkflowEngine,
        *,
        dispatcher: NotificationDispatcher | None = None,
        live: LiveQueryManager[TaskEntity] | None = None,
        locks: KeyedLock | None = None,
    ) -> None:
        self.task_repo = task_repo
        self.engine = engine
        self.dispatcher = dispatcher
        self.live = live if live is not None else task_live_query()
        self._locks = locks or KeyedLock()

    @staticmethod
    def _require_actor(actor: Actor | None) -> Actor:
        if actor is None:
            raise UnauthenticatedException()
        return actor

    async def _load(self, task_id: str) -> TaskEntity:
        task = await self.task_repo.get_by_id(task_id)
        if task is None:
            raise ResourceNotFoundException("task", task_id)
        return task

    async def create_task(self, actor: Actor | None, data: TaskCreate) -> TaskEntity:
        """Create a task in status new. Intake role only."""
        actor = self._require_actor(actor)
        if actor.role not in CREATE_ROLES:
            raise PermissionDeniedException(
                "Only the intake role can create tasks",
                role=actor.role.value,
                action="create",
            )
        title = _require_text(data.title, "title")
        client_name = _require_text(data.client_name, "client_name")
        now = next_timestamp()
        task = TaskEntity(
            id=generate_cuid(),
            title=title,
            description=data.description or "",
            client_name=client_name,
            priority=_coerce_field("priority", data.priority),
            status=TaskStatus.NEW,
            created_by=actor.uid,
            created_at=now,
            updated_at=now,
            due_date=ensure_utc(data.due_date),
            assigned_to=data.assigned_to,
            attachments=tuple(data.attachments),
            history=(
                HistoryEntryEntity(
                    id=generate_cuid(),
                    action="Task created",
                    performed_by=actor.uid,
                    timestamp=now,
                ),
            ),
        )
        async with self._locks.hold(task.id):
            await self.task_repo.insert(task)
            self.live.publish(task.id, task)
        logger.info("Task created: id=%s by=%s", task.id, actor.uid)
        return task

    async def get_task(self, task_id: str) -> TaskEntity:
        return await self._load(task_id)

    async def list_tasks(
        self, statuses: Collection[TaskStatus] | None = None
    ) -> list[TaskEntity]:
        """Tasks whose status is in statuses (all when None), newest first."""
        return await self.task_repo.list_by_statuses(statuses)

    async def update_task(
        self,
        actor: Actor | None,
        task_id: str,
        changes: Mapping[str, Any],
        *,
        expected_updated_at: datetime | None = None,
    ) -> TaskEntity:
        """Merge editable fields into the task and stamp updated_at.

        Last writer wins unless expected_updated_at is given, in which case a
        stored updated_at that differs raises ConflictException.
        """
        self._require_actor(actor)
        forbidden = sorted(set(changes) & PROTECTED_FIELDS)
        if forbidden:
            raise ValidationException(
                f"Field cannot be updated directly: {forbidden[0]}", field=forbidden[0]
            )
        if not changes:
            raise ValidationException("No fields to update")
        values = {name: _coerce_field(name, value) for name, value in changes.items()}

        async with self._locks.hold(task_id):
            task = await self._load(task_id)
            if expected_updated_at is not None and ensure_utc(expected_updated_at) != task.updated_at:
                raise ConflictException(task_id)
            updated = replace(task, updated_at=next_timestamp(task.last_stamp), **values)
            await self.task_repo.save(updated, [*values, "updated_at"])
            self.live.publish(updated.id, updated)
        return updated

    async def delete_task(self, actor: Actor | None, task_id: str) -> None:
        """Hard-delete a task. Intake or management only."""
        actor = self._require_actor(actor)
        if actor.role not in DELETE_ROLES:
            raise PermissionDeniedException(
                "Only intake or management can delete tasks",
                role=actor.role.value,
                action="delete",
            )
        async with self._locks.hold(task_id):
            await self._load(task_id)
            await self.task_repo.delete(task_id)
            self.live.publish(task_id, None)
        logger.info("Task deleted: id=%s by=%s", task_id, actor.uid)

    async def add_comment(self, actor: Actor | None, task_id: str, text: str) -> TaskEntity:
        """Append a comment and a 'Comment added' history entry."""
        actor = self._require_actor(actor)
        text = _require_text(text, "text")
        async with self._locks.hold(task_id):
            task = await self._load(task_id)
            now = next_timestamp(task.last_stamp)
            comment = CommentEntity(
                id=generate_cuid(), text=text, created_by=actor.uid, created_at=now
            )
            entry = HistoryEntryEntity(
                id=generate_cuid(),
                action="Comment added",
                performed_by=actor.uid,
                timestamp=now,
                comment=text,
            )
            updated = replace(
                task,
                updated_at=now,
                comments=(*task.comments, comment),
                history=(*task.history, entry),
            )
            await self.task_repo.save(updated, ["comments", "history", "updated_at"])
            self.live.publish(updated.id, updated)
        return updated

    @traced("task.transition")
    async def transition_task(
        self,
        actor: Actor | None,
        task_id: str,
        requested_status: TaskStatus | str,
        comment: str | None = None,
    ) -> TaskEntity:
        """Move a task to requested_status if the actor's role allows it.

        Validation completes before anything is written. After the commit the
        change is published to live views and notifications are fanned out to
        the users of the next responsible role; a fan-out failure is logged
        and does not undo the transition.
        """
        actor = self._require_actor(actor)
        add_span_attributes(task_id=task_id, role=str(getattr(actor.role, "value", actor.role)))
        async with self._locks.hold(task_id):
            task = await self._load(task_id)
            result: TransitionResult = self.engine.attempt_transition(
                actor.role,
                task,
                requested_status,
                performed_by=actor.uid,
                comment=comment or None,
            )
            await self.task_repo.save(result.task, ["status", "updated_at", "history"])
            self.live.publish(result.task.id, result.task)
        logger.info(
            "Task %s: %s -> %s by %s",
            task_id,
            result.previous_status.value,
            result.task.status.value,
            actor.uid,
        )
        if self.dispatcher is not None:
            try:
                await self.dispatcher.dispatch_transition(
                    result.task, result.previous_status, result.task.status
                )
            except Exception:
                logger.exception("Notification dispatch failed for task %s", task_id)
        return result.task

    def allowed_transitions(self, actor: Actor | None, task: TaskEntity) -> list[TaskStatus]:
        """Targets the actor may move task to, in lifecycle order."""
        actor = self._require_actor(actor)
        targets = self.engine.allowed_targets(actor.role, task.status)
        return [status for status in TaskStatus if status in targets]

    async def subscribe(
        self,
        statuses: Collection[TaskStatus] | None,
        on_change: ViewCallback[TaskEntity],
        *,
        predicate: Predicate[TaskEntity] | None = None,
    ) -> Subscription[TaskEntity]:
        """Live query over tasks with status in statuses (all when None).

        on_change receives the ordered matches now and after every later
        commit that changes them. predicate, when given, replaces the status
        filter.
        """
        if predicate is None:
            wanted = frozenset(statuses) if statuses is not None else None
            predicate = lambda task: wanted is None or task.status in wanted  # noqa: E731
        return await self.live.subscribe(
            predicate,
            on_change,
            loader=lambda: self.task_repo.list_by_statuses(statuses),
        )
