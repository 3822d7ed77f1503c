"""Workflow engine: pure decision function over the transition table.

Given (role, task, requested status) the engine either returns the updated
task together with the history entry to append, or raises
PermissionDeniedException. It never touches storage.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace
from datetime import datetime

from printflow.application.dtos.task import TransitionResult
from printflow.domain.entities import HistoryEntryEntity, TaskEntity
from printflow.domain.enums import Role, TaskStatus
from printflow.domain.exceptions import PermissionDeniedException, ValidationException
from printflow.domain.transitions import TRANSITIONS, TransitionTable
from printflow.shared.utils import generate_cuid, next_timestamp


def parse_status(raw: TaskStatus | str) -> TaskStatus:
    """Return TaskStatus for raw; ValidationException for an unknown value."""
    try:
        return TaskStatus(raw)
    except ValueError:
        raise ValidationException(
            f"Unknown status: {raw!r}. Expected one of {TaskStatus.values()}",
            field="status",
        ) from None


class WorkflowEngine:
    """Validates status transitions against a (role, status) -> targets table."""

    def __init__(
        self,
        table: TransitionTable = TRANSITIONS,
        *,
        id_factory: Callable[[], str] = generate_cuid,
    ) -> None:
        self._table = table
        self._id_factory = id_factory

    def allowed_targets(
        self, role: Role | str, status: TaskStatus | str
    ) -> frozenset[TaskStatus]:
        """Statuses role may move a task to from status (empty when none)."""
        return self._table.get((Role.parse(role), parse_status(status)), frozenset())

    def attempt_transition(
        self,
        role: Role | str,
        task: TaskEntity,
        requested_status: TaskStatus | str,
        *,
        performed_by: str,
        comment: str | None = None,
        now: datetime | None = None,
    ) -> TransitionResult:
        """Apply requested_status to task if role is allowed to.

        Returns:
            TransitionResult with the updated task (status, updated_at and one
            appended history entry changed; nothing else) and the new entry.

        Raises:
            PermissionDeniedException: unknown role, same-status request, or a
                transition outside the role's allowed set. The task is untouched.
            ValidationException: requested_status is not a known status.
        """
        actor_role = Role.parse(role)
        requested = parse_status(requested_status)
        current = task.status
        if requested is current:
            raise PermissionDeniedException(
                f"Task is already in status {current.value}",
                role=actor_role.value,
                action="transition",
                from_status=current.value,
                to_status=requested.value,
            )
        if requested not in self._table.get((actor_role, current), frozenset()):
            raise PermissionDeniedException(
                f"Role {actor_role.value} cannot move a task from {current.value} to {requested.value}",
                role=actor_role.value,
                action="transition",
                from_status=current.value,
                to_status=requested.value,
            )
        if now is not None and now > task.last_stamp:
            stamp = now
        else:
            stamp = next_timestamp(task.last_stamp)
        entry = HistoryEntryEntity(
            id=self._id_factory(),
            action=f"Status changed from {current.value} to {requested.value}",
            performed_by=performed_by,
            timestamp=stamp,
            from_status=current,
            to_status=requested,
            comment=comment,
        )
        updated = replace(
            task,
            status=requested,
            updated_at=stamp,
            history=(*task.history, entry),
        )
        return TransitionResult(task=updated, entry=entry, previous_status=current)
