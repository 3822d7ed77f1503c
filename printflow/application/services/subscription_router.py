"""Role-scoped task visibility.

Each role sees the tasks whose status falls in its working set. A live view
subscribed through the router gains a task when the task enters the role's
set and loses it when the task leaves.
"""

from __future__ import annotations

from printflow.application.services.live_query import Predicate, Subscription, ViewCallback
from printflow.application.services.task_service import TaskService
from printflow.domain.entities import Actor, TaskEntity
from printflow.domain.enums import Role, TaskStatus

VISIBLE_STATUSES: dict[Role, frozenset[TaskStatus]] = {
    Role.MANAGEMENT: frozenset(TaskStatus),
    Role.INTAKE: frozenset({TaskStatus.NEW, TaskStatus.REJECTED}),
    Role.DESIGN: frozenset({TaskStatus.DESIGN}),
    Role.PRODUCTION: frozenset(
        {TaskStatus.APPROVED, TaskStatus.PRODUCTION, TaskStatus.COMPLETED}
    ),
}


def visible_statuses(role: Role | str) -> frozenset[TaskStatus]:
    """Statuses whose tasks role may see."""
    return VISIBLE_STATUSES[Role.parse(role)]


def role_predicate(role: Role | str) -> Predicate[TaskEntity]:
    statuses = visible_statuses(role)
    return lambda task: task.status in statuses


class SubscriptionRouter:
    """Routes task listings and live views through the caller's role filter."""

    def __init__(self, task_service: TaskService) -> None:
        self.task_service = task_service

    async def list_visible(self, actor: Actor) -> list[TaskEntity]:
        return await self.task_service.list_tasks(visible_statuses(actor.role))

    async def subscribe_for_role(
        self, role: Role | str, on_change: ViewCallback[TaskEntity]
    ) -> Subscription[TaskEntity]:
        """Live view of the tasks role can see, newest first."""
        statuses = visible_statuses(role)
        return await self.task_service.subscribe(
            statuses, on_change, predicate=role_predicate(role)
        )
