"""Notification fan-out on accepted transitions.

The new status decides which role is responsible next; every active user of
that role gets exactly one notification. Writes run concurrently under a
semaphore and each failure is logged on its own.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

from printflow.application.interfaces.repositories import IUserDirectory
from printflow.application.services.notification_service import NotificationService
from printflow.domain.entities import DirectoryUser, NotificationEntity, TaskEntity
from printflow.domain.enums import Role, TaskStatus
from printflow.shared.telemetry.logging import get_logger
from printflow.shared.telemetry.tracing import add_span_attributes, traced

logger = get_logger(__name__)

_RECIPIENT_ROLES: dict[TaskStatus, Role] = {
    TaskStatus.DESIGN: Role.DESIGN,
    TaskStatus.REVIEW: Role.MANAGEMENT,
    TaskStatus.APPROVED: Role.PRODUCTION,
    TaskStatus.PRODUCTION: Role.PRODUCTION,
    TaskStatus.REJECTED: Role.INTAKE,
}


def recipient_role_for(status: TaskStatus) -> Role:
    """Role notified when a task enters status (management for anything unmapped)."""
    return _RECIPIENT_ROLES.get(status, Role.MANAGEMENT)


def transition_title(task: TaskEntity) -> str:
    return f"Task Status Updated: {task.title}"


def transition_message(previous: TaskStatus, new: TaskStatus) -> str:
    return f"Status changed from {previous.label} to {new.label}"


@dataclass
class DispatchReport:
    """What one fan-out did: the role targeted, notifications created, recipients that failed."""

    target_role: Role
    created: list[NotificationEntity] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


class NotificationDispatcher:
    """Creates one notification per active user of the next responsible role."""

    def __init__(
        self,
        notification_service: NotificationService,
        user_directory: IUserDirectory,
        *,
        max_concurrency: int = 8,
    ) -> None:
        self.notification_service = notification_service
        self.user_directory = user_directory
        self._max_concurrency = max(1, max_concurrency)

    @traced("notification.dispatch_transition")
    async def dispatch_transition(
        self,
        task: TaskEntity,
        previous_status: TaskStatus,
        new_status: TaskStatus,
    ) -> DispatchReport:
        """Notify the users responsible for new_status. Never raises for a failed write."""
        target_role = recipient_role_for(new_status)
        report = DispatchReport(target_role=target_role)
        try:
            recipients = await self.user_directory.list_active_by_role(target_role)
        except Exception:
            logger.exception(
                "Could not list %s users for task %s; no notifications sent",
                target_role.value,
                task.id,
            )
            return report

        title = transition_title(task)
        message = transition_message(previous_status, new_status)
        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def _send(user: DirectoryUser) -> NotificationEntity:
            async with semaphore:
                return await self.notification_service.send(
                    title, message, recipient_id=user.uid, task_id=task.id
                )

        results = await asyncio.gather(
            *(_send(user) for user in recipients), return_exceptions=True
        )
        for user, outcome in zip(recipients, results, strict=True):
            if isinstance(outcome, BaseException):
                report.failed.append(user.uid)
                logger.error(
                    "Notification to %s for task %s failed",
                    user.uid,
                    task.id,
                    exc_info=outcome,
                )
            else:
                report.created.append(outcome)
        add_span_attributes(
            target_role=target_role.value,
            created=len(report.created),
            failed=len(report.failed),
        )
        logger.info(
            "Task %s -> %s: notified %d %s users (%d failed)",
            task.id,
            new_status.value,
            len(report.created),
            target_role.value,
            len(report.failed),
        )
        return report
