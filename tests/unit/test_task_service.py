"""TaskService over the in-memory store: lifecycle, audit trail, permissions."""

import asyncio
from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from printflow.application.dtos import TaskCreate
from printflow.application.services import NotificationService, TaskService, WorkflowEngine
from printflow.domain.entities import Actor
from printflow.domain.enums import Priority, TaskStatus
from printflow.domain.exceptions import (
    ConflictException,
    PermissionDeniedException,
    ResourceNotFoundException,
    UnauthenticatedException,
    ValidationException,
)
from printflow.infrastructure.firebase.repositories import FirestoreTaskRepository


def _flyer() -> TaskCreate:
    return TaskCreate(title="Flyer", client_name="Acme", priority=Priority.HIGH)


async def test_create_task_by_intake(task_service: TaskService, actors: dict[str, Actor]) -> None:
    task = await task_service.create_task(actors["intake"], _flyer())
    assert task.status is TaskStatus.NEW
    assert task.created_by == "u-intake"
    assert task.created_at == task.updated_at
    assert [h.action for h in task.history] == ["Task created"]
    stored = await task_service.get_task(task.id)
    assert stored == task


@pytest.mark.parametrize("role", ["design", "management", "production"])
async def test_create_task_requires_intake(
    task_service: TaskService, actors: dict[str, Actor], role: str
) -> None:
    with pytest.raises(PermissionDeniedException):
        await task_service.create_task(actors[role], _flyer())
    assert await task_service.list_tasks() == []


async def test_create_task_rejects_blank_title(
    task_service: TaskService, actors: dict[str, Actor]
) -> None:
    with pytest.raises(ValidationException):
        await task_service.create_task(actors["intake"], TaskCreate(title="  ", client_name="Acme"))


async def test_missing_actor_is_unauthenticated(task_service: TaskService) -> None:
    with pytest.raises(UnauthenticatedException):
        await task_service.create_task(None, _flyer())


async def test_full_lifecycle_yields_six_history_entries(
    task_service: TaskService, actors: dict[str, Actor]
) -> None:
    """new -> design -> review -> approved -> production -> completed."""
    task = await task_service.create_task(actors["intake"], _flyer())
    steps = [
        ("intake", TaskStatus.DESIGN),
        ("design", TaskStatus.REVIEW),
        ("management", TaskStatus.APPROVED),
        ("production", TaskStatus.PRODUCTION),
        ("production", TaskStatus.COMPLETED),
    ]
    stamps = [task.updated_at]
    for role, status in steps:
        task = await task_service.transition_task(actors[role], task.id, status)
        assert task.status is status
        stamps.append(task.updated_at)

    assert all(later > earlier for earlier, later in zip(stamps, stamps[1:]))
    stored = await task_service.get_task(task.id)
    assert len(stored.history) == 6
    assert [h.to_status for h in stored.transitions()] == [s for _, s in steps]
    assert stored.history[-1].to_status is TaskStatus.COMPLETED
    assert stored.history_in_timestamp_order() == stored.history_in_insertion_order()


async def test_refused_transition_leaves_store_untouched(
    task_service: TaskService, actors: dict[str, Actor]
) -> None:
    task = await task_service.create_task(actors["intake"], _flyer())
    with pytest.raises(PermissionDeniedException):
        await task_service.transition_task(actors["design"], task.id, TaskStatus.REVIEW)
    stored = await task_service.get_task(task.id)
    assert stored == task


async def test_transition_unknown_task_is_not_found(
    task_service: TaskService, actors: dict[str, Actor]
) -> None:
    with pytest.raises(ResourceNotFoundException):
        await task_service.transition_task(actors["intake"], "missing", TaskStatus.DESIGN)


async def test_management_override_completed_to_new(
    task_service: TaskService, actors: dict[str, Actor]
) -> None:
    task = await task_service.create_task(actors["intake"], _flyer())
    task = await task_service.transition_task(actors["management"], task.id, TaskStatus.COMPLETED)
    task = await task_service.transition_task(actors["management"], task.id, TaskStatus.NEW)
    assert task.status is TaskStatus.NEW
    assert len(task.history) == 3


async def test_end_to_end_flyer_notifies_active_designers(
    task_service: TaskService,
    notification_service: NotificationService,
    actors: dict[str, Actor],
) -> None:
    task = await task_service.create_task(actors["intake"], _flyer())

    with pytest.raises(PermissionDeniedException):
        await task_service.transition_task(actors["design"], task.id, TaskStatus.DESIGN)

    moved = await task_service.transition_task(actors["intake"], task.id, TaskStatus.DESIGN)
    assert moved.status is TaskStatus.DESIGN
    assert len(moved.history) == 2

    designer_inbox = await notification_service.list_for_recipient("u-design")
    assert len(designer_inbox) == 1
    notification = designer_inbox[0]
    assert notification.task_id == task.id
    assert notification.read is False
    assert notification.title == "Task Status Updated: Flyer"
    assert "Task moved to Design" in notification.message
    # inactive designer gets nothing
    assert await notification_service.list_for_recipient("u-design-off") == []


async def test_dispatch_failure_does_not_undo_transition(
    document_client, actors: dict[str, Actor]
) -> None:
    dispatcher = AsyncMock()
    dispatcher.dispatch_transition.side_effect = RuntimeError("directory down")
    service = TaskService(
        FirestoreTaskRepository(document_client), WorkflowEngine(), dispatcher=dispatcher
    )
    task = await service.create_task(actors["intake"], _flyer())
    moved = await service.transition_task(actors["intake"], task.id, TaskStatus.DESIGN)
    assert moved.status is TaskStatus.DESIGN
    assert (await service.get_task(task.id)).status is TaskStatus.DESIGN
    dispatcher.dispatch_transition.assert_awaited_once_with(
        moved, TaskStatus.NEW, TaskStatus.DESIGN
    )


async def test_update_merges_editable_fields(
    task_service: TaskService, actors: dict[str, Actor]
) -> None:
    task = await task_service.create_task(actors["intake"], _flyer())
    updated = await task_service.update_task(
        actors["management"],
        task.id,
        {"title": "Big Flyer", "priority": "low", "attachments": ["gs://bucket/a.pdf"]},
    )
    assert updated.title == "Big Flyer"
    assert updated.priority is Priority.LOW
    assert updated.attachments == ("gs://bucket/a.pdf",)
    assert updated.updated_at > task.updated_at
    assert updated.history == task.history
    assert await task_service.get_task(task.id) == updated


@pytest.mark.parametrize("field", ["status", "history", "comments", "created_by", "created_at"])
async def test_update_rejects_protected_fields(
    task_service: TaskService, actors: dict[str, Actor], field: str
) -> None:
    task = await task_service.create_task(actors["intake"], _flyer())
    with pytest.raises(ValidationException) as exc_info:
        await task_service.update_task(actors["intake"], task.id, {field: "x"})
    assert exc_info.value.details == {"field": field}
    assert await task_service.get_task(task.id) == task


async def test_update_with_stale_precondition_conflicts(
    task_service: TaskService, actors: dict[str, Actor]
) -> None:
    task = await task_service.create_task(actors["intake"], _flyer())
    await task_service.update_task(actors["intake"], task.id, {"description": "first"})
    with pytest.raises(ConflictException):
        await task_service.update_task(
            actors["intake"],
            task.id,
            {"description": "second"},
            expected_updated_at=task.updated_at,
        )
    assert (await task_service.get_task(task.id)).description == "first"


async def test_update_with_current_precondition_succeeds(
    task_service: TaskService, actors: dict[str, Actor]
) -> None:
    task = await task_service.create_task(actors["intake"], _flyer())
    updated = await task_service.update_task(
        actors["intake"],
        task.id,
        {"due_date": task.created_at + timedelta(days=3)},
        expected_updated_at=task.updated_at,
    )
    assert updated.due_date == task.created_at + timedelta(days=3)


@pytest.mark.parametrize("role", ["intake", "management"])
async def test_delete_allowed_roles(
    task_service: TaskService, actors: dict[str, Actor], role: str
) -> None:
    task = await task_service.create_task(actors["intake"], _flyer())
    await task_service.delete_task(actors[role], task.id)
    with pytest.raises(ResourceNotFoundException):
        await task_service.get_task(task.id)


@pytest.mark.parametrize("role", ["design", "production"])
async def test_delete_refused_roles(
    task_service: TaskService, actors: dict[str, Actor], role: str
) -> None:
    task = await task_service.create_task(actors["intake"], _flyer())
    with pytest.raises(PermissionDeniedException):
        await task_service.delete_task(actors[role], task.id)
    assert await task_service.get_task(task.id) == task


async def test_delete_missing_task_is_not_found(
    task_service: TaskService, actors: dict[str, Actor]
) -> None:
    with pytest.raises(ResourceNotFoundException):
        await task_service.delete_task(actors["management"], "missing")


async def test_add_comment_appends_comment_and_history(
    task_service: TaskService, actors: dict[str, Actor]
) -> None:
    task = await task_service.create_task(actors["intake"], _flyer())
    updated = await task_service.add_comment(actors["design"], task.id, "Need the logo in SVG")
    assert [c.text for c in updated.comments] == ["Need the logo in SVG"]
    assert updated.comments[0].created_by == "u-design"
    last = updated.history[-1]
    assert last.action == "Comment added"
    assert last.comment == "Need the logo in SVG"
    assert last.to_status is None
    assert last.timestamp > task.history[-1].timestamp
    assert updated.status is TaskStatus.NEW


async def test_concurrent_comments_are_not_lost(
    task_service: TaskService, actors: dict[str, Actor]
) -> None:
    task = await task_service.create_task(actors["intake"], _flyer())
    await asyncio.gather(
        *(task_service.add_comment(actors["design"], task.id, f"c{n}") for n in range(10))
    )
    stored = await task_service.get_task(task.id)
    assert len(stored.comments) == 10
    assert len(stored.history) == 11
    stamps = [h.timestamp for h in stored.history]
    assert stamps == sorted(stamps)


async def test_allowed_transitions_in_lifecycle_order(
    task_service: TaskService, actors: dict[str, Actor]
) -> None:
    task = await task_service.create_task(actors["intake"], _flyer())
    task = await task_service.transition_task(actors["intake"], task.id, TaskStatus.DESIGN)
    assert task_service.allowed_transitions(actors["design"], task) == [
        TaskStatus.REVIEW,
        TaskStatus.REJECTED,
    ]
    assert task_service.allowed_transitions(actors["production"], task) == []


async def test_list_tasks_newest_first(
    task_service: TaskService, actors: dict[str, Actor]
) -> None:
    first = await task_service.create_task(actors["intake"], _flyer())
    second = await task_service.create_task(
        actors["intake"], TaskCreate(title="Poster", client_name="Beta")
    )
    assert [t.id for t in await task_service.list_tasks()] == [second.id, first.id]
    assert [t.id for t in await task_service.list_tasks({TaskStatus.DESIGN})] == []


async def test_unknown_role_is_denied(
    task_service: TaskService, actors: dict[str, Actor]
) -> None:
    task = await task_service.create_task(actors["intake"], _flyer())
    stranger = Actor("u-x", "sales")  # type: ignore[arg-type]
    with pytest.raises(PermissionDeniedException):
        await task_service.transition_task(stranger, task.id, TaskStatus.DESIGN)
    assert (await task_service.get_task(task.id)).status is TaskStatus.NEW
