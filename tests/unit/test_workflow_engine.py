"""WorkflowEngine.attempt_transition: accepted and refused transitions."""

from dataclasses import replace
from datetime import UTC, datetime, timedelta

import pytest

from printflow.application.services.workflow_engine import WorkflowEngine
from printflow.domain.entities import HistoryEntryEntity, TaskEntity
from printflow.domain.enums import Priority, Role, TaskStatus
from printflow.domain.exceptions import PermissionDeniedException, ValidationException

T0 = datetime(2025, 3, 1, 9, 0, 0, tzinfo=UTC)


def _task(status: TaskStatus = TaskStatus.NEW) -> TaskEntity:
    return TaskEntity(
        id="task1",
        title="Flyer",
        description="",
        client_name="Acme",
        priority=Priority.MEDIUM,
        status=status,
        created_by="u-intake",
        created_at=T0,
        updated_at=T0,
        due_date=None,
        history=(
            HistoryEntryEntity(
                id="h0", action="Task created", performed_by="u-intake", timestamp=T0
            ),
        ),
    )


@pytest.fixture
def engine() -> WorkflowEngine:
    ids = iter(f"id{n}" for n in range(100))
    return WorkflowEngine(id_factory=lambda: next(ids))


def test_accepted_transition_changes_only_status_updated_at_and_history(
    engine: WorkflowEngine,
) -> None:
    task = _task()
    now = T0 + timedelta(minutes=5)
    result = engine.attempt_transition(
        Role.INTAKE, task, TaskStatus.DESIGN, performed_by="u-intake", comment="go", now=now
    )
    assert result.previous_status is TaskStatus.NEW
    assert result.task.status is TaskStatus.DESIGN
    assert result.task.updated_at == now
    assert result.task.history == (*task.history, result.entry)
    assert replace(result.task, status=task.status, updated_at=task.updated_at, history=task.history) == task

    entry = result.entry
    assert entry.action == "Status changed from new to design"
    assert entry.from_status is TaskStatus.NEW
    assert entry.to_status is TaskStatus.DESIGN
    assert entry.performed_by == "u-intake"
    assert entry.timestamp == now
    assert entry.comment == "go"


def test_refused_transition_raises_and_leaves_task_untouched(engine: WorkflowEngine) -> None:
    task = _task()
    with pytest.raises(PermissionDeniedException) as exc_info:
        engine.attempt_transition(Role.DESIGN, task, TaskStatus.REVIEW, performed_by="u-design")
    assert exc_info.value.details["from_status"] == "new"
    assert exc_info.value.details["to_status"] == "review"
    assert task.status is TaskStatus.NEW
    assert len(task.history) == 1


def test_same_status_is_refused_even_for_management(engine: WorkflowEngine) -> None:
    with pytest.raises(PermissionDeniedException):
        engine.attempt_transition(
            Role.MANAGEMENT, _task(TaskStatus.DESIGN), TaskStatus.DESIGN, performed_by="m"
        )


def test_unknown_role_is_permission_denied(engine: WorkflowEngine) -> None:
    with pytest.raises(PermissionDeniedException):
        engine.attempt_transition("sales", _task(), TaskStatus.DESIGN, performed_by="x")


def test_unknown_status_is_validation_error(engine: WorkflowEngine) -> None:
    with pytest.raises(ValidationException):
        engine.attempt_transition(Role.INTAKE, _task(), "shipped", performed_by="x")


def test_accepts_string_role_and_status(engine: WorkflowEngine) -> None:
    result = engine.attempt_transition("intake", _task(), "design", performed_by="u")
    assert result.task.status is TaskStatus.DESIGN


def test_stale_clock_still_yields_strictly_later_stamp(engine: WorkflowEngine) -> None:
    """A 'now' earlier than the last stamp is bumped past it."""
    task = _task()
    result = engine.attempt_transition(
        Role.INTAKE, task, TaskStatus.DESIGN, performed_by="u", now=T0 - timedelta(days=1)
    )
    assert result.task.updated_at > task.updated_at
    assert result.entry.timestamp > task.history[-1].timestamp


def test_allowed_targets(engine: WorkflowEngine) -> None:
    assert engine.allowed_targets(Role.DESIGN, TaskStatus.DESIGN) == frozenset(
        {TaskStatus.REVIEW, TaskStatus.REJECTED}
    )
    assert engine.allowed_targets("production", "new") == frozenset()
