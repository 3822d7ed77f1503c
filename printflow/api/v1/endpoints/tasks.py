"""Task API: thin routes delegating to TaskService and SubscriptionRouter."""

from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Query, Response

from printflow.api.v1.dependencies import (
    CurrentActor,
    get_subscription_router,
    get_task_service,
)
from printflow.application.dtos import TaskCreate
from printflow.application.services import SubscriptionRouter, TaskService
from printflow.schemas.task import (
    AllowedTransitionsResponse,
    CommentCreateRequest,
    HistoryEntryResponse,
    HistoryResponse,
    TaskCreateRequest,
    TaskResponse,
    TaskUpdateRequest,
    TransitionRequest,
)

router = APIRouter()

TaskServiceDep = Annotated[TaskService, Depends(get_task_service)]


@router.get("", response_model=list[TaskResponse])
async def list_tasks(
    actor: CurrentActor,
    subscription_router: Annotated[SubscriptionRouter, Depends(get_subscription_router)],
):
    """Tasks visible to the caller's role, newest first."""
    tasks = await subscription_router.list_visible(actor)
    return [TaskResponse.model_validate(task) for task in tasks]


@router.post("", response_model=TaskResponse, status_code=201)
async def create_task(body: TaskCreateRequest, actor: CurrentActor, service: TaskServiceDep):
    """Create a task in status new (intake role only)."""
    task = await service.create_task(
        actor,
        TaskCreate(
            title=body.title,
            client_name=body.client_name,
            description=body.description,
            priority=body.priority,
            due_date=body.due_date,
            assigned_to=body.assigned_to,
            attachments=tuple(body.attachments),
        ),
    )
    return TaskResponse.model_validate(task)


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(task_id: str, actor: CurrentActor, service: TaskServiceDep):
    return TaskResponse.model_validate(await service.get_task(task_id))


@router.patch("/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: str, body: TaskUpdateRequest, actor: CurrentActor, service: TaskServiceDep
):
    """Change editable fields. Send expected_updated_at to fail on concurrent edits."""
    changes = body.model_dump(exclude_unset=True, exclude={"expected_updated_at"})
    task = await service.update_task(
        actor, task_id, changes, expected_updated_at=body.expected_updated_at
    )
    return TaskResponse.model_validate(task)


@router.delete("/{task_id}", status_code=204)
async def delete_task(task_id: str, actor: CurrentActor, service: TaskServiceDep) -> Response:
    """Hard-delete a task (intake or management)."""
    await service.delete_task(actor, task_id)
    return Response(status_code=204)


@router.post("/{task_id}/transitions", response_model=TaskResponse)
async def transition_task(
    task_id: str, body: TransitionRequest, actor: CurrentActor, service: TaskServiceDep
):
    """Move the task to body.status if the caller's role allows it (403 otherwise)."""
    task = await service.transition_task(actor, task_id, body.status, body.comment)
    return TaskResponse.model_validate(task)


@router.get("/{task_id}/transitions", response_model=AllowedTransitionsResponse)
async def allowed_transitions(task_id: str, actor: CurrentActor, service: TaskServiceDep):
    task = await service.get_task(task_id)
    return AllowedTransitionsResponse(
        task_id=task.id,
        status=task.status,
        allowed=service.allowed_transitions(actor, task),
    )


@router.post("/{task_id}/comments", response_model=TaskResponse, status_code=201)
async def add_comment(
    task_id: str, body: CommentCreateRequest, actor: CurrentActor, service: TaskServiceDep
):
    task = await service.add_comment(actor, task_id, body.text)
    return TaskResponse.model_validate(task)


@router.get("/{task_id}/history", response_model=HistoryResponse)
async def task_history(
    task_id: str,
    actor: CurrentActor,
    service: TaskServiceDep,
    order: Annotated[Literal["insertion", "timestamp"], Query()] = "insertion",
):
    """Audit trail in insertion order (activity feed) or sorted by timestamp."""
    task = await service.get_task(task_id)
    entries = (
        task.history_in_timestamp_order()
        if order == "timestamp"
        else task.history_in_insertion_order()
    )
    return HistoryResponse(
        task_id=task.id,
        order=order,
        items=[HistoryEntryResponse.model_validate(entry) for entry in entries],
    )
