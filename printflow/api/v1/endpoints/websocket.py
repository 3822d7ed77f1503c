"""WebSocket endpoint: live role-scoped task view and live notifications.

Requires a valid token via query param ?token=... before registering the
connection. Each connection gets two live queries (tasks visible to the
caller's role, and the caller's notifications); both are cancelled when the
socket closes.
"""

from fastapi import APIRouter, Request, WebSocket, WebSocketDisconnect

from printflow.api.websocket import ConnectionManager
from printflow.domain.entities import NotificationEntity, TaskEntity
from printflow.domain.exceptions import PrintflowException
from printflow.infrastructure.security.jwt import authenticate
from printflow.schemas.notification import NotificationResponse
from printflow.schemas.task import TaskResponse
from printflow.schemas.websocket import (
    NotificationViewMessage,
    TaskViewMessage,
    WebSocketStatusResponse,
)
from printflow.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


async def _reject_websocket(websocket: WebSocket, reason: str, code: int = 1008) -> None:
    """Accept then immediately close with code/reason so client gets a proper close frame."""
    await websocket.accept()
    await websocket.close(code=code, reason=reason)


def task_view_message(tasks: list[TaskEntity]) -> dict:
    return TaskViewMessage(
        tasks=[TaskResponse.model_validate(task) for task in tasks]
    ).model_dump(mode="json")


def notification_view_message(notifications: list[NotificationEntity]) -> dict:
    return NotificationViewMessage(
        unread_count=sum(1 for n in notifications if not n.read),
        notifications=[NotificationResponse.model_validate(n) for n in notifications],
    ).model_dump(mode="json")


@router.websocket("")
async def websocket_endpoint(websocket: WebSocket):
    """Authenticate, register, then push live views until the client disconnects.

    Client messages are ignored except "ping", answered with {"type": "pong"}.
    """
    manager: ConnectionManager = websocket.app.state.ws_manager
    services = websocket.app.state.services
    try:
        actor = authenticate(websocket.query_params.get("token"))
    except PrintflowException as e:
        await _reject_websocket(websocket, e.message)
        return

    await manager.connect(websocket, actor.uid)

    async def push_tasks(tasks: list[TaskEntity]) -> None:
        await manager.send(websocket, task_view_message(tasks))

    async def push_notifications(notifications: list[NotificationEntity]) -> None:
        await manager.send(websocket, notification_view_message(notifications))

    subscriptions = []
    try:
        subscriptions.append(
            await services.router.subscribe_for_role(actor.role, push_tasks)
        )
        subscriptions.append(
            await services.notification_service.subscribe(actor.uid, push_notifications)
        )
        while True:
            data = await websocket.receive_text()
            if data.strip() == "ping":
                await websocket.send_json({"type": "pong"})
    except WebSocketDisconnect:
        pass
    finally:
        for subscription in subscriptions:
            await subscription.unsubscribe()
        await manager.disconnect(websocket)
        logger.debug("WebSocket closed for %s", actor.uid)


@router.get("/status", response_model=WebSocketStatusResponse)
async def websocket_status(request: Request) -> WebSocketStatusResponse:
    """Number of live WebSocket connections."""
    manager: ConnectionManager = request.app.state.ws_manager
    return WebSocketStatusResponse(
        total_connections=await manager.get_connection_count()
    )
