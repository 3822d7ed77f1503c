"""Presentation-layer dependency injection (composition root).

build_services() wires repositories, the workflow engine and the services
over one document client; the lifespan stores the result on
app.state.services. Routes depend only on the getters below.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from printflow.application.services import (
    NotificationDispatcher,
    NotificationService,
    SubscriptionRouter,
    TaskService,
    WorkflowEngine,
)
from printflow.core.config import Settings
from printflow.domain.entities import Actor
from printflow.domain.exceptions import UnauthenticatedException
from printflow.infrastructure.firebase.repositories import (
    FirestoreNotificationRepository,
    FirestoreTaskRepository,
    FirestoreUserDirectory,
)
from printflow.infrastructure.security.jwt import authenticate
from printflow.infrastructure.store import DocumentClient
from printflow.shared.context import set_current_actor_id

_http_bearer = HTTPBearer(auto_error=False)


@dataclass
class Services:
    """Everything the routes need, built once per application."""

    client: DocumentClient
    user_directory: FirestoreUserDirectory
    notification_service: NotificationService
    dispatcher: NotificationDispatcher
    task_service: TaskService
    router: SubscriptionRouter

    async def close(self) -> None:
        await self.task_service.live.close()
        await self.notification_service.live.close()


def build_services(settings: Settings, client: DocumentClient) -> Services:
    """Wire the application over client (Firestore or in-memory)."""
    user_directory = FirestoreUserDirectory(client)
    notification_service = NotificationService(FirestoreNotificationRepository(client))
    dispatcher = NotificationDispatcher(
        notification_service,
        user_directory,
        max_concurrency=settings.notification_fanout_concurrency,
    )
    task_service = TaskService(
        FirestoreTaskRepository(client), WorkflowEngine(), dispatcher=dispatcher
    )
    return Services(
        client=client,
        user_directory=user_directory,
        notification_service=notification_service,
        dispatcher=dispatcher,
        task_service=task_service,
        router=SubscriptionRouter(task_service),
    )


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_task_service(
    services: Annotated[Services, Depends(get_services)],
) -> TaskService:
    return services.task_service


def get_notification_service(
    services: Annotated[Services, Depends(get_services)],
) -> NotificationService:
    return services.notification_service


def get_subscription_router(
    services: Annotated[Services, Depends(get_services)],
) -> SubscriptionRouter:
    return services.router


async def get_current_actor_optional(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_http_bearer)],
) -> Actor | None:
    """Return the actor for a valid bearer token; None when no token was sent.

    An invalid token still raises (401), and a valid token with an unknown
    role raises PermissionDeniedException (403).
    """
    if not credentials:
        return None
    actor = authenticate(credentials.credentials)
    set_current_actor_id(actor.uid)
    return actor


async def get_current_actor(
    actor: Annotated[Actor | None, Depends(get_current_actor_optional)],
) -> Actor:
    """Return the authenticated actor; raise 401 if no token was sent."""
    if actor is None:
        raise UnauthenticatedException()
    return actor


CurrentActor = Annotated[Actor, Depends(get_current_actor)]
