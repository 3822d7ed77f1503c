"""Pytest configuration and fixtures for printflow.

Environment is set before any printflow import so Settings validate on the
in-memory backend. HTTP tests drive printflow.main.create_app() through
httpx ASGITransport with the lifespan entered explicitly; tokens are minted
with python-jose the way the identity provider signs them.
"""

import os

os.environ.setdefault("DATABASE_BACKEND", "memory")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-printflow-tests")
os.environ.setdefault("TELEMETRY_ENABLED", "false")

from datetime import UTC, datetime, timedelta  # noqa: E402

import pytest  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from jose import jwt  # noqa: E402

from printflow.application.services import (  # noqa: E402
    NotificationDispatcher,
    NotificationService,
    SubscriptionRouter,
    TaskService,
    WorkflowEngine,
)
from printflow.core.config import get_settings  # noqa: E402
from printflow.domain.entities import Actor, DirectoryUser  # noqa: E402
from printflow.domain.enums import Role  # noqa: E402
from printflow.infrastructure.firebase.repositories import (  # noqa: E402
    FirestoreNotificationRepository,
    FirestoreTaskRepository,
    FirestoreUserDirectory,
)
from printflow.infrastructure.memory import InMemoryDocumentClient  # noqa: E402
from printflow.main import create_app  # noqa: E402

DEFAULT_USERS = (
    DirectoryUser("u-intake", Role.INTAKE, "Ines Intake", "intake@example.com"),
    DirectoryUser("u-design", Role.DESIGN, "Dara Design", "design@example.com"),
    DirectoryUser("u-design-off", Role.DESIGN, "Former Designer", "old@example.com", active=False),
    DirectoryUser("u-manager", Role.MANAGEMENT, "Max Manager", "manager@example.com"),
    DirectoryUser("u-production", Role.PRODUCTION, "Pat Production", "prod@example.com"),
)


def make_token(
    uid: str,
    role: str,
    *,
    name: str = "",
    email: str = "",
    expires_in: timedelta = timedelta(hours=1),
    secret: str | None = None,
) -> str:
    """Sign a token with the identity provider's claims (sub, role, name, email)."""
    settings = get_settings()
    claims = {
        "sub": uid,
        "role": role,
        "name": name,
        "email": email,
        "exp": datetime.now(UTC) + expires_in,
    }
    key = secret or settings.secret_key.get_secret_value()
    return jwt.encode(claims, key, algorithm=settings.algorithm)


def auth_headers_for(uid: str, role: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(uid, role)}"}


@pytest.fixture
def actors() -> dict[str, Actor]:
    """One actor per role, matching DEFAULT_USERS."""
    return {
        "intake": Actor("u-intake", Role.INTAKE, "Ines Intake"),
        "design": Actor("u-design", Role.DESIGN, "Dara Design"),
        "management": Actor("u-manager", Role.MANAGEMENT, "Max Manager"),
        "production": Actor("u-production", Role.PRODUCTION, "Pat Production"),
    }


@pytest.fixture
def document_client() -> InMemoryDocumentClient:
    return InMemoryDocumentClient()


@pytest.fixture
async def user_directory(document_client: InMemoryDocumentClient) -> FirestoreUserDirectory:
    directory = FirestoreUserDirectory(document_client)
    for user in DEFAULT_USERS:
        await directory.upsert(user)
    return directory


@pytest.fixture
def notification_service(document_client: InMemoryDocumentClient) -> NotificationService:
    return NotificationService(FirestoreNotificationRepository(document_client))


@pytest.fixture
def dispatcher(
    notification_service: NotificationService,
    user_directory: FirestoreUserDirectory,
) -> NotificationDispatcher:
    return NotificationDispatcher(notification_service, user_directory, max_concurrency=4)


@pytest.fixture
async def task_service(
    document_client: InMemoryDocumentClient,
    dispatcher: NotificationDispatcher,
) -> TaskService:
    """TaskService over the in-memory store with real notification fan-out."""
    service = TaskService(
        FirestoreTaskRepository(document_client), WorkflowEngine(), dispatcher=dispatcher
    )
    yield service
    await service.live.close()


@pytest.fixture
def subscription_router(task_service: TaskService) -> SubscriptionRouter:
    return SubscriptionRouter(task_service)


@pytest.fixture
async def app() -> FastAPI:
    """Application with its lifespan running (memory backend, directory seeded)."""
    get_settings.cache_clear()
    application = create_app()
    async with application.router.lifespan_context(application):
        for user in DEFAULT_USERS:
            await application.state.services.user_directory.upsert(user)
        yield application


@pytest.fixture
async def client(app: FastAPI) -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def auth_headers():
    """Factory: auth_headers("u-intake", "intake") -> Authorization header dict."""
    return auth_headers_for


@pytest.fixture
def token_factory():
    """Factory: token_factory("u1", "design", expires_in=...) -> signed token."""
    return make_token
