"""API v1 router aggregation.

Includes all endpoint modules with consistent prefix and tags.
"""

from fastapi import APIRouter

from printflow.api.v1.endpoints import health, notifications, tasks, websocket

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
api_router.include_router(
    notifications.router, prefix="/notifications", tags=["notifications"]
)
api_router.include_router(websocket.router, prefix="/ws", tags=["websocket"])
