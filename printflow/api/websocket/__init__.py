"""WebSocket connection management."""

from printflow.api.websocket.manager import ConnectionManager

__all__ = ["ConnectionManager"]
