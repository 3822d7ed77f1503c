"""WebSocket connection manager.

Holds active connections per user and sends JSON messages to them. Use via
app.state.ws_manager (set in lifespan).
"""

from __future__ import annotations

import asyncio
from typing import Any

from fastapi import WebSocket

from printflow.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class ConnectionManager:
    """Tracks WebSocket connections by user uid.

    A user may hold several connections (tabs); each gets its own live views.
    connection_count is lock-protected for concurrent access.
    """

    def __init__(self) -> None:
        self._connections_by_user: dict[str, set[WebSocket]] = {}
        self._websocket_to_user: dict[WebSocket, str] = {}
        self._lock = asyncio.Lock()

    async def connect(self, websocket: WebSocket, uid: str) -> None:
        """Accept and register a new connection for uid."""
        await websocket.accept()
        async with self._lock:
            self._connections_by_user.setdefault(uid, set()).add(websocket)
            self._websocket_to_user[websocket] = uid

    async def disconnect(self, websocket: WebSocket) -> None:
        """Remove a connection (call on disconnect). Unknown sockets are ignored."""
        async with self._lock:
            self._forget(websocket)

    def _forget(self, websocket: WebSocket) -> None:
        uid = self._websocket_to_user.pop(websocket, None)
        if uid and uid in self._connections_by_user:
            conns = self._connections_by_user[uid]
            conns.discard(websocket)
            if not conns:
                del self._connections_by_user[uid]

    async def send(self, websocket: WebSocket, message: dict[str, Any]) -> bool:
        """Send message to one connection; drop it if the send fails.

        Returns:
            True if sent, False if the connection was dead and removed.
        """
        try:
            await websocket.send_json(message)
        except Exception:
            logger.debug("Dropping dead WebSocket connection", exc_info=True)
            async with self._lock:
                self._forget(websocket)
            return False
        return True

    async def get_connection_count(self) -> int:
        """Return the total number of active connections (lock-safe)."""
        async with self._lock:
            return sum(len(c) for c in self._connections_by_user.values())
