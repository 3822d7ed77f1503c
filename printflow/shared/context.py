"""Request context management using contextvars.

Holds request-scoped data (request id, acting user) so that log records and
spans can be correlated without threading the values through every call.

Usage:
    token = set_request_id("abc123")
    ...
    reset_request_id(token)
"""

from contextvars import ContextVar, Token

_request_id: ContextVar[str | None] = ContextVar("request_id", default=None)
_actor_id: ContextVar[str | None] = ContextVar("actor_id", default=None)


def set_request_id(request_id: str | None) -> Token:
    """Set the current request id; returns a token for reset_request_id."""
    return _request_id.set(request_id)


def reset_request_id(token: Token) -> None:
    """Restore the request id that was current before set_request_id."""
    _request_id.reset(token)


def get_request_id() -> str | None:
    """Return the current request id, or None outside a request."""
    return _request_id.get()


def set_current_actor_id(uid: str | None) -> None:
    """Record the authenticated actor for the rest of this request/task."""
    _actor_id.set(uid)


def get_current_actor_id() -> str | None:
    """Return the current actor uid, or None if not authenticated."""
    return _actor_id.get()
