"""Verification of identity-provider JWTs.

Tokens are issued by the external identity provider and signed with the
shared secret from settings. This module only verifies them and turns the
claims into an Actor: sub -> uid, role, name -> display_name, email.
"""

from typing import Any

from jose import JWTError, jwt

from printflow.core.config import get_settings
from printflow.domain.entities import Actor
from printflow.domain.enums import Role
from printflow.domain.exceptions import UnauthenticatedException


def verify_token(token: str) -> dict[str, Any]:
    """Verify and decode a JWT. Returns the payload.

    Enforces presence of exp and sub. Raises ValueError if the token is
    invalid, expired, or missing required claims.

    Args:
        token: JWT string (e.g. from Authorization header).

    Returns:
        Decoded payload dict.

    Raises:
        ValueError: If token is invalid, expired, or missing required claims.
    """
    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.secret_key.get_secret_value(),
            algorithms=[settings.algorithm],
            options={"require_exp": True, "require_sub": True},
        )
    except JWTError as e:
        raise ValueError(f"Invalid token: {e!s}") from e
    if not payload.get("sub"):
        raise ValueError("Token missing required claim: sub")
    return payload


def actor_from_claims(payload: dict[str, Any]) -> Actor:
    """Build the Actor for verified claims. Unknown role -> PermissionDeniedException."""
    return Actor(
        uid=str(payload["sub"]),
        role=Role.parse(payload.get("role")),
        display_name=payload.get("name") or "",
        email=payload.get("email") or "",
    )


def authenticate(token: str | None) -> Actor:
    """Verify token and return its Actor.

    Raises:
        UnauthenticatedException: Token missing, invalid or expired.
        PermissionDeniedException: Token valid but role is not a workflow role.
    """
    if not token:
        raise UnauthenticatedException()
    try:
        payload = verify_token(token)
    except ValueError as e:
        raise UnauthenticatedException(str(e)) from e
    return actor_from_claims(payload)
