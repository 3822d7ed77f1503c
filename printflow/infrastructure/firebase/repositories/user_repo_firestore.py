"""Document-store user directory (implements IUserDirectory).

The directory is maintained by the identity side; this repository only
reads it. Documents: users/{uid} = {role, displayName, email, active}.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from printflow.domain.entities import DirectoryUser
from printflow.domain.enums import Role
from printflow.infrastructure.firebase.collections import COLLECTION_USERS
from printflow.shared.telemetry.logging import get_logger

if TYPE_CHECKING:
    from printflow.infrastructure.store import DocumentClient

logger = get_logger(__name__)


def user_to_document(user: DirectoryUser) -> dict[str, Any]:
    return {
        "role": user.role.value,
        "displayName": user.display_name,
        "email": user.email,
        "active": user.active,
    }


def _user_from_document(doc_id: str, data: dict[str, Any]) -> DirectoryUser | None:
    try:
        role = Role(data.get("role"))
    except ValueError:
        logger.warning("User %s has unknown role %r; ignored", doc_id, data.get("role"))
        return None
    return DirectoryUser(
        uid=doc_id,
        role=role,
        display_name=data.get("displayName", ""),
        email=data.get("email", ""),
        active=bool(data.get("active", True)),
    )


class FirestoreUserDirectory:
    """Read access to the users collection."""

    def __init__(self, client: DocumentClient) -> None:
        self._client = client
        self._coll = client.collection(COLLECTION_USERS)

    async def get_by_id(self, uid: str) -> DirectoryUser | None:
        doc = await self._coll.document(uid).get()
        if not doc:
            return None
        return _user_from_document(doc.id, doc.to_dict())

    async def list_active_by_role(self, role: Role) -> list[DirectoryUser]:
        query = self._coll.where("role", "==", Role(role).value).where("active", "==", True)
        users: list[DirectoryUser] = []
        async for doc in query.stream():
            user = _user_from_document(doc.id, doc.to_dict())
            if user is not None:
                users.append(user)
        return users

    async def upsert(self, user: DirectoryUser) -> None:
        """Write a directory entry (seeding and tests)."""
        await self._coll.document(user.uid).set(user_to_document(user))
