"""Document store selection: Firestore REST or in-process memory.

Both clients expose the same collection/document/query surface, so the
repositories in printflow.infrastructure.firebase.repositories run on either.
"""

from __future__ import annotations

from typing import TypeAlias

from printflow.core.config import Settings
from printflow.infrastructure.firebase._rest_client import FirestoreRESTClient
from printflow.infrastructure.firebase.client import get_firestore_client, init_firebase
from printflow.infrastructure.memory.document_store import InMemoryDocumentClient

DocumentClient: TypeAlias = FirestoreRESTClient | InMemoryDocumentClient


def build_document_client(settings: Settings) -> DocumentClient:
    """Return the client for settings.database_backend.

    Raises:
        RuntimeError: Firestore selected but the client could not be initialized.
    """
    if settings.database_backend == "memory":
        return InMemoryDocumentClient()
    if not init_firebase():
        raise RuntimeError(
            "Firestore backend selected but the client could not be initialized; "
            "check FIREBASE_SERVICE_ACCOUNT_KEY / FIREBASE_SERVICE_ACCOUNT_PATH"
        )
    client = get_firestore_client()
    assert client is not None
    return client
