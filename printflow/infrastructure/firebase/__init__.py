"""Firestore integration (REST client, encoding, repositories)."""

from printflow.infrastructure.firebase.client import (
    close_firebase,
    get_firestore_client,
    init_firebase,
)

__all__ = [
    "close_firebase",
    "get_firestore_client",
    "init_firebase",
]
