"""In-process document client with the Firestore REST client's surface.

Selected with DATABASE_BACKEND=memory for development and tests. Documents
are deep-copied on the way in and out so callers never share state with the
store. Data lives only as long as the process.
"""

from __future__ import annotations

import copy
from collections.abc import AsyncIterator, Callable
from typing import Any

from printflow.infrastructure.firebase._rest_client import (
    ASCENDING,
    DESCENDING,
    DocumentExistsError,
    DocumentMissingError,
    DocumentSnapshot,
)

_OPERATORS: dict[str, Callable[[Any, Any], bool]] = {
    "==": lambda actual, expected: actual == expected,
    "!=": lambda actual, expected: actual is not None and actual != expected,
    "<": lambda actual, expected: actual is not None and actual < expected,
    "<=": lambda actual, expected: actual is not None and actual <= expected,
    ">": lambda actual, expected: actual is not None and actual > expected,
    ">=": lambda actual, expected: actual is not None and actual >= expected,
    "in": lambda actual, expected: actual in expected,
    "not-in": lambda actual, expected: actual is not None and actual not in expected,
    "array-contains": lambda actual, expected: isinstance(actual, list) and expected in actual,
    "array_contains": lambda actual, expected: isinstance(actual, list) and expected in actual,
}


class InMemoryDocumentReference:
    def __init__(self, store: dict[str, dict[str, Any]], document_id: str) -> None:
        self._store = store
        self.id = document_id

    async def get(self) -> DocumentSnapshot | None:
        data = self._store.get(self.id)
        if data is None:
            return None
        return DocumentSnapshot(self.id, copy.deepcopy(data))

    async def set(self, data: dict[str, Any]) -> None:
        self._store[self.id] = copy.deepcopy(data)

    async def update(self, data: dict[str, Any]) -> None:
        """Merge top-level fields; DocumentMissingError when the document does not exist."""
        if self.id not in self._store:
            raise DocumentMissingError(self.id)
        self._store[self.id].update(copy.deepcopy(data))

    async def delete(self) -> None:
        self._store.pop(self.id, None)


class InMemoryQuery:
    def __init__(self, store: dict[str, dict[str, Any]]) -> None:
        self._store = store
        self._filters: list[tuple[str, Callable[[Any, Any], bool], Any]] = []
        self._orders: list[tuple[str, str]] = []
        self._offset = 0
        self._limit: int | None = None

    def where(self, field: str, op: str, value: Any) -> InMemoryQuery:
        if op not in _OPERATORS:
            raise ValueError(f"Unsupported filter operator: {op!r}")
        self._filters.append((field, _OPERATORS[op], value))
        return self

    def order_by(self, field: str, direction: str = ASCENDING) -> InMemoryQuery:
        self._orders.append((field, direction))
        return self

    def offset(self, n: int) -> InMemoryQuery:
        self._offset = n
        return self

    def limit(self, n: int) -> InMemoryQuery:
        self._limit = n
        return self

    def _matches(self, data: dict[str, Any]) -> bool:
        return all(op(data.get(field), value) for field, op, value in self._filters)

    def _run(self) -> list[tuple[str, dict[str, Any]]]:
        rows = [(doc_id, data) for doc_id, data in self._store.items() if self._matches(data)]
        # Documents missing an order_by field are excluded, as in Firestore.
        for field, _ in self._orders:
            rows = [(doc_id, data) for doc_id, data in rows if data.get(field) is not None]
        rows.sort(key=lambda row: row[0])
        for field, direction in reversed(self._orders):
            rows.sort(key=lambda row: row[1][field], reverse=direction == DESCENDING)
        rows = rows[self._offset:]
        if self._limit:
            rows = rows[: self._limit]
        return rows

    async def stream(self) -> AsyncIterator[DocumentSnapshot]:
        for doc_id, data in self._run():
            yield DocumentSnapshot(doc_id, copy.deepcopy(data))


class InMemoryCollection:
    def __init__(self, store: dict[str, dict[str, Any]]) -> None:
        self._store = store

    def document(self, document_id: str) -> InMemoryDocumentReference:
        return InMemoryDocumentReference(self._store, document_id)

    async def create(self, document_id: str, data: dict[str, Any]) -> None:
        if document_id in self._store:
            raise DocumentExistsError("Document already exists")
        self._store[document_id] = copy.deepcopy(data)

    def where(self, field: str, op: str, value: Any) -> InMemoryQuery:
        return InMemoryQuery(self._store).where(field, op, value)

    def order_by(self, field: str, direction: str = ASCENDING) -> InMemoryQuery:
        return InMemoryQuery(self._store).order_by(field, direction)

    def stream(self) -> AsyncIterator[DocumentSnapshot]:
        return InMemoryQuery(self._store).stream()


class InMemoryDocumentClient:
    """Drop-in for FirestoreRESTClient backed by nested dicts."""

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}

    def collection(self, collection_id: str) -> InMemoryCollection:
        return InMemoryCollection(self._collections.setdefault(collection_id, {}))

    async def aclose(self) -> None:
        self._collections.clear()
