"""Thin Firestore REST API client (no firebase-admin).

Uses google-auth for service account tokens and Firestore REST v1.
All HTTP calls use httpx.AsyncClient so they do not block the event loop.

Surface (shared with the in-memory client):
    await db.collection(name).document(id).get() -> DocumentSnapshot | None
    await db.collection(name).document(id).set(data)
    await db.collection(name).document(id).update(data)
    await db.collection(name).document(id).delete()
    await db.collection(name).create(id, data)
    async for doc in db.collection(name).where(f, op, v).order_by(f, "DESCENDING").stream()
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncIterator
from typing import Any
from urllib.parse import quote, urlencode

import httpx

from printflow.infrastructure.firebase._rest_encoding import (
    _encode_value,
    decode_document,
    encode_document,
)

_FIRESTORE_SCOPE = "https://www.googleapis.com/auth/datastore"
_BASE = "https://firestore.googleapis.com/v1"

ASCENDING = "ASCENDING"
DESCENDING = "DESCENDING"


def _get_credentials(key_dict: dict):
    """Return google.oauth2.service_account.Credentials for Firestore."""
    from google.oauth2 import service_account

    return service_account.Credentials.from_service_account_info(
        key_dict, scopes=[_FIRESTORE_SCOPE]
    )


def _get_access_token(credentials) -> str:
    if not credentials.valid:
        from google.auth.transport.requests import Request

        credentials.refresh(Request())
    return credentials.token


async def _request_async(
    client: httpx.AsyncClient,
    url: str,
    method: str = "GET",
    body: dict | None = None,
    access_token: str | None = None,
) -> Any:
    """Perform async HTTP request to Firestore REST API. 404 returns None."""
    headers = {"Content-Type": "application/json"}
    if access_token:
        headers["Authorization"] = f"Bearer {access_token}"
    if method == "GET":
        resp = await client.get(url, headers=headers)
    elif method == "PATCH":
        resp = await client.patch(url, headers=headers, json=body)
    elif method == "POST":
        resp = await client.post(url, headers=headers, json=body)
    elif method == "DELETE":
        resp = await client.delete(url, headers=headers)
    else:
        raise ValueError(f"Unsupported method: {method!r}")
    if resp.status_code == 404:
        return None
    if resp.status_code == 409:
        raise DocumentExistsError("Document already exists")
    if resp.status_code not in (200, 204):
        resp.raise_for_status()
    if method == "DELETE":
        return {}
    raw = resp.content
    return json.loads(raw.decode()) if raw else {}


class DocumentExistsError(Exception):
    """Raised when createDocument returns 409 (document ID already exists)."""


class DocumentMissingError(Exception):
    """Raised when update() targets a document that does not exist."""


class DocumentReference:
    """Reference to a single document; matches firestore API style."""

    def __init__(self, client: FirestoreRESTClient, path: str):
        self._client = client
        self._path = path

    @property
    def id(self) -> str:
        return self._path.split("/")[-1]

    async def set(self, data: dict[str, Any]) -> None:
        """Create or overwrite the document (PATCH with full replace)."""
        await _request_async(
            self._client._http,
            f"{_BASE}/{self._path}",
            method="PATCH",
            body=encode_document(data),
            access_token=await self._client.get_token(),
        )

    async def update(self, data: dict[str, Any]) -> None:
        """Merge the given top-level fields into an existing document.

        Uses updateMask so untouched fields are kept, and currentDocument.exists
        so a missing document raises DocumentMissingError instead of being created.
        """
        params = [("updateMask.fieldPaths", key) for key in data]
        params.append(("currentDocument.exists", "true"))
        out = await _request_async(
            self._client._http,
            f"{_BASE}/{self._path}?{urlencode(params)}",
            method="PATCH",
            body=encode_document(data),
            access_token=await self._client.get_token(),
        )
        if out is None:
            raise DocumentMissingError(self._path)

    async def get(self) -> DocumentSnapshot | None:
        """Fetch the document; returns None if not found."""
        out = await _request_async(
            self._client._http,
            f"{_BASE}/{self._path}",
            access_token=await self._client.get_token(),
        )
        if not out:
            return None
        return DocumentSnapshot(self.id, decode_document(out.get("fields")))

    async def delete(self) -> None:
        """Delete the document. Idempotent if document is already missing (404)."""
        await _request_async(
            self._client._http,
            f"{_BASE}/{self._path}",
            method="DELETE",
            access_token=await self._client.get_token(),
        )


class DocumentSnapshot:
    """Snapshot of a document (id + data)."""

    def __init__(self, id_: str, data: dict):
        self.id = id_
        self._data = data

    def to_dict(self) -> dict:
        return self._data


_OP_MAP: dict[str, str] = {
    "==": "EQUAL",
    "!=": "NOT_EQUAL",
    "<": "LESS_THAN",
    "<=": "LESS_THAN_OR_EQUAL",
    ">": "GREATER_THAN",
    ">=": "GREATER_THAN_OR_EQUAL",
    "in": "IN",
    "not-in": "NOT_IN",
    "array_contains": "ARRAY_CONTAINS",
    "array-contains": "ARRAY_CONTAINS",
}


class _Query:
    """Fluent query builder for a collection; runs via runQuery (filters ANDed, order/offset/limit on server)."""

    def __init__(self, client: FirestoreRESTClient, parent: str, collection_id: str):
        self._client = client
        self._parent = parent
        self._collection_id = collection_id
        self._filters: list[tuple[str, str, Any]] = []
        self._orders: list[tuple[str, str]] = []
        self._offset: int = 0
        self._limit: int | None = None

    def where(self, field: str, op: str, value: Any) -> _Query:
        if op not in _OP_MAP:
            raise ValueError(f"Unsupported filter operator: {op!r}")
        self._filters.append((field, _OP_MAP[op], value))
        return self

    def order_by(self, field: str, direction: str = ASCENDING) -> _Query:
        self._orders.append((field, direction))
        return self

    def offset(self, n: int) -> _Query:
        self._offset = n
        return self

    def limit(self, n: int) -> _Query:
        self._limit = n
        return self

    def _structured_query(self) -> dict[str, Any]:
        structured: dict[str, Any] = {
            "from": [{"collectionId": self._collection_id}],
        }
        field_filters = [
            {
                "fieldFilter": {
                    "field": {"fieldPath": field},
                    "op": op,
                    "value": _encode_value(value),
                }
            }
            for field, op, value in self._filters
        ]
        if len(field_filters) == 1:
            structured["where"] = field_filters[0]
        elif field_filters:
            structured["where"] = {
                "compositeFilter": {"op": "AND", "filters": field_filters}
            }
        if self._orders:
            structured["orderBy"] = [
                {"field": {"fieldPath": field}, "direction": direction}
                for field, direction in self._orders
            ]
        if self._offset:
            structured["offset"] = self._offset
        if self._limit:
            structured["limit"] = self._limit
        return structured

    async def stream(self) -> AsyncIterator[DocumentSnapshot]:
        """Execute the query and yield document snapshots."""
        resp = await _request_async(
            self._client._http,
            f"{_BASE}/{self._parent}:runQuery",
            method="POST",
            body={"structuredQuery": self._structured_query()},
            access_token=await self._client.get_token(),
        )
        items = resp if isinstance(resp, list) else ([resp] if resp else [])
        for item in items:
            if "document" not in item:
                continue
            doc = item["document"]
            name = doc.get("name", "")
            doc_id = name.split("/")[-1] if name else ""
            yield DocumentSnapshot(doc_id, decode_document(doc.get("fields")))


class CollectionReference:
    """Reference to a collection; matches firestore API style."""

    def __init__(self, client: FirestoreRESTClient, path: str):
        self._client = client
        self._path = path.rstrip("/")

    def document(self, document_id: str) -> DocumentReference:
        return DocumentReference(self._client, f"{self._path}/{document_id}")

    async def create(self, document_id: str, data: dict[str, Any]) -> None:
        """Create a document with the given ID (fail with DocumentExistsError if it exists)."""
        url = f"{_BASE}/{self._path}?documentId={quote(document_id, safe='')}"
        await _request_async(
            self._client._http,
            url,
            method="POST",
            body=encode_document(data),
            access_token=await self._client.get_token(),
        )

    def _query(self) -> _Query:
        parent, _, collection_id = self._path.rpartition("/")
        return _Query(self._client, parent, collection_id)

    def where(self, field: str, op: str, value: Any) -> _Query:
        """Start a query with a filter. Chain .where(), .order_by(), .limit(), then .stream()."""
        return self._query().where(field, op, value)

    def order_by(self, field: str, direction: str = ASCENDING) -> _Query:
        """Start an unfiltered ordered query."""
        return self._query().order_by(field, direction)

    def stream(self) -> AsyncIterator[DocumentSnapshot]:
        """All documents in the collection."""
        return self._query().stream()


class FirestoreRESTClient:
    """Lightweight Firestore client using REST API (no firebase-admin)."""

    def __init__(
        self,
        project_id: str,
        credentials,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._project_id = project_id
        self._credentials = credentials
        self._prefix = f"projects/{project_id}/databases/(default)/documents"
        self._http = http_client if http_client is not None else httpx.AsyncClient(timeout=30.0)
        self._owns_http = http_client is None

    async def aclose(self) -> None:
        """Close the HTTP client only if we created it (do not close injected client)."""
        if self._owns_http:
            await self._http.aclose()

    async def get_token(self) -> str:
        """Return a valid access token; refreshes in thread pool to avoid blocking."""
        return await asyncio.to_thread(_get_access_token, self._credentials)

    def collection(self, collection_id: str) -> CollectionReference:
        return CollectionReference(self, f"{self._prefix}/{collection_id}")
