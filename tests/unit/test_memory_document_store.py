"""InMemoryDocumentClient: the Firestore client surface over dicts."""

from datetime import UTC, datetime, timedelta

import pytest

from printflow.infrastructure.firebase._rest_client import (
    DESCENDING,
    DocumentExistsError,
    DocumentMissingError,
)
from printflow.infrastructure.memory import InMemoryDocumentClient

T0 = datetime(2025, 1, 1, tzinfo=UTC)


@pytest.fixture
async def client() -> InMemoryDocumentClient:
    db = InMemoryDocumentClient()
    coll = db.collection("items")
    for n, (kind, tags) in enumerate([("a", ["x"]), ("b", ["y"]), ("a", ["x", "y"]), ("c", [])]):
        await coll.create(f"i{n}", {"kind": kind, "n": n, "tags": tags, "at": T0 + timedelta(hours=n)})
    return db


async def test_create_get_and_copy_isolation(client: InMemoryDocumentClient) -> None:
    snapshot = await client.collection("items").document("i0").get()
    assert snapshot.id == "i0"
    data = snapshot.to_dict()
    data["tags"].append("mutated")
    again = await client.collection("items").document("i0").get()
    assert again.to_dict()["tags"] == ["x"]


async def test_create_existing_raises(client: InMemoryDocumentClient) -> None:
    with pytest.raises(DocumentExistsError):
        await client.collection("items").create("i0", {})


async def test_update_merges_and_requires_existing(client: InMemoryDocumentClient) -> None:
    ref = client.collection("items").document("i1")
    await ref.update({"kind": "z"})
    assert (await ref.get()).to_dict() == {
        "kind": "z", "n": 1, "tags": ["y"], "at": T0 + timedelta(hours=1)
    }
    with pytest.raises(DocumentMissingError):
        await client.collection("items").document("missing").update({"kind": "z"})


async def test_delete_is_idempotent(client: InMemoryDocumentClient) -> None:
    ref = client.collection("items").document("i2")
    await ref.delete()
    await ref.delete()
    assert await ref.get() is None


@pytest.mark.parametrize(
    "field,op,value,expected",
    [
        ("kind", "==", "a", ["i0", "i2"]),
        ("kind", "!=", "a", ["i1", "i3"]),
        ("n", "<", 2, ["i0", "i1"]),
        ("n", ">=", 2, ["i2", "i3"]),
        ("kind", "in", ["b", "c"], ["i1", "i3"]),
        ("kind", "not-in", ["b", "c"], ["i0", "i2"]),
        ("tags", "array-contains", "y", ["i1", "i2"]),
    ],
)
async def test_where_operators(
    client: InMemoryDocumentClient, field: str, op: str, value, expected: list[str]
) -> None:
    query = client.collection("items").where(field, op, value).order_by("n")
    assert [doc.id async for doc in query.stream()] == expected


async def test_chained_where_order_desc_offset_limit(client: InMemoryDocumentClient) -> None:
    query = (
        client.collection("items")
        .where("n", ">=", 0)
        .where("kind", "!=", "c")
        .order_by("at", DESCENDING)
        .offset(1)
        .limit(1)
    )
    assert [doc.id async for doc in query.stream()] == ["i1"]


async def test_unknown_operator_rejected(client: InMemoryDocumentClient) -> None:
    with pytest.raises(ValueError):
        client.collection("items").where("n", "~=", 1)
