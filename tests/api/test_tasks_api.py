"""Task API over the memory backend: status codes, role scoping, audit trail."""

from httpx import AsyncClient

INTAKE = ("u-intake", "intake")
DESIGN = ("u-design", "design")
MANAGER = ("u-manager", "management")
PRODUCTION = ("u-production", "production")


async def _create(client: AsyncClient, auth_headers, title: str = "Flyer") -> dict:
    response = await client.post(
        "/api/v1/tasks",
        json={"title": title, "client_name": "Acme", "priority": "high"},
        headers=auth_headers(*INTAKE),
    )
    assert response.status_code == 201, response.text
    return response.json()


async def test_requests_without_token_are_401(client: AsyncClient) -> None:
    response = await client.get("/api/v1/tasks")
    assert response.status_code == 401
    assert response.json()["error"] == "UNAUTHENTICATED"


async def test_invalid_token_is_401(client: AsyncClient) -> None:
    response = await client.get(
        "/api/v1/tasks", headers={"Authorization": "Bearer not-a-token"}
    )
    assert response.status_code == 401


async def test_unknown_role_is_403(client: AsyncClient, auth_headers) -> None:
    response = await client.get("/api/v1/tasks", headers=auth_headers("u-x", "sales"))
    assert response.status_code == 403
    assert response.json()["error"] == "PERMISSION_DENIED"


async def test_create_task_as_intake(client: AsyncClient, auth_headers) -> None:
    task = await _create(client, auth_headers)
    assert task["status"] == "new"
    assert task["created_by"] == "u-intake"
    assert task["priority"] == "high"
    assert [h["action"] for h in task["history"]] == ["Task created"]


async def test_create_task_as_design_is_403(client: AsyncClient, auth_headers) -> None:
    response = await client.post(
        "/api/v1/tasks",
        json={"title": "Flyer", "client_name": "Acme"},
        headers=auth_headers(*DESIGN),
    )
    assert response.status_code == 403


async def test_flyer_end_to_end(client: AsyncClient, auth_headers) -> None:
    task = await _create(client, auth_headers)
    url = f"/api/v1/tasks/{task['id']}/transitions"

    denied = await client.post(url, json={"status": "design"}, headers=auth_headers(*DESIGN))
    assert denied.status_code == 403

    moved = await client.post(url, json={"status": "design"}, headers=auth_headers(*INTAKE))
    assert moved.status_code == 200
    assert moved.json()["status"] == "design"
    assert len(moved.json()["history"]) == 2

    inbox = await client.get("/api/v1/notifications", headers=auth_headers(*DESIGN))
    [notification] = inbox.json()
    assert notification["task_id"] == task["id"]
    assert notification["read"] is False
    assert "Task moved to Design" in notification["message"]


async def test_list_is_scoped_by_role(client: AsyncClient, auth_headers) -> None:
    task = await _create(client, auth_headers)
    for who, expected in [(INTAKE, [task["id"]]), (DESIGN, []), (MANAGER, [task["id"]]), (PRODUCTION, [])]:
        response = await client.get("/api/v1/tasks", headers=auth_headers(*who))
        assert [t["id"] for t in response.json()] == expected, who


async def test_allowed_transitions_for_caller(client: AsyncClient, auth_headers) -> None:
    task = await _create(client, auth_headers)
    url = f"/api/v1/tasks/{task['id']}/transitions"
    intake = await client.get(url, headers=auth_headers(*INTAKE))
    assert intake.json() == {"task_id": task["id"], "status": "new", "allowed": ["design"]}
    production = await client.get(url, headers=auth_headers(*PRODUCTION))
    assert production.json()["allowed"] == []


async def test_unknown_status_is_400(client: AsyncClient, auth_headers) -> None:
    task = await _create(client, auth_headers)
    response = await client.post(
        f"/api/v1/tasks/{task['id']}/transitions",
        json={"status": "shipped"},
        headers=auth_headers(*MANAGER),
    )
    assert response.status_code == 400
    assert response.json()["error"] == "VALIDATION_ERROR"


async def test_patch_editable_fields_and_reject_status(client: AsyncClient, auth_headers) -> None:
    task = await _create(client, auth_headers)
    url = f"/api/v1/tasks/{task['id']}"
    ok = await client.patch(url, json={"description": "A5"}, headers=auth_headers(*DESIGN))
    assert ok.status_code == 200
    assert ok.json()["description"] == "A5"

    bad = await client.patch(url, json={"status": "completed"}, headers=auth_headers(*MANAGER))
    assert bad.status_code == 400
    assert bad.json()["details"] == {"field": "status"}


async def test_patch_with_stale_stamp_is_409(client: AsyncClient, auth_headers) -> None:
    task = await _create(client, auth_headers)
    url = f"/api/v1/tasks/{task['id']}"
    await client.patch(url, json={"description": "first"}, headers=auth_headers(*INTAKE))
    stale = await client.patch(
        url,
        json={"description": "second", "expected_updated_at": task["updated_at"]},
        headers=auth_headers(*INTAKE),
    )
    assert stale.status_code == 409
    assert stale.json()["error"] == "CONFLICT"


async def test_delete_permissions_and_not_found(client: AsyncClient, auth_headers) -> None:
    task = await _create(client, auth_headers)
    url = f"/api/v1/tasks/{task['id']}"
    assert (await client.delete(url, headers=auth_headers(*PRODUCTION))).status_code == 403
    assert (await client.delete(url, headers=auth_headers(*MANAGER))).status_code == 204
    assert (await client.get(url, headers=auth_headers(*MANAGER))).status_code == 404
    assert (await client.delete(url, headers=auth_headers(*MANAGER))).status_code == 404


async def test_comments_and_history_orders(client: AsyncClient, auth_headers) -> None:
    task = await _create(client, auth_headers)
    base = f"/api/v1/tasks/{task['id']}"
    commented = await client.post(
        f"{base}/comments", json={"text": "Use the blue logo"}, headers=auth_headers(*DESIGN)
    )
    assert commented.status_code == 201
    assert commented.json()["comments"][0]["text"] == "Use the blue logo"

    insertion = await client.get(f"{base}/history", headers=auth_headers(*DESIGN))
    timestamp = await client.get(
        f"{base}/history", params={"order": "timestamp"}, headers=auth_headers(*DESIGN)
    )
    assert [h["action"] for h in insertion.json()["items"]] == ["Task created", "Comment added"]
    assert timestamp.json()["order"] == "timestamp"
    assert timestamp.json()["items"] == insertion.json()["items"]

    bad_order = await client.get(
        f"{base}/history", params={"order": "random"}, headers=auth_headers(*DESIGN)
    )
    assert bad_order.status_code == 422
