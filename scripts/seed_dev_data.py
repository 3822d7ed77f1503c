"""Seed dev data from scripts/seed-data.json into the configured document store.

Loads directory users (users/{uid}, upserted) and a few sample tasks created
through TaskService as their intake author, so history and timestamps are
exactly what the API would have written.

Usage:
    python -m scripts.seed_dev_data [path/to/seed-data.json]

Default path: scripts/seed-data.json (relative to project root).
Requires: SECRET_KEY and the Firestore credentials (or DATABASE_BACKEND=memory
for a dry run).
"""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path

from dotenv import load_dotenv

from printflow.application.dtos import TaskCreate
from printflow.application.services import TaskService, WorkflowEngine
from printflow.core.config import get_settings
from printflow.domain.entities import Actor, DirectoryUser
from printflow.domain.enums import Priority, Role
from printflow.domain.exceptions import PrintflowException
from printflow.infrastructure.firebase.repositories import (
    FirestoreTaskRepository,
    FirestoreUserDirectory,
)
from printflow.infrastructure.store import build_document_client


def _project_root() -> Path:
    return Path(__file__).resolve().parent.parent


def _load_env() -> None:
    """Load .env from project root so get_settings() sees FIREBASE_* when run as script."""
    load_dotenv(_project_root() / ".env", override=True)


async def run(path: Path) -> None:
    _load_env()
    if not path.exists():
        print(f"Seed file not found: {path}", file=sys.stderr)
        sys.exit(1)
    with path.open() as f:
        data = json.load(f)
    users_data = data.get("users", [])
    tasks_data = data.get("tasks", [])

    settings = get_settings()
    client = build_document_client(settings)
    try:
        directory = FirestoreUserDirectory(client)
        users: dict[str, DirectoryUser] = {}
        for u in users_data:
            user = DirectoryUser(
                uid=u["uid"],
                role=Role(u["role"]),
                display_name=u.get("display_name", ""),
                email=u.get("email", ""),
                active=u.get("active", True),
            )
            await directory.upsert(user)
            users[user.uid] = user
            print(f"User {user.uid} ({user.role.value})")

        # Seeded tasks skip notifications: nothing has transitioned yet.
        service = TaskService(FirestoreTaskRepository(client), WorkflowEngine())
        for t in tasks_data:
            author = users.get(t["created_by"])
            if author is None:
                print(f"  Skip task {t['title']}: unknown author {t['created_by']}")
                continue
            actor = Actor(author.uid, author.role, author.display_name, author.email)
            try:
                task = await service.create_task(
                    actor,
                    TaskCreate(
                        title=t["title"],
                        client_name=t["client_name"],
                        description=t.get("description", ""),
                        priority=Priority(t.get("priority", "medium")),
                    ),
                )
            except PrintflowException as e:
                print(f"  Skip task {t['title']}: {e.message}", file=sys.stderr)
                continue
            print(f"  Task {task.title} -> {task.id}")
        await service.live.close()
    finally:
        await client.aclose()

    print("Seed completed.")


def main() -> None:
    root = _project_root()
    path_arg = sys.argv[1] if len(sys.argv) > 1 else None
    path = Path(path_arg) if path_arg else root / "scripts" / "seed-data.json"
    if not path.is_absolute():
        path = (root / path).resolve()
    asyncio.run(run(path))


if __name__ == "__main__":
    main()
