"""NotificationService: unread counter, idempotent mark-as-read, mark-all snapshot."""

import pytest

from printflow.application.services import NotificationService
from printflow.domain.exceptions import PermissionDeniedException, ResourceNotFoundException


async def _send(service: NotificationService, recipient: str, n: int) -> list[str]:
    ids = []
    for i in range(n):
        notification = await service.send(f"t{i}", f"m{i}", recipient_id=recipient, task_id="task1")
        ids.append(notification.id)
    return ids


async def test_send_creates_unread_notification(notification_service: NotificationService) -> None:
    notification = await notification_service.send("Hello", "World", "r1")
    assert notification.read is False
    assert notification.task_id is None
    assert await notification_service.unread_count("r1") == 1


async def test_mark_as_read_twice_is_idempotent(notification_service: NotificationService) -> None:
    [first, _] = await _send(notification_service, "r1", 2)
    await notification_service.mark_as_read(first)
    assert await notification_service.unread_count("r1") == 1
    again = await notification_service.mark_as_read(first)
    assert again.read is True
    assert await notification_service.unread_count("r1") == 1


async def test_mark_as_read_missing_is_not_found(notification_service: NotificationService) -> None:
    with pytest.raises(ResourceNotFoundException):
        await notification_service.mark_as_read("nope")


async def test_mark_as_read_for_other_recipient_is_denied(
    notification_service: NotificationService,
) -> None:
    [notification_id] = await _send(notification_service, "r1", 1)
    with pytest.raises(PermissionDeniedException):
        await notification_service.mark_as_read(notification_id, recipient_id="r2")
    assert await notification_service.unread_count("r1") == 1


async def test_mark_all_as_read_only_touches_recipient(
    notification_service: NotificationService,
) -> None:
    await _send(notification_service, "R", 3)
    await _send(notification_service, "S", 1)
    marked = await notification_service.mark_all_as_read("R")
    assert marked == 3
    assert await notification_service.unread_count("R") == 0
    assert await notification_service.unread_count("S") == 1
    assert await notification_service.mark_all_as_read("R") == 0


async def test_list_for_recipient_newest_first(notification_service: NotificationService) -> None:
    ids = await _send(notification_service, "r1", 3)
    listed = await notification_service.list_for_recipient("r1")
    assert [n.id for n in listed] == list(reversed(ids))
    await notification_service.mark_as_read(ids[0])
    unread = await notification_service.list_for_recipient("r1", unread_only=True)
    assert [n.id for n in unread] == [ids[2], ids[1]]


async def test_subscribe_tracks_unread_for_recipient(
    notification_service: NotificationService,
) -> None:
    views: list[list[bool]] = []
    sub = await notification_service.subscribe("r1", lambda ns: views.append([n.read for n in ns]))
    [notification_id] = await _send(notification_service, "r1", 1)
    await _send(notification_service, "someone-else", 1)
    await notification_service.mark_as_read(notification_id)
    await notification_service.live.wait_idle()
    assert views == [[], [False], [True]]
    await sub.unsubscribe()
