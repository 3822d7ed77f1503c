"""Notification domain entity.

A per-recipient alert created by a transition fan-out (or an ad-hoc send).
The read flag is one-way: once read, a notification is never unread again.
"""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class NotificationEntity:
    """Domain entity for a notification addressed to one user."""

    id: str
    title: str
    message: str
    recipient_id: str
    created_at: datetime
    read: bool = False
    task_id: str | None = None

    def belongs_to(self, recipient_id: str) -> bool:
        """Return whether this notification is addressed to recipient_id."""
        return self.recipient_id == recipient_id
