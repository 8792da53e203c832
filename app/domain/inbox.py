"""Pure list operations over a user's notification inbox.

The inbox is stored as a single list on the profile record, so every change
is expressed as "old list in, new list out". Callers persist the result with a
conditional write and retry on conflict.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace
from datetime import datetime, timezone

from app.domain.entities import Notification

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def find_matching(
    notifications: Sequence[Notification], type_: str, **correlation: str | None
) -> Notification | None:
    """Return the first notification of ``type_`` whose correlation fields match."""

    return next((n for n in notifications if n.matches(type_, **correlation)), None)


def has_signature(notifications: Sequence[Notification], notification: Notification) -> bool:
    signature = notification.signature()
    return any(existing.signature() == signature for existing in notifications)


def append_notification(
    notifications: Sequence[Notification],
    notification: Notification,
    *,
    dedupe: bool = False,
) -> tuple[list[Notification], bool]:
    """Return ``(inbox, appended)`` with ``notification`` added at the tail.

    Re-appending a notification whose id is already present is a no-op. With
    ``dedupe`` the append is also skipped when a notification with the same
    signature exists.
    """

    current = list(notifications)
    if any(existing.id == notification.id for existing in current):
        return current, False
    if dedupe and has_signature(current, notification):
        return current, False
    current.append(notification)
    return current, True


def remove_matching(
    notifications: Sequence[Notification], type_: str, **correlation: str | None
) -> tuple[list[Notification], int]:
    """Drop every notification of ``type_`` matching ``correlation``."""

    kept = [n for n in notifications if not n.matches(type_, **correlation)]
    return kept, len(notifications) - len(kept)


def remove_by_id(
    notifications: Sequence[Notification], notification_id: str
) -> tuple[list[Notification], bool]:
    kept = [n for n in notifications if n.id != notification_id]
    return kept, len(kept) != len(notifications)


def set_read(
    notifications: Sequence[Notification],
    notification_id: str,
    read: bool | None = None,
) -> tuple[list[Notification], bool]:
    """Mark one notification as read; ``read=None`` toggles the current value."""

    updated: list[Notification] = []
    found = False
    for notification in notifications:
        if notification.id == notification_id:
            found = True
            value = (not notification.read) if read is None else read
            notification = replace(notification, read=value)
        updated.append(notification)
    return updated, found


def mark_all_read(notifications: Sequence[Notification]) -> list[Notification]:
    return [replace(n, read=True) if not n.read else n for n in notifications]


def newest_first(notifications: Sequence[Notification]) -> list[Notification]:
    """Return the inbox sorted by creation time, newest first."""

    return sorted(
        notifications,
        key=lambda n: n.created_at or _EPOCH,
        reverse=True,
    )


def latest(notifications: Sequence[Notification]) -> Notification | None:
    """Return the most recently appended notification (the list tail)."""

    return notifications[-1] if notifications else None


def unread_count(notifications: Sequence[Notification]) -> int:
    return sum(1 for n in notifications if not n.read)


__all__ = [
    "append_notification",
    "find_matching",
    "has_signature",
    "latest",
    "mark_all_read",
    "newest_first",
    "remove_by_id",
    "remove_matching",
    "set_read",
    "unread_count",
]
