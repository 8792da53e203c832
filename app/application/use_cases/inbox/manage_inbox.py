"""Use cases letting a user read and tidy their own inbox."""

from __future__ import annotations

from typing import Any

from sqlalchemy.orm import Session

from app.domain import inbox
from app.domain.entities import Notification, UserAccount
from app.domain.errors import NotFoundError
from app.infrastructure.repositories import ProfileRepository


def list_notifications(
    session: Session, *, user_id: str, unread_only: bool = False
) -> list[Notification]:
    """Return the inbox of ``user_id`` newest first."""

    account = ProfileRepository(session).require(user_id)
    notifications = inbox.newest_first(account.notifications)
    if unread_only:
        notifications = [n for n in notifications if not n.read]
    return notifications


def set_notification_read(
    session: Session,
    *,
    user_id: str,
    notification_id: str,
    read: bool | None = None,
) -> Notification:
    """Set the read flag of one notification; ``read=None`` toggles it."""

    repository = ProfileRepository(session)

    def _mark(account: UserAccount) -> dict[str, Any] | None:
        updated, found = inbox.set_read(account.notifications, notification_id, read)
        if not found:
            raise NotFoundError("notification", notification_id)
        return {"notifications": updated}

    account, _ = repository.mutate(user_id, _mark)
    match = next(n for n in account.notifications if n.id == notification_id)
    return match


def mark_all_notifications_read(session: Session, *, user_id: str) -> int:
    """Mark every notification read and return how many changed."""

    repository = ProfileRepository(session)
    changed = 0

    def _mark(account: UserAccount) -> dict[str, Any] | None:
        nonlocal changed
        changed = inbox.unread_count(account.notifications)
        if not changed:
            return None
        return {"notifications": inbox.mark_all_read(account.notifications)}

    repository.mutate(user_id, _mark)
    return changed


def delete_notification(session: Session, *, user_id: str, notification_id: str) -> None:
    repository = ProfileRepository(session)

    def _delete(account: UserAccount) -> dict[str, Any] | None:
        kept, removed = inbox.remove_by_id(account.notifications, notification_id)
        if not removed:
            raise NotFoundError("notification", notification_id)
        return {"notifications": kept}

    repository.mutate(user_id, _delete)


def clear_notifications(session: Session, *, user_id: str) -> int:
    """Empty the inbox of ``user_id`` and return how many entries were dropped."""

    repository = ProfileRepository(session)
    cleared = 0

    def _clear(account: UserAccount) -> dict[str, Any] | None:
        nonlocal cleared
        cleared = len(account.notifications)
        return {"notifications": []} if cleared else None

    repository.mutate(user_id, _clear)
    return cleared
