"""Use cases for checking in and out of a group's patrol."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy.orm import Session

from app.domain.entities import (
    NOTIFICATION_MEMBER_CHECKED_IN,
    NOTIFICATION_MEMBER_CHECKED_OUT,
    UserAccount,
)
from app.domain.errors import PreconditionFailedError
from app.infrastructure.notifications import NotificationPublisher
from app.infrastructure.repositories import GroupRepository, ProfileRepository
from app.utils import ensure_app_timezone, now_in_app_timezone

from ..content.fanout import FanOutResult, notify_group_members

CHECK_PREFERENCE = "receive_check_notifications"


def check_in(
    session: Session,
    *,
    user_id: str,
    now: datetime | None = None,
    publisher: NotificationPublisher | None = None,
) -> FanOutResult:
    """Mark ``user_id`` as checked in and tell the rest of their group."""

    return _record_presence(
        session, user_id=user_id, checking_in=True, now=now, publisher=publisher
    )


def check_out(
    session: Session,
    *,
    user_id: str,
    now: datetime | None = None,
    publisher: NotificationPublisher | None = None,
) -> FanOutResult:
    return _record_presence(
        session, user_id=user_id, checking_in=False, now=now, publisher=publisher
    )


def _record_presence(
    session: Session,
    *,
    user_id: str,
    checking_in: bool,
    now: datetime | None,
    publisher: NotificationPublisher | None,
) -> FanOutResult:
    """Append a timestamp to the user's history, then notify roster members.

    Calling again while already in the requested state records nothing and
    re-sends the notification for the latest timestamp; members who already
    hold it are skipped, so a partially failed fan-out can be retried.
    """

    profiles = ProfileRepository(session)
    groups = GroupRepository(profiles.store)

    account = profiles.require(user_id)
    if account.group_id is None:
        raise PreconditionFailedError(f"User {user_id} does not belong to a group")
    group = groups.require(account.group_id)
    history = "check_in_times" if checking_in else "check_out_times"
    if not checking_in and not account.checked_in and not account.check_out_times:
        raise PreconditionFailedError(f"User {user_id} is not checked in")

    stamp = ensure_app_timezone(now) if now is not None else now_in_app_timezone()

    def _record(current: UserAccount) -> dict[str, Any] | None:
        if current.checked_in == checking_in:
            return None
        return {"checked_in": checking_in, history: [*getattr(current, history), stamp]}

    account, _ = profiles.mutate(user_id, _record)
    recorded = getattr(account, history)[-1] if getattr(account, history) else stamp

    if checking_in:
        notification_type = NOTIFICATION_MEMBER_CHECKED_IN
        message = f"{account.name} checked in at {recorded:%I:%M %p}."
    else:
        notification_type = NOTIFICATION_MEMBER_CHECKED_OUT
        message = f"{account.name} checked out at {recorded:%I:%M %p}."

    return notify_group_members(
        profiles,
        group,
        operation=notification_type,
        notification_type=notification_type,
        message=message,
        sender=account,
        sender_id=user_id,
        preference=CHECK_PREFERENCE,
        correlation={"group_id": group.id, "user_id": user_id},
        notification_id=f"{notification_type}:{user_id}:{recorded.isoformat()}",
        publisher=publisher,
        value=recorded,
    )
