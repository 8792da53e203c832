"""Append notifications to inboxes and hand them to push delivery."""

from __future__ import annotations

from uuid import uuid4

import logging

from app.domain.entities import Notification
from app.infrastructure.notifications import NotificationPublisher, get_notification_publisher
from app.infrastructure.repositories import ProfileRepository
from app.utils import now_in_app_timezone

logger = logging.getLogger(__name__)


def build_notification(
    type_: str,
    message: str,
    *,
    notification_id: str | None = None,
    avatar_url: str | None = None,
    **correlation: str | None,
) -> Notification:
    """Create an unread notification stamped with the current time."""

    return Notification(
        id=notification_id or uuid4().hex,
        type=type_,
        message=message,
        created_at=now_in_app_timezone(),
        avatar_url=avatar_url,
        **correlation,
    )


def deliver_notification(
    profiles: ProfileRepository,
    user_id: str,
    notification: Notification,
    *,
    publisher: NotificationPublisher | None = None,
    dedupe: bool = False,
) -> bool:
    """Append ``notification`` to the inbox of ``user_id`` and schedule a push.

    Returns ``False`` when the notification was already present, in which
    case no push is scheduled either.
    """

    account, appended = profiles.append_notification(user_id, notification, dedupe=dedupe)
    if not appended:
        logger.debug("Notification %s already in inbox of %s", notification.type, user_id)
        return False
    (publisher or get_notification_publisher()).dispatch(account)
    return True
