"""Fan notifications out to a group's roster.

Used for newly published content and for members checking in or out.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

import logging

from sqlalchemy.orm import Session

from app.application.operations import OperationResult, Step, run_steps
from app.domain.entities import (
    CONTENT_EVENT,
    CONTENT_NEWS,
    CONTENT_REPORT,
    NOTIFICATION_NEW_EVENT,
    NOTIFICATION_NEW_NEWS,
    NOTIFICATION_NEW_REPORT,
    ContentItem,
    Group,
    UserAccount,
)
from app.infrastructure.notifications import NotificationPublisher
from app.infrastructure.repositories import GroupRepository, ProfileRepository

from ..inbox import build_notification, deliver_notification

logger = logging.getLogger(__name__)

# Preference flag consulted per content kind; incident reports go to everyone.
PREFERENCE_FIELDS: dict[str, str | None] = {
    CONTENT_EVENT: "receive_event_notifications",
    CONTENT_NEWS: "receive_news_notifications",
    CONTENT_REPORT: None,
}

NOTIFICATION_TYPES_BY_KIND = {
    CONTENT_EVENT: NOTIFICATION_NEW_EVENT,
    CONTENT_NEWS: NOTIFICATION_NEW_NEWS,
    CONTENT_REPORT: NOTIFICATION_NEW_REPORT,
}

_MESSAGES = {
    CONTENT_EVENT: "{author} posted a new event in {group}: '{title}'",
    CONTENT_NEWS: "{author} shared a story in {group}: '{title}'",
    CONTENT_REPORT: "{author} reported an incident in {group}: '{title}'",
}

UNKNOWN_AUTHOR = "A neighbour"


@dataclass
class FanOutResult(OperationResult):
    """Outcome of a fan-out; ``applied`` lists the notified user ids."""

    opted_out: list[str] = field(default_factory=list)

    @property
    def notified(self) -> list[str]:
        return self.applied


def wants_notification(account: UserAccount, preference: str | None) -> bool:
    if preference is None:
        return True
    return bool(getattr(account, preference))


def select_recipients(
    members: Iterable[UserAccount], *, preference: str | None, author_id: str | None
) -> tuple[list[str], list[str]]:
    """Split ``members`` into recipients and opted-out users, skipping the author."""

    recipients: list[str] = []
    opted_out: list[str] = []
    for member in members:
        if member.id == author_id:
            continue
        target = recipients if wants_notification(member, preference) else opted_out
        target.append(member.id)
    return recipients, opted_out


def roster_members(profiles: ProfileRepository, group: Group) -> list[UserAccount]:
    """Return the profiles on ``group``'s roster, in roster order."""

    found = profiles.get_map_by_ids(group.users)
    return [found[user_id] for user_id in dict.fromkeys(group.users) if user_id in found]


def notify_group_members(
    profiles: ProfileRepository,
    group: Group,
    *,
    operation: str,
    notification_type: str,
    message: str,
    sender: UserAccount | None,
    sender_id: str | None,
    preference: str | None,
    correlation: dict[str, str | None],
    notification_id: str | None = None,
    publisher: NotificationPublisher | None = None,
    value: object = None,
) -> FanOutResult:
    """Append one notification per eligible roster member, continuing past failures.

    Each recipient is an independent step named after the recipient id.
    Appends are deduplicated on ``notification_type`` and ``correlation``,
    or on ``notification_id`` when one is given, so re-running a fan-out
    skips members who already hold the entry.
    """

    recipients, opted_out = select_recipients(
        roster_members(profiles, group), preference=preference, author_id=sender_id
    )
    avatar_url = sender.avatar_url if sender is not None else None

    def _notify(recipient_id: str) -> Step:
        def _append() -> bool:
            notification = build_notification(
                notification_type,
                message,
                notification_id=notification_id,
                avatar_url=avatar_url,
                **correlation,
            )
            return deliver_notification(
                profiles,
                recipient_id,
                notification,
                publisher=publisher,
                dedupe=notification_id is None,
            )

        return (recipient_id, _append)

    result = FanOutResult(operation=operation, value=value, opted_out=opted_out)
    run_steps(operation, [_notify(recipient) for recipient in recipients], into=result)
    logger.info(
        "%s in group %s: %s notified, %s opted out, %s failed",
        operation,
        group.id,
        len(result.applied),
        len(opted_out),
        len(result.failures),
    )
    return result


def broadcast_content(
    session: Session,
    *,
    group_id: str,
    content: ContentItem,
    publisher: NotificationPublisher | None = None,
) -> FanOutResult:
    """Append a content notification to every eligible member's inbox.

    Recipients are the group's roster minus the author. The message names
    the author and carries their avatar; an author whose profile is gone is
    shown as :data:`UNKNOWN_AUTHOR`.
    """

    profiles = ProfileRepository(session)
    group = GroupRepository(profiles.store).require(group_id)
    kind = content.kind
    author = profiles.get(content.author_id) if content.author_id else None

    correlation: dict[str, str | None] = {"group_id": group_id}
    if kind == CONTENT_EVENT:
        correlation["event_id"] = content.id
    else:
        correlation["content_id"] = content.id
    message = _MESSAGES[kind].format(
        author=author.name if author is not None else UNKNOWN_AUTHOR,
        group=group.name,
        title=content.title,
    )

    return notify_group_members(
        profiles,
        group,
        operation=f"broadcast_{kind}",
        notification_type=NOTIFICATION_TYPES_BY_KIND[kind],
        message=message,
        sender=author,
        sender_id=content.author_id,
        preference=PREFERENCE_FIELDS[kind],
        correlation=correlation,
        publisher=publisher,
        value=content,
    )
