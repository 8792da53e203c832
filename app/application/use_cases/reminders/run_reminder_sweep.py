"""Sweep that appends same-day event reminders to attendee inboxes."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Any

import logging

from sqlalchemy.orm import Session

from app.application.operations import OperationResult, Step, run_steps
from app.domain import inbox
from app.domain.entities import NOTIFICATION_EVENT_REMINDER, UserAccount
from app.infrastructure.notifications import NotificationPublisher, get_notification_publisher
from app.infrastructure.repositories import GroupRepository, ProfileRepository
from app.utils import ensure_app_timezone, get_app_timezone, now_in_app_timezone

from ..inbox import build_notification
from .plan_event_reminders import (
    PlannedReminder,
    has_reminder,
    plan_event_reminders,
    reminder_message,
)

logger = logging.getLogger(__name__)


def run_reminder_sweep(
    session: Session,
    *,
    now: datetime | None = None,
    clock: Callable[[], datetime] = now_in_app_timezone,
    publisher: NotificationPublisher | None = None,
) -> OperationResult:
    """Remind every attendee of an event that starts today, at most once.

    The clock is injectable so the sweep can be run for any instant. Running
    it again on the same day appends nothing new.
    """

    instant = ensure_app_timezone(now or clock())
    tz = get_app_timezone()
    profiles = ProfileRepository(session)
    groups = GroupRepository(profiles.store).list_all()

    attendee_ids = {
        attendee for group in groups for event in group.events for attendee in event.attendees
    }
    accounts = profiles.get_map_by_ids(sorted(attendee_ids))
    inboxes = {user_id: account.notifications for user_id, account in accounts.items()}
    planned = plan_event_reminders(instant, groups, inboxes, tz=tz)

    dispatch = (publisher or get_notification_publisher()).dispatch

    def _remind(reminder: PlannedReminder) -> Step:
        def _append(account: UserAccount) -> dict[str, Any] | None:
            if has_reminder(account.notifications, reminder.event.id):
                return None
            notification = build_notification(
                NOTIFICATION_EVENT_REMINDER,
                reminder_message(reminder.event, tz),
                group_id=reminder.group_id,
                event_id=reminder.event.id,
            )
            updated, _ = inbox.append_notification(account.notifications, notification)
            return {"notifications": updated}

        def _step() -> bool:
            account, appended = profiles.mutate(reminder.user_id, _append)
            if appended:
                dispatch(account)
            return appended

        return (f"{reminder.event.id}:{reminder.user_id}", _step)

    result = run_steps("event_reminder_sweep", [_remind(r) for r in planned])
    logger.info(
        "Reminder sweep for %s: %s reminder(s) appended, %s failed",
        instant.astimezone(tz).date().isoformat(),
        len(result.applied),
        len(result.failures),
    )
    return result
