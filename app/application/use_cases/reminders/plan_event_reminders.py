"""Decide which attendees should be reminded about today's events."""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime, tzinfo

from app.domain import inbox
from app.domain.entities import NOTIFICATION_EVENT_REMINDER, Event, Group, Notification
from app.utils import get_app_timezone


@dataclass(frozen=True)
class PlannedReminder:
    user_id: str
    group_id: str
    event: Event


def reminder_message(event: Event, tz: tzinfo) -> str:
    start = event.start_date.astimezone(tz) if event.start_date else None
    when = start.strftime("%I:%M %p") if start else "a time to be announced"
    return f"Reminder: '{event.title}' is today at {when}."


def has_reminder(notifications: Sequence[Notification], event_id: str) -> bool:
    match = inbox.find_matching(notifications, NOTIFICATION_EVENT_REMINDER, event_id=event_id)
    return match is not None


def events_on(day: date, groups: Sequence[Group], tz: tzinfo) -> Iterator[tuple[Group, Event]]:
    """Yield ``(group, event)`` for events whose start falls on ``day`` in ``tz``."""

    for group in groups:
        for event in group.events:
            if event.start_date is None:
                continue
            if event.start_date.astimezone(tz).date() == day:
                yield group, event


def plan_event_reminders(
    now: datetime,
    groups: Sequence[Group],
    inboxes: Mapping[str, Sequence[Notification]],
    *,
    tz: tzinfo | None = None,
) -> list[PlannedReminder]:
    """Return one reminder per attendee of every event starting today.

    "Today" is the calendar day of ``now`` in ``tz`` (the configured
    application timezone by default). Attendees without a known inbox and
    attendees already holding a reminder for the event are left out.
    """

    zone = tz or get_app_timezone()
    today = now.astimezone(zone).date() if now.tzinfo else now.date()
    planned: list[PlannedReminder] = []
    for group, event in events_on(today, groups, zone):
        for attendee_id in dict.fromkeys(event.attendees):
            notifications = inboxes.get(attendee_id)
            if notifications is None or has_reminder(notifications, event.id):
                continue
            planned.append(PlannedReminder(attendee_id, group.id, event))
    return planned
