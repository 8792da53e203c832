"""Domain entity representing an inbox notification."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

NOTIFICATION_JOIN_REQUEST = "join_request"
NOTIFICATION_ACCEPTED_REQUEST = "accepted_request"
NOTIFICATION_DECLINED_REQUEST = "declined_request"
NOTIFICATION_NEW_EVENT = "new_event"
NOTIFICATION_NEW_NEWS = "new_news"
NOTIFICATION_NEW_REPORT = "new_report"
NOTIFICATION_EVENT_REMINDER = "event_reminder"
NOTIFICATION_MEMBER_CHECKED_IN = "member_checked_in"
NOTIFICATION_MEMBER_CHECKED_OUT = "member_checked_out"

NOTIFICATION_TYPES = frozenset(
    {
        NOTIFICATION_JOIN_REQUEST,
        NOTIFICATION_ACCEPTED_REQUEST,
        NOTIFICATION_DECLINED_REQUEST,
        NOTIFICATION_NEW_EVENT,
        NOTIFICATION_NEW_NEWS,
        NOTIFICATION_NEW_REPORT,
        NOTIFICATION_EVENT_REMINDER,
        NOTIFICATION_MEMBER_CHECKED_IN,
        NOTIFICATION_MEMBER_CHECKED_OUT,
    }
)

# Correlation fields in the order they appear in a dedup signature.
CORRELATION_FIELDS = ("group_id", "event_id", "user_id", "request_id", "content_id")


@dataclass
class Notification:
    """Typed, timestamped entry appended to a user's inbox."""

    id: str
    type: str
    message: str
    created_at: datetime | None = None
    read: bool = False
    group_id: str | None = None
    event_id: str | None = None
    user_id: str | None = None
    request_id: str | None = None
    content_id: str | None = None
    avatar_url: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def signature(self) -> tuple[str, tuple[tuple[str, str], ...]]:
        """Return the (type, correlation fields) tuple used for deduplication."""

        correlation = tuple(
            (name, getattr(self, name))
            for name in CORRELATION_FIELDS
            if getattr(self, name) is not None
        )
        return (self.type, correlation)

    def matches(self, type_: str, **correlation: str | None) -> bool:
        """Return ``True`` when the type and every given correlation field match."""

        if self.type != type_:
            return False
        return all(getattr(self, name) == value for name, value in correlation.items())


__all__ = [
    "CORRELATION_FIELDS",
    "NOTIFICATION_ACCEPTED_REQUEST",
    "NOTIFICATION_DECLINED_REQUEST",
    "NOTIFICATION_EVENT_REMINDER",
    "NOTIFICATION_JOIN_REQUEST",
    "NOTIFICATION_MEMBER_CHECKED_IN",
    "NOTIFICATION_MEMBER_CHECKED_OUT",
    "NOTIFICATION_NEW_EVENT",
    "NOTIFICATION_NEW_NEWS",
    "NOTIFICATION_NEW_REPORT",
    "NOTIFICATION_TYPES",
    "Notification",
]
