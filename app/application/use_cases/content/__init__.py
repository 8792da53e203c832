"""Use cases for group content and its notifications."""

from .fanout import (
    FanOutResult,
    broadcast_content,
    notify_group_members,
    roster_members,
    select_recipients,
    wants_notification,
)
from .manage_content import attend_event, delete_content, record_content_view
from .publish_content import create_event, create_incident_report, create_news_story

__all__ = [
    "FanOutResult",
    "attend_event",
    "broadcast_content",
    "create_event",
    "create_incident_report",
    "create_news_story",
    "delete_content",
    "notify_group_members",
    "record_content_view",
    "roster_members",
    "select_recipients",
    "wants_notification",
]
