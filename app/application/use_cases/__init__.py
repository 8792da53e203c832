"""Aggregate application use cases."""

from .content import broadcast_content, create_event, create_incident_report, create_news_story
from .membership import (
    accept_join_request,
    cancel_join_request,
    create_join_request,
    decline_join_request,
    leave_group,
    remove_member,
)
from .profiles import delete_account
from .reminders import run_reminder_sweep

__all__ = [
    "accept_join_request",
    "broadcast_content",
    "cancel_join_request",
    "create_event",
    "create_incident_report",
    "create_join_request",
    "create_news_story",
    "decline_join_request",
    "delete_account",
    "leave_group",
    "remove_member",
    "run_reminder_sweep",
]
