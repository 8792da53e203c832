"""Use cases for appending to and managing user inboxes."""

from .deliver import build_notification, deliver_notification
from .manage_inbox import (
    clear_notifications,
    delete_notification,
    list_notifications,
    mark_all_notifications_read,
    set_notification_read,
)

__all__ = [
    "build_notification",
    "clear_notifications",
    "delete_notification",
    "deliver_notification",
    "list_notifications",
    "mark_all_notifications_read",
    "set_notification_read",
]
