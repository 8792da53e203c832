"""Domain entities exposed by the application."""

from .content import (
    CONTENT_EVENT,
    CONTENT_LIST_FIELDS,
    CONTENT_NEWS,
    CONTENT_REPORT,
    ContentItem,
    Event,
    IncidentReport,
    NewsStory,
)
from .group import Group
from .membership_request import (
    REQUEST_STATUS_ACCEPTED,
    REQUEST_STATUS_CANCELLED,
    REQUEST_STATUS_DECLINED,
    REQUEST_STATUS_PENDING,
    MembershipRequest,
)
from .notification import (
    NOTIFICATION_ACCEPTED_REQUEST,
    NOTIFICATION_DECLINED_REQUEST,
    NOTIFICATION_EVENT_REMINDER,
    NOTIFICATION_JOIN_REQUEST,
    NOTIFICATION_MEMBER_CHECKED_IN,
    NOTIFICATION_MEMBER_CHECKED_OUT,
    NOTIFICATION_NEW_EVENT,
    NOTIFICATION_NEW_NEWS,
    NOTIFICATION_NEW_REPORT,
    NOTIFICATION_TYPES,
    Notification,
)
from .user_account import ROLE_ADMIN, ROLE_MEMBER, ROLES, UserAccount

__all__ = [
    "CONTENT_EVENT",
    "CONTENT_LIST_FIELDS",
    "CONTENT_NEWS",
    "CONTENT_REPORT",
    "ContentItem",
    "Event",
    "Group",
    "IncidentReport",
    "MembershipRequest",
    "NewsStory",
    "Notification",
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
    "REQUEST_STATUS_ACCEPTED",
    "REQUEST_STATUS_CANCELLED",
    "REQUEST_STATUS_DECLINED",
    "REQUEST_STATUS_PENDING",
    "ROLE_ADMIN",
    "ROLE_MEMBER",
    "ROLES",
    "UserAccount",
]
