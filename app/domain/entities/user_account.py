"""Domain entity representing a user profile."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from .notification import Notification

ROLE_ADMIN = "Admin"
ROLE_MEMBER = "Member"
ROLES = (ROLE_ADMIN, ROLE_MEMBER)


@dataclass
class UserAccount:
    """Identity-bearing profile holding at most one group pointer and an inbox."""

    id: str
    name: str
    email: str
    group_id: str | None = None
    requested_group_id: str | None = None
    is_group_creator: bool = False
    role: str = ROLE_MEMBER
    notifications: list[Notification] = field(default_factory=list)
    attended_events: list[str] = field(default_factory=list)
    receive_event_notifications: bool = True
    receive_news_notifications: bool = True
    receive_check_notifications: bool = True
    checked_in: bool = False
    check_in_times: list[datetime] = field(default_factory=list)
    check_out_times: list[datetime] = field(default_factory=list)
    push_token: str | None = None
    avatar_url: str | None = None
    created_at: datetime | None = None
    version: int = 1

    def is_admin(self) -> bool:
        """Return ``True`` when the profile carries the administrator role."""

        return self.role == ROLE_ADMIN

    def belongs_to(self, group_id: str) -> bool:
        return self.group_id is not None and self.group_id == group_id


__all__ = ["ROLE_ADMIN", "ROLE_MEMBER", "ROLES", "UserAccount"]
