"""Domain entity representing a community group."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime

from .content import Event, IncidentReport, NewsStory
from .membership_request import MembershipRequest
from .user_account import UserAccount


@dataclass
class Group:
    """Community record with a member roster, content lists and join requests."""

    id: str
    name: str
    created_by: str | None = None
    group_password: str | None = None
    users: list[str] = field(default_factory=list)
    requests: list[MembershipRequest] = field(default_factory=list)
    events: list[Event] = field(default_factory=list)
    news: list[NewsStory] = field(default_factory=list)
    reports: list[IncidentReport] = field(default_factory=list)
    created_at: datetime | None = None
    version: int = 1

    def has_member(self, user_id: str) -> bool:
        return user_id in self.users

    def pending_request_for(self, user_id: str) -> MembershipRequest | None:
        """Return the pending request filed by ``user_id`` if there is one."""

        return next(
            (r for r in self.requests if r.user_id == user_id and r.is_pending()),
            None,
        )

    def find_event(self, event_id: str) -> Event | None:
        return next((event for event in self.events if event.id == event_id), None)

    def admin_ids(self, members: Iterable[UserAccount]) -> list[str]:
        """Return the creator plus every listed member holding the admin role."""

        admins: list[str] = [self.created_by] if self.created_by else []
        for member in members:
            if member.is_admin() and member.group_id == self.id and member.id not in admins:
                admins.append(member.id)
        return admins


__all__ = ["Group"]
