"""Domain entity representing a request to join a group."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

REQUEST_STATUS_PENDING = "pending"
REQUEST_STATUS_ACCEPTED = "accepted"
REQUEST_STATUS_DECLINED = "declined"
REQUEST_STATUS_CANCELLED = "cancelled"

REQUEST_TERMINAL_STATUSES = frozenset(
    {REQUEST_STATUS_ACCEPTED, REQUEST_STATUS_DECLINED, REQUEST_STATUS_CANCELLED}
)


@dataclass
class MembershipRequest:
    """A user's request to join a group, embedded in the group record."""

    id: str
    user_id: str
    status: str = REQUEST_STATUS_PENDING
    requested_at: datetime | None = None

    def is_pending(self) -> bool:
        return self.status == REQUEST_STATUS_PENDING


__all__ = [
    "MembershipRequest",
    "REQUEST_STATUS_ACCEPTED",
    "REQUEST_STATUS_CANCELLED",
    "REQUEST_STATUS_DECLINED",
    "REQUEST_STATUS_PENDING",
    "REQUEST_TERMINAL_STATUSES",
]
