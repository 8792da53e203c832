"""Use case listing the pending requests a user has filed."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.orm import Session

from app.domain.entities import Group, MembershipRequest
from app.infrastructure.repositories import GroupRepository, ProfileRepository


@dataclass(frozen=True)
class PendingRequest:
    group_id: str
    group_name: str
    request: MembershipRequest


def list_user_requests(session: Session, *, user_id: str) -> list[PendingRequest]:
    """Return the pending requests of ``user_id`` across all groups."""

    profiles = ProfileRepository(session)
    account = profiles.require(user_id)
    groups = GroupRepository(profiles.store)

    candidates: list[Group] = groups.list_all()
    pending: list[PendingRequest] = []
    for group in candidates:
        request = group.pending_request_for(account.id)
        if request is not None:
            pending.append(PendingRequest(group.id, group.name, request))
    return pending


def list_group_requests(session: Session, *, group_id: str) -> list[MembershipRequest]:
    group = GroupRepository(session).require(group_id)
    return [request for request in group.requests if request.is_pending()]
