"""Use case for filing a request to join a group."""

from __future__ import annotations

from typing import Any
from uuid import uuid4

from sqlalchemy.orm import Session

from app.application.operations import OperationResult, run_steps
from app.domain.entities import (
    NOTIFICATION_JOIN_REQUEST,
    Group,
    MembershipRequest,
    UserAccount,
)
from app.domain.errors import DuplicateRequestError, PreconditionFailedError
from app.infrastructure.notifications import NotificationPublisher
from app.infrastructure.repositories import GroupRepository, ProfileRepository
from app.infrastructure.security import verify_group_password
from app.utils import now_in_app_timezone

from ..inbox import build_notification, deliver_notification


def create_join_request(
    session: Session,
    *,
    group_id: str,
    user_id: str,
    password: str | None = None,
    publisher: NotificationPublisher | None = None,
) -> OperationResult:
    """Append a pending request and notify the group's creator.

    A user waits on one group at a time: a pending request elsewhere must be
    cancelled or resolved first.

    The request itself is written first and any error there is raised. The
    requester's pending pointer and the creator's notification follow as
    independent steps reported in the returned result.
    """

    profiles = ProfileRepository(session)
    groups = GroupRepository(profiles.store)

    group = groups.require(group_id)
    requester = profiles.require(user_id)

    if group.pending_request_for(user_id) is not None:
        raise DuplicateRequestError(f"User {user_id} already requested to join {group_id}")
    if requester.group_id is not None:
        raise PreconditionFailedError(f"User {user_id} already belongs to a group")
    elsewhere = requester.requested_group_id
    if elsewhere is not None and elsewhere != group_id:
        other = groups.get(elsewhere)
        if other is not None and other.pending_request_for(user_id) is not None:
            raise PreconditionFailedError(
                f"User {user_id} already has a pending request for group {elsewhere}"
            )
    if not verify_group_password(password, group.group_password):
        raise PreconditionFailedError("Incorrect group password")

    request = MembershipRequest(
        id=uuid4().hex,
        user_id=user_id,
        requested_at=now_in_app_timezone(),
    )

    def _append_request(current: Group) -> dict[str, Any] | None:
        if current.pending_request_for(user_id) is not None:
            raise DuplicateRequestError(
                f"User {user_id} already requested to join {group_id}"
            )
        return {"requests": [*current.requests, request]}

    group, _ = groups.mutate(group_id, _append_request)

    def _set_requested(account: UserAccount) -> dict[str, Any] | None:
        if account.requested_group_id == group_id:
            return None
        return {"requested_group_id": group_id}

    def _notify_creator() -> bool:
        if not group.created_by or profiles.get(group.created_by) is None:
            return False
        notification = build_notification(
            NOTIFICATION_JOIN_REQUEST,
            f'{requester.name} requested to join your group "{group.name}"',
            avatar_url=requester.avatar_url,
            group_id=group_id,
            user_id=user_id,
            request_id=request.id,
        )
        return deliver_notification(
            profiles, group.created_by, notification, publisher=publisher, dedupe=True
        )

    result = run_steps(
        "create_join_request",
        [
            ("set_requested_pointer", lambda: profiles.mutate(user_id, _set_requested)[1]),
            ("notify_creator", _notify_creator),
        ],
    )
    result.applied.insert(0, "append_request")
    result.value = request
    return result
