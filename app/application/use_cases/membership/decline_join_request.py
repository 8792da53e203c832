"""Use case for declining a pending join request."""

from __future__ import annotations

from sqlalchemy.orm import Session

from app.application.operations import OperationResult, run_steps
from app.domain.entities import NOTIFICATION_DECLINED_REQUEST, REQUEST_STATUS_DECLINED
from app.domain.errors import NotFoundError
from app.infrastructure.notifications import NotificationPublisher
from app.infrastructure.repositories import GroupRepository, ProfileRepository

from ..inbox import build_notification, deliver_notification
from .steps import (
    admin_recipients,
    clear_join_request_notifications_step,
    clear_requested_pointer_step,
    drop_request_step,
    ensure_group_admin,
    locate_request,
    mark_request_step,
)


def decline_join_request(
    session: Session,
    *,
    group_id: str,
    user_id: str,
    acting_user_id: str,
    publisher: NotificationPublisher | None = None,
) -> OperationResult:
    """Turn down the request of ``user_id`` and tell them about it.

    A request left behind by a deleted account can still be declined; the
    steps that would touch the missing profile report nothing to do.
    """

    profiles = ProfileRepository(session)
    groups = GroupRepository(profiles.store)

    group = groups.require(group_id)
    ensure_group_admin(group, profiles.require(acting_user_id))
    request = locate_request(group, user_id, REQUEST_STATUS_DECLINED)
    if request is None:
        raise NotFoundError("membership request", f"{group_id}/{user_id}")

    def _notify_requester() -> bool:
        if profiles.get(user_id) is None:
            return False
        notification = build_notification(
            NOTIFICATION_DECLINED_REQUEST,
            f'Your request to join "{group.name}" was declined.',
            group_id=group_id,
            request_id=request.id,
        )
        return deliver_notification(
            profiles, user_id, notification, publisher=publisher, dedupe=True
        )

    steps = [
        mark_request_step(
            groups, group_id=group_id, request_id=request.id, status=REQUEST_STATUS_DECLINED
        ),
        clear_requested_pointer_step(profiles, group_id=group_id, user_id=user_id),
        clear_join_request_notifications_step(
            profiles, admin_recipients(profiles, group), group_id=group_id, user_id=user_id
        ),
        ("notify_requester", _notify_requester),
    ]
    result = run_steps("decline_join_request", steps)
    result.value = request.id
    if not result.ok:
        result.fail("remove_request", "kept until the other steps succeed")
        return result
    return run_steps(
        result.operation,
        [drop_request_step(groups, group_id=group_id, request_id=request.id)],
        into=result,
    )
