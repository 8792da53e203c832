"""Use case for accepting a pending join request."""

from __future__ import annotations

from sqlalchemy.orm import Session

from app.application.operations import OperationResult, run_steps
from app.domain.entities import NOTIFICATION_ACCEPTED_REQUEST, REQUEST_STATUS_ACCEPTED
from app.domain.errors import NotFoundError
from app.infrastructure.notifications import NotificationPublisher
from app.infrastructure.repositories import GroupRepository, ProfileRepository

from ..inbox import build_notification, deliver_notification
from .steps import (
    admin_recipients,
    attach_member_steps,
    clear_join_request_notifications_step,
    drop_request_step,
    ensure_group_admin,
    ensure_joinable,
    locate_request,
    mark_request_step,
)


def accept_join_request(
    session: Session,
    *,
    group_id: str,
    user_id: str,
    acting_user_id: str,
    publisher: NotificationPublisher | None = None,
) -> OperationResult:
    """Admit ``user_id`` into ``group_id``.

    Points the user at the group, adds them to the roster, clears the admins'
    ``join_request`` notifications and tells the requester. The request is
    marked accepted first and only removed once all of that succeeded, so
    calling again after a partial failure completes the remaining steps.
    """

    profiles = ProfileRepository(session)
    groups = GroupRepository(profiles.store)

    group = groups.require(group_id)
    ensure_group_admin(group, profiles.require(acting_user_id))
    requester = profiles.require(user_id)
    request = locate_request(group, user_id, REQUEST_STATUS_ACCEPTED)
    if request is None:
        raise NotFoundError("membership request", f"{group_id}/{user_id}")
    ensure_joinable(requester, group_id)

    def _notify_requester() -> bool:
        notification = build_notification(
            NOTIFICATION_ACCEPTED_REQUEST,
            f'Your request to join "{group.name}" was accepted.',
            group_id=group_id,
            request_id=request.id,
        )
        return deliver_notification(
            profiles, user_id, notification, publisher=publisher, dedupe=True
        )

    steps = [
        mark_request_step(
            groups, group_id=group_id, request_id=request.id, status=REQUEST_STATUS_ACCEPTED
        ),
        *attach_member_steps(profiles, groups, group_id=group_id, user_id=user_id),
        clear_join_request_notifications_step(
            profiles, admin_recipients(profiles, group), group_id=group_id, user_id=user_id
        ),
        ("notify_requester", _notify_requester),
    ]
    result = run_steps("accept_join_request", steps)
    result.value = request.id
    if not result.ok:
        result.fail("remove_request", "kept until the other steps succeed")
        return result
    return run_steps(
        result.operation,
        [drop_request_step(groups, group_id=group_id, request_id=request.id)],
        into=result,
    )
