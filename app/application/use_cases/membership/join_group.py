"""Use case for joining a password-protected group directly."""

from __future__ import annotations

from sqlalchemy.orm import Session

from app.application.operations import OperationResult, run_steps
from app.domain.errors import PreconditionFailedError
from app.infrastructure.repositories import GroupRepository, ProfileRepository
from app.infrastructure.security import verify_group_password

from .steps import (
    admin_recipients,
    attach_member_steps,
    clear_join_request_notifications_step,
    ensure_joinable,
    remove_request_step,
)


def join_group_with_password(
    session: Session,
    *,
    group_id: str,
    user_id: str,
    password: str,
) -> OperationResult:
    """Add ``user_id`` to ``group_id`` when ``password`` matches.

    A pending request the user had filed for the same group is withdrawn
    along the way.
    """

    profiles = ProfileRepository(session)
    groups = GroupRepository(profiles.store)

    group = groups.require(group_id)
    account = profiles.require(user_id)
    ensure_joinable(account, group_id)
    if not group.group_password:
        raise PreconditionFailedError("This group can only be joined by request")
    if not verify_group_password(password, group.group_password):
        raise PreconditionFailedError("Incorrect group password")

    steps = [
        *attach_member_steps(profiles, groups, group_id=group_id, user_id=user_id),
        remove_request_step(groups, group_id=group_id, user_id=user_id),
        clear_join_request_notifications_step(
            profiles, admin_recipients(profiles, group), group_id=group_id, user_id=user_id
        ),
    ]
    result = run_steps("join_group_with_password", steps)
    result.value = group_id
    return result
