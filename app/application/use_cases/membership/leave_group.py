"""Use cases for leaving a group or removing someone from it."""

from __future__ import annotations

from sqlalchemy.orm import Session

from app.application.operations import OperationResult, run_steps
from app.domain.entities import Group, UserAccount
from app.domain.errors import NotFoundError, PreconditionFailedError
from app.infrastructure.repositories import GroupRepository, ProfileRepository

from .steps import detach_member_steps, ensure_group_admin


def _ensure_not_creator(group: Group, account: UserAccount) -> None:
    if account.id == group.created_by:
        raise PreconditionFailedError(
            "The group creator must transfer ownership or delete the group first"
        )


def leave_group(
    session: Session,
    *,
    user_id: str,
    group_id: str | None = None,
) -> OperationResult:
    """Detach ``user_id`` from their group.

    ``group_id`` defaults to the user's current pointer; passing it
    explicitly lets a retry finish the roster write after the pointer was
    already cleared.
    """

    profiles = ProfileRepository(session)
    groups = GroupRepository(profiles.store)

    account = profiles.require(user_id)
    target_group_id = group_id or account.group_id
    if target_group_id is None:
        raise PreconditionFailedError(f"User {user_id} is not in a group")

    group = groups.require(target_group_id)
    if not account.belongs_to(group.id) and not group.has_member(user_id):
        raise NotFoundError("member", f"{group.id}/{user_id}")
    _ensure_not_creator(group, account)

    return run_steps(
        "leave_group",
        detach_member_steps(profiles, groups, group_id=group.id, user_id=user_id),
    )


def remove_member(
    session: Session,
    *,
    group_id: str,
    user_id: str,
    acting_user_id: str,
) -> OperationResult:
    """Remove ``user_id`` from ``group_id`` on behalf of an admin."""

    profiles = ProfileRepository(session)
    groups = GroupRepository(profiles.store)

    group = groups.require(group_id)
    ensure_group_admin(group, profiles.require(acting_user_id))
    member = profiles.get(user_id)
    if member is None:
        if not group.has_member(user_id):
            raise NotFoundError("member", f"{group_id}/{user_id}")
    else:
        if not member.belongs_to(group_id) and not group.has_member(user_id):
            raise NotFoundError("member", f"{group_id}/{user_id}")
        _ensure_not_creator(group, member)

    return run_steps(
        "remove_member",
        detach_member_steps(profiles, groups, group_id=group_id, user_id=user_id),
    )
