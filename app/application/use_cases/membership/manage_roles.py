"""Use cases changing who owns or administers a group."""

from __future__ import annotations

from typing import Any

from sqlalchemy.orm import Session

from app.application.operations import OperationResult, Step, run_steps
from app.domain.entities import ROLE_ADMIN, ROLES, Group, UserAccount
from app.domain.errors import NotFoundError, PreconditionFailedError
from app.infrastructure.repositories import GroupRepository, ProfileRepository

from .steps import ensure_group_admin, ensure_group_creator


def _require_member(profiles: ProfileRepository, group: Group, user_id: str) -> UserAccount:
    account = profiles.require(user_id)
    if not account.belongs_to(group.id):
        raise NotFoundError("member", f"{group.id}/{user_id}")
    return account


def transfer_steps(
    profiles: ProfileRepository,
    groups: GroupRepository,
    *,
    group_id: str,
    old_owner_id: str,
    new_owner_id: str,
) -> list[Step]:
    """Steps handing ``group_id`` from ``old_owner_id`` to ``new_owner_id``."""

    def _set_owner(group: Group) -> dict[str, Any] | None:
        if group.created_by == new_owner_id:
            return None
        return {"created_by": new_owner_id}

    def _promote(account: UserAccount) -> dict[str, Any] | None:
        if account.is_group_creator and account.role == ROLE_ADMIN:
            return None
        return {"is_group_creator": True, "role": ROLE_ADMIN}

    def _demote(account: UserAccount) -> dict[str, Any] | None:
        return {"is_group_creator": False} if account.is_group_creator else None

    def _demote_old_owner() -> bool:
        if profiles.get(old_owner_id) is None:
            return False
        return profiles.mutate(old_owner_id, _demote)[1]

    return [
        ("promote_new_owner", lambda: profiles.mutate(new_owner_id, _promote)[1]),
        ("set_group_owner", lambda: groups.mutate(group_id, _set_owner)[1]),
        ("demote_previous_owner", _demote_old_owner),
    ]


def transfer_ownership(
    session: Session,
    *,
    group_id: str,
    new_owner_id: str,
    acting_user_id: str,
) -> OperationResult:
    """Make ``new_owner_id`` the creator of ``group_id``."""

    profiles = ProfileRepository(session)
    groups = GroupRepository(profiles.store)

    group = groups.require(group_id)
    ensure_group_creator(group, profiles.require(acting_user_id))
    if new_owner_id == acting_user_id:
        raise PreconditionFailedError("The new owner must be a different member")
    _require_member(profiles, group, new_owner_id)

    result = run_steps(
        "transfer_ownership",
        transfer_steps(
            profiles,
            groups,
            group_id=group_id,
            old_owner_id=acting_user_id,
            new_owner_id=new_owner_id,
        ),
    )
    result.value = new_owner_id
    return result


def change_member_role(
    session: Session,
    *,
    group_id: str,
    user_id: str,
    role: str,
    acting_user_id: str,
) -> UserAccount:
    """Grant or revoke the admin role of a member."""

    if role not in ROLES:
        raise PreconditionFailedError(f"Unknown role '{role}'")

    profiles = ProfileRepository(session)
    group = GroupRepository(profiles.store).require(group_id)
    ensure_group_admin(group, profiles.require(acting_user_id))
    member = _require_member(profiles, group, user_id)
    if member.id == group.created_by and role != ROLE_ADMIN:
        raise PreconditionFailedError("The group creator always keeps the admin role")

    def _set_role(account: UserAccount) -> dict[str, Any] | None:
        return {"role": role} if account.role != role else None

    account, _ = profiles.mutate(user_id, _set_role)
    return account
