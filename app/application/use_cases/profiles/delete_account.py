"""Use case for deleting a user account together with its memberships."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from app.application.operations import OperationResult, Step, run_steps
from app.domain.entities import UserAccount
from app.domain.errors import NotFoundError, PreconditionFailedError
from app.infrastructure.repositories import GroupRepository, ProfileRepository

from ..membership.delete_group import run_group_deletion
from ..membership.manage_roles import transfer_steps
from ..membership.steps import detach_member_steps

logger = logging.getLogger(__name__)

GROUP_RESOLUTION_DELETE = "delete_group"
GROUP_RESOLUTION_TRANSFER = "transfer"
GROUP_RESOLUTIONS = (GROUP_RESOLUTION_DELETE, GROUP_RESOLUTION_TRANSFER)


def delete_account(
    session: Session,
    *,
    user_id: str,
    group_resolution: str | None = None,
    new_owner_id: str | None = None,
) -> OperationResult:
    """Delete ``user_id`` without leaving dangling membership state.

    A user who created a group must choose whether that group is deleted or
    handed to ``new_owner_id``. Pending requests are cancelled, memberships
    are detached, and the profile record is removed only after every earlier
    step succeeded so that a retry can finish the job.
    """

    profiles = ProfileRepository(session)
    groups = GroupRepository(profiles.store)

    account = profiles.require(user_id)
    owned = {group.id: group for group in groups.list_created_by(user_id)}
    if account.is_group_creator and account.group_id and account.group_id not in owned:
        current = groups.get(account.group_id)
        if current is not None and current.created_by == user_id:
            owned[current.id] = current

    if owned:
        if group_resolution not in GROUP_RESOLUTIONS:
            raise PreconditionFailedError(
                "Choose whether to delete or transfer the groups you created"
            )
        if group_resolution == GROUP_RESOLUTION_TRANSFER:
            if len(owned) > 1:
                raise PreconditionFailedError("Ownership can only be transferred for one group")
            if not new_owner_id or new_owner_id == user_id:
                raise PreconditionFailedError("A new owner is required to transfer the group")
            new_owner = profiles.require(new_owner_id)
            (group_id,) = owned
            if not new_owner.belongs_to(group_id):
                raise NotFoundError("member", f"{group_id}/{new_owner_id}")

    result = OperationResult(operation="delete_account", value=user_id)
    steps: list[Step] = []

    for group_id in _pending_request_groups(groups, account):
        steps.append(
            (
                f"cancel_pending_request:{group_id}",
                _cancel_request(profiles, user_id, group_id),
            )
        )

    if owned and group_resolution == GROUP_RESOLUTION_TRANSFER:
        (group_id,) = owned
        steps.extend(
            transfer_steps(
                profiles,
                groups,
                group_id=group_id,
                old_owner_id=user_id,
                new_owner_id=new_owner_id,
            )
        )

    if account.group_id is not None and (
        account.group_id not in owned or group_resolution == GROUP_RESOLUTION_TRANSFER
    ):
        steps.extend(
            detach_member_steps(profiles, groups, group_id=account.group_id, user_id=user_id)
        )
    run_steps(result.operation, steps, into=result)

    if owned and group_resolution == GROUP_RESOLUTION_DELETE:
        for group_id in owned:
            run_group_deletion(profiles, groups, group_id=group_id, result=result)

    if result.failures:
        result.fail("delete_profile", "earlier steps failed; retry to finish")
        return result
    return run_steps(
        result.operation,
        [("delete_profile", _delete_profile(profiles, user_id))],
        into=result,
    )


def _pending_request_groups(groups: GroupRepository, account: UserAccount) -> list[str]:
    """Return every group holding a pending request of ``account``, pointer first."""

    holding = [
        group.id for group in groups.list_all() if group.pending_request_for(account.id) is not None
    ]
    if account.requested_group_id is not None:
        holding.insert(0, account.requested_group_id)
    return list(dict.fromkeys(holding))


def _cancel_request(profiles: ProfileRepository, user_id: str, group_id: str):
    def _cancel() -> bool:
        try:
            profiles.store.invoke_atomic(
                "cancel_join_request",
                {"group_id": group_id, "user_id": user_id},
            )
        except NotFoundError:
            return False
        return True

    return _cancel


def _delete_profile(profiles: ProfileRepository, user_id: str):
    def _delete() -> bool:
        try:
            profiles.delete(user_id)
        except NotFoundError:
            return False
        logger.info("Deleted profile %s", user_id)
        return True

    return _delete
