"""Repair drift between user pointers and group records.

User ``group_id`` pointers are authoritative. The sweep adds users missing
from the roster they point at, drops roster entries whose user points
elsewhere or no longer exists, and clears pending pointers that have no
matching request. Duplicate pending requests from one user are collapsed
into the earliest, and pending requests filed by deleted accounts or by
users who already belong to a group are dropped.
"""

from __future__ import annotations

from typing import Any

import logging

from sqlalchemy.orm import Session

from app.application.operations import OperationResult, Step, run_steps
from app.domain.entities import Group, MembershipRequest, UserAccount
from app.infrastructure.repositories import GroupRepository, ProfileRepository

logger = logging.getLogger(__name__)


def reconcile_memberships(session: Session) -> OperationResult:
    profiles = ProfileRepository(session)
    groups = GroupRepository(profiles.store)

    accounts = {account.id: account for account in profiles.list_all()}
    all_groups = {group.id: group for group in groups.list_all()}
    steps: list[Step] = []

    for group in all_groups.values():
        expected = [
            account.id for account in accounts.values() if account.group_id == group.id
        ]
        stray = [
            user_id
            for user_id in group.users
            if user_id not in accounts or accounts[user_id].group_id != group.id
        ]
        missing = [user_id for user_id in expected if not group.has_member(user_id)]
        if stray or missing:
            steps.append(
                (f"repair_roster:{group.id}", _roster_repair(groups, group.id, accounts))
            )
        if _duplicate_pending(group):
            steps.append(
                (
                    f"collapse_duplicate_requests:{group.id}",
                    _collapse_requests(groups, group.id),
                )
            )
        if _stale_pending(group, accounts):
            steps.append(
                (
                    f"drop_stale_requests:{group.id}",
                    _drop_stale_requests(groups, group.id, accounts),
                )
            )

    for account in accounts.values():
        if account.group_id is not None and account.group_id not in all_groups:
            steps.append(
                (
                    f"clear_dangling_pointer:{account.id}",
                    _clear_pointer(profiles, account.id, all_groups),
                )
            )
        requested = account.requested_group_id
        if requested is not None and (
            requested not in all_groups
            or all_groups[requested].pending_request_for(account.id) is None
        ):
            steps.append(
                (
                    f"clear_stale_request_pointer:{account.id}",
                    _clear_requested(profiles, account.id, groups),
                )
            )

    result = run_steps("reconcile_memberships", steps)
    logger.info(
        "Membership reconciliation: %s repaired, %s failed",
        len(result.applied),
        len(result.failures),
    )
    return result


def _roster_repair(
    groups: GroupRepository, group_id: str, accounts: dict[str, UserAccount]
):
    def _repair(group: Group) -> dict[str, Any] | None:
        kept = [
            user_id
            for user_id in group.users
            if user_id in accounts and accounts[user_id].group_id == group.id
        ]
        kept.extend(
            account.id
            for account in accounts.values()
            if account.group_id == group.id and account.id not in kept
        )
        return {"users": kept} if kept != group.users else None

    return lambda: groups.mutate(group_id, _repair)[1]


def _duplicate_pending(group: Group) -> bool:
    pending = [request.user_id for request in group.requests if request.is_pending()]
    return len(pending) != len(set(pending))


def _collapse_requests(groups: GroupRepository, group_id: str):
    def _collapse(group: Group) -> dict[str, Any] | None:
        seen: set[str] = set()
        kept = []
        for request in group.requests:
            if request.is_pending():
                if request.user_id in seen:
                    continue
                seen.add(request.user_id)
            kept.append(request)
        return {"requests": kept} if len(kept) != len(group.requests) else None

    return lambda: groups.mutate(group_id, _collapse)[1]


def _is_stale(request: MembershipRequest, accounts: dict[str, UserAccount]) -> bool:
    account = accounts.get(request.user_id)
    return request.is_pending() and (account is None or account.group_id is not None)


def _stale_pending(group: Group, accounts: dict[str, UserAccount]) -> bool:
    return any(_is_stale(request, accounts) for request in group.requests)


def _drop_stale_requests(
    groups: GroupRepository, group_id: str, accounts: dict[str, UserAccount]
):
    def _drop(group: Group) -> dict[str, Any] | None:
        kept = [request for request in group.requests if not _is_stale(request, accounts)]
        return {"requests": kept} if len(kept) != len(group.requests) else None

    return lambda: groups.mutate(group_id, _drop)[1]


def _clear_pointer(profiles: ProfileRepository, user_id: str, known: dict[str, Group]):
    def _clear(account: UserAccount) -> dict[str, Any] | None:
        if account.group_id is None or account.group_id in known:
            return None
        return {"group_id": None, "is_group_creator": False}

    return lambda: profiles.mutate(user_id, _clear)[1]


def _clear_requested(profiles: ProfileRepository, user_id: str, groups: GroupRepository):
    def _clear(account: UserAccount) -> dict[str, Any] | None:
        requested = account.requested_group_id
        if requested is None:
            return None
        group = groups.get(requested)
        if group is not None and group.pending_request_for(account.id) is not None:
            return None
        return {"requested_group_id": None}

    return lambda: profiles.mutate(user_id, _clear)[1]
