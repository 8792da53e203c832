"""Idempotent building blocks shared by the membership use cases.

Every membership change touches the user's ``group_id`` pointer and the
group's ``users`` roster, which live in different records. The pointer is
authoritative: joining writes it first and the roster second, leaving clears
it first and the roster second. A step that finds its effect already in place
reports ``False`` and writes nothing, so re-running an operation converges.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any

from app.application.operations import Step
from app.domain.entities import (
    NOTIFICATION_JOIN_REQUEST,
    ROLE_ADMIN,
    ROLE_MEMBER,
    Group,
    MembershipRequest,
    UserAccount,
)
from app.domain.errors import PermissionDeniedError, PreconditionFailedError
from app.infrastructure.repositories import GroupRepository, ProfileRepository


def ensure_group_admin(group: Group, account: UserAccount) -> None:
    """Raise unless ``account`` created ``group`` or is one of its admins."""

    if account.id == group.created_by:
        return
    if account.is_admin() and account.belongs_to(group.id):
        return
    raise PermissionDeniedError(f"User {account.id} cannot manage group {group.id}")


def ensure_group_creator(group: Group, account: UserAccount) -> None:
    if account.id != group.created_by:
        raise PermissionDeniedError(f"Only the creator can do this for group {group.id}")


def ensure_joinable(account: UserAccount, group_id: str) -> None:
    if account.group_id is not None and account.group_id != group_id:
        raise PreconditionFailedError(f"User {account.id} already belongs to another group")


def admin_recipients(profiles: ProfileRepository, group: Group) -> list[str]:
    """Return the ids of the creator and every admin member of ``group``."""

    members = profiles.get_map_by_ids(group.users).values()
    return group.admin_ids(members)


# ----------------------------------------------------------------------
# Pointer and roster steps
def attach_member_steps(
    profiles: ProfileRepository,
    groups: GroupRepository,
    *,
    group_id: str,
    user_id: str,
    promote_to_creator: bool = False,
) -> list[Step]:
    """Steps placing ``user_id`` in ``group_id``: pointer first, then roster."""

    def _set_pointer(account: UserAccount) -> dict[str, Any] | None:
        ensure_joinable(account, group_id)
        changes: dict[str, Any] = {}
        if account.group_id != group_id:
            changes["group_id"] = group_id
        if account.requested_group_id is not None:
            changes["requested_group_id"] = None
        if promote_to_creator and not account.is_group_creator:
            changes["is_group_creator"] = True
        if promote_to_creator and account.role != ROLE_ADMIN:
            changes["role"] = ROLE_ADMIN
        return changes or None

    def _add_to_roster(group: Group) -> dict[str, Any] | None:
        if group.has_member(user_id):
            return None
        return {"users": [*group.users, user_id]}

    return [
        ("set_group_pointer", lambda: profiles.mutate(user_id, _set_pointer)[1]),
        ("add_to_roster", lambda: groups.mutate(group_id, _add_to_roster)[1]),
    ]


def detach_member_steps(
    profiles: ProfileRepository,
    groups: GroupRepository,
    *,
    group_id: str,
    user_id: str,
) -> list[Step]:
    """Steps removing ``user_id`` from ``group_id``: pointer, roster, then events.

    A pointer that already names a different group is left alone. The user
    is also taken off the attendee list of every event in the group so the
    reminder sweep stops reaching them.
    """

    def _clear_pointer(account: UserAccount) -> dict[str, Any] | None:
        if account.group_id != group_id:
            return None
        return {"group_id": None, "is_group_creator": False, "role": ROLE_MEMBER}

    def _remove_from_roster(group: Group) -> dict[str, Any] | None:
        if not group.has_member(user_id):
            return None
        return {"users": [member for member in group.users if member != user_id]}

    def _leave_events(group: Group) -> dict[str, Any] | None:
        if not any(user_id in event.attendees for event in group.events):
            return None
        events = []
        for event in group.events:
            if user_id in event.attendees:
                attendees = [a for a in event.attendees if a != user_id]
                event = replace(event, attendees=attendees, attending_count=len(attendees))
            events.append(event)
        return {"events": events}

    def _detach_pointer() -> bool:
        if profiles.get(user_id) is None:
            return False
        return profiles.mutate(user_id, _clear_pointer)[1]

    def _detach_roster() -> bool:
        if groups.get(group_id) is None:
            return False
        return groups.mutate(group_id, _remove_from_roster)[1]

    def _detach_events() -> bool:
        if groups.get(group_id) is None:
            return False
        return groups.mutate(group_id, _leave_events)[1]

    return [
        (f"clear_group_pointer:{user_id}", _detach_pointer),
        (f"remove_from_roster:{user_id}", _detach_roster),
        (f"leave_events:{user_id}", _detach_events),
    ]


# ----------------------------------------------------------------------
# Request steps
def locate_request(group: Group, user_id: str, outcome: str) -> MembershipRequest | None:
    """Return the pending request of ``user_id``, or one already marked ``outcome``.

    A request marked with its outcome stays in the group until every other
    step of the accept or decline succeeded, so a retry can find it again.
    """

    pending = group.pending_request_for(user_id)
    if pending is not None:
        return pending
    return next(
        (r for r in group.requests if r.user_id == user_id and r.status == outcome),
        None,
    )


def mark_request_step(
    groups: GroupRepository, *, group_id: str, request_id: str, status: str
) -> Step:
    def _mark(group: Group) -> dict[str, Any] | None:
        requests = list(group.requests)
        for index, request in enumerate(requests):
            if request.id == request_id and request.status != status:
                requests[index] = replace(request, status=status)
                return {"requests": requests}
        return None

    return (f"mark_request_{status}", lambda: groups.mutate(group_id, _mark)[1])


def drop_request_step(groups: GroupRepository, *, group_id: str, request_id: str) -> Step:
    def _drop(group: Group) -> dict[str, Any] | None:
        remaining = [r for r in group.requests if r.id != request_id]
        if len(remaining) == len(group.requests):
            return None
        return {"requests": remaining}

    return ("remove_request", lambda: groups.mutate(group_id, _drop)[1])


def remove_request_step(groups: GroupRepository, *, group_id: str, user_id: str) -> Step:
    def _remove(group: Group) -> dict[str, Any] | None:
        remaining = [r for r in group.requests if not (r.user_id == user_id and r.is_pending())]
        if len(remaining) == len(group.requests):
            return None
        return {"requests": remaining}

    return ("remove_request", lambda: groups.mutate(group_id, _remove)[1])


def clear_requested_pointer_step(
    profiles: ProfileRepository, *, group_id: str, user_id: str
) -> Step:
    def _clear(account: UserAccount) -> dict[str, Any] | None:
        if account.requested_group_id != group_id:
            return None
        return {"requested_group_id": None}

    def _clear_pointer() -> bool:
        if profiles.get(user_id) is None:
            return False
        return profiles.mutate(user_id, _clear)[1]

    return ("clear_requested_pointer", _clear_pointer)


def clear_join_request_notifications_step(
    profiles: ProfileRepository, recipients: list[str], *, group_id: str, user_id: str
) -> Step:
    """Drop the ``join_request`` notifications about ``user_id`` from admin inboxes."""

    def _clear() -> bool:
        removed = 0
        for recipient in recipients:
            if profiles.get(recipient) is None:
                continue
            removed += profiles.remove_notifications(
                recipient, NOTIFICATION_JOIN_REQUEST, user_id=user_id, group_id=group_id
            )
        return removed > 0

    return ("clear_admin_notifications", _clear)


__all__ = [
    "admin_recipients",
    "attach_member_steps",
    "clear_join_request_notifications_step",
    "clear_requested_pointer_step",
    "detach_member_steps",
    "drop_request_step",
    "ensure_group_admin",
    "ensure_group_creator",
    "ensure_joinable",
    "locate_request",
    "mark_request_step",
    "remove_request_step",
]
