"""Procedures that must commit as a single transaction.

Each procedure receives the :class:`RecordStore` already inside
``RecordStore.atomic()``; any exception rolls back every write it made.
"""

from __future__ import annotations

from typing import Any

import logging

from app.domain import inbox
from app.domain.entities import NOTIFICATION_JOIN_REQUEST
from app.domain.errors import NotFoundError
from app.infrastructure.repositories import GroupRepository, ProfileRepository
from app.infrastructure.store import RecordStore, register_procedure

logger = logging.getLogger(__name__)


@register_procedure("cancel_join_request")
def cancel_join_request(store: RecordStore, *, group_id: str, user_id: str) -> dict[str, Any]:
    """Withdraw the pending request of ``user_id`` and every trace of it.

    Removes the request from the group, clears the requester's pending
    pointer and drops the matching ``join_request`` notifications from the
    creator's and admins' inboxes.
    """

    groups = GroupRepository(store)
    profiles = ProfileRepository(store)

    group = groups.require(group_id)
    requester = profiles.require(user_id)
    request = group.pending_request_for(user_id)
    if request is None and requester.requested_group_id != group_id:
        raise NotFoundError("membership request", f"{group_id}/{user_id}")

    if request is not None:
        groups.update_fields(
            group, requests=[r for r in group.requests if r.id != request.id]
        )
    if requester.requested_group_id == group_id:
        profiles.update_fields(requester, requested_group_id=None)

    members = profiles.get_map_by_ids(group.users).values()
    removed = 0
    for admin_id in group.admin_ids(members):
        admin = profiles.get(admin_id)
        if admin is None:
            continue
        kept, count = inbox.remove_matching(
            admin.notifications,
            NOTIFICATION_JOIN_REQUEST,
            user_id=user_id,
            group_id=group_id,
        )
        if count:
            profiles.update_fields(admin, notifications=kept)
            removed += count

    logger.info(
        "Cancelled join request of %s for group %s (%s notification(s) removed)",
        user_id,
        group_id,
        removed,
    )
    return {
        "request_id": request.id if request else None,
        "notifications_removed": removed,
    }


__all__ = ["cancel_join_request"]
