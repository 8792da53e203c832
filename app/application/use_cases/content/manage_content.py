"""Use cases acting on content that is already published."""

from __future__ import annotations

from dataclasses import replace
from typing import Any

from sqlalchemy.orm import Session

from app.application.operations import OperationResult, run_steps
from app.domain.entities import (
    CONTENT_EVENT,
    CONTENT_LIST_FIELDS,
    ContentItem,
    Group,
    UserAccount,
)
from app.domain.errors import NotFoundError, PermissionDeniedError, PreconditionFailedError
from app.infrastructure.repositories import GroupRepository, ProfileRepository

from ..membership.steps import ensure_group_admin


def _list_field(kind: str) -> str:
    try:
        return CONTENT_LIST_FIELDS[kind]
    except KeyError as exc:
        raise PreconditionFailedError(f"Unknown content kind '{kind}'") from exc


def _index_of(items: list[ContentItem], kind: str, content_id: str) -> int:
    for index, item in enumerate(items):
        if item.id == content_id:
            return index
    raise NotFoundError(kind, content_id)


def record_content_view(session: Session, *, group_id: str, kind: str, content_id: str) -> int:
    """Increment the view counter of a content item and return the new count."""

    list_field = _list_field(kind)
    views = 0

    def _bump(group: Group) -> dict[str, Any] | None:
        nonlocal views
        items = list(getattr(group, list_field))
        index = _index_of(items, kind, content_id)
        views = items[index].views + 1
        items[index] = replace(items[index], views=views)
        return {list_field: items}

    GroupRepository(session).mutate(group_id, _bump)
    return views


def delete_content(
    session: Session,
    *,
    group_id: str,
    kind: str,
    content_id: str,
    acting_user_id: str,
) -> None:
    """Remove a content item; its author or a group admin may do so."""

    list_field = _list_field(kind)
    profiles = ProfileRepository(session)
    groups = GroupRepository(profiles.store)

    group = groups.require(group_id)
    items = getattr(group, list_field)
    item = items[_index_of(items, kind, content_id)]
    acting = profiles.require(acting_user_id)
    if item.author_id != acting.id:
        ensure_group_admin(group, acting)

    def _remove(current: Group) -> dict[str, Any] | None:
        remaining = [i for i in getattr(current, list_field) if i.id != content_id]
        if len(remaining) == len(getattr(current, list_field)):
            return None
        return {list_field: remaining}

    groups.mutate(group_id, _remove)


def attend_event(
    session: Session,
    *,
    group_id: str,
    event_id: str,
    user_id: str,
) -> OperationResult:
    """Register ``user_id`` as attending ``event_id``.

    The event's attendee list and the user's ``attended_events`` are written
    as two idempotent steps.
    """

    profiles = ProfileRepository(session)
    groups = GroupRepository(profiles.store)

    group = groups.require(group_id)
    if group.find_event(event_id) is None:
        raise NotFoundError(CONTENT_EVENT, event_id)
    account = profiles.require(user_id)
    if not account.belongs_to(group_id):
        raise PermissionDeniedError(f"User {user_id} is not a member of group {group_id}")

    def _add_attendee(current: Group) -> dict[str, Any] | None:
        events = list(current.events)
        index = _index_of(events, CONTENT_EVENT, event_id)
        event = events[index]
        if user_id in event.attendees:
            return None
        attendees = [*event.attendees, user_id]
        events[index] = replace(event, attendees=attendees, attending_count=len(attendees))
        return {"events": events}

    def _record_attendance(current: UserAccount) -> dict[str, Any] | None:
        if event_id in current.attended_events:
            return None
        return {"attended_events": [*current.attended_events, event_id]}

    result = run_steps(
        "attend_event",
        [
            ("add_attendee", lambda: groups.mutate(group_id, _add_attendee)[1]),
            ("record_attendance", lambda: profiles.mutate(user_id, _record_attendance)[1]),
        ],
    )
    result.value = event_id
    return result
