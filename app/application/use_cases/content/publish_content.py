"""Use cases for publishing events, news stories and incident reports."""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import uuid4

from sqlalchemy.orm import Session

from app.domain.entities import (
    CONTENT_LIST_FIELDS,
    ContentItem,
    Event,
    Group,
    IncidentReport,
    NewsStory,
)
from app.domain.errors import PermissionDeniedError, PreconditionFailedError
from app.infrastructure.notifications import NotificationPublisher
from app.infrastructure.repositories import GroupRepository, ProfileRepository
from app.utils import ensure_app_timezone, now_in_app_timezone

from .fanout import FanOutResult, broadcast_content


def _append_content(
    session: Session,
    *,
    group_id: str,
    author_id: str,
    content: ContentItem,
    publisher: NotificationPublisher | None,
) -> FanOutResult:
    profiles = ProfileRepository(session)
    groups = GroupRepository(profiles.store)

    group = groups.require(group_id)
    author = profiles.require(author_id)
    if not author.belongs_to(group.id):
        raise PermissionDeniedError(f"User {author_id} is not a member of group {group_id}")
    if not content.title.strip():
        raise PreconditionFailedError("Title cannot be empty")

    list_field = CONTENT_LIST_FIELDS[content.kind]

    def _append(current: Group) -> dict[str, Any] | None:
        items = list(getattr(current, list_field))
        if any(item.id == content.id for item in items):
            return None
        return {list_field: [*items, content]}

    groups.mutate(group_id, _append)
    return broadcast_content(session, group_id=group_id, content=content, publisher=publisher)


def create_event(
    session: Session,
    *,
    group_id: str,
    author_id: str,
    title: str,
    message: str,
    start_date: datetime,
    end_date: datetime | None = None,
    image: str | None = None,
    publisher: NotificationPublisher | None = None,
) -> FanOutResult:
    """Add an event to the group and notify members who opted in."""

    start = ensure_app_timezone(start_date)
    end = ensure_app_timezone(end_date) if end_date else None
    if end is not None and end < start:
        raise PreconditionFailedError("An event cannot end before it starts")

    event = Event(
        id=uuid4().hex,
        title=title.strip(),
        message=message,
        author_id=author_id,
        start_date=start,
        end_date=end,
        image=image,
    )
    return _append_content(
        session, group_id=group_id, author_id=author_id, content=event, publisher=publisher
    )


def create_news_story(
    session: Session,
    *,
    group_id: str,
    author_id: str,
    title: str,
    body: str,
    image: str | None = None,
    publisher: NotificationPublisher | None = None,
) -> FanOutResult:
    story = NewsStory(
        id=uuid4().hex,
        title=title.strip(),
        body=body,
        author_id=author_id,
        published_at=now_in_app_timezone(),
        image=image,
    )
    return _append_content(
        session, group_id=group_id, author_id=author_id, content=story, publisher=publisher
    )


def create_incident_report(
    session: Session,
    *,
    group_id: str,
    author_id: str,
    title: str,
    description: str,
    severity_tag: str | None = None,
    location_of_incident: str | None = None,
    police_reference: str | None = None,
    publisher: NotificationPublisher | None = None,
) -> FanOutResult:
    """File a report; every member except the reporter is notified."""

    report = IncidentReport(
        id=uuid4().hex,
        title=title.strip(),
        description=description,
        author_id=author_id,
        reported_at=now_in_app_timezone(),
        severity_tag=severity_tag,
        location_of_incident=location_of_incident,
        police_reference=police_reference,
    )
    return _append_content(
        session, group_id=group_id, author_id=author_id, content=report, publisher=publisher
    )

