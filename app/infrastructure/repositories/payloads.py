"""Conversions between embedded JSON payloads and domain entities.

Embedded items keep the camelCase keys used by the mobile client
(``createdAt``, ``groupId``, ``userId``...), so records written by older
clients remain readable.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from app.domain.entities import (
    Event,
    IncidentReport,
    MembershipRequest,
    NewsStory,
    Notification,
)
from app.utils import parse_timestamp

_NOTIFICATION_KEYS = {
    "group_id": "groupId",
    "event_id": "eventId",
    "user_id": "userId",
    "request_id": "requestId",
    "content_id": "contentId",
    "avatar_url": "avatarUrl",
}
_NOTIFICATION_CORE_KEYS = {"id", "type", "message", "createdAt", "timestamp", "read"}


def _iso_or_none(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _text_or_none(value: Any) -> str | None:
    return None if value is None else str(value)


def notification_to_payload(notification: Notification) -> dict[str, Any]:
    payload: dict[str, Any] = dict(notification.extra)
    payload.update(
        {
            "id": notification.id,
            "type": notification.type,
            "message": notification.message,
            "createdAt": _iso_or_none(notification.created_at),
            "read": notification.read,
        }
    )
    for attribute, key in _NOTIFICATION_KEYS.items():
        value = getattr(notification, attribute)
        if value is not None:
            payload[key] = value
    return payload


def notification_from_payload(payload: dict[str, Any]) -> Notification:
    known = _NOTIFICATION_CORE_KEYS | set(_NOTIFICATION_KEYS.values())
    # Older join_request notifications carry the requester as ``fromUserId``.
    user_id = payload.get("userId", payload.get("fromUserId"))
    return Notification(
        id=str(payload.get("id")),
        type=str(payload.get("type", "")),
        message=str(payload.get("message", "")),
        created_at=parse_timestamp(payload.get("createdAt") or payload.get("timestamp")),
        read=bool(payload.get("read", False)),
        group_id=_text_or_none(payload.get("groupId")),
        event_id=_text_or_none(payload.get("eventId")),
        user_id=_text_or_none(user_id),
        request_id=_text_or_none(payload.get("requestId")),
        content_id=_text_or_none(payload.get("contentId")),
        avatar_url=payload.get("avatarUrl") or payload.get("avatar_url"),
        extra={
            key: value
            for key, value in payload.items()
            if key not in known and key not in {"fromUserId", "avatar_url"}
        },
    )


def request_to_payload(request: MembershipRequest) -> dict[str, Any]:
    return {
        "id": request.id,
        "userId": request.user_id,
        "status": request.status,
        "requestedAt": _iso_or_none(request.requested_at),
    }


def request_from_payload(payload: dict[str, Any]) -> MembershipRequest:
    return MembershipRequest(
        id=str(payload.get("id")),
        user_id=str(payload.get("userId")),
        status=str(payload.get("status", "pending")),
        requested_at=parse_timestamp(payload.get("requestedAt")),
    )


def event_to_payload(event: Event) -> dict[str, Any]:
    return {
        "id": event.id,
        "title": event.title,
        "message": event.message,
        "authorId": event.author_id,
        "startDate": _iso_or_none(event.start_date),
        "endDate": _iso_or_none(event.end_date),
        "image": event.image,
        "attendees": list(event.attendees),
        "attending_count": event.attending_count,
        "views": event.views,
    }


def event_from_payload(payload: dict[str, Any]) -> Event:
    attendees = [str(user_id) for user_id in payload.get("attendees") or []]
    return Event(
        id=str(payload.get("id")),
        title=str(payload.get("title", "")),
        message=str(payload.get("message", "")),
        author_id=_text_or_none(payload.get("authorId")),
        start_date=parse_timestamp(payload.get("startDate")),
        end_date=parse_timestamp(payload.get("endDate")),
        image=payload.get("image"),
        attendees=attendees,
        attending_count=int(payload.get("attending_count", len(attendees)) or 0),
        views=int(payload.get("views", 0) or 0),
    )


def news_to_payload(story: NewsStory) -> dict[str, Any]:
    return {
        "id": story.id,
        "title": story.title,
        "body": story.body,
        "authorId": story.author_id,
        "publishedAt": _iso_or_none(story.published_at),
        "image": story.image,
        "views": story.views,
    }


def news_from_payload(payload: dict[str, Any]) -> NewsStory:
    return NewsStory(
        id=str(payload.get("id")),
        title=str(payload.get("title", "")),
        body=str(payload.get("body", "")),
        author_id=_text_or_none(payload.get("authorId")),
        published_at=parse_timestamp(payload.get("publishedAt")),
        image=payload.get("image"),
        views=int(payload.get("views", 0) or 0),
    )


def report_to_payload(report: IncidentReport) -> dict[str, Any]:
    return {
        "id": report.id,
        "title": report.title,
        "description": report.description,
        "reported_by": report.author_id,
        "reported_at": _iso_or_none(report.reported_at),
        "severity_tag": report.severity_tag,
        "location_of_incident": report.location_of_incident,
        "police_reference": report.police_reference,
        "views": report.views,
    }


def report_from_payload(payload: dict[str, Any]) -> IncidentReport:
    return IncidentReport(
        id=str(payload.get("id")),
        title=str(payload.get("title", "")),
        description=str(payload.get("description", "")),
        author_id=_text_or_none(payload.get("reported_by")),
        reported_at=parse_timestamp(payload.get("reported_at")),
        severity_tag=payload.get("severity_tag"),
        location_of_incident=payload.get("location_of_incident"),
        police_reference=payload.get("police_reference"),
        views=int(payload.get("views", 0) or 0),
    )


__all__ = [
    "event_from_payload",
    "event_to_payload",
    "news_from_payload",
    "news_to_payload",
    "notification_from_payload",
    "notification_to_payload",
    "report_from_payload",
    "report_to_payload",
    "request_from_payload",
    "request_to_payload",
]
