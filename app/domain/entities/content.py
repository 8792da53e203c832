"""Domain entities for notifiable group content."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

CONTENT_EVENT = "event"
CONTENT_NEWS = "news"
CONTENT_REPORT = "report"

# Name of the group list that stores each content kind.
CONTENT_LIST_FIELDS = {
    CONTENT_EVENT: "events",
    CONTENT_NEWS: "news",
    CONTENT_REPORT: "reports",
}


@dataclass
class Event:
    """A scheduled group event that members can attend."""

    id: str
    title: str
    message: str
    author_id: str | None
    start_date: datetime | None
    end_date: datetime | None = None
    image: str | None = None
    attendees: list[str] = field(default_factory=list)
    attending_count: int = 0
    views: int = 0

    kind = CONTENT_EVENT


@dataclass
class NewsStory:
    """A news story published to the group."""

    id: str
    title: str
    body: str
    author_id: str | None
    published_at: datetime | None = None
    image: str | None = None
    views: int = 0

    kind = CONTENT_NEWS


@dataclass
class IncidentReport:
    """An incident reported by a member."""

    id: str
    title: str
    description: str
    author_id: str | None
    reported_at: datetime | None = None
    severity_tag: str | None = None
    location_of_incident: str | None = None
    police_reference: str | None = None
    views: int = 0

    kind = CONTENT_REPORT


ContentItem = Event | NewsStory | IncidentReport


__all__ = [
    "CONTENT_EVENT",
    "CONTENT_LIST_FIELDS",
    "CONTENT_NEWS",
    "CONTENT_REPORT",
    "ContentItem",
    "Event",
    "IncidentReport",
    "NewsStory",
]
