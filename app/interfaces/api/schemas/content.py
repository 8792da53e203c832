"""Schemas for events, news stories and incident reports."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .operation import OperationResultRead


class EventCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    message: str = ""
    start_date: datetime
    end_date: datetime | None = None
    image: str | None = None

    @model_validator(mode="after")
    def _check_dates(self) -> "EventCreate":
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class NewsStoryCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    body: str = ""
    image: str | None = None


class IncidentReportCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    severity_tag: str | None = None
    location_of_incident: str | None = None
    police_reference: str | None = None


class EventRead(BaseModel):
    id: str
    title: str
    message: str
    author_id: str | None
    start_date: datetime | None
    end_date: datetime | None
    image: str | None
    attendees: list[str]
    attending_count: int
    views: int

    model_config = ConfigDict(from_attributes=True)


class NewsStoryRead(BaseModel):
    id: str
    title: str
    body: str
    author_id: str | None
    published_at: datetime | None
    image: str | None
    views: int

    model_config = ConfigDict(from_attributes=True)


class IncidentReportRead(BaseModel):
    id: str
    title: str
    description: str
    author_id: str | None
    reported_at: datetime | None
    severity_tag: str | None
    location_of_incident: str | None
    police_reference: str | None
    views: int

    model_config = ConfigDict(from_attributes=True)


class FanOutRead(OperationResultRead):
    """Publication outcome; ``applied`` holds the ids of notified members."""

    content_id: str
    kind: str
    opted_out: list[str] = Field(default_factory=list)


class ViewCountRead(BaseModel):
    views: int


__all__ = [
    "EventCreate",
    "EventRead",
    "FanOutRead",
    "IncidentReportCreate",
    "IncidentReportRead",
    "NewsStoryCreate",
    "NewsStoryRead",
    "ViewCountRead",
]
