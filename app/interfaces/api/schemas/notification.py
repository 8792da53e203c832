"""Pydantic models describing inbox notifications."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class NotificationRead(BaseModel):
    """Representation of a notification delivered to the client."""

    id: str
    type: str
    message: str
    created_at: datetime | None
    read: bool
    group_id: str | None = None
    event_id: str | None = None
    user_id: str | None = None
    request_id: str | None = None
    content_id: str | None = None
    avatar_url: str | None = None

    model_config = ConfigDict(from_attributes=True)


class NotificationReadUpdate(BaseModel):
    read: bool | None = Field(default=None, description="Omit to toggle the current value")


class NotificationCountRead(BaseModel):
    count: int


class ReminderSweepRequest(BaseModel):
    now: datetime | None = Field(
        default=None,
        description="Instant to evaluate; defaults to the current time",
    )


__all__ = [
    "NotificationCountRead",
    "NotificationRead",
    "NotificationReadUpdate",
    "ReminderSweepRequest",
]
