"""Profile schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from .operation import OperationResultRead


class ProfileCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    avatar_url: str | None = None


class ProfileUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    avatar_url: str | None = None

    model_config = ConfigDict(extra="forbid")


class NotificationPreferencesUpdate(BaseModel):
    """Opt-in flags; omitted fields keep their current value."""

    event: bool | None = None
    news: bool | None = None
    check: bool | None = None

    model_config = ConfigDict(extra="forbid")


class PushTokenUpdate(BaseModel):
    push_token: str | None = Field(default=None, description="Expo push token, or null to clear it")


class AccountDeletion(BaseModel):
    group_resolution: str | None = Field(
        default=None,
        description="For group creators: 'delete_group' or 'transfer'",
    )
    new_owner_id: str | None = None


class ProfileRead(BaseModel):
    id: str
    name: str
    email: str
    avatar_url: str | None
    group_id: str | None
    requested_group_id: str | None
    is_group_creator: bool
    role: str
    attended_events: list[str]
    receive_event_notifications: bool
    receive_news_notifications: bool
    receive_check_notifications: bool
    checked_in: bool
    check_in_times: list[datetime]
    check_out_times: list[datetime]
    has_push_token: bool
    created_at: datetime | None


class PresenceRead(OperationResultRead):
    """Check-in or check-out outcome; ``applied`` holds the notified members."""

    checked_in: bool
    recorded_at: datetime
    opted_out: list[str] = Field(default_factory=list)


__all__ = [
    "AccountDeletion",
    "NotificationPreferencesUpdate",
    "PresenceRead",
    "ProfileCreate",
    "ProfileRead",
    "ProfileUpdate",
    "PushTokenUpdate",
]
