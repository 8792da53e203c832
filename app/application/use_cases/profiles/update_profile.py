"""Use cases for a user's own profile settings."""

from __future__ import annotations

from typing import Any

from sqlalchemy.orm import Session

from app.domain.entities import UserAccount
from app.infrastructure.repositories import ProfileRepository

_PREFERENCE_FIELDS = {
    "event": "receive_event_notifications",
    "news": "receive_news_notifications",
    "check": "receive_check_notifications",
}


def get_profile(session: Session, *, user_id: str) -> UserAccount:
    return ProfileRepository(session).require(user_id)


def update_notification_preferences(
    session: Session,
    *,
    user_id: str,
    event: bool | None = None,
    news: bool | None = None,
    check: bool | None = None,
) -> UserAccount:
    """Change the opt-in flags consulted by content fan-out."""

    requested = {"event": event, "news": news, "check": check}

    def _apply(account: UserAccount) -> dict[str, Any] | None:
        changes = {}
        for key, value in requested.items():
            field_name = _PREFERENCE_FIELDS[key]
            if value is not None and getattr(account, field_name) != value:
                changes[field_name] = value
        return changes or None

    account, _ = ProfileRepository(session).mutate(user_id, _apply)
    return account


def update_profile(
    session: Session,
    *,
    user_id: str,
    name: str | None = None,
    avatar_url: str | None = None,
) -> UserAccount:
    def _apply(account: UserAccount) -> dict[str, Any] | None:
        changes: dict[str, Any] = {}
        if name is not None and name.strip() and name.strip() != account.name:
            changes["name"] = name.strip()
        if avatar_url is not None and avatar_url != account.avatar_url:
            changes["avatar_url"] = avatar_url
        return changes or None

    account, _ = ProfileRepository(session).mutate(user_id, _apply)
    return account


def register_push_token(session: Session, *, user_id: str, push_token: str | None) -> UserAccount:
    """Store or clear the device token used for push delivery."""

    def _apply(account: UserAccount) -> dict[str, Any] | None:
        if account.push_token == push_token:
            return None
        return {"push_token": push_token}

    account, _ = ProfileRepository(session).mutate(user_id, _apply)
    return account
