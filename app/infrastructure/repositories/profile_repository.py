"""Persistence layer for user profiles and their inboxes."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Any

from app.domain import inbox
from app.domain.entities import Notification, UserAccount
from app.domain.errors import NotFoundError
from app.infrastructure.store import TABLE_PROFILES
from app.utils import parse_timestamp

from .base import VersionedRepository
from .payloads import notification_from_payload, notification_to_payload

# Entity attribute -> column name, where they differ.
_COLUMN_NAMES = {
    "requested_group_id": "requestedgroupid",
    "check_in_times": "check_in_time",
    "check_out_times": "check_out_time",
}
_TIMESTAMP_LISTS = ("check_in_times", "check_out_times")


class ProfileRepository(VersionedRepository[UserAccount]):
    """Provide read and conditional-write operations for :class:`UserAccount`."""

    table = TABLE_PROFILES

    def get(self, user_id: str) -> UserAccount | None:
        try:
            return self.require(user_id)
        except NotFoundError:
            return None

    def require(self, user_id: str) -> UserAccount:
        try:
            return super().require(user_id)
        except NotFoundError as exc:
            raise NotFoundError("user", user_id) from exc

    def get_map_by_ids(self, user_ids: Sequence[str]) -> dict[str, UserAccount]:
        """Bulk-fetch profiles; unknown ids are silently absent from the map."""

        unique_ids = {str(user_id) for user_id in user_ids if user_id}
        if not unique_ids:
            return {}
        records = self.store.query_records(self.table, {"id": unique_ids})
        return {record["id"]: self._to_entity(record) for record in records}

    def list_by_group(self, group_id: str) -> list[UserAccount]:
        records = self.store.query_records(self.table, {"group_id": group_id})
        return [self._to_entity(record) for record in records]

    def list_by_requested_group(self, group_id: str) -> list[UserAccount]:
        records = self.store.query_records(self.table, {"requestedgroupid": group_id})
        return [self._to_entity(record) for record in records]

    def list_all(self) -> list[UserAccount]:
        return [self._to_entity(record) for record in self.store.query_records(self.table)]

    def create(self, account: UserAccount) -> UserAccount:
        columns = self._to_columns(
            {
                "name": account.name,
                "email": account.email,
                "avatar_url": account.avatar_url,
                "group_id": account.group_id,
                "requested_group_id": account.requested_group_id,
                "is_group_creator": account.is_group_creator,
                "role": account.role,
                "notifications": account.notifications,
                "attended_events": account.attended_events,
                "receive_event_notifications": account.receive_event_notifications,
                "receive_news_notifications": account.receive_news_notifications,
                "receive_check_notifications": account.receive_check_notifications,
                "checked_in": account.checked_in,
                "check_in_times": account.check_in_times,
                "check_out_times": account.check_out_times,
                "push_token": account.push_token,
            }
        )
        return self._to_entity(self.store.insert_record(self.table, {"id": account.id, **columns}))

    def delete(self, user_id: str) -> None:
        try:
            self.store.delete_record(self.table, user_id)
        except NotFoundError as exc:
            raise NotFoundError("user", user_id) from exc

    # ------------------------------------------------------------------
    # Inbox helpers
    def append_notification(
        self, user_id: str, notification: Notification, *, dedupe: bool = False
    ) -> tuple[UserAccount, bool]:
        """Append ``notification`` to the inbox tail with retry on conflict."""

        def _append(account: UserAccount) -> dict[str, Any] | None:
            updated, appended = inbox.append_notification(
                account.notifications, notification, dedupe=dedupe
            )
            return {"notifications": updated} if appended else None

        return self.mutate(user_id, _append)

    def remove_notifications(
        self, profile_id: str, type_: str, /, **correlation: str | None
    ) -> int:
        """Remove matching notifications from ``profile_id`` and return how many were dropped.

        ``correlation`` may itself name a ``user_id`` (the requester of a
        ``join_request``), so the profile id is positional-only.
        """

        removed = 0

        def _remove(account: UserAccount) -> dict[str, Any] | None:
            nonlocal removed
            kept, removed = inbox.remove_matching(account.notifications, type_, **correlation)
            return {"notifications": kept} if removed else None

        self.mutate(profile_id, _remove)
        return removed

    # ------------------------------------------------------------------
    # Mapping helpers
    def _to_entity(self, record: dict[str, Any]) -> UserAccount:
        return UserAccount(
            id=record["id"],
            name=record["name"],
            email=record["email"],
            group_id=record.get("group_id"),
            requested_group_id=record.get("requestedgroupid"),
            is_group_creator=bool(record.get("is_group_creator")),
            role=record.get("role") or "Member",
            notifications=[
                notification_from_payload(item)
                for item in record.get("notifications") or []
                if isinstance(item, dict)
            ],
            attended_events=[str(e) for e in record.get("attended_events") or []],
            receive_event_notifications=bool(record.get("receive_event_notifications", True)),
            receive_news_notifications=bool(record.get("receive_news_notifications", True)),
            receive_check_notifications=bool(record.get("receive_check_notifications", True)),
            checked_in=bool(record.get("checked_in")),
            check_in_times=_timestamps(record.get("check_in_time")),
            check_out_times=_timestamps(record.get("check_out_time")),
            push_token=record.get("push_token"),
            avatar_url=record.get("avatar_url"),
            created_at=record.get("created_at"),
            version=int(record.get("version") or 1),
        )

    def _to_columns(self, fields: dict[str, Any]) -> dict[str, Any]:
        columns: dict[str, Any] = {}
        for name, value in fields.items():
            if name == "notifications":
                value = [notification_to_payload(n) for n in value]
            elif name == "attended_events":
                value = list(dict.fromkeys(value))
            elif name in _TIMESTAMP_LISTS:
                value = [stamp.isoformat() for stamp in value]
            columns[_COLUMN_NAMES.get(name, name)] = value
        return columns


def _timestamps(values: Any) -> list[datetime]:
    parsed = (parse_timestamp(value) for value in values or [])
    return [stamp for stamp in parsed if stamp is not None]


__all__ = ["ProfileRepository"]
