"""Persistence layer for groups and their embedded lists."""

from __future__ import annotations

from typing import Any

from app.domain.entities import Group
from app.domain.errors import NotFoundError
from app.infrastructure.store import TABLE_GROUPS

from .base import VersionedRepository
from .payloads import (
    event_from_payload,
    event_to_payload,
    news_from_payload,
    news_to_payload,
    report_from_payload,
    report_to_payload,
    request_from_payload,
    request_to_payload,
)

_LIST_SERIALIZERS = {
    "requests": request_to_payload,
    "events": event_to_payload,
    "news": news_to_payload,
    "reports": report_to_payload,
}


class GroupRepository(VersionedRepository[Group]):
    """Provide read and conditional-write operations for :class:`Group`."""

    table = TABLE_GROUPS

    def get(self, group_id: str) -> Group | None:
        try:
            return self.require(group_id)
        except NotFoundError:
            return None

    def require(self, group_id: str) -> Group:
        try:
            return super().require(group_id)
        except NotFoundError as exc:
            raise NotFoundError("group", group_id) from exc

    def list_all(self) -> list[Group]:
        return [self._to_entity(record) for record in self.store.query_records(self.table)]

    def list_created_by(self, user_id: str) -> list[Group]:
        records = self.store.query_records(self.table, {"created_by": user_id})
        return [self._to_entity(record) for record in records]

    def create(self, group: Group) -> Group:
        columns = self._to_columns(
            {
                "name": group.name,
                "created_by": group.created_by,
                "group_password": group.group_password,
                "users": group.users,
                "requests": group.requests,
                "events": group.events,
                "news": group.news,
                "reports": group.reports,
            }
        )
        return self._to_entity(self.store.insert_record(self.table, {"id": group.id, **columns}))

    def delete(self, group_id: str) -> None:
        try:
            self.store.delete_record(self.table, group_id)
        except NotFoundError as exc:
            raise NotFoundError("group", group_id) from exc

    def _to_entity(self, record: dict[str, Any]) -> Group:
        return Group(
            id=record["id"],
            name=record["name"],
            created_by=record.get("created_by"),
            group_password=record.get("group_password"),
            users=[str(user_id) for user_id in record.get("users") or []],
            requests=[request_from_payload(item) for item in record.get("requests") or []],
            events=[event_from_payload(item) for item in record.get("events") or []],
            news=[news_from_payload(item) for item in record.get("news") or []],
            reports=[report_from_payload(item) for item in record.get("reports") or []],
            created_at=record.get("created_at"),
            version=int(record.get("version") or 1),
        )

    def _to_columns(self, fields: dict[str, Any]) -> dict[str, Any]:
        columns: dict[str, Any] = {}
        for name, value in fields.items():
            serializer = _LIST_SERIALIZERS.get(name)
            if serializer is not None:
                value = [serializer(item) for item in value]
            elif name == "users":
                value = list(dict.fromkeys(value))
            columns[name] = value
        return columns


__all__ = ["GroupRepository"]
