"""Tests for inbox list operations and the inbox use cases."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from app.application.use_cases.inbox import (
    build_notification,
    clear_notifications,
    delete_notification,
    deliver_notification,
    list_notifications,
    mark_all_notifications_read,
    set_notification_read,
)
from app.domain import inbox
from app.domain.entities import (
    NOTIFICATION_JOIN_REQUEST,
    NOTIFICATION_NEW_EVENT,
    Notification,
)
from app.domain.errors import NotFoundError

BASE = datetime(2026, 5, 1, 8, 0, tzinfo=timezone.utc)


def _notification(notification_id: str, minutes: int = 0, **fields) -> Notification:
    values = {"type": NOTIFICATION_NEW_EVENT, "message": f"message {notification_id}"}
    values.update(fields)
    return Notification(id=notification_id, created_at=BASE + timedelta(minutes=minutes), **values)


def test_append_skips_known_ids_and_duplicate_signatures() -> None:
    first = _notification("n1", group_id="g1", event_id="e1")
    same_id = _notification("n1", group_id="g1", event_id="other")
    same_signature = _notification("n2", group_id="g1", event_id="e1")

    current, appended = inbox.append_notification([], first)
    assert appended
    current, appended = inbox.append_notification(current, same_id)
    assert not appended
    current, appended = inbox.append_notification(current, same_signature)
    assert appended
    _, appended = inbox.append_notification(
        current, _notification("n3", group_id="g1", event_id="e1"), dedupe=True
    )
    assert not appended
    assert [n.id for n in current] == ["n1", "n2"]


def test_remove_matching_filters_on_correlation_fields() -> None:
    notifications = [
        _notification("n1", type=NOTIFICATION_JOIN_REQUEST, user_id="bob", group_id="g1"),
        _notification("n2", type=NOTIFICATION_JOIN_REQUEST, user_id="carol", group_id="g1"),
        _notification("n3", user_id="bob", group_id="g1"),
    ]

    kept, removed = inbox.remove_matching(
        notifications, NOTIFICATION_JOIN_REQUEST, user_id="bob", group_id="g1"
    )

    assert removed == 1
    assert [n.id for n in kept] == ["n2", "n3"]


def test_newest_first_puts_undated_entries_last() -> None:
    undated = Notification(id="old", type=NOTIFICATION_NEW_EVENT, message="old")
    ordered = inbox.newest_first([_notification("a", 1), undated, _notification("b", 5)])

    assert [n.id for n in ordered] == ["b", "a", "old"]


def test_set_read_toggles_when_no_value_given() -> None:
    notifications = [_notification("n1")]

    toggled, found = inbox.set_read(notifications, "n1")
    back, _ = inbox.set_read(toggled, "n1")
    _, missing = inbox.set_read(notifications, "nope")

    assert found
    assert toggled[0].read is True
    assert back[0].read is False
    assert missing is False
    assert notifications[0].read is False


def test_deliver_notification_dispatches_only_new_entries(profiles, make_profile, publisher) -> None:
    make_profile("bob")
    notification = build_notification(NOTIFICATION_NEW_EVENT, "hello", group_id="g1", event_id="e1")

    first = deliver_notification(profiles, "bob", notification, publisher=publisher)
    again = deliver_notification(profiles, "bob", notification, publisher=publisher)

    assert first is True
    assert again is False
    assert publisher.user_ids == ["bob"]
    assert profiles.require("bob").notifications[-1].id == notification.id


def test_inbox_use_cases(session, profiles, make_profile, publisher) -> None:
    make_profile("bob")
    for index in range(3):
        deliver_notification(
            profiles,
            "bob",
            _notification(f"n{index}", index, content_id=f"c{index}"),
            publisher=publisher,
        )

    listed = list_notifications(session, user_id="bob")
    assert [n.id for n in listed] == ["n2", "n1", "n0"]

    marked = set_notification_read(session, user_id="bob", notification_id="n1", read=True)
    assert marked.read is True
    unread = list_notifications(session, user_id="bob", unread_only=True)
    assert [n.id for n in unread] == ["n2", "n0"]

    assert mark_all_notifications_read(session, user_id="bob") == 2
    assert mark_all_notifications_read(session, user_id="bob") == 0

    delete_notification(session, user_id="bob", notification_id="n0")
    assert [n.id for n in list_notifications(session, user_id="bob")] == ["n2", "n1"]

    assert clear_notifications(session, user_id="bob") == 2
    assert list_notifications(session, user_id="bob") == []


def test_inbox_use_cases_report_unknown_notifications(session, make_profile) -> None:
    make_profile("bob")

    with pytest.raises(NotFoundError):
        set_notification_read(session, user_id="bob", notification_id="missing")
    with pytest.raises(NotFoundError):
        delete_notification(session, user_id="bob", notification_id="missing")
    with pytest.raises(NotFoundError):
        list_notifications(session, user_id="nobody")
