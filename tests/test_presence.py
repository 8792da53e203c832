"""Tests for checking in and out of a group."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from app.application.use_cases.profiles import (
    check_in,
    check_out,
    update_notification_preferences,
)
from app.domain.entities import (
    NOTIFICATION_MEMBER_CHECKED_IN,
    NOTIFICATION_MEMBER_CHECKED_OUT,
)
from app.domain.errors import PreconditionFailedError, StoreError
from app.infrastructure.repositories import ProfileRepository

NOW = datetime(2026, 5, 1, 21, 15, tzinfo=timezone.utc)


def _types(session, user_id: str) -> list[str]:
    return [n.type for n in ProfileRepository(session).require(user_id).notifications]


def test_check_in_records_time_and_notifies_members(session, community, publisher) -> None:
    update_notification_preferences(session, user_id="carol", check=False)

    result = check_in(session, user_id="bob", now=NOW, publisher=publisher)

    assert result.ok
    assert result.value == NOW
    assert result.notified == ["alice"]
    assert result.opted_out == ["carol"]
    bob = ProfileRepository(session).require("bob")
    assert bob.checked_in
    assert bob.check_in_times == [NOW]
    (notification,) = ProfileRepository(session).require("alice").notifications
    assert notification.type == NOTIFICATION_MEMBER_CHECKED_IN
    assert notification.user_id == "bob"
    assert notification.group_id == community.id
    assert notification.message == "Bob checked in at 09:15 PM."
    assert _types(session, "carol") == []
    assert publisher.user_ids == ["alice"]


def test_repeated_check_in_records_once(session, community) -> None:
    check_in(session, user_id="bob", now=NOW)
    again = check_in(session, user_id="bob", now=NOW + timedelta(minutes=5))

    assert again.value == NOW
    assert again.applied == []
    assert sorted(again.skipped) == ["alice", "carol"]
    assert ProfileRepository(session).require("bob").check_in_times == [NOW]
    assert _types(session, "alice") == [NOTIFICATION_MEMBER_CHECKED_IN]


def test_each_shift_is_announced(session, community) -> None:
    check_in(session, user_id="bob", now=NOW)
    check_out(session, user_id="bob", now=NOW + timedelta(hours=2))
    check_in(session, user_id="bob", now=NOW + timedelta(days=1))

    bob = ProfileRepository(session).require("bob")
    assert bob.checked_in
    assert len(bob.check_in_times) == 2
    assert bob.check_out_times == [NOW + timedelta(hours=2)]
    assert _types(session, "alice") == [
        NOTIFICATION_MEMBER_CHECKED_IN,
        NOTIFICATION_MEMBER_CHECKED_OUT,
        NOTIFICATION_MEMBER_CHECKED_IN,
    ]


def test_check_out_requires_a_check_in(session, community) -> None:
    with pytest.raises(PreconditionFailedError):
        check_out(session, user_id="bob", now=NOW)


def test_check_in_requires_a_group(session, make_profile) -> None:
    make_profile("dave")

    with pytest.raises(PreconditionFailedError):
        check_in(session, user_id="dave", now=NOW)


def test_failed_recipient_is_reached_on_retry(session, community, monkeypatch) -> None:
    original = ProfileRepository.append_notification

    def _failing(self, user_id, notification, *, dedupe=False):
        if user_id == "carol":
            raise StoreError("carol's inbox is unavailable")
        return original(self, user_id, notification, dedupe=dedupe)

    monkeypatch.setattr(ProfileRepository, "append_notification", _failing)
    first = check_in(session, user_id="bob", now=NOW)
    monkeypatch.setattr(ProfileRepository, "append_notification", original)

    assert [failure.step for failure in first.failures] == ["carol"]

    retry = check_in(session, user_id="bob", now=NOW + timedelta(minutes=1))
    assert retry.notified == ["carol"]
    assert retry.skipped == ["alice"]
    assert _types(session, "alice") == [NOTIFICATION_MEMBER_CHECKED_IN]
