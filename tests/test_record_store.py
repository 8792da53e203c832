"""Tests for the record store and versioned repositories."""

from __future__ import annotations

import pytest

from app.domain.entities import NOTIFICATION_JOIN_REQUEST, Notification, UserAccount
from app.domain.errors import ConcurrencyConflictError, NotFoundError, StoreError
from app.infrastructure.repositories import ProfileRepository
from app.infrastructure.store import TABLE_PROFILES, RecordStore


def test_get_record_raises_not_found(session) -> None:
    store = RecordStore(session)

    with pytest.raises(NotFoundError):
        store.get_record(TABLE_PROFILES, "missing")


def test_unknown_table_is_a_store_error(session) -> None:
    with pytest.raises(StoreError):
        RecordStore(session).query_records("nope")


def test_query_records_filters(session, make_profile) -> None:
    make_profile("alice")
    make_profile("bob", group_id="g1")
    make_profile("carol", group_id="g1")
    store = RecordStore(session)

    members = store.query_records(TABLE_PROFILES, {"group_id": "g1"})
    assert [record["id"] for record in members] == ["bob", "carol"]

    unassigned = store.query_records(TABLE_PROFILES, {"group_id": None})
    assert [record["id"] for record in unassigned] == ["alice"]

    assert store.query_records(TABLE_PROFILES, {"id": []}) == []
    picked = store.query_records(TABLE_PROFILES, {"id": ["alice", "carol"]})
    assert {record["id"] for record in picked} == {"alice", "carol"}


def test_update_fields_bumps_version(session, make_profile) -> None:
    account = make_profile("alice")
    store = RecordStore(session)

    new_version = store.update_fields(
        TABLE_PROFILES, "alice", {"name": "Alice B"}, expected_version=account.version
    )

    assert new_version == account.version + 1
    assert store.get_record(TABLE_PROFILES, "alice")["name"] == "Alice B"


def test_stale_version_is_rejected(session, make_profile) -> None:
    stale = make_profile("alice")
    repository = ProfileRepository(session)
    repository.update_fields(stale, name="First writer")

    with pytest.raises(ConcurrencyConflictError):
        repository.update_fields(stale, name="Second writer")

    assert repository.require("alice").name == "First writer"


def test_update_missing_record_is_not_a_conflict(session) -> None:
    with pytest.raises(NotFoundError):
        RecordStore(session).update_fields(
            TABLE_PROFILES, "ghost", {"name": "x"}, expected_version=1
        )


def test_mutate_retries_after_a_concurrent_write(session, make_profile) -> None:
    make_profile("alice")
    repository = ProfileRepository(session)
    calls = 0

    def _rename(account: UserAccount):
        nonlocal calls
        calls += 1
        if calls == 1:
            # Another writer sneaks in between our read and our write.
            RecordStore(session).update_fields(TABLE_PROFILES, "alice", {"avatar_url": "a.png"})
        return {"name": "Renamed"}

    account, changed = repository.mutate("alice", _rename)

    assert changed
    assert calls == 2
    assert account.name == "Renamed"
    assert account.avatar_url == "a.png"


def test_mutate_gives_up_after_max_attempts(session, make_profile) -> None:
    make_profile("alice")
    repository = ProfileRepository(session)

    calls = 0

    def _always_raced(account: UserAccount):
        nonlocal calls
        calls += 1
        RecordStore(session).update_fields(TABLE_PROFILES, "alice", {"avatar_url": "x"})
        return {"name": "Never"}

    with pytest.raises(ConcurrencyConflictError):
        repository.mutate("alice", _always_raced, max_attempts=3)

    assert calls == 3


def test_mutate_without_changes_writes_nothing(session, make_profile) -> None:
    account = make_profile("alice")

    result, changed = ProfileRepository(session).mutate("alice", lambda _: None)

    assert not changed
    assert result.version == account.version


def test_atomic_block_rolls_back_every_write(session, make_profile) -> None:
    make_profile("alice")
    make_profile("bob")
    store = RecordStore(session)

    with pytest.raises(RuntimeError):
        with store.atomic():
            store.update_fields(TABLE_PROFILES, "alice", {"name": "Changed"})
            store.update_fields(TABLE_PROFILES, "bob", {"name": "Changed"})
            raise RuntimeError("abort")

    assert store.get_record(TABLE_PROFILES, "alice")["name"] == "Alice"
    assert store.get_record(TABLE_PROFILES, "bob")["name"] == "Bob"


def test_invoke_unknown_procedure(session) -> None:
    with pytest.raises(NotFoundError):
        RecordStore(session).invoke_atomic("does_not_exist", {})


def test_remove_notifications_can_correlate_on_user_id(session, make_profile) -> None:
    make_profile("alice")
    repository = ProfileRepository(session)
    for request_id, requester in (("r1", "dave"), ("r2", "erin")):
        repository.append_notification(
            "alice",
            Notification(
                id=request_id,
                type=NOTIFICATION_JOIN_REQUEST,
                message=f"{requester} wants in",
                user_id=requester,
                group_id="g1",
            ),
        )

    removed = repository.remove_notifications(
        "alice", NOTIFICATION_JOIN_REQUEST, user_id="dave", group_id="g1"
    )

    assert removed == 1
    assert [n.user_id for n in repository.require("alice").notifications] == ["erin"]
