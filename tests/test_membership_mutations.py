"""Tests for joining, leaving, ownership changes and account deletion."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from app.application.use_cases.content import attend_event, create_event
from app.application.use_cases.membership import (
    change_member_role,
    create_join_request,
    delete_group,
    join_group_with_password,
    leave_group,
    reconcile_memberships,
    remove_member,
    transfer_ownership,
)
from app.application.use_cases.profiles import delete_account
from app.application.use_cases.reminders import run_reminder_sweep
from app.domain.entities import ROLE_ADMIN, ROLE_MEMBER, MembershipRequest
from app.domain.errors import (
    NotFoundError,
    PermissionDeniedError,
    PreconditionFailedError,
    StoreError,
)
from app.infrastructure.repositories import GroupRepository, ProfileRepository


def test_create_group_makes_creator_an_admin_member(session, make_group) -> None:
    group = make_group("alice", name="  Oak Street ")

    alice = ProfileRepository(session).require("alice")
    assert group.name == "Oak Street"
    assert group.users == ["alice"]
    assert group.created_by == "alice"
    assert alice.group_id == group.id
    assert alice.is_group_creator
    assert alice.role == ROLE_ADMIN


def test_cannot_create_second_group(session, make_group) -> None:
    make_group("alice")

    with pytest.raises(PreconditionFailedError):
        make_group("alice", name="Another")


def test_join_with_password(session, make_group, make_profile) -> None:
    group = make_group("alice", password="letmein")
    make_profile("dave")

    with pytest.raises(PreconditionFailedError):
        join_group_with_password(session, group_id=group.id, user_id="dave", password="nope")

    result = join_group_with_password(
        session, group_id=group.id, user_id="dave", password="letmein"
    )

    assert result.ok
    assert ProfileRepository(session).require("dave").group_id == group.id
    assert GroupRepository(session).require(group.id).users == ["alice", "dave"]


def test_join_with_password_withdraws_pending_request(session, make_group, make_profile) -> None:
    group = make_group("alice", password="letmein")
    make_profile("dave")
    create_join_request(session, group_id=group.id, user_id="dave", password="letmein")

    join_group_with_password(session, group_id=group.id, user_id="dave", password="letmein")

    profiles = ProfileRepository(session)
    assert GroupRepository(session).require(group.id).requests == []
    assert profiles.require("dave").requested_group_id is None
    assert profiles.require("alice").notifications == []


def test_join_group_without_password_is_request_only(session, make_group, make_profile) -> None:
    group = make_group("alice")
    make_profile("dave")

    with pytest.raises(PreconditionFailedError):
        join_group_with_password(session, group_id=group.id, user_id="dave", password="x")


def test_leave_group_clears_pointer_and_roster(session, community) -> None:
    result = leave_group(session, user_id="bob")

    assert result.ok
    bob = ProfileRepository(session).require("bob")
    assert bob.group_id is None
    assert "bob" not in GroupRepository(session).require(community.id).users


def test_leave_retry_finishes_roster_write(session, community, monkeypatch) -> None:
    original = GroupRepository.mutate

    def _failing(self, record_id, mutator, **kwargs):
        raise StoreError("group store unavailable")

    monkeypatch.setattr(GroupRepository, "mutate", _failing)
    first = leave_group(session, user_id="bob")
    monkeypatch.setattr(GroupRepository, "mutate", original)

    assert not first.ok
    assert ProfileRepository(session).require("bob").group_id is None
    assert "bob" in GroupRepository(session).require(community.id).users

    second = leave_group(session, user_id="bob", group_id=community.id)
    assert second.ok
    assert "bob" not in GroupRepository(session).require(community.id).users


def test_leaving_drops_event_attendance(session, community, publisher) -> None:
    now = datetime(2026, 5, 1, 8, 0, tzinfo=timezone.utc)
    event = create_event(
        session,
        group_id=community.id,
        author_id="alice",
        title="Street party",
        message="",
        start_date=now + timedelta(hours=10),
    ).value
    for user_id in ("bob", "carol"):
        attend_event(session, group_id=community.id, event_id=event.id, user_id=user_id)

    result = leave_group(session, user_id="bob")

    assert "leave_events:bob" in result.applied
    stored = GroupRepository(session).require(community.id).find_event(event.id)
    assert stored.attendees == ["carol"]
    assert stored.attending_count == 1

    run_reminder_sweep(session, now=now, publisher=publisher)
    assert publisher.user_ids == ["carol"]


def test_leave_without_group(session, make_profile) -> None:
    make_profile("dave")

    with pytest.raises(PreconditionFailedError):
        leave_group(session, user_id="dave")


def test_creator_cannot_leave(session, community) -> None:
    with pytest.raises(PreconditionFailedError):
        leave_group(session, user_id="alice")


def test_remove_member(session, community) -> None:
    result = remove_member(session, group_id=community.id, user_id="carol", acting_user_id="alice")

    assert result.ok
    assert ProfileRepository(session).require("carol").group_id is None
    assert GroupRepository(session).require(community.id).users == ["alice", "bob"]


def test_remove_member_requires_admin(session, community) -> None:
    with pytest.raises(PermissionDeniedError):
        remove_member(session, group_id=community.id, user_id="carol", acting_user_id="bob")


def test_creator_cannot_be_removed(session, community) -> None:
    change_member_role(
        session, group_id=community.id, user_id="bob", role=ROLE_ADMIN, acting_user_id="alice"
    )

    with pytest.raises(PreconditionFailedError):
        remove_member(session, group_id=community.id, user_id="alice", acting_user_id="bob")


def test_remove_unknown_member(session, community, make_profile) -> None:
    make_profile("dave")

    with pytest.raises(NotFoundError):
        remove_member(session, group_id=community.id, user_id="dave", acting_user_id="alice")


def test_change_member_role(session, community) -> None:
    bob = change_member_role(
        session, group_id=community.id, user_id="bob", role=ROLE_ADMIN, acting_user_id="alice"
    )
    assert bob.role == ROLE_ADMIN

    with pytest.raises(PreconditionFailedError):
        change_member_role(
            session, group_id=community.id, user_id="bob", role="Owner", acting_user_id="alice"
        )
    with pytest.raises(PreconditionFailedError):
        change_member_role(
            session,
            group_id=community.id,
            user_id="alice",
            role=ROLE_MEMBER,
            acting_user_id="bob",
        )


def test_transfer_ownership(session, community) -> None:
    result = transfer_ownership(
        session, group_id=community.id, new_owner_id="bob", acting_user_id="alice"
    )

    assert result.ok
    profiles = ProfileRepository(session)
    assert GroupRepository(session).require(community.id).created_by == "bob"
    assert profiles.require("bob").is_group_creator
    assert profiles.require("bob").role == ROLE_ADMIN
    assert not profiles.require("alice").is_group_creator

    assert leave_group(session, user_id="alice").ok


def test_transfer_requires_creator(session, community) -> None:
    with pytest.raises(PermissionDeniedError):
        transfer_ownership(
            session, group_id=community.id, new_owner_id="carol", acting_user_id="bob"
        )


def test_delete_group_disassociates_everyone(session, community, make_profile) -> None:
    make_profile("dave")
    create_join_request(session, group_id=community.id, user_id="dave")

    result = delete_group(session, group_id=community.id, acting_user_id="alice")

    assert result.ok
    assert "delete_group_record" in result.applied
    profiles = ProfileRepository(session)
    for user_id in ("alice", "bob", "carol"):
        account = profiles.require(user_id)
        assert account.group_id is None
        assert not account.is_group_creator
    assert profiles.require("dave").requested_group_id is None
    assert GroupRepository(session).get(community.id) is None


def test_delete_group_keeps_record_when_a_member_cannot_be_detached(
    session, community, monkeypatch
) -> None:
    original = ProfileRepository.mutate

    def _failing(self, record_id, mutator, **kwargs):
        if record_id == "carol":
            raise StoreError("carol is locked")
        return original(self, record_id, mutator, **kwargs)

    monkeypatch.setattr(ProfileRepository, "mutate", _failing)
    result = delete_group(session, group_id=community.id, acting_user_id="alice")
    monkeypatch.setattr(ProfileRepository, "mutate", original)

    assert not result.ok
    assert {failure.step for failure in result.failures} == {
        "clear_group_pointer:carol",
        "delete_group_record",
    }
    assert GroupRepository(session).get(community.id) is not None

    retry = delete_group(session, group_id=community.id, acting_user_id="alice")
    assert retry.ok
    assert GroupRepository(session).get(community.id) is None
    assert ProfileRepository(session).require("carol").group_id is None


def test_delete_account_of_member(session, community) -> None:
    result = delete_account(session, user_id="carol")

    assert result.ok
    assert ProfileRepository(session).get("carol") is None
    assert "carol" not in GroupRepository(session).require(community.id).users


def test_delete_account_cancels_pending_request(session, make_group, make_profile) -> None:
    group = make_group("alice")
    make_profile("dave")
    create_join_request(session, group_id=group.id, user_id="dave")

    result = delete_account(session, user_id="dave")

    assert result.ok
    assert GroupRepository(session).require(group.id).requests == []
    assert ProfileRepository(session).require("alice").notifications == []


def test_delete_account_cancels_every_pending_request(session, make_group, make_profile) -> None:
    groups = GroupRepository(session)
    oak = make_group("alice")
    elm = make_group("erin", name="Elm Road")
    make_profile("dave")
    create_join_request(session, group_id=oak.id, user_id="dave")
    elm = groups.require(elm.id)
    groups.update_fields(elm, requests=[MembershipRequest(id="legacy", user_id="dave")])

    result = delete_account(session, user_id="dave")

    assert result.ok
    assert result.applied[:2] == [
        f"cancel_pending_request:{oak.id}",
        f"cancel_pending_request:{elm.id}",
    ]
    assert groups.require(oak.id).requests == []
    assert groups.require(elm.id).requests == []


def test_delete_account_of_creator_needs_a_decision(session, community) -> None:
    with pytest.raises(PreconditionFailedError):
        delete_account(session, user_id="alice")

    assert ProfileRepository(session).get("alice") is not None


def test_delete_account_of_creator_deletes_group(session, community) -> None:
    result = delete_account(session, user_id="alice", group_resolution="delete_group")

    assert result.ok
    profiles = ProfileRepository(session)
    assert profiles.get("alice") is None
    assert GroupRepository(session).get(community.id) is None
    assert profiles.require("bob").group_id is None
    assert profiles.require("carol").group_id is None


def test_delete_account_of_creator_transfers_group(session, community) -> None:
    result = delete_account(
        session, user_id="alice", group_resolution="transfer", new_owner_id="bob"
    )

    assert result.ok
    group = GroupRepository(session).require(community.id)
    assert group.created_by == "bob"
    assert group.users == ["bob", "carol"]
    assert ProfileRepository(session).get("alice") is None


def test_delete_account_transfer_to_non_member(session, community, make_profile) -> None:
    make_profile("dave")

    with pytest.raises(NotFoundError):
        delete_account(session, user_id="alice", group_resolution="transfer", new_owner_id="dave")


def test_reconcile_repairs_roster_drift(session, community, make_profile) -> None:
    groups = GroupRepository(session)
    profiles = ProfileRepository(session)
    make_profile("dave", group_id=community.id)
    make_profile("erin", requested_group_id=community.id)
    group = groups.require(community.id)
    groups.update_fields(group, users=["alice", "bob", "carol", "ghost"])

    result = reconcile_memberships(session)

    assert result.ok
    assert groups.require(community.id).users == ["alice", "bob", "carol", "dave"]
    assert profiles.require("erin").requested_group_id is None

    again = reconcile_memberships(session)
    assert again.applied == []


def test_reconcile_collapses_duplicate_pending_requests(session, make_group, make_profile) -> None:
    groups = GroupRepository(session)
    group = make_group("alice")
    make_profile("dave", requested_group_id=group.id)
    groups.update_fields(
        group,
        requests=[
            MembershipRequest(id="r1", user_id="dave"),
            MembershipRequest(id="r2", user_id="dave"),
        ],
    )

    result = reconcile_memberships(session)

    assert result.applied == [f"collapse_duplicate_requests:{group.id}"]
    assert [r.id for r in groups.require(group.id).requests] == ["r1"]
    assert ProfileRepository(session).require("dave").requested_group_id == group.id


def test_reconcile_drops_requests_nobody_can_act_on(session, community, make_profile) -> None:
    groups = GroupRepository(session)
    group = groups.require(community.id)
    make_profile("dave")
    groups.update_fields(
        group,
        requests=[
            MembershipRequest(id="gone", user_id="ghost"),
            MembershipRequest(id="member", user_id="bob"),
            MembershipRequest(id="live", user_id="dave"),
        ],
    )

    result = reconcile_memberships(session)

    assert result.applied == [f"drop_stale_requests:{community.id}"]
    assert [r.id for r in groups.require(community.id).requests] == ["live"]
