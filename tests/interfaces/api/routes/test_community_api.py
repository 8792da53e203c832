"""Integration tests for the membership, content and inbox endpoints."""

from __future__ import annotations

import pytest

pytest.importorskip("fastapi")
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from app.config import reset_settings_cache
from app.infrastructure.database import get_db
from app.infrastructure.security import create_access_token
from app.interfaces.api.dependencies import get_publisher
from main import create_app


def _auth(user_id: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


@pytest.fixture()
def client(engine, publisher):
    """Return a test client whose sessions use the per-test database."""

    factory = sessionmaker(bind=engine, autocommit=False, autoflush=False)

    def _get_db():
        db = factory()
        try:
            yield db
        finally:
            db.close()

    app = create_app()
    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_publisher] = lambda: publisher
    return TestClient(app)


def _register(client: TestClient, user_id: str) -> None:
    response = client.post(
        "/profiles/",
        json={"name": user_id.title(), "email": f"{user_id}@example.com"},
        headers=_auth(user_id),
    )
    assert response.status_code == 201, response.text


def test_requests_without_token_are_rejected(client: TestClient) -> None:
    assert client.get("/profiles/me").status_code == 401
    response = client.get("/profiles/me", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401


def test_duplicate_profile_is_a_conflict(client: TestClient) -> None:
    _register(client, "alice")

    response = client.post(
        "/profiles/",
        json={"name": "Alice", "email": "alice@example.com"},
        headers=_auth("alice"),
    )

    assert response.status_code == 409


def test_join_request_flow(client: TestClient, publisher) -> None:
    _register(client, "alice")
    _register(client, "bob")

    created = client.post("/groups/", json={"name": "Oak Street"}, headers=_auth("alice"))
    assert created.status_code == 201, created.text
    body = created.json()
    assert body["ok"] is True
    assert body["group"]["users"] == ["alice"]
    group_id = body["group"]["id"]

    requested = client.post(f"/groups/{group_id}/requests/", json={}, headers=_auth("bob"))
    assert requested.status_code == 201, requested.text
    assert requested.json()["request"]["status"] == "pending"

    again = client.post(f"/groups/{group_id}/requests/", json={}, headers=_auth("bob"))
    assert again.status_code == 409

    mine = client.get("/profiles/me/requests", headers=_auth("bob")).json()
    assert [item["group_id"] for item in mine] == [group_id]

    inbox = client.get("/notifications/", headers=_auth("alice")).json()
    assert [(n["type"], n["user_id"]) for n in inbox] == [("join_request", "bob")]

    forbidden = client.post(
        f"/groups/{group_id}/requests/bob/accept", headers=_auth("bob")
    )
    assert forbidden.status_code == 403

    accepted = client.post(
        f"/groups/{group_id}/requests/bob/accept", headers=_auth("alice")
    )
    assert accepted.status_code == 200, accepted.text
    assert accepted.json()["ok"] is True

    group = client.get(f"/groups/{group_id}", headers=_auth("bob")).json()
    assert group["users"] == ["alice", "bob"]
    assert group["pending_requests"] == 0

    assert client.get("/notifications/", headers=_auth("alice")).json() == []
    bob_inbox = client.get("/notifications/", headers=_auth("bob")).json()
    assert [n["type"] for n in bob_inbox] == ["accepted_request"]
    assert publisher.user_ids == ["alice", "bob"]

    profile = client.get("/profiles/me", headers=_auth("bob")).json()
    assert profile["group_id"] == group_id
    assert profile["requested_group_id"] is None


def test_cancel_join_request_clears_creator_notification(client: TestClient) -> None:
    _register(client, "alice")
    _register(client, "bob")
    group_id = client.post(
        "/groups/", json={"name": "Oak Street"}, headers=_auth("alice")
    ).json()["group"]["id"]
    client.post(f"/groups/{group_id}/requests/", json={}, headers=_auth("bob"))

    cancelled = client.delete(f"/groups/{group_id}/requests/me", headers=_auth("bob"))

    assert cancelled.status_code == 200, cancelled.text
    assert cancelled.json() == {"count": 1}
    assert client.get("/notifications/", headers=_auth("alice")).json() == []
    missing = client.delete(f"/groups/{group_id}/requests/me", headers=_auth("bob"))
    assert missing.status_code == 404


def test_events_notify_members_and_inbox_can_be_managed(client: TestClient) -> None:
    _register(client, "alice")
    _register(client, "bob")
    group_id = client.post(
        "/groups/", json={"name": "Oak Street", "password": "secret"}, headers=_auth("alice")
    ).json()["group"]["id"]

    wrong = client.post(
        f"/groups/{group_id}/join", json={"password": "nope"}, headers=_auth("bob")
    )
    assert wrong.status_code == 400
    joined = client.post(
        f"/groups/{group_id}/join", json={"password": "secret"}, headers=_auth("bob")
    )
    assert joined.status_code == 200, joined.text

    published = client.post(
        f"/groups/{group_id}/events",
        json={"title": "Street party", "start_date": "2026-05-01T18:00:00+00:00"},
        headers=_auth("alice"),
    )
    assert published.status_code == 201, published.text
    assert published.json()["applied"] == ["bob"]

    (notification,) = client.get("/notifications/", headers=_auth("bob")).json()
    assert notification["type"] == "new_event"
    assert notification["message"] == "Alice posted a new event in Oak Street: 'Street party'"
    assert notification["read"] is False

    toggled = client.patch(
        f"/notifications/{notification['id']}", json={}, headers=_auth("bob")
    )
    assert toggled.json()["read"] is True
    read_all = client.post("/notifications/read-all", headers=_auth("bob"))
    assert read_all.json() == {"count": 0}

    deleted = client.delete(f"/notifications/{notification['id']}", headers=_auth("bob"))
    assert deleted.status_code == 204
    missing = client.delete(f"/notifications/{notification['id']}", headers=_auth("bob"))
    assert missing.status_code == 404


def test_account_deletion_detaches_member(client: TestClient) -> None:
    _register(client, "alice")
    _register(client, "bob")
    group_id = client.post(
        "/groups/", json={"name": "Oak Street", "password": "secret"}, headers=_auth("alice")
    ).json()["group"]["id"]
    client.post(f"/groups/{group_id}/join", json={"password": "secret"}, headers=_auth("bob"))

    response = client.delete("/profiles/me", headers=_auth("bob"))

    assert response.status_code == 200, response.text
    assert response.json()["ok"] is True
    group = client.get(f"/groups/{group_id}", headers=_auth("alice")).json()
    assert group["users"] == ["alice"]
    assert client.get("/profiles/me", headers=_auth("bob")).status_code == 404


def test_unknown_group_is_not_found(client: TestClient) -> None:
    _register(client, "alice")

    assert client.get("/groups/missing", headers=_auth("alice")).status_code == 404


def test_profile_settings(client: TestClient) -> None:
    _register(client, "alice")

    preferences = client.put(
        "/profiles/me/preferences", json={"news": False}, headers=_auth("alice")
    )
    assert preferences.status_code == 200, preferences.text
    body = preferences.json()
    assert body["receive_news_notifications"] is False
    assert body["receive_event_notifications"] is True

    token = client.put(
        "/profiles/me/push-token",
        json={"push_token": "ExponentPushToken[alice]"},
        headers=_auth("alice"),
    )
    assert token.json()["has_push_token"] is True

    renamed = client.patch("/profiles/me", json={"name": "Alice B"}, headers=_auth("alice"))
    assert renamed.json()["name"] == "Alice B"


@pytest.fixture()
def service_key(monkeypatch):
    monkeypatch.setenv("SERVICE_API_KEY", "sweeper-key")
    reset_settings_cache()
    return "sweeper-key"


def test_sweeps_reject_member_tokens(client: TestClient, service_key: str) -> None:
    _register(client, "alice")

    for path, payload in (("/sweeps/reminders", {}), ("/sweeps/memberships", None)):
        assert client.post(path, json=payload, headers=_auth("alice")).status_code == 403
        wrong = client.post(path, json=payload, headers={"X-Service-Key": "guess"})
        assert wrong.status_code == 403


def test_sweeps_accept_the_service_key(client: TestClient, service_key: str) -> None:
    headers = {"X-Service-Key": service_key}

    reminders = client.post("/sweeps/reminders", json={}, headers=headers)
    memberships = client.post("/sweeps/memberships", headers=headers)

    assert reminders.status_code == 200, reminders.text
    assert memberships.json()["ok"] is True


def test_sweeps_are_closed_without_a_configured_key(client: TestClient) -> None:
    response = client.post("/sweeps/memberships", headers={"X-Service-Key": ""})

    assert response.status_code == 403


def test_check_in_and_out(client: TestClient) -> None:
    _register(client, "alice")
    _register(client, "bob")
    group_id = client.post(
        "/groups/", json={"name": "Oak Street", "password": "secret"}, headers=_auth("alice")
    ).json()["group"]["id"]
    client.post(f"/groups/{group_id}/join", json={"password": "secret"}, headers=_auth("bob"))

    checked_in = client.post("/profiles/me/check-in", headers=_auth("bob"))
    assert checked_in.status_code == 200, checked_in.text
    assert checked_in.json()["applied"] == ["alice"]
    assert checked_in.json()["checked_in"] is True

    (notification,) = client.get("/notifications/", headers=_auth("alice")).json()
    assert notification["type"] == "member_checked_in"

    checked_out = client.post("/profiles/me/check-out", headers=_auth("bob"))
    assert checked_out.json()["checked_in"] is False
    profile = client.get("/profiles/me", headers=_auth("bob")).json()
    assert profile["checked_in"] is False
    assert len(profile["check_in_times"]) == 1
    assert len(profile["check_out_times"]) == 1

    assert client.post("/profiles/me/check-in", headers=_auth("dave")).status_code == 404
