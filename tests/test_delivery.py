"""Tests for push delivery of inbox appends."""

from __future__ import annotations

import json
from datetime import datetime, timezone

import anyio
import httpx
import pytest

from app.domain.entities import Notification, UserAccount
from app.domain.errors import DeliveryFailureError
from app.infrastructure.notifications import (
    DeliveryAdapter,
    DeliveryOutcome,
    ExpoPushClient,
    NotificationPublisher,
    PushServiceUnavailableError,
)

PUSH_URL = "https://push.example.test/send"


def _client(handler, *, max_attempts: int = 3) -> ExpoPushClient:
    return ExpoPushClient(
        url=PUSH_URL,
        access_token="expo-token",
        max_attempts=max_attempts,
        backoff_multiplier=0,
        transport=httpx.MockTransport(handler),
    )


def _account(**fields) -> UserAccount:
    notification = Notification(
        id="n1",
        type="new_event",
        message="Alice posted a new event in Oak Street: 'Street party'",
        created_at=datetime(2026, 5, 1, 8, 0, tzinfo=timezone.utc),
        group_id="g1",
        event_id="e1",
    )
    values = {
        "id": "bob",
        "name": "Bob",
        "email": "bob@example.com",
        "notifications": [notification],
        "push_token": "ExponentPushToken[bob]",
    }
    values.update(fields)
    return UserAccount(**values)


class FakeSender:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.sent: list[tuple[str, str, str, dict]] = []

    async def send(self, token, title, body, data):
        self.sent.append((token, title, body, data))
        if self.error is not None:
            raise self.error
        return {"data": {"status": "ok"}}


def test_client_posts_expo_message() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"data": {"status": "ok", "id": "ticket"}})

    body = anyio.run(_client(handler).send, "token-1", "Title", "Body", {"k": "v"})

    assert body["data"]["id"] == "ticket"
    (request,) = requests
    assert request.headers["Authorization"] == "Bearer expo-token"
    sent = json.loads(request.content)
    assert sent == {
        "to": "token-1",
        "sound": "default",
        "title": "Title",
        "body": "Body",
        "data": {"k": "v"},
    }


def test_client_retries_unavailable_service() -> None:
    statuses = iter([503, 429, 200])

    def handler(request: httpx.Request) -> httpx.Response:
        status = next(statuses)
        if status == 200:
            return httpx.Response(200, json={"data": {"status": "ok"}})
        return httpx.Response(status, text="busy")

    body = anyio.run(_client(handler).send, "token-1", "Title", "Body", {})

    assert body == {"data": {"status": "ok"}}


def test_client_gives_up_after_max_attempts() -> None:
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        return httpx.Response(502, text="bad gateway")

    with pytest.raises(PushServiceUnavailableError) as excinfo:
        anyio.run(_client(handler, max_attempts=2).send, "token-1", "Title", "Body", {})

    assert calls == 2
    assert excinfo.value.status_code == 502


def test_client_does_not_retry_rejected_messages() -> None:
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        return httpx.Response(400, text="invalid token")

    with pytest.raises(DeliveryFailureError, match="400"):
        anyio.run(_client(handler).send, "token-1", "Title", "Body", {})

    assert calls == 1


def test_client_reports_ticket_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "data": {
                    "status": "error",
                    "message": "not registered",
                    "details": {"error": "DeviceNotRegistered"},
                }
            },
        )

    with pytest.raises(DeliveryFailureError, match="DeviceNotRegistered"):
        anyio.run(_client(handler).send, "token-1", "Title", "Body", {})


def test_adapter_sends_latest_notification() -> None:
    sender = FakeSender()
    account = _account()

    report = anyio.run(DeliveryAdapter(sender).deliver_latest, account)

    assert report.outcome is DeliveryOutcome.SENT
    assert report.notification_id == "n1"
    ((token, title, body, data),) = sender.sent
    assert token == "ExponentPushToken[bob]"
    assert title == "New Notification"
    assert body == "Alice posted a new event in Oak Street: 'Street party'"
    assert data["notification"]["id"] == "n1"
    assert data["notification"]["type"] == "new_event"


def test_adapter_skips_profiles_without_token() -> None:
    sender = FakeSender()

    report = anyio.run(DeliveryAdapter(sender).deliver_latest, _account(push_token=None))

    assert report.outcome is DeliveryOutcome.SKIPPED
    assert report.detail == "no push token"
    assert sender.sent == []


def test_adapter_skips_empty_inbox() -> None:
    sender = FakeSender()

    report = anyio.run(DeliveryAdapter(sender).deliver_latest, _account(notifications=[]))

    assert report.outcome is DeliveryOutcome.SKIPPED
    assert sender.sent == []


def test_adapter_reports_failures_without_raising() -> None:
    sender = FakeSender(error=DeliveryFailureError("device gone"))

    report = anyio.run(DeliveryAdapter(sender).deliver_latest, _account())

    assert report.outcome is DeliveryOutcome.FAILED
    assert report.detail == "device gone"


def test_disabled_publisher_never_builds_adapter() -> None:
    def _factory() -> DeliveryAdapter:
        raise AssertionError("adapter should not be created")

    publisher = NotificationPublisher(_factory, enabled=False)

    publisher.dispatch(_account())

