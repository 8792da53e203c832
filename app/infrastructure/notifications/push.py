"""HTTP client for the Expo push notification service."""

from __future__ import annotations

from typing import Any, Protocol

import logging

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from app.config import Settings, get_settings
from app.domain.errors import DeliveryFailureError

logger = logging.getLogger(__name__)


class PushServiceUnavailableError(DeliveryFailureError):
    """Transient push service failure (HTTP 429 or 5xx) that may be retried."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class PushSender(Protocol):
    """Anything able to deliver one push message to a device token."""

    async def send(
        self, token: str, title: str, body: str, data: dict[str, Any]
    ) -> dict[str, Any]:  # pragma: no cover - protocol definition
        ...


class ExpoPushClient:
    """Send push messages through the Expo HTTP API with retry and backoff."""

    def __init__(
        self,
        *,
        url: str,
        access_token: str | None = None,
        timeout: float = 10.0,
        max_attempts: int = 3,
        backoff_multiplier: float = 0.5,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self.access_token = access_token
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.backoff_multiplier = backoff_multiplier
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "ExpoPushClient":
        settings = settings or get_settings()
        return cls(
            url=settings.expo_push_url,
            access_token=settings.expo_access_token,
            timeout=settings.push_timeout_seconds,
            max_attempts=settings.push_max_attempts,
        )

    async def send(
        self, token: str, title: str, body: str, data: dict[str, Any]
    ) -> dict[str, Any]:
        """Deliver one message, retrying transport errors and 429/5xx responses."""

        message = {
            "to": token,
            "sound": "default",
            "title": title,
            "body": body,
            "data": data,
        }
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=self.backoff_multiplier, max=8),
            retry=retry_if_exception_type(
                (httpx.TransportError, PushServiceUnavailableError)
            ),
            reraise=True,
        )
        result: dict[str, Any] = {}
        async for attempt in retrying:
            with attempt:
                result = await self._post(message)
        return result

    async def _post(self, message: dict[str, Any]) -> dict[str, Any]:
        headers = {
            "Accept": "application/json",
            "Accept-Encoding": "gzip, deflate",
            "Content-Type": "application/json",
        }
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.post(self.url, json=message, headers=headers)

        if response.status_code == 429 or response.status_code >= 500:
            raise PushServiceUnavailableError(
                f"Push service responded with status {response.status_code}",
                status_code=response.status_code,
            )
        if response.status_code >= 400:
            raise DeliveryFailureError(
                f"Push service rejected the message with status {response.status_code}: "
                f"{response.text}"
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise DeliveryFailureError("Push service returned a non-JSON body") from exc

        ticket = body.get("data") if isinstance(body, dict) else None
        if isinstance(ticket, dict) and ticket.get("status") == "error":
            details = ticket.get("details") or {}
            raise DeliveryFailureError(
                f"Push ticket error: {ticket.get('message')} ({details.get('error', 'unknown')})"
            )
        logger.debug("Push service response: %s", body)
        return body


__all__ = ["ExpoPushClient", "PushSender", "PushServiceUnavailableError"]
