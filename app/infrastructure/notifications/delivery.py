"""Forward the newest inbox entry of a profile to its push device."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import logging

import httpx

from app.domain import inbox
from app.domain.entities import UserAccount
from app.domain.errors import DeliveryFailureError
from app.infrastructure.repositories.payloads import notification_to_payload

from .push import PushSender

logger = logging.getLogger(__name__)

PUSH_TITLE = "New Notification"


class DeliveryOutcome(str, Enum):
    SENT = "sent"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class DeliveryReport:
    """What happened to one delivery attempt."""

    outcome: DeliveryOutcome
    user_id: str
    notification_id: str | None = None
    detail: str | None = None


class DeliveryAdapter:
    """Best-effort, at-most-once push delivery of inbox appends.

    Only the tail of the inbox is considered: the adapter is invoked after an
    append, so the tail is the notification that was just added. Missing push
    tokens are not errors. Send failures are logged and reported, never raised.
    """

    def __init__(self, sender: PushSender) -> None:
        self._sender = sender

    async def deliver_latest(self, account: UserAccount) -> DeliveryReport:
        notification = inbox.latest(account.notifications)
        if notification is None:
            logger.debug("Profile %s has no notifications; nothing to deliver", account.id)
            return DeliveryReport(DeliveryOutcome.SKIPPED, account.id, detail="empty inbox")

        if not notification.message:
            logger.error(
                "Latest notification %s of profile %s has no message", notification.id, account.id
            )
            return DeliveryReport(
                DeliveryOutcome.SKIPPED, account.id, notification.id, "notification without message"
            )

        if not account.push_token:
            logger.debug("Profile %s has no push token; skipping delivery", account.id)
            return DeliveryReport(
                DeliveryOutcome.SKIPPED, account.id, notification.id, "no push token"
            )

        try:
            await self._sender.send(
                account.push_token,
                PUSH_TITLE,
                notification.message,
                {"notification": notification_to_payload(notification)},
            )
        except (DeliveryFailureError, httpx.HTTPError) as exc:
            logger.error(
                "Push delivery of notification %s to profile %s failed: %s",
                notification.id,
                account.id,
                exc,
            )
            return DeliveryReport(DeliveryOutcome.FAILED, account.id, notification.id, str(exc))

        logger.info("Delivered notification %s to profile %s", notification.id, account.id)
        return DeliveryReport(DeliveryOutcome.SENT, account.id, notification.id)


__all__ = ["DeliveryAdapter", "DeliveryOutcome", "DeliveryReport", "PUSH_TITLE"]
