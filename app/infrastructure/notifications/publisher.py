"""Schedule push delivery for profiles whose inbox just received an entry."""

from __future__ import annotations

import asyncio
from collections.abc import Callable

import logging

import anyio
from anyio import from_thread

from app.config import get_settings
from app.domain.entities import UserAccount

from .delivery import DeliveryAdapter, DeliveryReport
from .push import ExpoPushClient

logger = logging.getLogger(__name__)


def _default_adapter() -> DeliveryAdapter:
    return DeliveryAdapter(ExpoPushClient.from_settings())


class NotificationPublisher:
    """Hand inbox appends to the delivery adapter without blocking the caller."""

    def __init__(
        self,
        adapter_factory: Callable[[], DeliveryAdapter] = _default_adapter,
        *,
        enabled: bool | None = None,
    ) -> None:
        self._adapter_factory = adapter_factory
        self._adapter: DeliveryAdapter | None = None
        self._enabled = enabled
        self._tasks: set[asyncio.Task] = set()

    @property
    def enabled(self) -> bool:
        if self._enabled is not None:
            return self._enabled
        return get_settings().push_delivery_enabled

    def dispatch(self, account: UserAccount) -> None:
        """Schedule delivery of the newest notification of ``account``."""

        if not self.enabled:
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            try:
                from_thread.run_sync(self._spawn, account)
            except RuntimeError:
                # Plain thread without an event loop (scripts): deliver inline.
                anyio.run(self._deliver, account)
        else:
            self._track(loop.create_task(self._deliver(account)))

    def _spawn(self, account: UserAccount) -> None:
        loop = asyncio.get_running_loop()
        self._track(loop.create_task(self._deliver(account)))

    def _track(self, task: asyncio.Task) -> None:
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _deliver(self, account: UserAccount) -> DeliveryReport | None:
        if self._adapter is None:
            self._adapter = self._adapter_factory()
        try:
            return await self._adapter.deliver_latest(account)
        except Exception:  # pragma: no cover - delivery must never fail the caller
            logger.exception("Unexpected error delivering push to profile %s", account.id)
            return None


notification_publisher = NotificationPublisher()


def get_notification_publisher() -> NotificationPublisher:
    """Return the shared publisher instance."""

    return notification_publisher


__all__ = [
    "NotificationPublisher",
    "get_notification_publisher",
    "notification_publisher",
]
