"""Push delivery helpers for the infrastructure layer."""

from .delivery import DeliveryAdapter, DeliveryOutcome, DeliveryReport
from .publisher import (
    NotificationPublisher,
    get_notification_publisher,
    notification_publisher,
)
from .push import ExpoPushClient, PushSender, PushServiceUnavailableError

__all__ = [
    "DeliveryAdapter",
    "DeliveryOutcome",
    "DeliveryReport",
    "ExpoPushClient",
    "NotificationPublisher",
    "PushSender",
    "PushServiceUnavailableError",
    "get_notification_publisher",
    "notification_publisher",
]
