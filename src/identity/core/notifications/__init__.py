"""Notification utilities - out-of-band delivery of codes and links."""

from src.identity.core.notifications.delivery import (
    DeliveryPurpose,
    deliver,
    shutdown_delivery,
)

__all__ = [
    "DeliveryPurpose",
    "deliver",
    "shutdown_delivery",
]
