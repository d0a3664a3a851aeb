"""Notification port: fire-and-forget messages to customers and staff."""

from abc import ABC, abstractmethod
from enum import Enum


class NotificationKind(Enum):
    ORDER_CONFIRMATION = "order_confirmation"
    STATUS_UPDATE = "status_update"
    CANCELLATION = "cancellation"
    LOW_STOCK = "low_stock"


class Notifier(ABC):
    @abstractmethod
    def send(self, kind: NotificationKind, recipient: str, payload: dict) -> None:
        """Deliver one message. Raises on delivery failure."""
        ...
