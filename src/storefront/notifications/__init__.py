"""Notifier factory and best-effort dispatch.

Notifications never decide the outcome of an order operation: ``notify_safely``
catches and logs every delivery failure.
"""

import structlog

from storefront.notifications.fake import FakeNotifier
from storefront.notifications.port import NotificationKind, Notifier

logger = structlog.get_logger(__name__)

_current_notifier: Notifier | None = None


def get_notifier() -> Notifier:
    global _current_notifier
    if _current_notifier is None:
        _current_notifier = FakeNotifier()
    return _current_notifier


def set_notifier(notifier: Notifier) -> None:
    """Override the active notifier (useful for tests)."""
    global _current_notifier
    _current_notifier = notifier


def reset_notifier() -> None:
    global _current_notifier
    _current_notifier = None


def notify_safely(kind: NotificationKind, recipient: str, **payload) -> bool:
    """Send a notification, returning False instead of raising when delivery fails."""
    try:
        get_notifier().send(kind, str(recipient), payload)
    except Exception as exc:
        logger.warning(
            "Notification delivery failed",
            kind=kind.value,
            recipient=str(recipient),
            error=str(exc),
        )
        return False
    return True
