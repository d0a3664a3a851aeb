"""Fake notifier that records messages for test assertions."""

from storefront.notifications.port import NotificationKind, Notifier


class FakeNotifier(Notifier):
    def __init__(self) -> None:
        self.sent: list[dict] = []
        self.should_succeed = True
        self.failure_reason = "Notification service unavailable"

    def configure(self, should_succeed: bool = True, failure_reason: str = "Notification service unavailable") -> None:
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def send(self, kind: NotificationKind, recipient: str, payload: dict) -> None:
        if not self.should_succeed:
            raise ConnectionError(self.failure_reason)
        self.sent.append({"kind": kind, "recipient": recipient, "payload": payload})

    def of_kind(self, kind: NotificationKind) -> list[dict]:
        return [message for message in self.sent if message["kind"] == kind]

    def reset(self) -> None:
        self.sent.clear()
        self.should_succeed = True
        self.failure_reason = "Notification service unavailable"
