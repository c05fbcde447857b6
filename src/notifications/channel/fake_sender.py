"""Fake sender: records notifications in memory for test assertions."""

from uuid import uuid4

from notifications.channel.sender_port import NotificationSender


class FakeSender(NotificationSender):
    def __init__(self):
        self.sent: list[dict] = []
        self.should_succeed = True
        self.failure_reason = "Notification delivery failed"

    def configure(self, should_succeed: bool = True, failure_reason: str = "Notification delivery failed"):
        """Configure the fake sender behavior for testing."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def send(self, notification) -> dict:
        if not self.should_succeed:
            return {"message_id": None, "status": "failed", "error": self.failure_reason}

        message_id = f"fake-{uuid4().hex[:12]}"
        self.sent.append(
            {
                "message_id": message_id,
                "event_type": notification.event_type,
                "order_id": str(notification.order_id),
                "delivery_id": str(notification.delivery_id) if notification.delivery_id else None,
                "user_email": notification.user_email,
                "message": notification.message,
                "status": notification.status,
            }
        )
        return {"message_id": message_id, "status": "sent"}

    def reset(self):
        """Clear sent notifications (useful between tests)."""
        self.sent.clear()
        self.should_succeed = True
        self.failure_reason = "Notification delivery failed"
