"""Log sender: writes each notification to the application log.

Stands in for a real email/SMS integration; this is where one would plug in.
"""

from uuid import uuid4

import structlog

from notifications.channel.sender_port import NotificationSender

logger = structlog.get_logger(__name__)


class LogSender(NotificationSender):
    def send(self, notification) -> dict:
        message_id = f"log-{uuid4().hex[:12]}"
        logger.info(
            "Sending notification",
            message_id=message_id,
            to=notification.user_email,
            event_type=notification.event_type,
            order_id=str(notification.order_id),
            delivery_id=str(notification.delivery_id) if notification.delivery_id else None,
            message=notification.message,
        )
        return {"message_id": message_id, "status": "sent"}
