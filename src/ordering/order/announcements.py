"""Order notifications, staged in the order outbox keyed by order id."""

from datetime import UTC, datetime

from ordering.domain import ordering
from ordering.outbox import OutboxMessage
from shared.events.notifications import Notification, NotificationType
from shared.identity import RequestIdentity
from shared.messaging import topics
from shared.messaging.outbox import stage

ordering.register_external_event(Notification, "Notifications.Notification.v1")

_MESSAGES = {
    NotificationType.ORDER_CREATED: "Order created successfully with ID: {id}. Total amount: ₹{amount:.2f}",
    NotificationType.ORDER_UPDATED: "Order #{id} has been updated. New total amount: ₹{amount:.2f}",
}


def announce(order, event_type: NotificationType, identity: RequestIdentity | None = None) -> None:
    # The caller's email is only known when the caller is the order's owner
    email = identity.email if identity and identity.user_id == str(order.user_id) else None
    stage(
        OutboxMessage,
        topics.ORDER_EVENTS,
        order.id,
        Notification(
            event_type=event_type.value,
            order_id=order.id,
            delivery_id=order.delivery_id,
            user_id=order.user_id,
            user_email=email,
            message=_MESSAGES[event_type].format(id=order.id, amount=order.amount),
            status=order.status,
            timestamp=datetime.now(UTC),
        ),
    )
