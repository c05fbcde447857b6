"""Outbound events for delivery changes, staged in the delivery outbox.

Delivery-originated notifications are keyed by delivery id on
``delivery-events``; the status-sync events use the keys the Order service
relies on for per-entity ordering.
"""

from datetime import UTC, datetime

from delivery.domain import delivery as delivery_domain
from delivery.outbox import OutboxMessage
from shared.events.delivery import DeliveryCreated, DeliveryStatusChanged
from shared.events.notifications import Notification, NotificationType
from shared.messaging import topics
from shared.messaging.outbox import stage

delivery_domain.register_external_event(DeliveryCreated, "Delivery.DeliveryCreated.v1")
delivery_domain.register_external_event(DeliveryStatusChanged, "Delivery.DeliveryStatusChanged.v1")
delivery_domain.register_external_event(Notification, "Notifications.Notification.v1")


def announce_created(delivery, user_email: str) -> None:
    stage(
        OutboxMessage,
        topics.DELIVERY_CREATED,
        delivery.order_id,
        DeliveryCreated(
            order_id=delivery.order_id,
            delivery_id=delivery.id,
            status=delivery.status,
            created_at=delivery.created_at,
        ),
    )
    stage(
        OutboxMessage,
        topics.DELIVERY_EVENTS,
        delivery.id,
        Notification(
            event_type=NotificationType.DELIVERY_CREATED.value,
            order_id=delivery.order_id,
            delivery_id=delivery.id,
            user_id=delivery.user_id,
            user_email=user_email,
            message=(
                f"Delivery for your order #{delivery.order_id} is scheduled with "
                f"Delivery ID: {delivery.id}. Expected delivery: {delivery.expected_delivery_date}"
            ),
            status=delivery.status,
            timestamp=datetime.now(UTC),
        ),
    )


def announce_status_changed(delivery, old_status: str, user_email: str) -> None:
    changed_at = delivery.updated_at or datetime.now(UTC)
    stage(
        OutboxMessage,
        topics.DELIVERY_STATUS_CHANGED,
        delivery.id,
        DeliveryStatusChanged(
            delivery_id=delivery.id,
            order_id=delivery.order_id,
            old_status=old_status,
            new_status=delivery.status,
            changed_at=changed_at,
        ),
    )
    stage(
        OutboxMessage,
        topics.DELIVERY_EVENTS,
        delivery.id,
        Notification(
            event_type=NotificationType.DELIVERY_STATUS_CHANGED.value,
            order_id=delivery.order_id,
            delivery_id=delivery.id,
            user_id=delivery.user_id,
            user_email=user_email,
            message=f"Delivery status updated to: {delivery.status} for Order #{delivery.order_id}",
            status=delivery.status,
            timestamp=changed_at,
        ),
    )
