"""Messaging subscriptions of the Notification service (group ``notification-service``)."""

from notifications.dispatch.fan_in import forward_notification
from notifications.domain import notifications
from shared.events.notifications import Notification
from shared.messaging import topics
from shared.messaging.consumer import Subscription


def notification_service_subscriptions() -> list[Subscription]:
    return [
        Subscription(
            topic=topic,
            group=topics.NOTIFICATION_SERVICE_GROUP,
            contract=Notification,
            handler=forward_notification,
            domain=notifications,
        )
        for topic in (topics.ORDER_EVENTS, topics.DELIVERY_EVENTS)
    ]
