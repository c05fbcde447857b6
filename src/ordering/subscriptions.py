"""Messaging subscriptions of the Order service (consumer group ``order-service``)."""

from ordering.domain import ordering
from ordering.order.delivery_events import DeliveryEventHandler
from shared.events.delivery import DeliveryCreated, DeliveryStatusChanged
from shared.messaging import topics
from shared.messaging.consumer import Subscription


def order_service_subscriptions() -> list[Subscription]:
    handler = DeliveryEventHandler()
    return [
        Subscription(
            topic=topics.DELIVERY_CREATED,
            group=topics.ORDER_SERVICE_GROUP,
            contract=DeliveryCreated,
            handler=handler.on_delivery_created,
            domain=ordering,
        ),
        Subscription(
            topic=topics.DELIVERY_STATUS_CHANGED,
            group=topics.ORDER_SERVICE_GROUP,
            contract=DeliveryStatusChanged,
            handler=handler.on_delivery_status_changed,
            domain=ordering,
        ),
    ]
