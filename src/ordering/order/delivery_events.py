"""Inbound cross-service event handler: the Order service reacts to Delivery events.

DeliveryCreated links the Delivery to its Order; DeliveryStatusChanged to
DELIVERED marks the Order delivered. Every other status change is
acknowledged without touching the Order.

An event for an Order this service does not know raises OrderNotFound, so the
record stays unacknowledged and is redelivered. This absorbs the window
where a delivery event overtakes the order's own write. Once retries are
exhausted the consumer worker dead-letters the record.

Cross-service events are imported from shared.events.delivery and registered
as external events via ordering.register_external_event().
"""

import structlog
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from ordering.domain import ordering
from ordering.order.delivery_link import LinkDelivery, RecordDelivery
from ordering.order.order import Order
from shared.events.delivery import DeliveryCreated, DeliveryStatusChanged

logger = structlog.get_logger(__name__)

DELIVERED = "DELIVERED"

# Register external events so Protean can deserialize them
ordering.register_external_event(DeliveryCreated, "Delivery.DeliveryCreated.v1")
ordering.register_external_event(DeliveryStatusChanged, "Delivery.DeliveryStatusChanged.v1")


@ordering.event_handler(part_of=Order, stream_category="delivery::delivery")
class DeliveryEventHandler:
    """Keeps Order.delivery_id and Order.status in step with the Delivery service."""

    @handle(DeliveryCreated)
    def on_delivery_created(self, event: DeliveryCreated) -> None:
        logger.info(
            "Linking delivery to order",
            order_id=str(event.order_id),
            delivery_id=str(event.delivery_id),
        )
        current_domain.process(
            LinkDelivery(order_id=event.order_id, delivery_id=event.delivery_id),
            asynchronous=False,
        )

    @handle(DeliveryStatusChanged)
    def on_delivery_status_changed(self, event: DeliveryStatusChanged) -> None:
        if event.new_status != DELIVERED:
            logger.debug(
                "Ignoring non-terminal delivery status",
                order_id=str(event.order_id),
                delivery_id=str(event.delivery_id),
                new_status=event.new_status,
            )
            return

        logger.info(
            "Recording delivery on order",
            order_id=str(event.order_id),
            delivery_id=str(event.delivery_id),
        )
        current_domain.process(
            RecordDelivery(order_id=event.order_id, delivery_id=event.delivery_id),
            asynchronous=False,
        )
