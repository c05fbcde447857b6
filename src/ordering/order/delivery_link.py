"""Projection of Delivery state onto the Order: commands and handler.

These commands are issued only by the delivery event consumers. Both are
idempotent so that at-least-once redelivery has no observable extra effect.
"""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import Order
from shared.errors import OrderNotFound

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class LinkDelivery:
    order_id = Identifier(required=True)
    delivery_id = Identifier(required=True)


@ordering.command(part_of="Order")
class RecordDelivery:
    order_id = Identifier(required=True)
    delivery_id = Identifier()


@ordering.command_handler(part_of=Order)
class DeliveryLinkHandler:
    def _load(self, order_id) -> Order:
        try:
            return current_domain.repository_for(Order).get(order_id)
        except ObjectNotFoundError as exc:
            raise OrderNotFound(order_id) from exc

    @handle(LinkDelivery)
    def link_delivery(self, command) -> bool:
        order = self._load(command.order_id)
        try:
            linked = order.link_delivery(command.delivery_id)
        except ValidationError:
            # Never overwrite an existing link; surface it for investigation
            logger.error(
                "Delivery link anomaly: order already linked to a different delivery",
                order_id=str(order.id),
                linked_delivery_id=str(order.delivery_id),
                incoming_delivery_id=str(command.delivery_id),
            )
            return False

        if not linked:
            logger.debug("Delivery already linked", order_id=str(order.id), delivery_id=str(command.delivery_id))
            return False

        current_domain.repository_for(Order).add(order)
        logger.info("Delivery linked to order", order_id=str(order.id), delivery_id=str(command.delivery_id))
        return True

    @handle(RecordDelivery)
    def record_delivery(self, command) -> bool:
        order = self._load(command.order_id)
        if not order.mark_delivered():
            logger.debug("Order already delivered", order_id=str(order.id))
            return False

        current_domain.repository_for(Order).add(order)
        logger.info("Order marked delivered", order_id=str(order.id), delivery_id=str(command.delivery_id))
        return True
