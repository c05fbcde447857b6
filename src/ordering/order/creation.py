"""Order placement: command and handler."""

import json

import structlog
from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.announcements import announce
from ordering.order.order import Order, PaymentMode
from ordering.order.pricing import price_items
from shared.events.notifications import NotificationType
from shared.identity import RequestIdentity

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class PlaceOrder:
    user_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of {product_id, quantity}
    payment_mode = String(required=True, max_length=20, choices=PaymentMode)
    requester = Text()  # JSON-encoded RequestIdentity


@ordering.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        identity = RequestIdentity.from_json(command.requester)
        items_data = json.loads(command.items) if isinstance(command.items, str) else command.items

        # Raises ProductServiceError before anything is written
        priced = price_items(items_data, identity)

        order = Order.create(
            user_id=command.user_id,
            payment_mode=command.payment_mode,
            priced_items=priced,
        )
        current_domain.repository_for(Order).add(order)
        announce(order, NotificationType.ORDER_CREATED, identity)

        logger.info("Order placed", order_id=str(order.id), user_id=str(order.user_id), amount=order.amount)
        return str(order.id)
