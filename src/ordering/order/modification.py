"""Order modification: full replacement of line items and payment mode."""

import json

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.announcements import announce
from ordering.order.order import Order, PaymentMode
from ordering.order.pricing import price_items
from shared.errors import OrderNotFound
from shared.events.notifications import NotificationType
from shared.identity import RequestIdentity

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class UpdateOrder:
    """Re-price and replace an order's items. Status and delivery link are kept."""

    order_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of {product_id, quantity}
    payment_mode = String(required=True, max_length=20, choices=PaymentMode)
    requester = Text()


@ordering.command_handler(part_of=Order)
class UpdateOrderHandler:
    @handle(UpdateOrder)
    def update_order(self, command):
        identity = RequestIdentity.from_json(command.requester)
        repo = current_domain.repository_for(Order)
        try:
            order = repo.get(command.order_id)
        except ObjectNotFoundError as exc:
            raise OrderNotFound(command.order_id) from exc

        items_data = json.loads(command.items) if isinstance(command.items, str) else command.items
        priced = price_items(items_data, identity)

        order.replace_items(priced, command.payment_mode)
        repo.add(order)
        announce(order, NotificationType.ORDER_UPDATED, identity)

        logger.info("Order updated", order_id=str(order.id), amount=order.amount)
        return str(order.id)
