"""Read-side lookups for orders. Run inside the ordering domain context."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from ordering.clients import get_delivery_client
from ordering.order.order import Order
from shared.errors import DeliveryNotAssigned, OrderNotFound
from shared.identity import RequestIdentity


def find_order(order_id: str) -> Order:
    try:
        return current_domain.repository_for(Order).get(order_id)
    except ObjectNotFoundError as exc:
        raise OrderNotFound(order_id) from exc


def list_orders() -> list[Order]:
    repo = current_domain.repository_for(Order)
    return repo._dao.query.order_by("created_at").all().items


def delivery_for_order(order_id: str, identity: RequestIdentity | None = None) -> dict:
    """The Delivery linked to an order, read through from the Delivery service.

    Raises DeliveryNotAssigned while the link has not been projected yet,
    which is distinct from the Delivery service reporting DeliveryNotFound.
    """
    order = find_order(order_id)
    if order.delivery_id is None:
        raise DeliveryNotAssigned(order_id)
    return get_delivery_client().get_delivery(str(order.delivery_id), identity)
