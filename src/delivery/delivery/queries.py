"""Read-side lookups for deliveries. Run inside the delivery domain context."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from delivery.clients import get_order_client
from delivery.delivery.delivery import Delivery
from shared.errors import DeliveryNotFound
from shared.identity import RequestIdentity


def find_delivery(delivery_id: str) -> Delivery:
    try:
        return current_domain.repository_for(Delivery).get(delivery_id)
    except ObjectNotFoundError as exc:
        raise DeliveryNotFound(delivery_id) from exc


def list_deliveries() -> list[Delivery]:
    repo = current_domain.repository_for(Delivery)
    return repo._dao.query.order_by("created_at").all().items


def find_order_for_delivery(delivery_id: str, identity: RequestIdentity | None = None) -> dict:
    """The Order this delivery belongs to, read through from the Order service."""
    dl = find_delivery(delivery_id)
    return get_order_client().get_order(dl.order_id, identity)
