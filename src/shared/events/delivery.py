"""Cross-service event contracts for Delivery lifecycle events.

Published by the Delivery service through its outbox and consumed by the
Order service to keep ``Order.delivery_id`` and ``Order.status`` in step
with the Delivery it does not own. Each contract is registered as an
external event via domain.register_external_event() in every domain that
builds or reads it.
"""

from protean.core.event import BaseEvent
from protean.fields import DateTime, Identifier, String


class DeliveryCreated(BaseEvent):
    """A Delivery was created for an existing Order. Keyed by order_id."""

    __version__ = 1

    order_id = Identifier(required=True)
    delivery_id = Identifier(required=True)
    status = String(required=True)
    created_at = DateTime(required=True)


class DeliveryStatusChanged(BaseEvent):
    """A Delivery moved to a new status. Keyed by delivery_id."""

    __version__ = 1

    delivery_id = Identifier(required=True)
    order_id = Identifier(required=True)
    old_status = String(required=True)
    new_status = String(required=True)
    changed_at = DateTime(required=True)
