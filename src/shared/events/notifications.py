"""Cross-service contract for user-facing notifications.

Both the Order and the Delivery service emit this one shape; the
Notification fan-in consumes it from ``order-events`` and ``delivery-events``
alike.
"""

from enum import Enum

from protean.core.event import BaseEvent
from protean.fields import DateTime, Identifier, String, Text


class NotificationType(Enum):
    ORDER_CREATED = "ORDER_CREATED"
    ORDER_UPDATED = "ORDER_UPDATED"
    DELIVERY_CREATED = "DELIVERY_CREATED"
    DELIVERY_STATUS_CHANGED = "DELIVERY_STATUS_CHANGED"


class Notification(BaseEvent):
    """Something the user should hear about."""

    __version__ = 1

    event_type = String(required=True, choices=NotificationType)
    order_id = Identifier(required=True)
    delivery_id = Identifier()
    user_id = Identifier(required=True)
    user_email = String(max_length=254)
    message = Text(required=True)
    status = String(required=True)
    timestamp = DateTime(required=True)
