"""Dispatch record: one row per notification handed to the sender."""

from enum import Enum

from protean.fields import DateTime, Identifier, String, Text

from notifications.domain import notifications


class DispatchStatus(Enum):
    SENT = "SENT"
    FAILED = "FAILED"


@notifications.aggregate
class Dispatch:
    event_type = String(required=True, max_length=50)
    order_id = Identifier(required=True)
    delivery_id = Identifier()
    user_id = Identifier(required=True)
    user_email = String(max_length=254)
    status = String(required=True, max_length=10, choices=DispatchStatus)
    sender_message_id = String(max_length=100)
    error = Text()
    dispatched_at = DateTime()
