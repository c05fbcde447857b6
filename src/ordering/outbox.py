"""Order outbox: order notifications waiting to be published."""

from protean.core.aggregate import BaseAggregate
from protean.fields import DateTime, Integer, String, Text

from ordering.domain import ordering
from shared.messaging.outbox import OutboxMessageMixin, OutboxStatus


@ordering.aggregate
class OutboxMessage(BaseAggregate, OutboxMessageMixin):
    topic = String(required=True, max_length=255)
    key = String(required=True, max_length=255)
    payload = Text(required=True)
    status = String(max_length=20, choices=OutboxStatus, default=OutboxStatus.PENDING.value)
    attempts = Integer(default=0)
    last_error = Text()
    next_attempt_at = DateTime()
    created_at = DateTime()
    published_at = DateTime()
