"""Both producing domains' OutboxMessage aggregates carry the shared outbox behaviour."""

from datetime import UTC, datetime, timedelta

import pytest
from delivery.outbox import OutboxMessage as DeliveryOutboxMessage
from ordering.outbox import OutboxMessage as OrderOutboxMessage
from protean.core.aggregate import BaseAggregate
from shared.events.delivery import DeliveryCreated
from shared.messaging.codec import decode
from shared.messaging.outbox import OutboxMessageMixin, OutboxStatus

NOW = datetime(2030, 1, 1, 12, 0, tzinfo=UTC)

OUTBOXES = [DeliveryOutboxMessage, OrderOutboxMessage]


def _event():
    return DeliveryCreated(order_id="ord-1", delivery_id="dl-1", status="PENDING", created_at=NOW)


@pytest.mark.parametrize("outbox_cls", OUTBOXES)
def test_registered_aggregate_keeps_outbox_behaviour(outbox_cls):
    assert issubclass(outbox_cls, BaseAggregate)
    assert issubclass(outbox_cls, OutboxMessageMixin)


def test_for_event_builds_pending_row():
    message = DeliveryOutboxMessage.for_event("delivery-created", "ord-1", _event())

    assert message.topic == "delivery-created"
    assert message.key == "ord-1"
    assert message.status == OutboxStatus.PENDING.value
    assert message.attempts == 0
    assert decode(DeliveryCreated, message.payload).delivery_id == "dl-1"


def test_failed_row_is_due_once_backoff_elapses():
    message = DeliveryOutboxMessage.for_event("delivery-created", "ord-1", _event())
    assert message.is_due(NOW)

    message.mark_failed("broker down", timedelta(seconds=2), NOW)

    assert message.attempts == 1
    assert message.last_error == "broker down"
    assert not message.is_due(NOW + timedelta(seconds=1))
    assert message.is_due(NOW + timedelta(seconds=2))


def test_mark_published_clears_retry_state():
    message = DeliveryOutboxMessage.for_event("delivery-created", "ord-1", _event())
    message.mark_failed("broker down", timedelta(seconds=2), NOW)

    message.mark_published(NOW)

    assert message.status == OutboxStatus.PUBLISHED.value
    assert message.attempts == 2
    assert message.last_error is None
    assert message.next_attempt_at is None
