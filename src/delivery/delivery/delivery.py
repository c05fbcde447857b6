"""Delivery aggregate.

A Delivery belongs to exactly one Order (``order_id`` never changes after
creation) and carries the authoritative delivery status. Status changes go
through the state machine in ``delivery.delivery.state_machine``.
"""

from datetime import UTC, date, datetime, timedelta

from protean.fields import Date, DateTime, Identifier, String

from delivery.delivery.state_machine import DeliveryStatus, transition
from delivery.domain import delivery

DEFAULT_DELIVERY_WINDOW = timedelta(days=5)


@delivery.aggregate
class Delivery:
    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    status = String(
        max_length=20,
        choices=DeliveryStatus,
        default=DeliveryStatus.PENDING.value,
    )
    expected_delivery_date = Date()
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, order_id: str, user_id: str, expected_delivery_date: date | None = None):
        now = datetime.now(UTC)
        return cls(
            order_id=order_id,
            user_id=user_id,
            status=DeliveryStatus.PENDING.value,
            expected_delivery_date=expected_delivery_date or (now + DEFAULT_DELIVERY_WINDOW).date(),
            created_at=now,
            updated_at=now,
        )

    def change_status(self, requested) -> str:
        """Move to ``requested`` if the state machine allows it.

        Returns the previous status. Raises IllegalTransition otherwise,
        leaving the aggregate untouched.
        """
        previous = self.status
        self.status = transition(previous, requested).value
        self.updated_at = datetime.now(UTC)
        return previous
