"""Order aggregate.

An Order is priced from the Product service when it is placed and never
trusts a client-supplied amount. Its ``delivery_id`` and DELIVERED status are
an eventually-consistent projection of the Delivery service's state, fed by
the delivery event consumers: the Order never validates delivery transitions
itself, it only mirrors the link and the DELIVERED signal.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, Integer, String

from ordering.domain import ordering


class OrderStatus(Enum):
    PENDING = "PENDING"
    DELIVERED = "DELIVERED"


class PaymentMode(Enum):
    CASH = "CASH"
    CARD = "CARD"
    UPI = "UPI"
    NET_BANKING = "NET_BANKING"


@ordering.entity(part_of="Order")
class OrderItem:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)

    @property
    def line_total(self) -> float:
        return self.unit_price * self.quantity


@ordering.aggregate
class Order:
    user_id = Identifier(required=True)
    amount = Float(default=0.0, min_value=0.0)
    payment_mode = String(required=True, max_length=20, choices=PaymentMode)
    paid = Boolean(default=False)
    status = String(
        max_length=20,
        choices=OrderStatus,
        default=OrderStatus.PENDING.value,
    )
    delivery_id = Identifier()
    items = HasMany(OrderItem)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, user_id: str, payment_mode: str, priced_items: list[dict]):
        """Create a PENDING order from line items that already carry a unit price."""
        now = datetime.now(UTC)
        order = cls(
            user_id=user_id,
            payment_mode=payment_mode,
            paid=False,
            status=OrderStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )
        order._set_items(priced_items)
        return order

    # -------------------------------------------------------------------
    # Behaviour
    # -------------------------------------------------------------------
    def replace_items(self, priced_items: list[dict], payment_mode: str) -> None:
        """Full update of the line items. Never touches status or delivery link."""
        for item in list(self.items):
            self.remove_items(item)
        self.payment_mode = payment_mode
        self._set_items(priced_items)
        self.updated_at = datetime.now(UTC)

    def link_delivery(self, delivery_id: str) -> bool:
        """Record the Delivery created for this order.

        Returns False when the same delivery is already linked (redelivery).
        A different delivery id is an anomaly and is rejected.
        """
        delivery_id = str(delivery_id)
        if self.delivery_id is not None:
            if str(self.delivery_id) == delivery_id:
                return False
            raise ValidationError(
                {"delivery_id": [f"Order is already linked to delivery {self.delivery_id}, not {delivery_id}"]}
            )

        self.delivery_id = delivery_id
        self.updated_at = datetime.now(UTC)
        return True

    def mark_delivered(self) -> bool:
        """Mirror the Delivery service's DELIVERED signal. False if already delivered."""
        if self.status == OrderStatus.DELIVERED.value:
            return False
        self.status = OrderStatus.DELIVERED.value
        self.updated_at = datetime.now(UTC)
        return True

    def _set_items(self, priced_items: list[dict]) -> None:
        if not priced_items:
            raise ValidationError({"items": ["An order needs at least one item"]})

        for data in priced_items:
            self.add_items(
                OrderItem(
                    product_id=data["product_id"],
                    quantity=data["quantity"],
                    unit_price=data["unit_price"],
                )
            )
        self.amount = round(sum(item.line_total for item in self.items), 2)
