import pytest
from ordering.order.order import Order, OrderItem, OrderStatus
from protean.exceptions import ValidationError

PRICED = [
    {"product_id": "prod-1", "quantity": 2, "unit_price": 25.0},
    {"product_id": "prod-2", "quantity": 3, "unit_price": 7.5},
]


def _order(items=None):
    return Order.create(user_id="user-1", payment_mode="CARD", priced_items=items or PRICED)


class TestOrderCreation:
    def test_new_order_is_pending_and_unpaid(self):
        order = _order()
        assert order.status == OrderStatus.PENDING.value
        assert order.paid is False
        assert order.delivery_id is None

    def test_amount_is_sum_of_line_totals(self):
        assert _order().amount == 72.5

    def test_amount_rounded_to_cents(self):
        order = _order([{"product_id": "prod-3", "quantity": 3, "unit_price": 0.1}])
        assert order.amount == 0.3

    def test_items_carry_unit_price(self):
        order = _order()
        assert len(order.items) == 2
        first = next(item for item in order.items if item.product_id == "prod-1")
        assert first.unit_price == 25.0
        assert first.line_total == 50.0

    def test_no_items_rejected(self):
        with pytest.raises(ValidationError) as exc:
            Order.create(user_id="user-1", payment_mode="CARD", priced_items=[])
        assert "items" in exc.value.messages

    def test_unknown_payment_mode_rejected(self):
        with pytest.raises(ValidationError):
            Order.create(user_id="user-1", payment_mode="BARTER", priced_items=PRICED)

    def test_zero_quantity_item_rejected(self):
        with pytest.raises(ValidationError):
            OrderItem(product_id="prod-1", quantity=0, unit_price=1.0)


class TestReplaceItems:
    def test_replaces_items_and_reprices(self):
        order = _order()
        order.replace_items([{"product_id": "prod-2", "quantity": 1, "unit_price": 7.5}], "UPI")
        assert [item.product_id for item in order.items] == ["prod-2"]
        assert order.amount == 7.5
        assert order.payment_mode == "UPI"

    def test_keeps_status_and_delivery_link(self):
        order = _order()
        order.link_delivery("dl-1")
        order.mark_delivered()
        order.replace_items(PRICED, "CASH")
        assert order.status == OrderStatus.DELIVERED.value
        assert order.delivery_id == "dl-1"


class TestDeliveryLink:
    def test_links_once(self):
        order = _order()
        assert order.link_delivery("dl-1") is True
        assert order.delivery_id == "dl-1"

    def test_same_delivery_again_is_a_no_op(self):
        order = _order()
        order.link_delivery("dl-1")
        assert order.link_delivery("dl-1") is False

    def test_different_delivery_rejected(self):
        order = _order()
        order.link_delivery("dl-1")
        with pytest.raises(ValidationError):
            order.link_delivery("dl-2")
        assert order.delivery_id == "dl-1"


class TestMarkDelivered:
    def test_marks_delivered(self):
        order = _order()
        assert order.mark_delivered() is True
        assert order.status == OrderStatus.DELIVERED.value

    def test_already_delivered_is_a_no_op(self):
        order = _order()
        order.mark_delivered()
        assert order.mark_delivered() is False
