"""Pydantic API schemas for the Order service.

These are the external API contracts, separate from domain commands.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------
class OrderItemRequest(BaseModel):
    product_id: str
    quantity: int = Field(ge=1)


class PlaceOrderRequest(BaseModel):
    user_id: str | None = None  # defaults to the caller
    items: list[OrderItemRequest] = Field(min_length=1)
    payment_mode: str


class UpdateOrderRequest(BaseModel):
    items: list[OrderItemRequest] = Field(min_length=1)
    payment_mode: str


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------
class OrderIdResponse(BaseModel):
    order_id: str


class OrderItemResponse(BaseModel):
    product_id: str
    quantity: int
    unit_price: float


class OrderResponse(BaseModel):
    order_id: str
    user_id: str
    amount: float
    payment_mode: str
    paid: bool
    status: str
    delivery_id: str | None = None
    # False until the Delivery service's DeliveryCreated event is applied
    delivery_linked: bool
    items: list[OrderItemResponse]
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_aggregate(cls, order) -> "OrderResponse":
        return cls(
            order_id=str(order.id),
            user_id=str(order.user_id),
            amount=order.amount,
            payment_mode=order.payment_mode,
            paid=bool(order.paid),
            status=order.status,
            delivery_id=str(order.delivery_id) if order.delivery_id else None,
            delivery_linked=order.delivery_id is not None,
            items=[
                OrderItemResponse(
                    product_id=str(item.product_id),
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                )
                for item in order.items
            ],
            created_at=order.created_at,
            updated_at=order.updated_at,
        )
