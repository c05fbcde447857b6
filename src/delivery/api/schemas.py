"""Pydantic API schemas for the Delivery service.

These are the external API contracts, separate from domain commands.
"""

from datetime import date, datetime

from pydantic import BaseModel


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------
class CreateDeliveryRequest(BaseModel):
    order_id: str
    user_id: str
    expected_delivery_date: date | None = None


class UpdateDeliveryStatusRequest(BaseModel):
    status: str


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------
class DeliveryIdResponse(BaseModel):
    delivery_id: str


class DeliveryResponse(BaseModel):
    delivery_id: str
    order_id: str
    user_id: str
    status: str
    expected_delivery_date: date | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_aggregate(cls, dl) -> "DeliveryResponse":
        return cls(
            delivery_id=str(dl.id),
            order_id=str(dl.order_id),
            user_id=str(dl.user_id),
            status=dl.status,
            expected_delivery_date=dl.expected_delivery_date,
            created_at=dl.created_at,
            updated_at=dl.updated_at,
        )
