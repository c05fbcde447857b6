"""FastAPI routes for the Order service."""

import json

from fastapi import APIRouter, Depends

from ordering.api.schemas import OrderIdResponse, OrderResponse, PlaceOrderRequest, UpdateOrderRequest
from ordering.domain import ordering
from ordering.order.creation import PlaceOrder
from ordering.order.modification import UpdateOrder
from ordering.order.queries import delivery_for_order, find_order, list_orders
from shared.identity import RequestIdentity, optional_identity, require_identity
from shared.web import in_domain_thread

order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderIdResponse)
async def place_order(
    body: PlaceOrderRequest,
    identity: RequestIdentity = Depends(require_identity),
) -> OrderIdResponse:
    """Place an order; prices come from the Product service."""
    command = PlaceOrder(
        user_id=body.user_id or identity.user_id,
        items=json.dumps([item.model_dump() for item in body.items]),
        payment_mode=body.payment_mode,
        requester=identity.to_json(),
    )
    result = await in_domain_thread(ordering, ordering.process, command, asynchronous=False)
    return OrderIdResponse(order_id=result)


@order_router.get("", response_model=list[OrderResponse])
async def get_orders(
    identity: RequestIdentity | None = Depends(optional_identity),
) -> list[OrderResponse]:
    return [OrderResponse.from_aggregate(order) for order in list_orders()]


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: str,
    identity: RequestIdentity | None = Depends(optional_identity),
) -> OrderResponse:
    return OrderResponse.from_aggregate(find_order(order_id))


@order_router.put("/{order_id}", response_model=OrderResponse)
async def update_order(
    order_id: str,
    body: UpdateOrderRequest,
    identity: RequestIdentity = Depends(require_identity),
) -> OrderResponse:
    """Replace the order's items and payment mode, re-pricing every item."""
    command = UpdateOrder(
        order_id=order_id,
        items=json.dumps([item.model_dump() for item in body.items]),
        payment_mode=body.payment_mode,
        requester=identity.to_json(),
    )
    await in_domain_thread(ordering, ordering.process, command, asynchronous=False)
    return OrderResponse.from_aggregate(find_order(order_id))


@order_router.get("/{order_id}/delivery")
async def get_order_delivery(
    order_id: str,
    identity: RequestIdentity | None = Depends(optional_identity),
) -> dict:
    """The linked delivery, or 409 ``delivery_not_linked`` while it is not projected yet."""
    return await in_domain_thread(ordering, delivery_for_order, order_id, identity)
